"""Input validation and tool schema loading."""
