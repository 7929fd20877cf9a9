"""Auction domain: value objects, outcome variants, and response classification."""
