"""HTTP transport to the x402 auction API."""
