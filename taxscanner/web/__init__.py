"""HTTP API for Tax Scanner."""
