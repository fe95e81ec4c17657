"""Redis-backed document store."""
