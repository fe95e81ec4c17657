"""RSA signature adapters built on ``cryptography``."""
