from __future__ import annotations

from typing import Protocol


class SignatureVerifier(Protocol):
    """Port for checking a detached signature over raw bytes."""

    def ensure_ready(self) -> None:
        """Raise ``ConfigurationError`` when no usable key is configured."""
        ...

    def verify(self, message: bytes, signature: bytes) -> bool: ...
