# revint/services/tokens/service.py
from __future__ import annotations

import json

from revint.services._shared.ports import SignatureVerifier
from revint.services.tokens.codec import b64url_decode
from revint.services.tokens.dto import TokenPayload

TOKEN_SEPARATOR = "."


class TokenService:
    """
    Verify ``base64url(payload).base64url(signature)`` credentials.

    The signature covers the raw payload bytes (the decoded first segment).
    Every structural or cryptographic failure yields ``None`` so callers
    cannot tell a forged token from a garbled one.
    """

    def __init__(self, *, verifier: SignatureVerifier) -> None:
        """
        :param verifier: Adapter bound to the configured public key.
        """
        self.verifier = verifier

    def verify(self, token: str | None) -> TokenPayload | None:
        """
        Return the payload of a valid token, else ``None``.

        :param token: Opaque credential as received from the client.
        :raises ConfigurationError: When no usable public key is configured,
            whatever the token looks like.
        """
        self.verifier.ensure_ready()
        if not token or not isinstance(token, str):
            return None
        segments = token.split(TOKEN_SEPARATOR)
        if len(segments) != 2:
            return None

        message = b64url_decode(segments[0])
        signature = b64url_decode(segments[1])
        if message is None or signature is None:
            return None

        payload = self._parse_payload(message)
        if payload is None:
            return None

        if not self.verifier.verify(message, signature):
            return None
        return payload

    def is_valid(self, token: str | None) -> bool:
        return self.verify(token) is not None

    @staticmethod
    def _parse_payload(message: bytes) -> TokenPayload | None:
        try:
            data = json.loads(message)
        except (UnicodeDecodeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        name, date = data.get("name"), data.get("date")
        if not isinstance(name, str) or not isinstance(date, str):
            return None
        extra = {k: v for k, v in data.items() if k not in ("name", "date")}
        return TokenPayload(name=name, date=date, extra=extra)
