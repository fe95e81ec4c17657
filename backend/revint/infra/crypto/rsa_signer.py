"""Token signing and key generation for tests and operator tooling.

Signing never happens in a request path: hosts and audience clients receive
tokens minted out of band with the private half of the configured key.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from revint.services.tokens.codec import b64url_encode


def generate_key_pair(key_size: int = 2048) -> tuple[str, str]:
    """
    Generate an RSA key pair.

    :returns: ``(private_pem, public_pem)`` as text.
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem.decode(), public_pem.decode()


def sign_token(payload: Mapping[str, Any], private_key_pem: str | bytes) -> str:
    """
    Produce ``base64url(payload).base64url(signature)``.

    :param payload: JSON object; must carry string ``name`` and ``date`` to
        be accepted by :class:`~revint.services.tokens.service.TokenService`.
    :param private_key_pem: Unencrypted PEM private key.
    :returns: Token string without base64 padding.
    """
    raw_key = private_key_pem.encode() if isinstance(private_key_pem, str) else private_key_pem
    key = serialization.load_pem_private_key(raw_key, password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise TypeError("private key must be an RSA key")
    message = json.dumps(dict(payload), separators=(",", ":")).encode()
    signature = key.sign(message, padding.PKCS1v15(), hashes.SHA256())
    return f"{b64url_encode(message)}.{b64url_encode(signature)}"
