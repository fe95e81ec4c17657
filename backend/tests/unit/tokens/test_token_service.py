# tests/unit/tokens/test_token_service.py
from __future__ import annotations

import json

import pytest

from revint.infra.crypto.rsa_signature import RSASignatureVerifier
from revint.infra.crypto.rsa_signer import generate_key_pair, sign_token
from revint.services._shared.errors import ConfigurationError
from revint.services.tokens.codec import b64url_decode, b64url_encode
from revint.services.tokens.dto import TokenPayload
from revint.services.tokens.service import TokenService


def _flip(segment: str, index: int) -> str:
    """Flip one bit of the decoded segment and re-encode it."""
    raw = bytearray(b64url_decode(segment) or b"")
    raw[index] ^= 0x01
    return b64url_encode(bytes(raw))


def test_verify_returns_original_payload(tokens, private_key):
    token = sign_token({"name": "Demo", "date": "2025-01-01"}, private_key)

    payload = tokens.verify(token)

    assert payload == TokenPayload(name="Demo", date="2025-01-01")
    assert payload.as_dict() == {"name": "Demo", "date": "2025-01-01"}


def test_verify_preserves_extra_claims(tokens, private_key):
    token = sign_token({"name": "Host", "date": "2025-01-01", "host": True}, private_key)

    payload = tokens.verify(token)

    assert payload is not None
    assert payload.extra == {"host": True}


def test_verify_accepts_padded_segments(tokens, private_key):
    token = sign_token({"name": "Demo", "date": "2025-01-01"}, private_key)
    head, sig = token.split(".")
    padded = f"{head}{'=' * (-len(head) % 4)}.{sig}{'=' * (-len(sig) % 4)}"

    assert tokens.verify(padded) is not None


@pytest.mark.parametrize("part", [0, 1])
def test_flipping_any_byte_invalidates(tokens, private_key, part):
    """A single flipped byte in payload or signature fails verification."""
    token = sign_token({"name": "Demo", "date": "2025-01-01"}, private_key)
    segments = token.split(".")
    size = len(b64url_decode(segments[part]) or b"")

    for index in (0, size // 2, size - 1):
        tampered = list(segments)
        tampered[part] = _flip(segments[part], index)
        assert tokens.verify(".".join(tampered)) is None


def test_signature_from_another_key_is_rejected(tokens):
    other_private, _ = generate_key_pair()
    token = sign_token({"name": "Demo", "date": "2025-01-01"}, other_private)

    assert tokens.verify(token) is None


@pytest.mark.parametrize(
    "token",
    [
        None,
        "",
        "only-one-segment",
        "a.b.c",
        "!!!.???",
        ".",
    ],
)
def test_structurally_invalid_tokens(tokens, token):
    assert tokens.verify(token) is None


@pytest.mark.parametrize(
    "payload",
    [
        [1, 2, 3],
        {"name": "Demo"},
        {"date": "2025-01-01"},
        {"name": 1, "date": "2025-01-01"},
        "just a string",
    ],
)
def test_payload_shape_is_enforced(tokens, private_key, payload):
    """Even correctly signed payloads need string ``name`` and ``date``."""
    from cryptography.hazmat.primitives import hashes, serialization
    from cryptography.hazmat.primitives.asymmetric import padding

    key = serialization.load_pem_private_key(private_key.encode(), password=None)
    message = json.dumps(payload).encode()
    signature = key.sign(message, padding.PKCS1v15(), hashes.SHA256())
    token = f"{b64url_encode(message)}.{b64url_encode(signature)}"

    assert tokens.verify(token) is None


def test_missing_public_key_is_a_configuration_error(private_key):
    service = TokenService(verifier=RSASignatureVerifier(None))
    token = sign_token({"name": "Demo", "date": "2025-01-01"}, private_key)

    with pytest.raises(ConfigurationError):
        service.verify(token)


@pytest.mark.parametrize("token", ["e30.AAAA", "garbage", "!!.??", "a.b.c"])
def test_missing_public_key_wins_over_malformed_tokens(token):
    service = TokenService(verifier=RSASignatureVerifier(None))

    with pytest.raises(ConfigurationError, match="not configured"):
        service.verify(token)


def test_unloadable_public_key_is_a_configuration_error(private_key):
    service = TokenService(verifier=RSASignatureVerifier("-----BEGIN PUBLIC KEY-----\nnope\n"))
    token = sign_token({"name": "Demo", "date": "2025-01-01"}, private_key)

    with pytest.raises(ConfigurationError):
        service.verify(token)


def test_is_valid(tokens, sign):
    assert tokens.is_valid(sign()) is True
    assert tokens.is_valid("nope") is False
