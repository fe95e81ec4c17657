# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from revint.services._shared.errors import ConfigurationError
from revint.services._shared.ports import SignatureVerifier


def load_public_key(pem: str | bytes | None) -> rsa.RSAPublicKey:
    """
    Load an RSA public key from PEM text.

    :param pem: PEM-encoded ``SubjectPublicKeyInfo`` (or PKCS#1) key.
    :returns: Loaded key.
    :raises ConfigurationError: When the key is missing, unreadable or not RSA.
    """
    if not pem:
        raise ConfigurationError("public key is not configured")
    raw = pem.encode() if isinstance(pem, str) else pem
    try:
        key = serialization.load_pem_public_key(raw)
    except ValueError as exc:
        raise ConfigurationError("public key could not be loaded") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise ConfigurationError("public key must be an RSA key")
    return key


@dataclass(slots=True)
class RSASignatureVerifier(SignatureVerifier):
    """
    RSA PKCS#1 v1.5 / SHA-256 verifier bound to one public key.

    The key is loaded on first use, so a process without a key still serves
    public routes; every verification then fails with
    :class:`ConfigurationError`.

    :param public_key_pem: PEM text of the verification key.
    """

    public_key_pem: str | bytes | None
    _key: rsa.RSAPublicKey | None = field(default=None, init=False, repr=False)

    @property
    def key(self) -> rsa.RSAPublicKey:
        self.ensure_ready()
        return self._key

    def ensure_ready(self) -> None:
        if self._key is None:
            self._key = load_public_key(self.public_key_pem)

    def verify(self, message: bytes, signature: bytes) -> bool:
        try:
            self.key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
        except InvalidSignature:
            return False
        return True
