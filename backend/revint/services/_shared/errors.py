"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, SQLAlchemy or Redis directly. They serve as stable contracts
between the document stores, the authorization guard and the application
services.

The translation to HTTP responses (RFC 7807) is handled exactly once by
``revint/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores, the guard or the services.
    - The core never retries after one of these.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """
    Raised when a credential is missing or fails signature verification.
    """

    def __init__(self, message: str = "invalid credential") -> None:
        super().__init__(message)


class InvalidUserTokenError(AuthenticationError):
    """
    Raised when the audience credential supplied to ``new_session`` does not
    verify. Kept distinct from the header credential failure.
    """

    def __init__(self, message: str = "invalid user token") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """
    Raised when a valid credential does not satisfy the role or identity
    binding required by the operation.
    """

    def __init__(self, message: str = "forbidden") -> None:
        super().__init__(message)


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when a referenced entity does not exist.

    :param entity: Entity name (e.g., "Session").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str
    """

    entity: str
    key: str

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


class ValidationError(ServiceError):
    """
    Raised for structurally invalid input: malformed store keys, filters on
    undeclared indices, or request bodies that fail schema validation.

    :param message: Human-readable summary.
    :param details: Optional field-level messages.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(ServiceError):
    """
    Raised when the service is misconfigured (e.g., no verification key).

    Fatal: callers must not retry, and the message is never shown to clients.
    """
