# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from revint.models import Session


class Role(StrEnum):
    """The two credential scopes of a session."""

    HOST = "host"
    USER = "user"


@dataclass(frozen=True, slots=True)
class HostSession:
    """
    Proof that the caller holds the host credential of ``session``.

    :param token: Verified host credential.
    :param session: Session the credential is bound to.
    """

    token: str
    session: Session


@dataclass(frozen=True, slots=True)
class UserSession:
    """
    Proof that the caller holds the audience credential of ``session``.

    :param user_token: Verified audience credential.
    :param session: Session the credential is bound to.
    """

    user_token: str
    session: Session


@dataclass(frozen=True, slots=True)
class SessionAccess:
    """Proof of either role; ``role`` tells which one matched."""

    token: str
    role: Role
    session: Session
