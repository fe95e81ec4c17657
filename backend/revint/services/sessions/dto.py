# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass

from revint.models import Session
from revint.services.authorization.dto import Role

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class NewSessionIn:
    """
    Input DTO for opening a session.

    :param user_token: Audience credential minted alongside the host one.
    :param api_url: Base URL of the HTTP API.
    :param web_ui_url: Base URL of the audience web app.
    :param ws_url: Optional base URL of the live pipes.
    """

    user_token: str
    api_url: str
    web_ui_url: str
    ws_url: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class NewSessionOut:
    """
    Output DTO of ``new_session``.

    :param token: The host credential (echoed back).
    :param host_uid: Identity issued to the presenter.
    :param session_uid: Public id used in shareable links.
    """

    token: str
    host_uid: str
    session_uid: str


@dataclass(frozen=True, slots=True)
class SessionInfoOut:
    """Public session information returned by ``get_session``."""

    user_token: str
    api_url: str
    web_ui_url: str
    ws_url: str | None = None


@dataclass(frozen=True, slots=True)
class SessionStateOut:
    """
    Output DTO of ``get_state``.

    :param session: Current session record.
    :param role: Role of the credential that read it; audience readers never
        get the host token.
    """

    session: Session
    role: Role

    @property
    def exposes_host_token(self) -> bool:
        return self.role is Role.HOST
