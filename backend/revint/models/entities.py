"""Session, host, user and reaction documents.

Documents travel through the stores as JSON objects with camelCase keys (the
format the presentation plugin and the audience client exchange). The
dataclasses below are the typed view used by the services.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Session:
    """
    A live presentation instance.

    :param token: Host credential; one of the two storage keys.
    :param user_token: Audience credential handed out by ``get_session``.
    :param page: Current slide identifier.
    :param state: Free-form presenter state.
    :param uid: Public identifier embedded in the shareable link.
    :param api_url: Base URL of the HTTP API.
    :param web_ui_url: Base URL of the audience web app.
    :param ws_url: Optional base URL of the live pipes.
    """

    token: str
    user_token: str
    page: str
    state: str
    uid: str
    api_url: str
    web_ui_url: str
    ws_url: str | None = None

    def with_state(self, page: str, state: str) -> Session:
        """Return a copy with ``page``/``state`` replaced and all else kept."""
        return replace(self, page=page, state=state)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "token": self.token,
            "userToken": self.user_token,
            "page": self.page,
            "state": self.state,
            "uid": self.uid,
            "apiUrl": self.api_url,
            "webUiUrl": self.web_ui_url,
        }
        if self.ws_url is not None:
            doc["wsUrl"] = self.ws_url
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Session:
        return cls(
            token=doc["token"],
            user_token=doc["userToken"],
            page=doc["page"],
            state=doc["state"],
            uid=doc["uid"],
            api_url=doc["apiUrl"],
            web_ui_url=doc["webUiUrl"],
            ws_url=doc.get("wsUrl"),
        )


@dataclass(frozen=True, slots=True)
class Host:
    """Binds the host credential to a per-connection identity."""

    token: str
    uid: str

    def to_document(self) -> dict[str, Any]:
        return {"token": self.token, "uid": self.uid}

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Host:
        return cls(token=doc["token"], uid=doc["uid"])


@dataclass(frozen=True, slots=True)
class User:
    """Binds the audience credential to a per-connection identity."""

    token: str
    uid: str

    def to_document(self) -> dict[str, Any]:
        return {"token": self.token, "uid": self.uid}

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> User:
        return cls(token=doc["token"], uid=doc["uid"])


@dataclass(frozen=True, slots=True)
class Reaction:
    """
    One audience reaction. Identical reactions are distinct events.

    :param time: Epoch milliseconds when the reaction was recorded.
    :param token: Audience credential the reaction was sent with.
    :param uid: Identity of the reacting user.
    :param page: Slide the reaction refers to.
    :param reaction: Reaction name (e.g. ``thumbsup``).
    :param session_uid: Public session identifier.
    """

    time: int
    token: str
    uid: str
    page: str
    reaction: str
    session_uid: str

    def to_document(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "token": self.token,
            "uid": self.uid,
            "page": self.page,
            "reaction": self.reaction,
            "sessionUid": self.session_uid,
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Reaction:
        return cls(
            time=int(doc["time"]),
            token=doc["token"],
            uid=doc["uid"],
            page=doc["page"],
            reaction=doc["reaction"],
            session_uid=doc["sessionUid"],
        )
