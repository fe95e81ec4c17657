# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RequestContext:
    """
    Request-scoped inputs and outputs of a service call.

    Transports build one per request and pass it explicitly to the service;
    nothing in the service layer reads ambient request state.

    :param credential: Raw value of the credential header, if any.
    :param identity: Identity marker presented by the client for
        ``session_uid``, if any.
    :param request_id: Correlation id for logging.
    :param session_uid: Session the identity marker is scoped to.
    """

    credential: str | None = None
    identity: str | None = None
    request_id: str | None = None
    session_uid: str | None = None
    issued_identity: str | None = None

    def issue_identity(self, uid: str, *, session_uid: str) -> None:
        """
        Ask the transport to hand ``uid`` to the client as its identity
        marker for ``session_uid``.

        The marker also becomes the context's identity for the rest of the
        call.
        """
        self.issued_identity = uid
        self.identity = uid
        self.session_uid = session_uid
