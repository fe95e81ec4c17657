# revint/services/sessions/service.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from marshmallow import ValidationError as MarshmallowValidationError

from revint.models import Host, Session, User
from revint.schemas import NewSessionSchema
from revint.services._shared.context import RequestContext
from revint.services._shared.errors import (
    AuthorizationError,
    InvalidUserTokenError,
    ValidationError,
)
from revint.services._shared.ids import new_id
from revint.services._shared.ports import Broadcaster, NullBroadcaster
from revint.services._shared.stores import DocumentStores
from revint.services.authorization.dto import Role
from revint.services.authorization.service import AuthorizationGuard
from revint.services.sessions.dto import (
    NewSessionIn,
    NewSessionOut,
    SessionInfoOut,
    SessionStateOut,
)
from revint.services.tokens.service import TokenService

log = logging.getLogger(__name__)

INITIAL_PAGE = "0"
INITIAL_STATE = "init"


class SessionService:
    """
    Session lifecycle: open, discover, log in, drive and read a session.

    The session record is written twice, under the host token and under the
    public session uid. The two writes are independent, so a failure between
    them leaves the copies diverged; reads by uid then see the older copy.
    """

    def __init__(
        self,
        *,
        stores: DocumentStores,
        tokens: TokenService,
        guard: AuthorizationGuard | None = None,
        broadcaster: Broadcaster | None = None,
    ) -> None:
        """
        :param stores: Document stores (sessions, hosts, users).
        :param tokens: Verifier for the audience credential in the body.
        :param guard: Credential/binding checks (built from ``tokens`` when omitted).
        :param broadcaster: Live fan-out for state changes.
        """
        self.stores = stores
        self.tokens = tokens
        self.guard = guard or AuthorizationGuard(tokens=tokens, stores=stores)
        self.broadcaster = broadcaster or NullBroadcaster()
        self._body_schema = NewSessionSchema()

    # ------------------------------------------------------------------ #
    # Open
    # ------------------------------------------------------------------ #

    def parse_new_session(self, body: Mapping[str, Any] | None) -> NewSessionIn:
        """
        Validate the ``new_session`` body.

        :raises ValidationError: Missing or malformed fields.
        """
        if not isinstance(body, Mapping):
            raise ValidationError("request body must be a JSON object")
        try:
            data = self._body_schema.load(body)
        except MarshmallowValidationError as exc:
            raise ValidationError("invalid session body", details={"errors": exc.messages}) from exc
        return NewSessionIn(**data)

    def new_session(self, body: Mapping[str, Any] | None, ctx: RequestContext) -> NewSessionOut:
        """
        Open a session for the host credential in ``ctx``.

        Writes the Host record, then the session under both keys, and issues
        the host identity marker.

        :raises AuthenticationError: Missing/invalid host credential.
        :raises ValidationError: Malformed body.
        :raises InvalidUserTokenError: The body's ``userToken`` does not verify.
        """
        token = self.guard.require_token(ctx)
        dto = self.parse_new_session(body)
        if self.tokens.verify(dto.user_token) is None:
            raise InvalidUserTokenError()

        host_uid = new_id()
        session_uid = new_id()
        session = Session(
            token=token,
            user_token=dto.user_token,
            page=INITIAL_PAGE,
            state=INITIAL_STATE,
            uid=session_uid,
            api_url=dto.api_url,
            web_ui_url=dto.web_ui_url,
            ws_url=dto.ws_url,
        )

        self.stores.hosts.store(token, Host(token=token, uid=host_uid).to_document())
        self._write_session(session)
        ctx.issue_identity(host_uid, session_uid=session_uid)

        log.info("session.created", extra={"session_uid": session_uid, "uid": host_uid})
        return NewSessionOut(token=token, host_uid=host_uid, session_uid=session_uid)

    # ------------------------------------------------------------------ #
    # Discover / log in
    # ------------------------------------------------------------------ #

    def get_session(self, session_uid: str) -> SessionInfoOut | None:
        """Public lookup; ``None`` for unknown sessions."""
        session = self.guard.find_session(session_uid)
        if session is None:
            return None
        return SessionInfoOut(
            user_token=session.user_token,
            api_url=session.api_url,
            web_ui_url=session.web_ui_url,
            ws_url=session.ws_url,
        )

    def login(self, session_uid: str, ctx: RequestContext) -> str:
        """
        Register the caller as an audience member and return its uid.

        A caller already carrying an identity marker keeps it: no new record
        and no new marker.
        """
        binding = self.guard.require_user_session(session_uid, ctx)
        if ctx.identity:
            return ctx.identity

        uid = new_id()
        user = User(token=binding.user_token, uid=uid)
        self.stores.users.store(binding.user_token, user.to_document())
        ctx.issue_identity(uid, session_uid=session_uid)
        log.info("user.logged_in", extra={"session_uid": session_uid, "uid": uid})
        return uid

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    def set_state(self, session_uid: str, page: str, state: str, ctx: RequestContext) -> bool:
        """
        Move the session to ``page``/``state`` and notify live audience pipes.

        :raises AuthorizationError: Not the host credential, or the caller's
            marker is not a registered host identity.
        :raises ValidationError: Empty ``page`` or ``state``.
        """
        binding = self.guard.require_host_session(session_uid, ctx)
        if not self.guard.is_registered(Role.HOST, binding.token, ctx.identity):
            raise AuthorizationError("only host can set state")
        for name, value in (("page", page), ("state", state)):
            if not isinstance(value, str) or not value:
                raise ValidationError(f"{name} must be a non-empty string", details={"field": name})

        updated = binding.session.with_state(page, state)
        self._write_session(updated)
        log.info(
            "session.state_changed",
            extra={"session_uid": session_uid, "page": page},
        )

        message = {
            "type": "state_change",
            "token": updated.user_token,
            "page": page,
            "state": state,
        }
        try:
            self.broadcaster.broadcast(session_uid, message)
        except Exception:
            # Delivery is best-effort; the stored state is already updated
            log.exception("session.broadcast_failed", extra={"session_uid": session_uid})
        return True

    def get_state(self, session_uid: str, ctx: RequestContext) -> SessionStateOut:
        """
        Read the session with a host or audience credential.

        :raises AuthorizationError: ``must be logged in`` / ``not registered``.
        """
        access = self.guard.require_any_session(session_uid, ctx)
        self.guard.require_identity(access.role, access.token, ctx)
        return SessionStateOut(session=access.session, role=access.role)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _write_session(self, session: Session) -> None:
        doc = session.to_document()
        self.stores.sessions.store(session.token, doc)
        self.stores.sessions.store(session.uid, doc)
