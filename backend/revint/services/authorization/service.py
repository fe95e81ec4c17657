# revint/services/authorization/service.py
from __future__ import annotations

from revint.models import Session
from revint.services._shared.context import RequestContext
from revint.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
)
from revint.services._shared.stores import DocumentStores
from revint.services.authorization.dto import HostSession, Role, SessionAccess, UserSession
from revint.services.tokens.service import TokenService


class AuthorizationGuard:
    """
    Credential verification and host/user binding for session operations.

    Host and user proofs are separate checks: a host credential never
    satisfies :meth:`require_user_session` and vice versa.
    """

    def __init__(self, *, tokens: TokenService, stores: DocumentStores) -> None:
        self.tokens = tokens
        self.stores = stores

    # ------------------------------------------------------------------ #
    # Credentials
    # ------------------------------------------------------------------ #

    def require_token(self, ctx: RequestContext) -> str:
        """
        Return the verified credential carried by the request.

        :raises AuthenticationError: When absent or rejected by the verifier.
        """
        token = ctx.credential
        if not token:
            raise AuthenticationError("missing credential")
        if self.tokens.verify(token) is None:
            raise AuthenticationError("invalid credential")
        return token

    # ------------------------------------------------------------------ #
    # Session binding
    # ------------------------------------------------------------------ #

    def find_session(self, session_uid: str) -> Session | None:
        """Load a session by its public uid; ``None`` when unknown."""
        doc = self.stores.sessions.latest(session_uid)
        return Session.from_document(doc) if doc is not None else None

    def load_session(self, session_uid: str) -> Session:
        session = self.find_session(session_uid)
        if session is None:
            raise NotFoundError("Session", session_uid)
        return session

    def require_host_session(self, session_uid: str, ctx: RequestContext) -> HostSession:
        """
        Require the session's host credential.

        :raises AuthenticationError: Missing/invalid credential.
        :raises NotFoundError: Unknown session.
        :raises AuthorizationError: Credential is not this session's host token.
        """
        token = self.require_token(ctx)
        session = self.load_session(session_uid)
        if token != session.token:
            raise AuthorizationError("credential does not match session")
        return HostSession(token=token, session=session)

    def require_user_session(self, session_uid: str, ctx: RequestContext) -> UserSession:
        """Like :meth:`require_host_session`, against the audience credential."""
        token = self.require_token(ctx)
        session = self.load_session(session_uid)
        if token != session.user_token:
            raise AuthorizationError("credential does not match session")
        return UserSession(user_token=token, session=session)

    def require_any_session(self, session_uid: str, ctx: RequestContext) -> SessionAccess:
        """Accept either the host or the audience credential of the session."""
        token = self.require_token(ctx)
        session = self.load_session(session_uid)
        if token == session.token:
            return SessionAccess(token=token, role=Role.HOST, session=session)
        if token == session.user_token:
            return SessionAccess(token=token, role=Role.USER, session=session)
        raise AuthorizationError("credential does not match session")

    # ------------------------------------------------------------------ #
    # Identity markers
    # ------------------------------------------------------------------ #

    def is_registered(self, role: Role, token: str, uid: str | None) -> bool:
        """Tell whether ``uid`` was registered under ``token`` for ``role``."""
        if not uid:
            return False
        store = self.stores.hosts if role is Role.HOST else self.stores.users
        return any(doc.get("uid") == uid for doc in store.get(token))

    def require_identity(self, role: Role, token: str, ctx: RequestContext) -> str:
        """
        Return the caller's identity marker once it is known for ``role``.

        :raises AuthorizationError: ``must be logged in`` without a marker,
            ``not registered`` for an unknown one.
        """
        if not ctx.identity:
            raise AuthorizationError("must be logged in")
        if not self.is_registered(role, token, ctx.identity):
            raise AuthorizationError("not registered")
        return ctx.identity
