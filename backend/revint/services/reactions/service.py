# revint/services/reactions/service.py
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from revint.models import Reaction
from revint.services._shared.context import RequestContext
from revint.services._shared.errors import AuthorizationError
from revint.services._shared.ids import new_id
from revint.services._shared.stores import DocumentStores
from revint.services.authorization.dto import Role
from revint.services.authorization.service import AuthorizationGuard

log = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class ReactionService:
    """
    Append-only reaction ledger.

    Every call to :meth:`react` is a distinct event, stored under its own
    generated id; nothing is deduplicated.
    """

    def __init__(
        self,
        *,
        stores: DocumentStores,
        guard: AuthorizationGuard,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.stores = stores
        self.guard = guard
        self.clock = clock

    def react(
        self,
        session_uid: str,
        uid: str,
        page: str,
        reaction: str,
        ctx: RequestContext,
    ) -> bool:
        """
        Record ``reaction`` of audience member ``uid`` on ``page``.

        :raises AuthorizationError: No marker (``must be logged in``), a
            marker other than ``uid`` (``user id mismatch``) or an unknown one
            (``not registered``).
        """
        binding = self.guard.require_user_session(session_uid, ctx)
        if not ctx.identity:
            raise AuthorizationError("must be logged in")
        if ctx.identity != uid:
            raise AuthorizationError("user id mismatch")
        if not self.guard.is_registered(Role.USER, binding.user_token, uid):
            raise AuthorizationError("not registered")

        record = Reaction(
            time=self.clock(),
            token=binding.user_token,
            uid=uid,
            page=page,
            reaction=reaction,
            session_uid=session_uid,
        )
        key = {"id": new_id(), "sessionUid": session_uid, "page": page, "uid": uid}
        self.stores.reactions.store(key, record.to_document())
        log.info(
            "reaction.recorded",
            extra={"session_uid": session_uid, "uid": uid, "page": page},
        )
        return True

    def list_reactions(
        self,
        session_uid: str,
        ctx: RequestContext,
        *,
        page: str | None = None,
        uid: str | None = None,
    ) -> list[Reaction]:
        """
        Reactions of a session, optionally narrowed to a page and a user.

        Host-only, with the same proof as ``set_state``. Filters follow the
        reaction index order, so ``uid`` is only honoured together with
        ``page``.

        :raises ValidationError: ``uid`` without ``page`` on prefix-only backends.
        """
        binding = self.guard.require_host_session(session_uid, ctx)
        if not self.guard.is_registered(Role.HOST, binding.token, ctx.identity):
            raise AuthorizationError("only host can list reactions")

        filters: dict[str, str] = {"sessionUid": session_uid}
        if page is not None:
            filters["page"] = page
        if uid is not None:
            filters["uid"] = uid
        docs = self.stores.reactions.list(filters)
        reactions = [Reaction.from_document(doc) for doc in docs]
        reactions.sort(key=lambda r: r.time)
        return reactions
