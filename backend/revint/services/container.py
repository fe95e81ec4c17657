"""Service wiring shared by the HTTP API and the live pipes."""

from __future__ import annotations

from dataclasses import dataclass

from revint.services._shared.ports import Broadcaster, SignatureVerifier
from revint.services._shared.stores import DocumentStores
from revint.services.authorization.service import AuthorizationGuard
from revint.services.reactions.service import ReactionService
from revint.services.sessions.service import SessionService
from revint.services.tokens.service import TokenService


@dataclass(frozen=True, slots=True)
class Services:
    """
    One instance per application, built by the factory.

    :param stores: Document stores of the selected backend.
    :param tokens: Credential verification.
    :param guard: Host/user binding checks.
    :param sessions: Session lifecycle.
    :param reactions: Reaction ledger.
    """

    stores: DocumentStores
    tokens: TokenService
    guard: AuthorizationGuard
    sessions: SessionService
    reactions: ReactionService

    @classmethod
    def build(
        cls,
        *,
        stores: DocumentStores,
        verifier: SignatureVerifier,
        broadcaster: Broadcaster | None = None,
    ) -> Services:
        tokens = TokenService(verifier=verifier)
        guard = AuthorizationGuard(tokens=tokens, stores=stores)
        return cls(
            stores=stores,
            tokens=tokens,
            guard=guard,
            sessions=SessionService(
                stores=stores, tokens=tokens, guard=guard, broadcaster=broadcaster
            ),
            reactions=ReactionService(stores=stores, guard=guard),
        )
