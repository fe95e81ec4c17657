"""Factory Boy definitions for session, host, user and reaction documents."""

from __future__ import annotations

import factory

from revint.models import Host, Reaction, Session, StoredDocument, User
from tests.factories import BaseFactory


class SessionFactory(factory.Factory):
    """Build :class:`revint.models.Session` values with opaque credentials."""

    class Meta:
        model = Session

    token = factory.Sequence(lambda n: f"host-token-{n}")
    user_token = factory.Sequence(lambda n: f"user-token-{n}")
    page = "0"
    state = "init"
    uid = factory.Sequence(lambda n: f"session-{n}")
    api_url = factory.Faker("url")
    web_ui_url = factory.Faker("url")
    ws_url = None


class HostFactory(factory.Factory):
    class Meta:
        model = Host

    token = factory.Sequence(lambda n: f"host-token-{n}")
    uid = factory.Sequence(lambda n: f"host-{n}")


class UserFactory(factory.Factory):
    class Meta:
        model = User

    token = factory.Sequence(lambda n: f"user-token-{n}")
    uid = factory.Sequence(lambda n: f"user-{n}")


class ReactionFactory(factory.Factory):
    """Build reactions; ``time`` increases with the sequence."""

    class Meta:
        model = Reaction

    time = factory.Sequence(lambda n: 1_700_000_000_000 + n)
    token = "user-token"
    uid = factory.Sequence(lambda n: f"user-{n}")
    page = "0"
    reaction = factory.Iterator(["thumbsup", "heart", "clap"])
    session_uid = "session-0"


class StoredDocumentFactory(BaseFactory):
    """Persist raw rows of the SQL store (bypassing the store API)."""

    class Meta:
        model = StoredDocument

    id = None  # let autoincrement handle it
    store = "sessions"
    key = factory.Sequence(lambda n: f"key-{n}")
    data = factory.LazyAttribute(lambda o: {"key": o.key})
