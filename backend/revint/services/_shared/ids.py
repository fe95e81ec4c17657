"""Random identifiers for hosts, users, sessions and reactions."""

from __future__ import annotations

import secrets

# 16 random bytes, ~22 url-safe characters
ID_BYTES = 16


def new_id() -> str:
    return secrets.token_urlsafe(ID_BYTES)
