# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """
    Verified token claims.

    :param name: Holder name chosen when the token was minted.
    :type name: str
    :param date: Issue date as written by the minting tool.
    :type date: str
    :param extra: Any further claims (e.g. ``host``), preserved verbatim.
    :type extra: dict[str, Any]
    """

    name: str
    date: str
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {**self.extra, "name": self.name, "date": self.date}
