from revint.models.document import StoredDocument
from revint.models.entities import Host, Reaction, Session, User

__all__ = [
    "Host",
    "Reaction",
    "Session",
    "StoredDocument",
    "User",
]
