"""Database layer."""

from voicesign.database.session import get_session
from voicesign.database.stores import EnrollmentStore, SigningStore, UserStore

__all__ = ["get_session", "EnrollmentStore", "SigningStore", "UserStore"]
