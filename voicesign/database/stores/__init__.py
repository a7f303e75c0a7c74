"""Database stores."""

from voicesign.database.stores.enrollment_store import EnrollmentStore
from voicesign.database.stores.signing_store import SigningStore
from voicesign.database.stores.user_store import UserStore

__all__ = ["EnrollmentStore", "SigningStore", "UserStore"]
