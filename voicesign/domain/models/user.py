"""User domain model (voice-related subset)."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from voicesign.domain.models._helpers import _generate_ulid, _utc_now


class SecurityAuditLogType(str, Enum):
    """Security audit log entry types written by voice verification."""

    SIGN_IN = "SIGN_IN"
    SIGN_IN_FAIL = "SIGN_IN_FAIL"


@dataclass
class User:
    """A platform user with voice enrollment fields."""

    email: str
    name: str | None = None
    id: int | None = None
    public_id: str = field(default_factory=_generate_ulid)
    email_verified: datetime | None = None
    voice_profile_id: str | None = None
    voice_enrollment_complete: bool = False
    voice_enrollment_date: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
