"""User store for database operations."""

import logging

from sqlmodel import Session

from voicesign.database.exceptions import UserNotFoundError
from voicesign.database.models import UserModel, UserSecurityAuditLogModel
from voicesign.domain.models import SecurityAuditLogType, User

logger = logging.getLogger(__name__)


class UserStore:
    """Store for User and security audit log operations.

    Implements UserStoreProtocol from voicesign.domain.protocols.store.
    """

    def __init__(self, session: Session) -> None:
        """Initialize store with a database session.

        Args:
            session: SQLModel database session
        """
        self.session = session

    def _to_domain_user(self, model: UserModel) -> User:
        """Convert database model to domain model."""
        assert model.id is not None
        return User(
            id=model.id,
            public_id=model.public_id,
            email=model.email,
            name=model.name,
            email_verified=model.email_verified,
            voice_profile_id=model.voice_profile_id,
            voice_enrollment_complete=model.voice_enrollment_complete,
            voice_enrollment_date=model.voice_enrollment_date,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _get_user_model(self, user_id: int) -> UserModel:
        model = self.session.get(UserModel, user_id)
        if model is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return model

    def create_user(self, email: str, name: str | None = None) -> User:
        """Create a new user.

        Args:
            email: Unique e-mail address
            name: Optional display name

        Returns:
            The created User instance
        """
        model = UserModel(email=email, name=name)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_domain_user(model)

    def get_user(self, user_id: int) -> User:
        """Get a user by id.

        Raises:
            UserNotFoundError: If user not found
        """
        return self._to_domain_user(self._get_user_model(user_id))

    def add_security_audit_log(
        self,
        user_id: int,
        log_type: SecurityAuditLogType,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Append a security audit log entry.

        Args:
            user_id: The user the event belongs to
            log_type: SIGN_IN or SIGN_IN_FAIL
            ip_address: Client address, when known
            user_agent: Client user agent, when known
        """
        self.session.add(
            UserSecurityAuditLogModel(
                user_id=user_id,
                type=log_type.value,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
