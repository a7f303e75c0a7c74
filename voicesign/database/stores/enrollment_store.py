"""Voice enrollment store for database operations."""

import logging
from datetime import UTC, datetime

from sqlmodel import Session, col, select

from voicesign.database.exceptions import EnrollmentNotFoundError, UserNotFoundError
from voicesign.database.models import UserModel, VoiceEnrollmentModel
from voicesign.domain.models import ProcessingStatus, VoiceEnrollment

logger = logging.getLogger(__name__)


class EnrollmentStore:
    """Store for VoiceEnrollment records and the user's mirrored profile id.

    Implements EnrollmentStoreProtocol from voicesign.domain.protocols.store.
    """

    def __init__(self, session: Session) -> None:
        """Initialize store with a database session.

        Args:
            session: SQLModel database session
        """
        self.session = session

    def _to_domain_enrollment(self, model: VoiceEnrollmentModel) -> VoiceEnrollment:
        """Convert database model to domain model."""
        return VoiceEnrollment(
            id=model.id,
            public_id=model.public_id,
            user_id=model.user_id,
            is_active=model.is_active,
            video_url=model.video_url,
            video_duration=model.video_duration,
            audio_url=model.audio_url,
            voice_profile_id=model.voice_profile_id,
            processing_status=ProcessingStatus(model.processing_status),
            processing_error=model.processing_error,
            is_processed=model.is_processed,
            ready_for_profile_creation=model.ready_for_profile_creation,
            last_used_at=model.last_used_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _get_model(self, enrollment_id: int) -> VoiceEnrollmentModel:
        model = self.session.get(VoiceEnrollmentModel, enrollment_id)
        if model is None:
            raise EnrollmentNotFoundError(f"Voice enrollment {enrollment_id} not found")
        return model

    def _latest_active_model(
        self, user_id: int, with_profile: bool = False
    ) -> VoiceEnrollmentModel | None:
        statement = select(VoiceEnrollmentModel).where(
            VoiceEnrollmentModel.user_id == user_id,
            col(VoiceEnrollmentModel.is_active).is_(True),
        )
        if with_profile:
            statement = statement.where(
                col(VoiceEnrollmentModel.voice_profile_id).is_not(None)
            )
        statement = statement.order_by(
            col(VoiceEnrollmentModel.created_at).desc(),
            col(VoiceEnrollmentModel.id).desc(),
        )
        return self.session.exec(statement).first()

    def _save(self, model: VoiceEnrollmentModel) -> VoiceEnrollment:
        model.updated_at = datetime.now(UTC)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_domain_enrollment(model)

    @staticmethod
    def _apply_status(
        model: VoiceEnrollmentModel, status: ProcessingStatus
    ) -> None:
        current = ProcessingStatus(model.processing_status)
        if not current.can_transition_to(status):
            logger.warning(
                f"Unexpected status transition for enrollment {model.id}: "
                f"{current.value} -> {status.value}"
            )
        model.processing_status = status.value

    def create_enrollment(
        self,
        user_id: int,
        video_url: str | None = None,
        video_duration: int | None = None,
        status: ProcessingStatus = ProcessingStatus.UPLOADED,
    ) -> VoiceEnrollment:
        """Create a new active enrollment.

        Args:
            user_id: Owning user
            video_url: Location of the raw recording
            video_duration: Recording length in seconds, if known
            status: Initial processing status

        Returns:
            The created VoiceEnrollment instance

        Raises:
            UserNotFoundError: If the user does not exist
        """
        if self.session.get(UserModel, user_id) is None:
            raise UserNotFoundError(f"User {user_id} not found")

        model = VoiceEnrollmentModel(
            user_id=user_id,
            video_url=video_url,
            video_duration=video_duration,
            processing_status=status.value,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_domain_enrollment(model)

    def get_enrollment(self, enrollment_id: int) -> VoiceEnrollment:
        """Get an enrollment by id.

        Raises:
            EnrollmentNotFoundError: If enrollment not found
        """
        return self._to_domain_enrollment(self._get_model(enrollment_id))

    def get_enrollment_for_user(self, enrollment_id: int, user_id: int) -> VoiceEnrollment:
        """Get an enrollment only if it belongs to the given user.

        Raises:
            EnrollmentNotFoundError: If not found or owned by someone else
        """
        model = self.session.get(VoiceEnrollmentModel, enrollment_id)
        if model is None or model.user_id != user_id:
            raise EnrollmentNotFoundError(
                f"Voice enrollment {enrollment_id} not found for user {user_id}"
            )
        return self._to_domain_enrollment(model)

    def get_latest_active(self, user_id: int) -> VoiceEnrollment | None:
        """Get the user's most recent active enrollment."""
        model = self._latest_active_model(user_id)
        return self._to_domain_enrollment(model) if model else None

    def get_latest_active_with_profile(self, user_id: int) -> VoiceEnrollment | None:
        """Get the user's most recent active enrollment that has a voice profile."""
        model = self._latest_active_model(user_id, with_profile=True)
        return self._to_domain_enrollment(model) if model else None

    def list_pending_profile_creation(self, user_id: int) -> list[VoiceEnrollment]:
        """List enrollments with extracted audio still waiting for a profile."""
        statement = (
            select(VoiceEnrollmentModel)
            .where(
                VoiceEnrollmentModel.user_id == user_id,
                col(VoiceEnrollmentModel.ready_for_profile_creation).is_(True),
                col(VoiceEnrollmentModel.voice_profile_id).is_(None),
                col(VoiceEnrollmentModel.audio_url).is_not(None),
            )
            .order_by(col(VoiceEnrollmentModel.created_at))
        )
        return [self._to_domain_enrollment(m) for m in self.session.exec(statement).all()]

    def update_status(
        self,
        enrollment_id: int,
        status: ProcessingStatus,
        error: str | None = None,
    ) -> VoiceEnrollment:
        """Move an enrollment to a new processing status.

        Args:
            enrollment_id: Enrollment to update
            status: New status
            error: Error message stored with error statuses

        Returns:
            The updated VoiceEnrollment instance
        """
        model = self._get_model(enrollment_id)
        self._apply_status(model, status)
        if status.is_error:
            model.processing_error = error
        elif error is None:
            model.processing_error = None
        return self._save(model)

    def mark_audio_extracted(
        self,
        enrollment_id: int,
        audio_url: str,
        video_duration: int | None = None,
    ) -> VoiceEnrollment:
        """Record a successful audio extraction."""
        model = self._get_model(enrollment_id)
        self._apply_status(model, ProcessingStatus.AUDIO_EXTRACTED)
        model.audio_url = audio_url
        model.ready_for_profile_creation = True
        model.processing_error = None
        if model.video_duration is None and video_duration is not None:
            model.video_duration = video_duration
        return self._save(model)

    def attach_profile(
        self,
        user_id: int,
        profile_id: str,
        status: ProcessingStatus,
        enrollment_complete: bool = True,
        enrollment_id: int | None = None,
    ) -> VoiceEnrollment:
        """Point the user and their authoritative enrollment at a profile.

        The enrollment update, the user update and the retirement of active
        enrollments that reference a different profile are committed together.

        Args:
            user_id: Owning user
            profile_id: Profile id returned by the speaker recognition service
            status: Processing status to record on the enrollment
            enrollment_complete: Value for the user's voiceEnrollmentComplete flag
            enrollment_id: Enrollment to attach to; defaults to the latest active one

        Returns:
            The updated VoiceEnrollment instance

        Raises:
            UserNotFoundError: If the user does not exist
            EnrollmentNotFoundError: If enrollment_id does not belong to the user
        """
        user = self.session.get(UserModel, user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")

        if enrollment_id is not None:
            target = self.session.get(VoiceEnrollmentModel, enrollment_id)
            if target is None or target.user_id != user_id:
                raise EnrollmentNotFoundError(
                    f"Voice enrollment {enrollment_id} not found for user {user_id}"
                )
        else:
            target = self._latest_active_model(user_id)
        if target is None:
            target = VoiceEnrollmentModel(user_id=user_id, processing_status=status.value)

        now = datetime.now(UTC)
        try:
            others = self.session.exec(
                select(VoiceEnrollmentModel).where(
                    VoiceEnrollmentModel.user_id == user_id,
                    col(VoiceEnrollmentModel.is_active).is_(True),
                    col(VoiceEnrollmentModel.voice_profile_id).is_not(None),
                    VoiceEnrollmentModel.voice_profile_id != profile_id,
                )
            ).all()
            for other in others:
                if other.id != target.id:
                    other.is_active = False
                    other.updated_at = now
                    self.session.add(other)

            self._apply_status(target, status)
            target.voice_profile_id = profile_id
            target.is_active = True
            target.is_processed = True
            target.ready_for_profile_creation = False
            target.processing_error = None
            target.updated_at = now
            self.session.add(target)

            user.voice_profile_id = profile_id
            user.voice_enrollment_complete = enrollment_complete
            user.voice_enrollment_date = now
            user.updated_at = now
            self.session.add(user)

            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(target)
        return self._to_domain_enrollment(target)

    def mark_active_error(
        self,
        user_id: int,
        status: ProcessingStatus,
        error: str,
        enrollment_id: int | None = None,
    ) -> None:
        """Store an error status on the given or latest active enrollment."""
        if enrollment_id is not None:
            model = self.session.get(VoiceEnrollmentModel, enrollment_id)
        else:
            model = self._latest_active_model(user_id)
        if model is None:
            logger.warning(f"No active enrollment to mark as {status.value} for user {user_id}")
            return
        self._apply_status(model, status)
        model.processing_error = error
        self._save(model)

    def touch_last_used(self, user_id: int, profile_id: str) -> int:
        """Set lastUsedAt on the user's active enrollments with the profile.

        Returns:
            Number of enrollments updated
        """
        models = self.session.exec(
            select(VoiceEnrollmentModel).where(
                VoiceEnrollmentModel.user_id == user_id,
                VoiceEnrollmentModel.voice_profile_id == profile_id,
                col(VoiceEnrollmentModel.is_active).is_(True),
            )
        ).all()
        now = datetime.now(UTC)
        for model in models:
            model.last_used_at = now
            self.session.add(model)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return len(models)
