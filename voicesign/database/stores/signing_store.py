"""Document, recipient, field and signature store for voice signing."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlmodel import Session, col, select

from voicesign.database.exceptions import (
    DocumentNotFoundError,
    FieldNotFoundError,
    RecipientNotFoundError,
)
from voicesign.database.models import (
    DocumentAuditLogModel,
    DocumentModel,
    FieldModel,
    RecipientModel,
    SignatureModel,
)
from voicesign.domain.models import (
    Document,
    DocumentAuditLog,
    DocumentAuditLogType,
    DocumentStatus,
    Field,
    FieldType,
    Recipient,
    RecipientRole,
    Signature,
    SignedField,
    SigningStatus,
)

logger = logging.getLogger(__name__)


class SigningStore:
    """Store for the document-side records touched by voice signing.

    Implements SigningStoreProtocol from voicesign.domain.protocols.store.
    """

    def __init__(self, session: Session) -> None:
        """Initialize store with a database session.

        Args:
            session: SQLModel database session
        """
        self.session = session

    def _to_domain_document(self, model: DocumentModel) -> Document:
        return Document(
            id=model.id,
            title=model.title,
            owner_id=model.owner_id,
            status=DocumentStatus(model.status),
            deleted_at=model.deleted_at,
            created_at=model.created_at,
        )

    def _to_domain_recipient(self, model: RecipientModel) -> Recipient:
        return Recipient(
            id=model.id,
            document_id=model.document_id,
            email=model.email,
            name=model.name,
            token=model.token,
            role=RecipientRole(model.role),
            signing_status=SigningStatus(model.signing_status),
            signing_order=model.signing_order,
        )

    def _to_domain_field(self, model: FieldModel) -> Field:
        return Field(
            id=model.id,
            secondary_id=model.secondary_id,
            document_id=model.document_id,
            recipient_id=model.recipient_id,
            type=FieldType(model.type),
            inserted=model.inserted,
            custom_text=model.custom_text,
            field_meta=model.field_meta,
        )

    def _to_domain_signature(self, model: SignatureModel) -> Signature:
        return Signature(
            id=model.id,
            field_id=model.field_id,
            recipient_id=model.recipient_id,
            voice_signature_url=model.voice_signature_url,
            voice_signature_transcript=model.voice_signature_transcript,
            voice_signature_metadata=model.voice_signature_metadata,
            voice_signature_created_at=model.voice_signature_created_at,
            created_at=model.created_at,
        )

    def create_document(
        self, owner_id: int, title: str, status: DocumentStatus = DocumentStatus.PENDING
    ) -> Document:
        """Create a document owned by a user."""
        model = DocumentModel(owner_id=owner_id, title=title, status=status.value)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_domain_document(model)

    def get_document(self, document_id: int) -> Document:
        """Get a document by id.

        Raises:
            DocumentNotFoundError: If document not found
        """
        model = self.session.get(DocumentModel, document_id)
        if model is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return self._to_domain_document(model)

    def add_recipient(
        self,
        document_id: int,
        email: str,
        token: str,
        name: str = "",
        role: RecipientRole = RecipientRole.SIGNER,
        signing_order: int | None = None,
    ) -> Recipient:
        """Add a recipient to a document."""
        model = RecipientModel(
            document_id=document_id,
            email=email,
            token=token,
            name=name,
            role=role.value,
            signing_order=signing_order,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_domain_recipient(model)

    def add_field(
        self,
        document_id: int,
        field_type: FieldType,
        recipient_id: int | None = None,
        field_meta: dict[str, Any] | None = None,
    ) -> Field:
        """Add a field to a document."""
        model = FieldModel(
            document_id=document_id,
            recipient_id=recipient_id,
            type=field_type.value,
            field_meta=field_meta,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_domain_field(model)

    def get_recipient_by_token(self, token: str) -> Recipient:
        """Get the recipient that owns a signing token.

        Raises:
            RecipientNotFoundError: If no recipient has the token
        """
        model = self.session.exec(
            select(RecipientModel).where(RecipientModel.token == token)
        ).first()
        if model is None:
            raise RecipientNotFoundError("Recipient not found for signing token")
        return self._to_domain_recipient(model)

    def get_signable_field(self, field_id: int, recipient: Recipient) -> Field:
        """Get a field the recipient is allowed to fill.

        Signers may only fill their own fields. Assistants may also fill
        fields of recipients who have not signed yet and come at or after
        them in the signing order.

        Raises:
            FieldNotFoundError: If the field is missing or not fillable
        """
        model = self.session.get(FieldModel, field_id)
        if model is None or model.document_id != recipient.document_id:
            raise FieldNotFoundError(f"Field {field_id} not found")

        if recipient.role != RecipientRole.ASSISTANT:
            if model.recipient_id != recipient.id:
                raise FieldNotFoundError(f"Field {field_id} not found")
            return self._to_domain_field(model)

        if model.recipient_id == recipient.id:
            return self._to_domain_field(model)
        owner = (
            self.session.get(RecipientModel, model.recipient_id)
            if model.recipient_id is not None
            else None
        )
        if (
            owner is None
            or owner.signing_status == SigningStatus.SIGNED.value
            or (owner.signing_order or 0) < (recipient.signing_order or 0)
        ):
            raise FieldNotFoundError(f"Field {field_id} not found")
        return self._to_domain_field(model)

    def get_field(self, field_id: int) -> Field:
        """Get a field by id.

        Raises:
            FieldNotFoundError: If field not found
        """
        model = self.session.get(FieldModel, field_id)
        if model is None:
            raise FieldNotFoundError(f"Field {field_id} not found")
        return self._to_domain_field(model)

    def get_signature_for_field(self, field_id: int) -> Signature | None:
        """Get the signature attached to a field, if any."""
        model = self.session.exec(
            select(SignatureModel).where(SignatureModel.field_id == field_id)
        ).first()
        return self._to_domain_signature(model) if model else None

    def list_audit_logs(self, document_id: int) -> list[DocumentAuditLog]:
        """List a document's audit log entries, oldest first."""
        models = self.session.exec(
            select(DocumentAuditLogModel)
            .where(DocumentAuditLogModel.document_id == document_id)
            .order_by(col(DocumentAuditLogModel.id))
        ).all()
        return [
            DocumentAuditLog(
                id=m.id,
                document_id=m.document_id,
                type=DocumentAuditLogType(m.type),
                data=m.data,
                email=m.email,
                name=m.name,
                created_at=m.created_at,
            )
            for m in models
        ]

    def insert_voice_signature(
        self,
        field_id: int,
        recipient: Recipient,
        voice_signature_url: str,
        transcript: str | None,
        metadata: dict[str, Any] | None,
        audit_type: DocumentAuditLogType,
        audit_data: dict[str, Any],
    ) -> SignedField:
        """Mark a field inserted and store its voice signature.

        The field update, the signature upsert and the audit log entry are
        committed in a single transaction. Nothing is written if any step fails.

        Returns:
            The inserted field with its signature
        """
        assert recipient.id is not None
        now = datetime.now(UTC)
        field_model = self.session.get(FieldModel, field_id)
        if field_model is None:
            raise FieldNotFoundError(f"Field {field_id} not found")

        try:
            field_model.inserted = True
            field_model.custom_text = ""
            self.session.add(field_model)

            signature = self.session.exec(
                select(SignatureModel).where(SignatureModel.field_id == field_id)
            ).first()
            if signature is None:
                signature = SignatureModel(field_id=field_id, recipient_id=recipient.id)
            signature.recipient_id = recipient.id
            signature.voice_signature_url = voice_signature_url
            signature.voice_signature_transcript = transcript
            signature.voice_signature_metadata = metadata
            signature.voice_signature_created_at = now
            self.session.add(signature)

            self.session.add(
                DocumentAuditLogModel(
                    document_id=field_model.document_id,
                    type=audit_type.value,
                    email=recipient.email,
                    name=recipient.name,
                    data=audit_data,
                )
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.error(f"Voice signature transaction rolled back for field {field_id}")
            raise

        self.session.refresh(field_model)
        self.session.refresh(signature)
        return SignedField(
            field=self._to_domain_field(field_model),
            signature=self._to_domain_signature(signature),
        )
