"""Versioned schema for voice signature metadata.

Clients submit metadata as a JSON string next to the audio. Its shape has
changed over time, so decoding never fails: unreadable input yields an
empty ``VoiceSignatureMetadata`` plus the reason, and the signature is
stored regardless.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

METADATA_VERSION = 1


class VoiceSignatureMetadata(BaseModel):
    """Sidecar data stored with a voice signature."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    version: int = METADATA_VERSION
    duration: float | None = None
    mime_type: str | None = None
    transcript: str | None = None
    required_phrase: str | None = None
    strict_matching: bool | None = None
    is_verified: bool | None = None
    verified_at: datetime | None = None
    missing_words: list[str] | None = None
    metadata_error: str | None = None

    def to_storage(self) -> dict[str, Any]:
        """Dump with camelCase keys, dropping unset values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass
class DecodedMetadata:
    metadata: VoiceSignatureMetadata
    raw: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def decode_signature_metadata(raw: str | dict[str, Any] | None) -> DecodedMetadata:
    """Decode submitted metadata, falling back to an empty schema.

    Args:
        raw: JSON string, already-parsed dict, or None

    Returns:
        DecodedMetadata; ``error`` is set when the input could not be used
    """
    if raw is None or raw == "":
        return DecodedMetadata(metadata=VoiceSignatureMetadata())

    data: Any = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Voice signature metadata is not valid JSON: {e}")
            return DecodedMetadata(
                metadata=VoiceSignatureMetadata(), error=f"Invalid JSON: {e.msg}"
            )

    if not isinstance(data, dict):
        logger.warning(f"Voice signature metadata is not an object: {type(data).__name__}")
        return DecodedMetadata(
            metadata=VoiceSignatureMetadata(), error="Metadata must be a JSON object"
        )

    try:
        metadata = VoiceSignatureMetadata.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Voice signature metadata failed validation: {e.error_count()} errors")
        transcript = data.get("transcript")
        return DecodedMetadata(
            metadata=VoiceSignatureMetadata(
                transcript=transcript if isinstance(transcript, str) else None
            ),
            raw=data,
            error="Metadata did not match the expected schema",
        )
    return DecodedMetadata(metadata=metadata, raw=data)
