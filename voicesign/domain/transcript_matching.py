"""Required-phrase matching for voice signature transcripts.

Two policies are supported:

- lenient: every required word must appear somewhere in the transcript,
  in any order, where "appear" means one word contains the other
  (tolerates plurals and partially recognized words).
- strict: the transcript must follow the phrase word by word. Filler
  words are skipped, but a required word is given up as missing once the
  transcript has drifted more than ``MAX_DRIFT`` words past the last match.
  At most ``min(2, floor(0.1 * len(phrase_words)))`` words may be missing.
"""

import math
import re
from dataclasses import dataclass, field

MAX_DRIFT = 3
MAX_MISSING_WORDS = 2
MISSING_WORDS_RATIO = 0.1

_PUNCTUATION = re.compile(r"[^\w\s]")


def normalize_text(text: str | None) -> str:
    """Lowercase, strip punctuation, collapse whitespace and trim."""
    if not text:
        return ""
    stripped = _PUNCTUATION.sub("", text.lower())
    return " ".join(stripped.split())


def _words_match(required: str, spoken: str) -> bool:
    return required == spoken or required in spoken or spoken in required


def max_missing_words(word_count: int) -> int:
    return min(MAX_MISSING_WORDS, math.floor(word_count * MISSING_WORDS_RATIO))


@dataclass
class TranscriptMatch:
    """Outcome of comparing a transcript with a required phrase."""

    matched: bool
    strict: bool
    normalized_transcript: str = ""
    normalized_phrase: str = ""
    missing_words: list[str] = field(default_factory=list)
    max_missing: int = 0


def _match_lenient(required: list[str], spoken: list[str]) -> list[str]:
    return [w for w in required if not any(_words_match(w, s) for s in spoken)]


def _match_strict(required: list[str], spoken: list[str], max_missing: int) -> list[str]:
    r = t = anchor = 0
    skipped: list[str] = []
    while r < len(required) and t < len(spoken):
        if _words_match(required[r], spoken[t]):
            r += 1
            t += 1
            anchor = t
            continue

        t += 1
        if t - anchor > MAX_DRIFT:
            skipped.append(required[r])
            r += 1
            t = anchor
            if len(skipped) > max_missing:
                break

    return skipped + required[r:]


def match_transcript(
    transcript: str | None,
    required_phrase: str | None,
    strict: bool = False,
) -> TranscriptMatch:
    """Compare a transcript with a required phrase.

    Args:
        transcript: Speech-to-text output, may be empty
        required_phrase: Phrase the signer must say; None disables matching
        strict: Use word-aligned matching instead of containment

    Returns:
        TranscriptMatch with the outcome and the words found missing
    """
    phrase = normalize_text(required_phrase)
    spoken = normalize_text(transcript)
    if not phrase:
        return TranscriptMatch(matched=True, strict=strict, normalized_transcript=spoken)

    required_words = phrase.split()
    spoken_words = spoken.split()

    if not strict:
        missing = _match_lenient(required_words, spoken_words)
        return TranscriptMatch(
            matched=not missing,
            strict=False,
            normalized_transcript=spoken,
            normalized_phrase=phrase,
            missing_words=missing,
        )

    allowed = max_missing_words(len(required_words))
    if spoken == phrase:
        return TranscriptMatch(
            matched=True,
            strict=True,
            normalized_transcript=spoken,
            normalized_phrase=phrase,
            max_missing=allowed,
        )

    missing = _match_strict(required_words, spoken_words, allowed)
    return TranscriptMatch(
        matched=len(missing) <= allowed,
        strict=True,
        normalized_transcript=spoken,
        normalized_phrase=phrase,
        missing_words=missing,
        max_missing=allowed,
    )


def matches(transcript: str | None, required_phrase: str | None, strict: bool = False) -> bool:
    """Check whether a transcript satisfies a required phrase."""
    return match_transcript(transcript, required_phrase, strict).matched
