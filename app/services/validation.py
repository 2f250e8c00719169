from __future__ import annotations

from typing import Any

from app.core.errors import ValidationError

MIN_SUBJECT_LENGTH = 5


def validate_subject(raw: Any) -> str:
    """Return the trimmed subject or raise ValidationError.

    Internal whitespace is preserved; only the ends are stripped.
    """
    if not isinstance(raw, str):
        raise ValidationError()
    subject = raw.strip()
    if len(subject) < MIN_SUBJECT_LENGTH:
        raise ValidationError()
    return subject
