from __future__ import annotations

import json
import re
from typing import Any, List

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import MalformedResponseError
from app.schemas.analysis import AnalysisRecord

SNIPPET_LIMIT = 400

_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?[ \t]*```\s*$")


def strip_fences(text: str) -> str:
    """Remove a leading ```lang marker and a trailing ``` marker, if present."""
    cleaned = (text or "").strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_records(text: str) -> List[Any]:
    """
    Fence-strip → strict JSON parse → must be an array.
    Entries are returned as parsed; shape is not checked here.
    """
    cleaned = strip_fences(text)
    snippet = cleaned[:SNIPPET_LIMIT]

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Réponse JSON invalide de l'API Gemini: {e.msg} (ligne {e.lineno}, colonne {e.colno})",
            snippet=snippet,
        ) from e

    if not isinstance(data, list):
        raise MalformedResponseError(
            f"Réponse inattendue de l'API Gemini: tableau attendu, reçu {type(data).__name__}",
            snippet=snippet,
        )
    return data


def validate_records(records: List[Any]) -> List[dict]:
    out = []
    for i, entry in enumerate(records):
        try:
            out.append(AnalysisRecord.model_validate(entry).model_dump())
        except PydanticValidationError as e:
            raise MalformedResponseError(
                f"Entrée {i} non conforme au schéma: {e.error_count()} erreur(s)",
                snippet=json.dumps(entry, ensure_ascii=False, default=str)[:SNIPPET_LIMIT],
            ) from e
    return out
