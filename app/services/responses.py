from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.errors import AnalysisError, ValidationError
from app.schemas.analysis import AnalysisResponse, ErrorResponse

GENERIC_ERROR = "Erreur lors de l'analyse"


@dataclass(frozen=True)
class AnalysisOutcome:
    status_code: int
    body: Dict[str, Any]


def iso_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def success(subject: str, records: List[Any]) -> AnalysisOutcome:
    body = AnalysisResponse(subject=subject, analysis=records, timestamp=iso_timestamp())
    return AnalysisOutcome(200, body.model_dump())


def failure(err: AnalysisError) -> AnalysisOutcome:
    if isinstance(err, ValidationError):
        return AnalysisOutcome(400, ErrorResponse(error=str(err)).model_dump(exclude_none=True))
    return AnalysisOutcome(500, ErrorResponse(error=GENERIC_ERROR, message=str(err)).model_dump())
