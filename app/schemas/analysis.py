from __future__ import annotations

from typing import Any

from google.genai import types
from pydantic import BaseModel, ConfigDict

RECORD_FIELDS = ("thinker", "generalApproach", "specificAnalysis")


# Sent unchanged with every generation call; never rebuilt per request.
ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    description="Liste d'analyses, une pour chaque penseur.",
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "thinker": types.Schema(
                type=types.Type.STRING,
                description="Nom du penseur (e.g., Socrate).",
            ),
            "generalApproach": types.Schema(
                type=types.Type.STRING,
                description=(
                    "Résumé de l'approche générale du penseur sur le grand thème "
                    "lié au sujet (en français)."
                ),
            ),
            "specificAnalysis": types.Schema(
                type=types.Type.STRING,
                description=(
                    "Analyse spécifique et directe de comment les idées du penseur "
                    "s'appliquent au sujet précis (en français)."
                ),
            ),
        },
        required=list(RECORD_FIELDS),
        property_ordering=list(RECORD_FIELDS),
    ),
)


class AnalysisRecord(BaseModel):
    """One thinker's entry, used when post-parse validation is enabled."""

    model_config = ConfigDict(extra="forbid", strict=True)

    thinker: str
    generalApproach: str
    specificAnalysis: str


class AnalysisResponse(BaseModel):
    success: bool = True
    subject: str
    analysis: list[Any]
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
