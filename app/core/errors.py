from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
    """Base class for every failure the analysis pipeline knows how to report."""


class ValidationError(AnalysisError):
    """Subject missing or shorter than the minimum length."""

    def __init__(self, message: str = "Le sujet doit contenir au moins 5 caractères", kind: str = "too-short"):
        super().__init__(message)
        self.kind = kind


class UpstreamError(AnalysisError):
    """Generation service answered with a non-success status.

    ``raw_body`` is kept for the logs only, it never reaches the caller.
    """

    def __init__(self, status: Optional[int], raw_body: str = ""):
        super().__init__(f"Erreur API Gemini: {status}")
        self.status = status
        self.raw_body = raw_body


class EmptyResponseError(AnalysisError):
    def __init__(self, message: str = "Réponse vide de l'API Gemini"):
        super().__init__(message)


class MalformedResponseError(AnalysisError):
    def __init__(self, message: str, snippet: str = ""):
        super().__init__(message)
        self.snippet = snippet


class UnhandledError(AnalysisError):
    def __init__(self, cause: BaseException):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause


class MissingCredentialError(RuntimeError):
    """Raised at startup when GEMINI_API_KEY is not configured."""
