from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from app.core.settings import DEFAULT_THINKERS


@dataclass(frozen=True)
class ThinkerRoster:
    names: Tuple[str, ...]

    @classmethod
    def of(cls, names: Iterable[str]) -> "ThinkerRoster":
        cleaned = tuple(n.strip() for n in names if n and n.strip())
        if not cleaned:
            raise ValueError("Thinker roster must contain at least one name")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError(f"Thinker roster contains duplicates: {list(cleaned)}")
        return cls(cleaned)

    def joined(self) -> str:
        return ", ".join(self.names)


DEFAULT_ROSTER = ThinkerRoster.of(DEFAULT_THINKERS)


@dataclass(frozen=True)
class ComposedPrompt:
    instruction: str
    query: str


def compose_prompt(subject: str, roster: ThinkerRoster = DEFAULT_ROSTER) -> ComposedPrompt:
    """Build the system instruction and the user query for one subject.

    Both texts quote the subject verbatim and list each roster name exactly once.
    """
    thinkers = roster.joined()

    instruction = (
        "Tu es un spécialiste de l'analyse sociologique et philosophique. "
        f"Ton rôle est de décortiquer le sujet proposé par l'utilisateur (qui est: \"{subject}\") "
        f"à travers le prisme des grands penseurs suivants: {thinkers}. "
        "Pour chaque penseur, tu dois fournir une analyse structurée, séparant : "
        "1) l'approche générale du penseur sur le thème large associé au sujet "
        "(ex: pour 'solitude numérique', le thème large est 'isolement' ou 'relation humaine'), et "
        "2) l'application ou l'interprétation spécifique de ses idées au sujet exact proposé par l'utilisateur. "
        "Le ton doit être académique, rigoureux, et pédagogique. "
        "Rédige toute l'analyse en français. "
        "Réponds UNIQUEMENT en utilisant la structure JSON fournie ci-dessous."
    )

    query = f"Analyse le sujet \"{subject}\" en appliquant les idées des penseurs suivants: {thinkers}."

    return ComposedPrompt(instruction=instruction, query=query)
