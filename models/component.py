"""Datenmodell für eine Prüfungskomponente (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field


class Component(BaseModel):
    """Eine einzelne bewertete Leistung innerhalb eines Moduls (Klausur, Abgabe, Test)."""

    name: str                                           # "Exam", "Coursework 1"
    weight: float = Field(ge=0)                         # Prozentpunkte von 100 des Moduls
    mark: Optional[float] = Field(None, ge=0, le=100)   # None = noch keine Note
    group_id: int = Field(0, ge=0)                      # 0 = ungruppiert
    best_of: int = Field(0, ge=0)                       # 0 = keine Best-of-N-Gruppe

    @property
    def is_marked(self) -> bool:
        return self.mark is not None

    @property
    def is_grouped(self) -> bool:
        """True nur für echte Best-of-N-Mitglieder (group_id > 0 UND best_of > 0)."""
        return self.group_id > 0 and self.best_of > 0

    @property
    def group_key(self) -> tuple[int, int]:
        return (self.group_id, self.best_of)
