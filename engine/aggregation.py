"""Aggregation: gewichtete Summen S, W, R pro Modul inkl. Best-of-N-Gruppen.

  S = Σ(Note × Gewicht)  über gezählte, benotete Leistungen
  W = Σ(Gewicht)         über gezählte, benotete Leistungen
  R = Σ(Gewicht)         über gezählte, noch offene Leistungen
                         (inkl. unbesetzter Best-of-N-Slots)

Das Tripel (S, W, R) ist die einzige Grundlage aller Prognosen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.module import Module

logger = logging.getLogger(__name__)

# Obergrenze gesammelter Noten je Gruppe; weitere Noten werden ignoriert.
MAX_GROUP_MEMBERS = 256


@dataclass(frozen=True)
class ModuleSums:
    """Ergebnis von aggregate()."""

    S: float = 0.0
    W: float = 0.0
    R: float = 0.0

    @property
    def in_play(self) -> float:
        """Gesamtgewicht, das in W oder R eingeht."""
        return self.W + self.R


@dataclass
class GroupSummary:
    """Aufschlüsselung einer Best-of-N-Gruppe (für Berichte)."""

    group_id: int
    best_of: int
    slot_weight: float
    members: list[str] = field(default_factory=list)
    counted_marks: list[float] = field(default_factory=list)
    dropped_marks: list[float] = field(default_factory=list)

    @property
    def pending_slots(self) -> int:
        return max(self.best_of - len(self.counted_marks), 0)

    @property
    def earned(self) -> float:
        return sum(m * self.slot_weight for m in self.counted_marks)

    @property
    def remaining_weight(self) -> float:
        return self.pending_slots * self.slot_weight


def group_summaries(module: "Module",
                    max_group_members: int = MAX_GROUP_MEMBERS) -> list[GroupSummary]:
    """Wertet alle Best-of-N-Gruppen eines Moduls aus.

    Gruppenschlüssel ist (group_id, best_of). Jede Gruppe wird genau einmal
    beim ersten Auftreten ausgewertet; das Slot-Gewicht ist das Gewicht des
    ersten Mitglieds, auch wenn spätere Mitglieder anderes deklarieren.
    """
    groups: dict[tuple[int, int], GroupSummary] = {}
    collected: dict[tuple[int, int], list[float]] = {}

    for comp in module.components:
        if not comp.is_grouped:
            continue
        key = comp.group_key
        summary = groups.get(key)
        if summary is None:
            summary = GroupSummary(group_id=comp.group_id, best_of=comp.best_of,
                                   slot_weight=comp.weight)
            groups[key] = summary
            collected[key] = []
        summary.members.append(comp.name)
        if comp.mark is None:
            continue
        marks = collected[key]
        if len(marks) >= max_group_members:
            logger.warning(
                f"Modul {module.code}, Gruppe {comp.group_id}: mehr als "
                f"{max_group_members} Noten – '{comp.name}' wird ignoriert"
            )
            continue
        marks.append(comp.mark)

    for key, summary in groups.items():
        # sorted() ist stabil: gleiche Noten behalten ihre Reihenfolge
        ranked = sorted(collected[key], reverse=True)
        counted = min(len(ranked), summary.best_of)
        summary.counted_marks = ranked[:counted]
        summary.dropped_marks = ranked[counted:]

    return list(groups.values())


def aggregate(module: "Module", max_group_members: int = MAX_GROUP_MEMBERS) -> ModuleSums:
    """Berechnet (S, W, R) für ein Modul.

    Komponenten werden in Deklarationsreihenfolge durchlaufen. Ungruppierte
    Komponenten (group_id == 0 oder best_of == 0) zählen einzeln. Eine Gruppe
    wird beim ersten Mitglied komplett verbucht, weitere Mitglieder werden
    übersprungen. Bei Gruppen zählen nur die besten best_of Noten; nicht
    besetzte Slots gehen mit dem Slot-Gewicht in R ein. Aussortierte
    schlechtere Noten tragen weder zu W noch zu R bei.
    """
    S = W = R = 0.0
    groups = {(g.group_id, g.best_of): g
              for g in group_summaries(module, max_group_members)}
    seen: set[tuple[int, int]] = set()

    for comp in module.components:
        if not comp.is_grouped:
            if comp.mark is not None:
                S += comp.mark * comp.weight
                W += comp.weight
            else:
                R += comp.weight
            continue

        key = comp.group_key
        if key in seen:
            continue
        seen.add(key)

        group = groups[key]
        for mark in group.counted_marks:
            S += mark * group.slot_weight
            W += group.slot_weight
        R += group.remaining_weight

    return ModuleSums(S=S, W=W, R=R)
