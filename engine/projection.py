"""Prognose: benötigte Durchschnitte pro Modul, pro Komponente und gesamt.

Alle Funktionen arbeiten ausschließlich auf den Summen (S, W, R) aus
engine.aggregation. Ziel- und Annahmewerte sind Prozentwerte 0–100.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Union

from engine.aggregation import MAX_GROUP_MEMBERS, GroupSummary, ModuleSums, aggregate, group_summaries

if TYPE_CHECKING:
    from models.component import Component
    from models.module import Module


class ProjectionStatus(str, Enum):
    NEEDED = "needed"          # Es ist noch etwas offen, value = benötigter Schnitt
    FINALIZED = "finalized"    # Nichts mehr offen, value = Endnote
    NO_DATA = "no_data"        # Keine Module / keine Leistungspunkte


class RequirementStatus(str, Enum):
    REQUIRED = "required"              # 0 ≤ value ≤ 100
    INFEASIBLE = "infeasible"          # value > 100: Ziel nicht erreichbar
    ALREADY_SAFE = "already_safe"      # value < 0: auch 0 % reichen
    NON_COMPUTABLE = "non_computable"  # Gewicht ≤ 0


def check_percentage(value: float, label: str = "Wert") -> float:
    value = float(value)
    if not 0.0 <= value <= 100.0:
        raise ValueError(f"{label} muss zwischen 0 und 100 liegen (erhalten: {value})")
    return value


@dataclass(frozen=True)
class Projection:
    """Benötigter Schnitt auf die offenen Leistungen eines Moduls."""

    status: ProjectionStatus
    value: Optional[float]

    @property
    def is_finalized(self) -> bool:
        return self.status == ProjectionStatus.FINALIZED

    @property
    def is_feasible(self) -> bool:
        """False wenn mehr als 100 % auf den Rest nötig wären."""
        if self.status != ProjectionStatus.NEEDED or self.value is None:
            return True
        return self.value <= 100.0

    @property
    def already_met(self) -> bool:
        """True wenn das Ziel selbst mit 0 % auf den Rest erreicht wird."""
        return (self.status == ProjectionStatus.NEEDED
                and self.value is not None and self.value <= 0.0)


@dataclass(frozen=True)
class ComponentRequirement:
    """Benötigte Note für eine einzelne offene, ungruppierte Komponente."""

    component: str
    weight: float
    status: RequirementStatus
    value: Optional[float] = None   # None nur bei NON_COMPUTABLE


@dataclass(frozen=True)
class OverallProjection:
    """Leistungspunkt-gewichtete Gesamtprognose."""

    status: ProjectionStatus
    value: Optional[float]
    total_credits: float        # C
    banked: float               # A = Σ LP × S/100
    remaining: float            # B = Σ LP × R/100

    @property
    def is_feasible(self) -> bool:
        if self.status != ProjectionStatus.NEEDED or self.value is None:
            return True
        return self.value <= 100.0

    @property
    def already_met(self) -> bool:
        return (self.status == ProjectionStatus.NEEDED
                and self.value is not None and self.value <= 0.0)


# ─── Modul ────────────────────────────────────────────────────────────────────

def _sums(module_or_sums: Union["Module", ModuleSums],
          max_group_members: int = MAX_GROUP_MEMBERS) -> ModuleSums:
    if isinstance(module_or_sums, ModuleSums):
        return module_or_sums
    return aggregate(module_or_sums, max_group_members)


def current_average(module_or_sums: Union["Module", ModuleSums]) -> Optional[float]:
    """Aktueller Schnitt auf die bereits benotete Arbeit (S/W). None = noch keine Noten."""
    sums = _sums(module_or_sums)
    if sums.W > 0:
        return sums.S / sums.W
    return None


def needed_average(module_or_sums: Union["Module", ModuleSums], target: float) -> Projection:
    """Benötigter Schnitt auf alle offenen Leistungen, um target zu erreichen.

    - R ≤ 0: Modul abgeschlossen, value = S/100 (Endnote).
    - W ≤ 0: noch nichts benotet, value = target.
    - sonst: value = (target·100 − S) / R
    """
    target = check_percentage(target, "Zielwert")
    sums = _sums(module_or_sums)
    if sums.R <= 0:
        return Projection(ProjectionStatus.FINALIZED, sums.S / 100.0)
    if sums.W <= 0:
        return Projection(ProjectionStatus.NEEDED, target)
    return Projection(ProjectionStatus.NEEDED, (target * 100.0 - sums.S) / sums.R)


def required_for_component(module: "Module", component: "Component", target: float,
                           assumed_other: float,
                           sums: Optional[ModuleSums] = None) -> ComponentRequirement:
    """Benötigte Note auf eine Komponente, wenn alle anderen offenen Leistungen
    mit assumed_other bewertet werden.

        required = (target·100 − S − assumed_other·(R − Gewicht)) / Gewicht

    Nur für ungruppierte, unbenotete Komponenten definiert. Für einen Slot
    einer Best-of-N-Gruppe gibt es keine eindeutige Einzelanforderung.
    """
    target = check_percentage(target, "Zielwert")
    assumed_other = check_percentage(assumed_other, "Annahme")
    if not any(c is component for c in module.components):
        raise ValueError(f"Komponente '{component.name}' gehört nicht zu Modul {module.code}")
    if component.is_grouped:
        raise ValueError(
            f"Komponente '{component.name}' ist Teil einer Best-of-N-Gruppe – "
            f"keine Einzelanforderung möglich"
        )
    if component.is_marked:
        raise ValueError(f"Komponente '{component.name}' ist bereits benotet")

    weight = component.weight
    if weight <= 0:
        return ComponentRequirement(component.name, weight, RequirementStatus.NON_COMPUTABLE)

    sums = sums or aggregate(module)
    value = (target * 100.0 - sums.S - assumed_other * (sums.R - weight)) / weight
    if value > 100.0:
        status = RequirementStatus.INFEASIBLE
    elif value < 0.0:
        status = RequirementStatus.ALREADY_SAFE
    else:
        status = RequirementStatus.REQUIRED
    return ComponentRequirement(component.name, weight, status, value)


def component_requirements(module: "Module", target: float, assumed_other: float,
                           sums: Optional[ModuleSums] = None) -> list[ComponentRequirement]:
    """Anforderungen für alle offenen, ungruppierten Komponenten (Deklarationsreihenfolge)."""
    sums = sums or aggregate(module)
    return [
        required_for_component(module, comp, target, assumed_other, sums)
        for comp in module.components
        if not comp.is_grouped and not comp.is_marked
    ]


# ─── Gesamt ───────────────────────────────────────────────────────────────────

def overall_projection(modules: Iterable["Module"], target: float,
                       max_group_members: int = MAX_GROUP_MEMBERS) -> OverallProjection:
    """Leistungspunkt-gewichtete Prognose über alle Module.

        A = Σ LP·S/100   (bereits gesicherte Punkte in Modulnoten-Einheiten)
        B = Σ LP·R/100   (noch offenes LP-Gewicht)
        C = Σ LP

    B ≤ 0 → abgeschlossen mit A/C, sonst benötigter Schnitt (target·C − A)/B.
    """
    target = check_percentage(target, "Zielwert")
    A = B = C = 0.0
    for module in modules:
        sums = aggregate(module, max_group_members)
        A += module.credits * (sums.S / 100.0)
        B += module.credits * (sums.R / 100.0)
        C += module.credits

    if C <= 0:
        return OverallProjection(ProjectionStatus.NO_DATA, None, C, A, B)
    if B <= 0:
        return OverallProjection(ProjectionStatus.FINALIZED, A / C, C, A, B)
    return OverallProjection(ProjectionStatus.NEEDED, (target * C - A) / B, C, A, B)


def overall_current_average(modules: Iterable["Module"],
                            max_group_members: int = MAX_GROUP_MEMBERS) -> Optional[float]:
    """Gesamtschnitt auf benotete Arbeit: Σ LP·S / Σ LP·W.

    Bewusst NICHT der Mittelwert der Modul-Schnitte.
    """
    num = den = 0.0
    for module in modules:
        sums = aggregate(module, max_group_members)
        num += module.credits * sums.S
        den += module.credits * sums.W
    if den > 0:
        return num / den
    return None


# ─── Gebündelte Sicht für Ausgabe ─────────────────────────────────────────────

@dataclass
class ModuleProjection:
    """Alle Kennzahlen eines Moduls für CLI, Menü und Export."""

    module: "Module"
    sums: ModuleSums
    current: Optional[float]
    needed: Projection
    requirements: list[ComponentRequirement] = field(default_factory=list)
    groups: list[GroupSummary] = field(default_factory=list)


def project_module(module: "Module", target: float, assumed_other: float,
                   max_group_members: int = MAX_GROUP_MEMBERS) -> ModuleProjection:
    sums = aggregate(module, max_group_members)
    return ModuleProjection(
        module=module,
        sums=sums,
        current=current_average(sums),
        needed=needed_average(sums, target),
        requirements=component_requirements(module, target, assumed_other, sums),
        groups=group_summaries(module, max_group_members),
    )
