"""Gemeinsame Hilfsfunktionen für Konsolen- und Excel-Ausgabe."""

from datetime import date
from typing import Optional, Union

from engine.projection import (
    ComponentRequirement,
    OverallProjection,
    Projection,
    ProjectionStatus,
    RequirementStatus,
)

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "ok":         "B3FFB3",
    "warn":       "FFF2B3",
    "impossible": "FF9999",
    "safe":       "B3D4FF",
    "done":       "E0E0E0",
    "header":     "4472C4",
}

# Rich-Stil je Farbkategorie
STYLES: dict[str, str] = {
    "ok":         "green",
    "warn":       "yellow",
    "impossible": "bold red",
    "safe":       "cyan",
    "done":       "dim",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def fmt_pct(value: Optional[float], empty: str = "—") -> str:
    """72.5 → '72.50 %', None → '—'."""
    if value is None:
        return empty
    return f"{value:.2f} %"


def fmt_weight(value: float) -> str:
    return f"{value:g}"


# ─── Status-Beschriftungen ────────────────────────────────────────────────────

def projection_label(proj: Union[Projection, OverallProjection]) -> tuple[str, str]:
    """Text und Farbkategorie für einen benötigten Schnitt.

    Die Kategorien unterscheiden ausdrücklich "unmöglich" (> 100 %) und
    "bereits erreicht" (≤ 0 %), statt den Wert stillschweigend zu kappen.
    """
    if proj.status == ProjectionStatus.NO_DATA:
        return "keine Module", "done"
    if proj.status == ProjectionStatus.FINALIZED:
        return f"abgeschlossen: {fmt_pct(proj.value)}", "done"
    if proj.already_met:
        return f"Ziel erreicht ({fmt_pct(proj.value)})", "safe"
    if not proj.is_feasible:
        return f"unmöglich ({fmt_pct(proj.value)})", "impossible"
    if proj.value is not None and proj.value > 85.0:
        return fmt_pct(proj.value), "warn"
    return fmt_pct(proj.value), "ok"


def requirement_label(req: ComponentRequirement) -> tuple[str, str]:
    """Text und Farbkategorie für eine Komponenten-Anforderung."""
    if req.status == RequirementStatus.NON_COMPUTABLE:
        return "nicht berechenbar (Gewicht 0)", "done"
    if req.status == RequirementStatus.INFEASIBLE:
        return f"unmöglich ({fmt_pct(req.value)})", "impossible"
    if req.status == RequirementStatus.ALREADY_SAFE:
        return f"sicher – 0 % genügen ({fmt_pct(req.value)})", "safe"
    return fmt_pct(req.value), "ok"


def styled(text: str, category: str) -> str:
    """Verpackt Text in Rich-Markup der Farbkategorie."""
    style = STYLES.get(category)
    if not style:
        return text
    return f"[{style}]{text}[/{style}]"
