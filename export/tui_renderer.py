"""Gemeinsamer Renderer für die Terminal-Anzeige.

Wird von den CLI-Befehlen (show, module, overall) und vom interaktiven Menü
verwendet. Die *_rows-Funktionen liefern reine Textzeilen, die *_table-
Funktionen bauen daraus Rich-Tabellen.
"""

from typing import TYPE_CHECKING

from rich import box
from rich.panel import Panel
from rich.table import Table

from engine.projection import (
    overall_current_average,
    overall_projection,
    project_module,
)
from export.helpers import (
    fmt_pct,
    fmt_weight,
    projection_label,
    requirement_label,
    styled,
)

if TYPE_CHECKING:
    from config.schema import GradeConfig
    from engine.projection import ModuleProjection
    from models.registry import ModuleRegistry


def render_overview_rows(registry: "ModuleRegistry", config: "GradeConfig") -> list[list[str]]:
    """Eine Zeile pro Modul: [ID, Kürzel, Titel, LP, Schnitt, benötigt]."""
    pc = config.projection
    cap = config.engine.max_group_members
    rows: list[list[str]] = []
    for module in registry:
        mp = project_module(module, pc.target, pc.assume_other, cap)
        text, cat = projection_label(mp.needed)
        rows.append([
            str(module.id),
            module.code,
            module.title,
            str(module.credits),
            fmt_pct(mp.current, empty="noch keine Noten"),
            styled(text, cat),
        ])
    return rows


def render_component_rows(mp: "ModuleProjection") -> list[list[str]]:
    """Eine Zeile pro Komponente: [Name, Gewicht, Gruppe, Note]."""
    rows: list[list[str]] = []
    for comp in mp.module.components:
        group = f"G{comp.group_id} (beste {comp.best_of})" if comp.is_grouped else ""
        rows.append([
            comp.name,
            fmt_weight(comp.weight),
            group,
            fmt_pct(comp.mark, empty="offen"),
        ])
    return rows


def render_group_rows(mp: "ModuleProjection") -> list[list[str]]:
    """Eine Zeile pro Best-of-N-Gruppe."""
    rows: list[list[str]] = []
    for g in mp.groups:
        rows.append([
            f"G{g.group_id}",
            f"beste {g.best_of} von {len(g.members)}",
            fmt_weight(g.slot_weight),
            ", ".join(f"{m:g}" for m in g.counted_marks) or "—",
            ", ".join(f"{m:g}" for m in g.dropped_marks) or "—",
            str(g.pending_slots),
        ])
    return rows


def render_requirement_rows(mp: "ModuleProjection") -> list[list[str]]:
    rows: list[list[str]] = []
    for req in mp.requirements:
        text, cat = requirement_label(req)
        rows.append([req.component, fmt_weight(req.weight), styled(text, cat)])
    return rows


# ─── Rich-Tabellen ────────────────────────────────────────────────────────────

def overview_table(registry: "ModuleRegistry", config: "GradeConfig") -> Table:
    table = Table(
        title=f"{config.programme_name} – Ziel {config.projection.target:g} %",
        box=box.ROUNDED,
    )
    table.add_column("ID", justify="right")
    table.add_column("Kürzel", style="bold")
    table.add_column("Titel")
    table.add_column("LP", justify="right")
    table.add_column("Aktueller Schnitt", justify="right")
    table.add_column("Benötigt auf Rest", justify="right")
    for row in render_overview_rows(registry, config):
        table.add_row(*row)
    return table


def module_tables(mp: "ModuleProjection", config: "GradeConfig") -> list:
    """Panel + Tabellen für die Modul-Detailansicht."""
    m = mp.module
    s = mp.sums
    needed_text, needed_cat = projection_label(mp.needed)
    header = Panel(
        f"[bold]{m.code}[/bold] {m.title}  |  {m.credits} LP\n"
        f"S = {s.S:.2f}   W = {s.W:g}   R = {s.R:g}\n"
        f"Aktueller Schnitt: {fmt_pct(mp.current, empty='noch keine Noten')}\n"
        f"Benötigt auf Rest für {config.projection.target:g} %: "
        f"{styled(needed_text, needed_cat)}",
        title="Modul",
        border_style="cyan",
    )
    parts: list = [header]

    comps = Table(title="Komponenten", box=box.ROUNDED)
    comps.add_column("Name", style="bold")
    comps.add_column("Gewicht", justify="right")
    comps.add_column("Gruppe")
    comps.add_column("Note", justify="right")
    for row in render_component_rows(mp):
        comps.add_row(*row)
    parts.append(comps)

    if mp.groups:
        groups = Table(title="Best-of-N-Gruppen", box=box.ROUNDED)
        groups.add_column("Gruppe", style="bold")
        groups.add_column("Regel")
        groups.add_column("Slot-Gewicht", justify="right")
        groups.add_column("Gezählt")
        groups.add_column("Gestrichen")
        groups.add_column("Offene Slots", justify="right")
        for row in render_group_rows(mp):
            groups.add_row(*row)
        parts.append(groups)

    if mp.requirements:
        reqs = Table(
            title=f"Benötigte Note je Komponente "
                  f"(übrige offene mit {config.projection.assume_other:g} %)",
            box=box.ROUNDED,
        )
        reqs.add_column("Komponente", style="bold")
        reqs.add_column("Gewicht", justify="right")
        reqs.add_column("Benötigt", justify="right")
        for row in render_requirement_rows(mp):
            reqs.add_row(*row)
        parts.append(reqs)

    return parts


def overall_panel(registry: "ModuleRegistry", config: "GradeConfig") -> Panel:
    pc = config.projection
    cap = config.engine.max_group_members
    modules = registry.modules
    proj = overall_projection(modules, pc.target, cap)
    current = overall_current_average(modules, cap)
    text, cat = projection_label(proj)
    return Panel(
        f"Leistungspunkte gesamt: {proj.total_credits:g}\n"
        f"Gesichert (A): {proj.banked:.2f}   Offen (B): {proj.remaining:.2f}\n"
        f"Aktueller Schnitt (LP-gewichtet): {fmt_pct(current, empty='noch keine Noten')}\n"
        f"Benötigt auf Rest für {pc.target:g} %: {styled(text, cat)}",
        title="Gesamtprognose",
        border_style="cyan",
    )
