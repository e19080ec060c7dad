"""Interaktives Menü: Module ansehen, Noten eintragen, Prognosen abrufen.

Nutzt rich für Konsolenausgabe und Eingabe.
"""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, Prompt

from config.manager import ask_percentage
from config.schema import GradeConfig
from data.records import save_marks
from engine.projection import project_module
from export.tui_renderer import module_tables, overall_panel, overview_table
from models.module import Module
from models.registry import ModuleRegistry

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def _pick_module(registry: ModuleRegistry) -> Optional[Module]:
    key = Prompt.ask("Modul (ID oder Kürzel)")
    module = registry.resolve(key)
    if module is None:
        _warn(f"Kein Modul '{key}' gefunden.")
    return module


def _pick_component_name(module: Module) -> Optional[str]:
    for i, comp in enumerate(module.components, 1):
        mark = f"{comp.mark:g}" if comp.mark is not None else "offen"
        console.print(f"  [bold]{i}.[/bold] {comp.name} [dim]({mark})[/dim]")
    raw = Prompt.ask("Komponente (Nummer oder Name)")
    if raw.isdigit() and 1 <= int(raw) <= len(module.components):
        return module.components[int(raw) - 1].name
    if module.find_component(raw) is not None:
        return raw
    _warn(f"Keine Komponente '{raw}' in {module.code}.")
    return None


def _show_module(module: Module, config: GradeConfig) -> None:
    pc = config.projection
    mp = project_module(module, pc.target, pc.assume_other, config.engine.max_group_members)
    for part in module_tables(mp, config):
        console.print(part)


def _set_mark(registry: ModuleRegistry, config: GradeConfig) -> bool:
    module = _pick_module(registry)
    if module is None:
        return False
    name = _pick_component_name(module)
    if name is None:
        return False
    value = FloatPrompt.ask("Note (0–100)")
    try:
        module.set_mark(name, value)
    except ValueError as e:
        _warn(str(e))
        return False
    _success(f"{module.code} / {name}: {value:g} %")
    _show_module(module, config)
    return True


def _clear_mark(registry: ModuleRegistry) -> bool:
    module = _pick_module(registry)
    if module is None:
        return False
    name = _pick_component_name(module)
    if name is None:
        return False
    module.clear_mark(name)
    _success(f"{module.code} / {name}: Note entfernt")
    return True


def run_menu(registry: ModuleRegistry, config: GradeConfig,
             marks_path: Path) -> GradeConfig:
    """Hauptschleife. Gibt die (ggf. geänderte) Config zurück.

    Geänderte Noten werden beim Verlassen gespeichert, wenn autosave aktiv ist,
    sonst wird nachgefragt.
    """
    dirty = False
    while True:
        _header(f"Notenrechner – {config.programme_name}")
        console.print(
            f"[dim]Ziel {config.projection.target:g} %  |  "
            f"Annahme übrige {config.projection.assume_other:g} %[/dim]"
        )
        console.print("  [bold]1.[/bold] Modulübersicht")
        console.print("  [bold]2.[/bold] Modul-Details")
        console.print("  [bold]3.[/bold] Note eintragen")
        console.print("  [bold]4.[/bold] Note entfernen")
        console.print("  [bold]5.[/bold] Gesamtprognose")
        console.print("  [bold]6.[/bold] Zielnote ändern")
        console.print("  [bold]7.[/bold] Annahme für übrige Komponenten ändern")
        console.print("  [bold]8.[/bold] Noten speichern")
        console.print("  [bold]0.[/bold] Beenden")

        choice = Prompt.ask("\nAuswahl", default="0")

        if choice == "1":
            console.print(overview_table(registry, config))
        elif choice == "2":
            module = _pick_module(registry)
            if module is not None:
                _show_module(module, config)
        elif choice == "3":
            dirty = _set_mark(registry, config) or dirty
        elif choice == "4":
            dirty = _clear_mark(registry) or dirty
        elif choice == "5":
            console.print(overall_panel(registry, config))
        elif choice == "6":
            target = ask_percentage("Zielnote (%)", config.projection.target)
            config = config.model_copy(update={
                "projection": config.projection.model_copy(update={"target": target})
            })
        elif choice == "7":
            assume = ask_percentage("Annahme (%)", config.projection.assume_other)
            config = config.model_copy(update={
                "projection": config.projection.model_copy(update={"assume_other": assume})
            })
        elif choice == "8":
            save_marks(registry, marks_path)
            _success(f"Noten gespeichert: {marks_path}")
            dirty = False
        elif choice == "0":
            break
        else:
            console.print("[yellow]Ungültige Auswahl.[/yellow]")

    if dirty and (config.data.autosave
                  or Confirm.ask("Geänderte Noten speichern?", default=True)):
        save_marks(registry, marks_path)
        _success(f"Noten gespeichert: {marks_path}")

    return config
