"""Notenrechner: Haupt-CLI.

Verwendung:
  python main.py init                          Config + Beispieldaten anlegen
  python main.py config show                   Konfiguration anzeigen
  python main.py config edit                   Konfiguration bearbeiten
  python main.py config set-target <pct>       Zielnote setzen
  python main.py config set-assume <pct>       Annahme für übrige Komponenten setzen
  python main.py show                          Modulübersicht
  python main.py module <id|kürzel>            Modul-Details + benötigte Noten
  python main.py overall                       LP-gewichtete Gesamtprognose
  python main.py mark <modul> <komp.> <note>   Note eintragen
  python main.py clear <modul> <komp.>         Note entfernen
  python main.py validate                      Plausibilitäts-Check
  python main.py export                        Excel-Bericht
  python main.py menu                          Interaktives Menü
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config_or_abort():
    """Lädt die Konfiguration (Default wenn keine Datei existiert) oder bricht ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _marks_path(config) -> Path:
    return Path(config.data.data_dir) / config.data.marks_file


def _load_registry_or_abort(config):
    """Lädt alle CSV-Dateien. Übersprungene Zeilen werden gemeldet, nicht abgebrochen."""
    from data.records import RecordLoadError, load_registry

    try:
        registry, reports = load_registry(config.data)
    except RecordLoadError as e:
        console.print(
            f"[red bold]Import fehlgeschlagen:[/red bold] {e}\n"
            "Führen Sie zunächst [bold]python main.py init[/bold] aus."
        )
        sys.exit(1)

    for report in reports:
        if report.diagnostics:
            report.print_rich()
    return registry


def _resolve_module_or_abort(registry, key: str):
    module = registry.resolve(key)
    if module is None:
        console.print(f"[red]Kein Modul '{key}' gefunden.[/red]")
        sys.exit(1)
    return module


# ─── INIT ─────────────────────────────────────────────────────────────────────

@click.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Beispieldateien überschreiben.")
def cmd_init(force: bool):
    """Legt Konfiguration und Beispiel-CSV-Dateien an."""
    from data.records import init_data_dir

    mgr, config = _load_config_or_abort()
    if mgr.first_run_check():
        mgr.save(config)

    written = init_data_dir(config.data, overwrite=force)
    for p in written:
        console.print(f"[green]✓[/green] Beispieldatei angelegt: {p}")
    if not written:
        console.print("[dim]Datendateien existieren bereits (--force zum Überschreiben).[/dim]")
    console.print("Weiter mit [bold]python main.py show[/bold].")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder bearbeiten."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()
    source = "Standardwerte" if mgr.first_run_check() else str(mgr.DEFAULT_CONFIG)

    console.print(Panel(
        f"[bold]{config.programme_name}[/bold]  |  Quelle: {source}",
        title="Konfiguration",
        border_style="cyan",
    ))

    table = Table(box=box.ROUNDED)
    table.add_column("Bereich", style="bold")
    table.add_column("Parameter")
    table.add_column("Wert")
    for section in ("projection", "data", "engine"):
        for k, v in getattr(config, section).model_dump().items():
            table.add_row(section, k, str(v))
    console.print(table)


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    mgr, config = _load_config_or_abort()
    mgr.edit_interactive(config)


def _set_projection_value(field: str, value: float) -> None:
    from config.schema import ProjectionConfig
    from pydantic import ValidationError

    mgr, config = _load_config_or_abort()
    try:
        projection = ProjectionConfig.model_validate(
            {**config.projection.model_dump(), field: value}
        )
    except ValidationError:
        console.print(f"[red]Wert muss zwischen 0 und 100 liegen (erhalten: {value:g}).[/red]")
        sys.exit(1)
    mgr.save(config.model_copy(update={"projection": projection}))


@cmd_config.command("set-target")
@click.argument("percent", type=float)
def config_set_target(percent: float):
    """Setzt die Zielnote (0–100)."""
    _set_projection_value("target", percent)


@cmd_config.command("set-assume")
@click.argument("percent", type=float)
def config_set_assume(percent: float):
    """Setzt die angenommene Note für übrige offene Komponenten (0–100)."""
    _set_projection_value("assume_other", percent)


# ─── ANZEIGE ──────────────────────────────────────────────────────────────────

@click.command("show")
def cmd_show():
    """Modulübersicht: aktueller Schnitt und benötigter Schnitt je Modul."""
    from export.tui_renderer import overall_panel, overview_table

    mgr, config = _load_config_or_abort()
    registry = _load_registry_or_abort(config)
    if not len(registry):
        console.print("[dim]Keine Module vorhanden.[/dim]")
        return
    console.print(overview_table(registry, config))
    console.print(overall_panel(registry, config))


@click.command("module")
@click.argument("key")
@click.option("--target", type=click.FloatRange(0, 100), default=None,
              help="Zielnote für diese Abfrage überschreiben.")
@click.option("--assume", type=click.FloatRange(0, 100), default=None,
              help="Annahme für übrige Komponenten überschreiben.")
def cmd_module(key: str, target, assume):
    """Details eines Moduls inkl. benötigter Note je offener Komponente."""
    from engine.projection import project_module
    from export.tui_renderer import module_tables

    mgr, config = _load_config_or_abort()
    overrides = {}
    if target is not None:
        overrides["target"] = target
    if assume is not None:
        overrides["assume_other"] = assume
    if overrides:
        config = config.model_copy(update={
            "projection": config.projection.model_copy(update=overrides)
        })

    registry = _load_registry_or_abort(config)
    module = _resolve_module_or_abort(registry, key)
    pc = config.projection
    mp = project_module(module, pc.target, pc.assume_other, config.engine.max_group_members)
    for part in module_tables(mp, config):
        console.print(part)


@click.command("overall")
@click.option("--target", type=click.FloatRange(0, 100), default=None,
              help="Zielnote für diese Abfrage überschreiben.")
def cmd_overall(target):
    """Leistungspunkt-gewichtete Gesamtprognose."""
    from export.tui_renderer import overall_panel

    mgr, config = _load_config_or_abort()
    if target is not None:
        config = config.model_copy(update={
            "projection": config.projection.model_copy(update={"target": target})
        })
    registry = _load_registry_or_abort(config)
    console.print(overall_panel(registry, config))


# ─── NOTEN ────────────────────────────────────────────────────────────────────

@click.command("mark")
@click.argument("key")
@click.argument("component")
@click.argument("mark", type=float)
def cmd_mark(key: str, component: str, mark: float):
    """Trägt eine Note (0–100) ein und speichert marks.csv."""
    from data.records import save_marks

    mgr, config = _load_config_or_abort()
    registry = _load_registry_or_abort(config)
    module = _resolve_module_or_abort(registry, key)
    try:
        module.set_mark(component, mark)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    path = _marks_path(config)
    save_marks(registry, path)
    console.print(f"[green]✓[/green] {module.code} / {component}: {mark:g} %  → {path}")


@click.command("clear")
@click.argument("key")
@click.argument("component")
def cmd_clear(key: str, component: str):
    """Entfernt eine Note und speichert marks.csv."""
    from data.records import save_marks

    mgr, config = _load_config_or_abort()
    registry = _load_registry_or_abort(config)
    module = _resolve_module_or_abort(registry, key)
    try:
        module.clear_mark(component)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)

    path = _marks_path(config)
    save_marks(registry, path)
    console.print(f"[green]✓[/green] {module.code} / {component}: Note entfernt  → {path}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
def cmd_validate():
    """Plausibilitäts-Check der geladenen Daten (rein beratend)."""
    mgr, config = _load_config_or_abort()
    registry = _load_registry_or_abort(config)
    report = registry.validate(
        max_group_members=config.engine.max_group_members,
        weight_tolerance=config.engine.weight_tolerance,
    )
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.option("--output", "-o", default="output/notenbericht.xlsx",
              help="Ausgabepfad für den Excel-Bericht.")
def cmd_export(output: str):
    """Exportiert Übersicht und Modul-Details als Excel-Datei."""
    from export.excel_export import ExcelExporter

    mgr, config = _load_config_or_abort()
    registry = _load_registry_or_abort(config)
    out_path = Path(output)
    ExcelExporter(registry, config).export(out_path)
    console.print(f"[green]✓[/green] Excel gespeichert: {out_path}")


# ─── MENU ─────────────────────────────────────────────────────────────────────

@click.command("menu")
def cmd_menu():
    """Interaktives Menü (Noten eintragen, Prognosen ansehen)."""
    from ui.menu import run_menu

    mgr, config = _load_config_or_abort()
    registry = _load_registry_or_abort(config)
    updated = run_menu(registry, config, _marks_path(config))
    # Ziel/Annahme aus dem Menü bleiben für den nächsten Aufruf erhalten
    if updated != config:
        mgr.save(updated)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Notenrechner: Modulnoten verwalten und benötigte Noten prognostizieren.

    Starten Sie mit: python main.py init
    """
    _setup_logging(verbose)


def main():
    """Einstiegspunkt. Ohne Argumente startet das interaktive Menü."""
    if len(sys.argv) == 1:
        sys.argv.append("menu")
    cli()


# Befehle registrieren
cli.add_command(cmd_init)
cli.add_command(cmd_config)
cli.add_command(cmd_show)
cli.add_command(cmd_module)
cli.add_command(cmd_overall)
cli.add_command(cmd_mark)
cli.add_command(cmd_clear)
cli.add_command(cmd_validate)
cli.add_command(cmd_export)
cli.add_command(cmd_menu)


if __name__ == "__main__":
    main()
