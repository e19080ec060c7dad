"""Konfiguration des Notenrechners: kommentiertes YAML lesen/schreiben (ruamel.yaml)
und interaktiv bearbeiten (rich.prompt).
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_grade_config
from config.schema import (
    DataConfig,
    EngineConfig,
    GradeConfig,
    ProjectionConfig,
)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Notenrechner - Konfiguration
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "projection": (
        "Prognose",
        "target: angestrebte Gesamtnote (0–100).\n"
        "assume_other: angenommene Note für alle übrigen offenen Komponenten.",
    ),
    "data": (
        "Datendateien",
        "CSV-Dateien relativ zu data_dir. marks.csv ist optional.",
    ),
    "engine": (
        "Rechenkern",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "grade_config.yaml"

    def first_run_check(self) -> bool:
        """True, solange noch keine grade_config.yaml angelegt wurde."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> GradeConfig:
        """Liest die YAML-Datei und validiert sie gegen GradeConfig."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py init' aus, um eine anzulegen."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        if raw is not None and not isinstance(raw, dict):
            raise ValueError(f"{target} ist ungültig: erwartet wird eine YAML-Zuordnung")
        try:
            return GradeConfig.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise ValueError(f"{target} ist ungültig:\n{e}") from e

    def load_or_default(self, path: Optional[Path] = None) -> GradeConfig:
        """Wie load(), liefert aber die Standard-Config wenn keine Datei existiert."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            return default_grade_config()
        return self.load(target)

    # ─── Speichern ───

    def save(self, config: GradeConfig, path: Optional[Path] = None) -> None:
        """Schreibt die Config als YAML; Abschnitte erhalten erklärende Kommentare."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Config geschrieben: {target}")

    def _build_commented_yaml(self, config: GradeConfig) -> CommentedMap:
        """GradeConfig → CommentedMap mit Abschnitts- und Zeilenkommentaren."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "engine" in cm:
            engine_map = CommentedMap(cm["engine"])
            engine_map.yaml_add_eol_comment("weitere Noten werden ignoriert",
                                            "max_group_members")
            cm["engine"] = engine_map

        return cm

    # ─── Interaktives Bearbeiten ───

    def edit_interactive(self, config: GradeConfig) -> GradeConfig:
        """Menü zum Ändern von Ziel, Annahme, Dateien und Rechenkern. Speichert bei 0."""
        while True:
            console.print()
            console.print(Panel(
                f"[bold]Konfiguration bearbeiten[/bold] – {config.programme_name}",
                border_style="cyan",
            ))
            console.print("  [bold]1.[/bold] Zielnote & Annahme")
            console.print("  [bold]2.[/bold] Datendateien")
            console.print("  [bold]3.[/bold] Rechenkern")
            console.print("  [bold]4.[/bold] Studiengang")
            console.print("  [bold]0.[/bold] Speichern & Zurück")

            choice = Prompt.ask("\nAuswahl", default="0")

            if choice == "1":
                config = config.model_copy(
                    update={"projection": self._edit_projection(config.projection)}
                )
            elif choice in ("2", "3"):
                section = "data" if choice == "2" else "engine"
                edit = self._edit_data if choice == "2" else self._edit_engine
                try:
                    value = edit(getattr(config, section))
                except ValidationError as e:
                    console.print(f"[yellow]Ungültige Eingabe, nichts geändert:[/yellow] {e}")
                    continue
                config = config.model_copy(update={section: value})
            elif choice == "4":
                name = Prompt.ask("Studiengang", default=config.programme_name)
                config = config.model_copy(update={"programme_name": name})
            elif choice == "0":
                self.save(config)
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")

        return config

    def _show(self, title: str, model) -> None:
        table = Table(title=title, box=box.SIMPLE)
        table.add_column("Parameter", style="bold")
        table.add_column("Aktuell")
        for k, v in model.model_dump().items():
            table.add_row(k, str(v))
        console.print(table)

    def _edit_projection(self, pc: ProjectionConfig) -> ProjectionConfig:
        """Zielnote und Annahme interaktiv anpassen (beide 0–100)."""
        self._show("Prognose", pc)
        target = ask_percentage("Zielnote (%)", pc.target)
        assume = ask_percentage("Annahme für übrige Komponenten (%)", pc.assume_other)
        return ProjectionConfig(target=target, assume_other=assume)

    def _edit_data(self, dc: DataConfig) -> DataConfig:
        self._show("Datendateien", dc)
        if not Confirm.ask("Änderungen vornehmen?", default=False):
            return dc
        return DataConfig(
            data_dir=Prompt.ask("Datenverzeichnis", default=dc.data_dir),
            modules_file=Prompt.ask("Moduldatei", default=dc.modules_file),
            components_file=Prompt.ask("Komponentendatei", default=dc.components_file),
            marks_file=Prompt.ask("Notendatei", default=dc.marks_file),
            autosave=Confirm.ask("Automatisch speichern?", default=dc.autosave),
        )

    def _edit_engine(self, ec: EngineConfig) -> EngineConfig:
        self._show("Rechenkern", ec)
        if not Confirm.ask("Änderungen vornehmen?", default=False):
            return ec
        cap = IntPrompt.ask("Max. Noten je Gruppe", default=ec.max_group_members)
        tol = FloatPrompt.ask("Toleranz Gewichtssumme", default=ec.weight_tolerance)
        return EngineConfig(max_group_members=cap, weight_tolerance=tol)


def ask_percentage(label: str, default: float) -> float:
    """Fragt einen Prozentwert ab, bis er im Bereich 0–100 liegt."""
    while True:
        value = FloatPrompt.ask(label, default=default)
        if 0.0 <= value <= 100.0:
            return value
        console.print("[yellow]Bitte einen Wert zwischen 0 und 100 eingeben.[/yellow]")
