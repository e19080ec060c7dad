"""CSV-Import und -Export der Notendaten.

Dateien (jeweils mit Kopfzeile):
  modules.csv     id,code,title,credits
  components.csv  module_id,component_name,weight[,group_id,best_of]
  marks.csv       module_id,component_name,mark   (optional, leer = offen)

Fehlerhafte Zeilen und verwaiste Verweise werden übersprungen und im
LoadReport vermerkt. Nur eine fehlende Pflichtdatei bricht den Import ab.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from config.schema import DataConfig
from data.delimited import DelimitedParseError, DelimitedReader, format_row
from models.component import Component
from models.module import Module
from models.registry import ModuleRegistry

logger = logging.getLogger(__name__)


class RecordLoadError(Exception):
    """Pflichtdatei fehlt oder ist nicht lesbar."""


class LoadReport(BaseModel):
    """Ergebnis eines Datei-Imports."""

    path: str
    rows_read: int = 0
    rows_loaded: int = 0
    diagnostics: list[str] = []

    @property
    def rows_skipped(self) -> int:
        return self.rows_read - self.rows_loaded

    def skip(self, line: int, reason: str) -> None:
        msg = f"{Path(self.path).name}:{line}: {reason} – Zeile übersprungen"
        self.diagnostics.append(msg)
        logger.debug(msg)

    def print_rich(self) -> None:
        from rich.console import Console

        console = Console()
        console.print(
            f"[bold]{Path(self.path).name}[/bold]: {self.rows_loaded}/{self.rows_read} "
            f"Zeilen übernommen"
        )
        for d in self.diagnostics:
            console.print(f"  [yellow]• {d}[/yellow]")


# ─── Parse-Helfer ─────────────────────────────────────────────────────────────

def _parse_int(raw: str) -> Optional[int]:
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _parse_float(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    # "nan"/"inf" sind keine Noten oder Gewichte
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value


def _read_rows(path: Path, report: LoadReport):
    """Liefert (Zeilennummer, Felder) ohne Kopfzeile.

    Die Datei wird binär gelesen und zeilenweise dekodiert: Parse- und
    Kodierungsfehler einzelner Zeilen landen im Report, der Rest wird weiter
    gelesen.
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise RecordLoadError(f"Datei nicht lesbar: {path} ({e})") from e

    with f:
        reader = DelimitedReader(f)
        first = True
        while True:
            try:
                row = reader.read_row()
            except DelimitedParseError as e:
                if first:
                    first = False
                    continue
                report.rows_read += 1
                report.skip(reader.line_number, str(e))
                continue
            if row is None:
                return
            if first:
                first = False
                continue
            if not row or row == [""]:
                continue
            report.rows_read += 1
            yield reader.line_number, row


# ─── Loader ───────────────────────────────────────────────────────────────────

def load_modules(registry: ModuleRegistry, path: Path) -> LoadReport:
    """Liest modules.csv: id,code,title,credits."""
    path = Path(path)
    if not path.exists():
        raise RecordLoadError(f"Moduldatei nicht gefunden: {path}")
    report = LoadReport(path=str(path))

    for line, row in _read_rows(path, report):
        if len(row) < 4:
            report.skip(line, f"{len(row)} statt 4 Felder")
            continue
        module_id = _parse_int(row[0])
        credits = _parse_int(row[3])
        if module_id is None or credits is None:
            report.skip(line, "ID oder Leistungspunkte nicht numerisch")
            continue
        if credits <= 0:
            report.skip(line, f"Leistungspunkte müssen > 0 sein ({credits})")
            continue
        registry.add_module(Module(id=module_id, code=row[1], title=row[2], credits=credits))
        report.rows_loaded += 1

    return report


def load_components(registry: ModuleRegistry, path: Path) -> LoadReport:
    """Liest components.csv.

    Altes Format:  module_id,component_name,weight
    Neues Format:  module_id,component_name,weight,group_id,best_of
    Nicht lesbare Gruppenfelder werden als 0 (ungruppiert) behandelt.
    """
    path = Path(path)
    if not path.exists():
        raise RecordLoadError(f"Komponentendatei nicht gefunden: {path}")
    report = LoadReport(path=str(path))

    for line, row in _read_rows(path, report):
        if len(row) < 3:
            report.skip(line, f"{len(row)} statt mind. 3 Felder")
            continue
        module_id = _parse_int(row[0])
        weight = _parse_float(row[2])
        if module_id is None or weight is None:
            report.skip(line, "Modul-ID oder Gewicht nicht numerisch")
            continue
        if weight < 0:
            report.skip(line, f"negatives Gewicht ({weight:g})")
            continue

        group_id = best_of = 0
        if len(row) >= 5:
            group_id = _parse_int(row[3]) or 0
            best_of = _parse_int(row[4]) or 0
            if group_id < 0 or best_of < 0:
                group_id = best_of = 0

        module = registry.find_by_id(module_id)
        if module is None:
            report.skip(line, f"unbekannte Modul-ID {module_id}")
            continue
        module.add_component(Component(name=row[1], weight=weight,
                                       group_id=group_id, best_of=best_of))
        report.rows_loaded += 1

    return report


def load_marks(registry: ModuleRegistry, path: Path) -> LoadReport:
    """Liest marks.csv. Die Datei ist optional; fehlt sie, bleibt alles offen."""
    path = Path(path)
    report = LoadReport(path=str(path))
    if not path.exists():
        logger.info(f"Keine Notendatei gefunden: {path}")
        return report

    for line, row in _read_rows(path, report):
        if len(row) < 3:
            report.skip(line, f"{len(row)} statt 3 Felder")
            continue
        module_id = _parse_int(row[0])
        if module_id is None:
            report.skip(line, "Modul-ID nicht numerisch")
            continue
        module = registry.find_by_id(module_id)
        if module is None:
            report.skip(line, f"unbekannte Modul-ID {module_id}")
            continue
        component = module.find_component(row[1])
        if component is None:
            report.skip(line, f"Modul {module.code}: unbekannte Komponente '{row[1]}'")
            continue

        # Leeres oder nicht-numerisches Feld = noch keine Note
        mark = _parse_float(row[2]) if row[2] else None
        if mark is not None:
            if not 0.0 <= mark <= 100.0:
                report.skip(line, f"Note {mark:g} außerhalb 0–100")
                continue
            component.mark = mark
        report.rows_loaded += 1

    return report


def load_registry(data_config: DataConfig,
                  base_dir: Optional[Path] = None) -> tuple[ModuleRegistry, list[LoadReport]]:
    """Lädt Module, Komponenten und Noten in dieser Reihenfolge."""
    data_dir = Path(base_dir) if base_dir else Path(data_config.data_dir)
    registry = ModuleRegistry()
    reports = [
        load_modules(registry, data_dir / data_config.modules_file),
        load_components(registry, data_dir / data_config.components_file),
        load_marks(registry, data_dir / data_config.marks_file),
    ]
    return registry, reports


# ─── Export ───────────────────────────────────────────────────────────────────

def format_mark(mark: Optional[float]) -> str:
    return f"{mark:.2f}" if mark is not None else ""


def write_rows(path: Path, rows: list[list[str]]) -> None:
    """Schreibt Zeilen über eine temporäre Datei und ersetzt dann das Ziel."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            for row in rows:
                f.write(format_row(row) + "\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def save_marks(registry: ModuleRegistry, path: Path) -> int:
    """Schreibt marks.csv: eine Zeile pro Komponente, leeres Notenfeld wenn offen.

    Gibt die Anzahl geschriebener Datenzeilen zurück.
    """
    rows = [["module_id", "component_name", "mark"]]
    for module in registry:
        for comp in module.components:
            rows.append([str(module.id), comp.name, format_mark(comp.mark)])
    write_rows(path, rows)
    logger.info(f"{len(rows) - 1} Notenzeilen gespeichert: {path}")
    return len(rows) - 1


def init_data_dir(data_config: DataConfig, base_dir: Optional[Path] = None,
                  overwrite: bool = False) -> list[Path]:
    """Legt die Beispiel-CSV-Dateien an. Bestehende Dateien bleiben unangetastet,
    außer overwrite ist gesetzt. Gibt die geschriebenen Pfade zurück."""
    from config.defaults import EXAMPLE_COMPONENTS, EXAMPLE_MARKS, EXAMPLE_MODULES

    data_dir = Path(base_dir) if base_dir else Path(data_config.data_dir)
    written = []
    for name, rows in (
        (data_config.modules_file, EXAMPLE_MODULES),
        (data_config.components_file, EXAMPLE_COMPONENTS),
        (data_config.marks_file, EXAMPLE_MARKS),
    ):
        target = data_dir / name
        if target.exists() and not overwrite:
            logger.info(f"Existiert bereits, übersprungen: {target}")
            continue
        write_rows(target, rows)
        written.append(target)
    return written
