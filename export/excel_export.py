"""Excel-Export des Notenstands (openpyxl)."""

import re
from pathlib import Path

from config.schema import GradeConfig
from engine.projection import (
    ModuleProjection,
    overall_current_average,
    overall_projection,
    project_module,
)
from export.helpers import (
    COLORS,
    projection_label,
    requirement_label,
    today_str,
)
from models.registry import ModuleRegistry

# Excel verbietet diese Zeichen in Blattnamen
_SHEET_NAME_INVALID = re.compile(r"[\[\]\:\*\?\/\\]")


class ExcelExporter:
    """Exportiert alle Module in eine Excel-Datei: Übersicht + ein Blatt pro Modul."""

    # Spaltenbreiten (Excel-Einheiten)
    COL_NARROW_W = 8
    COL_TEXT_W   = 30
    COL_VALUE_W  = 16
    COL_STATUS_W = 34

    ROW_HEADER_H = 22

    def __init__(self, registry: ModuleRegistry, config: GradeConfig):
        self.registry = registry
        self.config = config
        self.target = config.projection.target
        self.assume_other = config.projection.assume_other
        self.cap = config.engine.max_group_members

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        projections = [
            project_module(m, self.target, self.assume_other, self.cap)
            for m in self.registry
        ]
        self._sheet_uebersicht(wb, projections)

        used_names: set[str] = {"Übersicht"}
        for mp in projections:
            self._sheet_modul(wb, mp, self._sheet_name(mp, used_names))

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header_row(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Alignment, Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    def _write_row(self, ws, row: int, values: list, color: str = "") -> None:
        border = self._thin_border()
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = border
            if color:
                cell.fill = self._fill(color)

    def _set_widths(self, ws, widths: list[int]) -> None:
        from openpyxl.utils import get_column_letter
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

    @staticmethod
    def _sheet_name(mp: ModuleProjection, used: set[str]) -> str:
        base = _SHEET_NAME_INVALID.sub("_", f"{mp.module.code}")[:28] or "Modul"
        name = base
        n = 2
        while name in used:
            name = f"{base[:26]}_{n}"
            n += 1
        used.add(name)
        return name

    @staticmethod
    def _round(value):
        return round(value, 2) if value is not None else None

    # ─── Übersicht ────────────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb, projections: list[ModuleProjection]) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet("Übersicht")
        ws.cell(row=1, column=1,
                value=f"{self.config.programme_name} – Stand {today_str()}").font = \
            Font(bold=True, size=12)
        ws.cell(row=2, column=1,
                value=f"Ziel: {self.target:g} %   Annahme übrige: {self.assume_other:g} %")

        headers = ["ID", "Kürzel", "Titel", "LP", "S", "W", "R",
                   "Aktueller Schnitt", "Benötigt auf Rest", "Status"]
        self._write_header_row(ws, 4, headers)
        self._set_widths(ws, [self.COL_NARROW_W, self.COL_NARROW_W + 4, self.COL_TEXT_W,
                              self.COL_NARROW_W, self.COL_VALUE_W, self.COL_NARROW_W,
                              self.COL_NARROW_W, self.COL_VALUE_W, self.COL_VALUE_W,
                              self.COL_STATUS_W])

        row = 5
        for mp in projections:
            m = mp.module
            text, cat = projection_label(mp.needed)
            self._write_row(ws, row, [
                m.id, m.code, m.title, m.credits,
                self._round(mp.sums.S), mp.sums.W, mp.sums.R,
                self._round(mp.current),
                self._round(mp.needed.value),
                text,
            ], COLORS.get(cat, ""))
            row += 1

        modules = self.registry.modules
        proj = overall_projection(modules, self.target, self.cap)
        current = overall_current_average(modules, self.cap)
        text, cat = projection_label(proj)
        row += 1
        self._write_row(ws, row, [
            "", "Gesamt", "", proj.total_credits, "", "", "",
            self._round(current), self._round(proj.value), text,
        ], COLORS.get(cat, ""))
        for col in range(1, len(headers) + 1):
            ws.cell(row=row, column=col).font = Font(bold=True)

    # ─── Modul-Blatt ──────────────────────────────────────────────────────────

    def _sheet_modul(self, wb, mp: ModuleProjection, name: str) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(name)
        m = mp.module
        ws.cell(row=1, column=1, value=f"{m.code} – {m.title} ({m.credits} LP)").font = \
            Font(bold=True, size=12)

        self._write_header_row(ws, 3, ["Komponente", "Gewicht", "Gruppe", "Best-of", "Note"])
        self._set_widths(ws, [self.COL_TEXT_W, self.COL_NARROW_W + 2, self.COL_NARROW_W,
                              self.COL_NARROW_W, self.COL_STATUS_W])
        row = 4
        for comp in m.components:
            self._write_row(ws, row, [
                comp.name, comp.weight,
                comp.group_id or None, comp.best_of or None,
                comp.mark,
            ], "" if comp.is_marked else COLORS["warn"])
            row += 1

        if mp.requirements:
            row += 1
            self._write_header_row(ws, row, ["Offene Komponente", "Gewicht", "", "", "Benötigte Note"])
            row += 1
            for req in mp.requirements:
                text, cat = requirement_label(req)
                self._write_row(ws, row, [req.component, req.weight, None, None, text],
                                COLORS.get(cat, ""))
                row += 1
