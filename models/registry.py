"""ModuleRegistry: alle geladenen Module + beratender Plausibilitäts-Check."""

import logging
from typing import Iterator, Optional

from pydantic import BaseModel

from models.component import Component
from models.module import Module

logger = logging.getLogger(__name__)


class ValidationReport(BaseModel):
    """Ergebnis des Plausibilitäts-Checks. Rein beratend, blockiert keine Berechnung."""

    is_valid: bool
    errors: list[str]      # Daten sind unbrauchbar (z.B. Modul ohne Komponenten)
    warnings: list[str]    # Hinweise (Gewichte ≠ 100, uneinheitliche Gruppen, ...)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_valid:
            status = "[bold green]✓ PLAUSIBEL[/bold green]"
        else:
            status = "[bold red]✗ FEHLERHAFT[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler:[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Plausibilitäts-Check", border_style="cyan"))


class ModuleRegistry:
    """Geordnete Sammlung aller Module.

    Doppelte Modul-IDs werden NICHT abgewiesen: ein späterer Datensatz mit
    gleicher ID erzeugt einen zweiten Eintrag, der bei der Suche verdeckt
    bleibt (erster Treffer gewinnt). validate() weist darauf hin.
    """

    def __init__(self, modules: Optional[list[Module]] = None) -> None:
        self._modules: list[Module] = list(modules or [])

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    @property
    def modules(self) -> list[Module]:
        return list(self._modules)

    @property
    def total_credits(self) -> int:
        return sum(m.credits for m in self._modules)

    # ─── Aufbau ───

    def add_module(self, module: Module) -> Module:
        self._modules.append(module)
        return module

    def add_component(self, module_id: int, component: Component) -> bool:
        """Hängt eine Komponente an das Modul mit module_id an.

        Gibt False zurück (mit Warnung im Log) wenn das Modul unbekannt ist.
        """
        module = self.find_by_id(module_id)
        if module is None:
            logger.warning(
                f"Komponente '{component.name}' verweist auf unbekannte Modul-ID {module_id}"
            )
            return False
        module.add_component(component)
        return True

    # ─── Suche (erster Treffer) ───

    def find_by_id(self, module_id: int) -> Optional[Module]:
        for module in self._modules:
            if module.id == module_id:
                return module
        return None

    def find_by_code(self, code: str) -> Optional[Module]:
        code = code.strip().lower()
        for module in self._modules:
            if module.code.lower() == code:
                return module
        return None

    def resolve(self, key: str) -> Optional[Module]:
        """Sucht per ID (falls numerisch), sonst per Modul-Kürzel."""
        key = key.strip()
        try:
            return self.find_by_id(int(key))
        except ValueError:
            return self.find_by_code(key)

    # ─── Plausibilitäts-Check ───

    def validate(self, max_group_members: int = 256,
                 weight_tolerance: float = 0.01) -> ValidationReport:
        """Prüft die geladenen Daten.

        Prüfungen:
        1. Doppelte Modul-IDs (spätere Einträge sind verdeckt)
        2. Modul ohne Komponenten
        3. Summe der Gewichte ≠ 100
        4. Doppelte Komponentennamen (nur die erste ist per Name erreichbar)
        5. Best-of-N-Gruppen: uneinheitliche Gewichte, best_of > Mitglieder,
           mehr Mitglieder als max_group_members
        """
        errors: list[str] = []
        warnings: list[str] = []

        # ── 1. Doppelte IDs ──────────────────────────────────────────────
        seen_ids: dict[int, Module] = {}
        for module in self._modules:
            first = seen_ids.get(module.id)
            if first is not None:
                warnings.append(
                    f"Modul-ID {module.id} doppelt ({first.code} / {module.code}) – "
                    f"nur '{first.code}' ist per ID erreichbar."
                )
            else:
                seen_ids[module.id] = module

        for module in self._modules:
            label = f"Modul {module.code} (ID {module.id})"

            # ── 2. Leeres Modul ──────────────────────────────────────────
            if not module.components:
                errors.append(f"{label}: keine Komponenten definiert.")
                continue

            # ── 3. Gewichtssumme ─────────────────────────────────────────
            total = self._effective_weight(module)
            if abs(total - 100.0) > weight_tolerance:
                warnings.append(
                    f"{label}: Gewichte ergeben {total:.2f} statt 100."
                )

            # ── 4. Doppelte Komponentennamen ─────────────────────────────
            names: set[str] = set()
            for comp in module.components:
                if comp.name in names:
                    warnings.append(
                        f"{label}: Komponente '{comp.name}' doppelt – "
                        f"Noten landen immer bei der ersten."
                    )
                names.add(comp.name)

            # ── 5. Gruppen ───────────────────────────────────────────────
            for (group_id, best_of), members in module.groups().items():
                slot_weight = members[0].weight
                odd = [c.name for c in members if c.weight != slot_weight]
                if odd:
                    warnings.append(
                        f"{label}, Gruppe {group_id}: uneinheitliche Gewichte "
                        f"({', '.join(odd)}) – gerechnet wird mit {slot_weight:g} "
                        f"(Gewicht von '{members[0].name}')."
                    )
                if best_of > len(members):
                    warnings.append(
                        f"{label}, Gruppe {group_id}: best_of={best_of} aber nur "
                        f"{len(members)} Mitglieder – {best_of - len(members)} "
                        f"Slot(s) bleiben dauerhaft offen."
                    )
                if len(members) > max_group_members:
                    warnings.append(
                        f"{label}, Gruppe {group_id}: {len(members)} Mitglieder, "
                        f"berücksichtigt werden höchstens {max_group_members} Noten."
                    )

        return ValidationReport(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    @staticmethod
    def _effective_weight(module: Module) -> float:
        """Gewicht, das tatsächlich in W + R eingeht.

        Ungruppierte Komponenten zählen voll, jede Best-of-N-Gruppe zählt
        best_of × Gewicht des ersten Mitglieds.
        """
        total = sum(c.weight for c in module.components if not c.is_grouped)
        for (_, best_of), members in module.groups().items():
            total += best_of * members[0].weight
        return total
