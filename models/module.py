"""Datenmodell für ein Studienmodul (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field

from models.component import Component


def check_mark(mark: float) -> float:
    """Prüft eine Note auf den Bereich 0–100."""
    mark = float(mark)
    if not 0.0 <= mark <= 100.0:
        raise ValueError(f"Note muss zwischen 0 und 100 liegen (erhalten: {mark})")
    return mark


class Module(BaseModel):
    """Ein Modul mit Leistungspunkten und seinen Komponenten.

    Die Reihenfolge der Komponenten entspricht der Deklarationsreihenfolge
    in components.csv. Sie ist nur für die Gruppenerkennung relevant: das
    erste Mitglied einer Best-of-N-Gruppe bestimmt das Slot-Gewicht.
    """

    id: int
    code: str                                   # "CS101"
    title: str                                  # "Programming I"
    credits: int = Field(gt=0)                  # Leistungspunkte
    components: list[Component] = []

    @property
    def declared_weight(self) -> float:
        """Summe aller deklarierten Gewichte (sollte 100 sein, wird nicht erzwungen)."""
        return sum(c.weight for c in self.components)

    @property
    def is_complete(self) -> bool:
        return all(c.is_marked for c in self.components)

    def add_component(self, component: Component) -> None:
        self.components.append(component)

    def find_component(self, name: str) -> Optional[Component]:
        """Lineare Suche, erster Treffer gewinnt."""
        for comp in self.components:
            if comp.name == name:
                return comp
        return None

    def set_mark(self, name: str, mark: float) -> Component:
        """Setzt die Note einer Komponente. KeyError wenn der Name unbekannt ist."""
        comp = self.find_component(name)
        if comp is None:
            raise KeyError(f"Modul {self.code}: keine Komponente '{name}'")
        comp.mark = check_mark(mark)
        return comp

    def clear_mark(self, name: str) -> Component:
        comp = self.find_component(name)
        if comp is None:
            raise KeyError(f"Modul {self.code}: keine Komponente '{name}'")
        comp.mark = None
        return comp

    def groups(self) -> dict[tuple[int, int], list[Component]]:
        """Best-of-N-Gruppen in Reihenfolge des ersten Auftretens."""
        result: dict[tuple[int, int], list[Component]] = {}
        for comp in self.components:
            if comp.is_grouped:
                result.setdefault(comp.group_key, []).append(comp)
        return result
