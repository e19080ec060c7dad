"""Tests für Datenmodelle: Component, Module, ModuleRegistry."""

import pytest
from pydantic import ValidationError

from models.component import Component
from models.module import Module, check_mark
from models.registry import ModuleRegistry


def _module(*components: Component, id: int = 1, code: str = "CS101",
            credits: int = 15) -> Module:
    return Module(id=id, code=code, title=f"Modul {code}", credits=credits,
                  components=list(components))


# ─── COMPONENT ────────────────────────────────────────────────────────────────

class TestComponent:
    def test_defaults_ungrouped_unmarked(self):
        c = Component(name="Exam", weight=60)
        assert not c.is_marked
        assert not c.is_grouped
        assert c.group_key == (0, 0)

    def test_grouped_requires_both_fields(self):
        """Nur group_id > 0 UND best_of > 0 ergeben ein Gruppenmitglied."""
        assert Component(name="a", weight=10, group_id=1, best_of=2).is_grouped
        assert not Component(name="b", weight=10, group_id=1, best_of=0).is_grouped
        assert not Component(name="c", weight=10, group_id=0, best_of=3).is_grouped

    def test_mark_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            Component(name="Exam", weight=60, mark=101)
        with pytest.raises(ValidationError):
            Component(name="Exam", weight=60, mark=-0.5)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            Component(name="Exam", weight=-1)


# ─── MODULE ───────────────────────────────────────────────────────────────────

class TestModule:
    def test_credits_must_be_positive(self):
        with pytest.raises(ValidationError):
            Module(id=1, code="X", title="X", credits=0)

    def test_check_mark_bounds(self):
        assert check_mark(0) == 0.0
        assert check_mark(100) == 100.0
        with pytest.raises(ValueError):
            check_mark(100.01)

    def test_set_and_clear_mark(self):
        m = _module(Component(name="Exam", weight=100))
        m.set_mark("Exam", 65)
        assert m.find_component("Exam").mark == 65.0
        assert m.is_complete
        m.clear_mark("Exam")
        assert m.find_component("Exam").mark is None
        assert not m.is_complete

    def test_set_mark_unknown_component(self):
        m = _module(Component(name="Exam", weight=100))
        with pytest.raises(KeyError):
            m.set_mark("Quiz", 50)

    def test_set_mark_out_of_range_leaves_component_unchanged(self):
        m = _module(Component(name="Exam", weight=100, mark=40))
        with pytest.raises(ValueError):
            m.set_mark("Exam", 150)
        assert m.find_component("Exam").mark == 40

    def test_find_component_first_match(self):
        """Bei doppelten Namen gewinnt die erste Komponente."""
        m = _module(Component(name="Quiz", weight=10),
                    Component(name="Quiz", weight=20))
        m.set_mark("Quiz", 80)
        assert m.components[0].mark == 80
        assert m.components[1].mark is None

    def test_groups_in_first_seen_order(self):
        m = _module(
            Component(name="B1", weight=5, group_id=2, best_of=1),
            Component(name="A1", weight=10, group_id=1, best_of=2),
            Component(name="B2", weight=5, group_id=2, best_of=1),
            Component(name="Exam", weight=80),
        )
        groups = m.groups()
        assert list(groups) == [(2, 1), (1, 2)]
        assert [c.name for c in groups[(2, 1)]] == ["B1", "B2"]

    def test_same_group_id_different_best_of_are_distinct(self):
        m = _module(
            Component(name="a", weight=10, group_id=1, best_of=1),
            Component(name="b", weight=10, group_id=1, best_of=2),
        )
        assert len(m.groups()) == 2

    def test_declared_weight(self):
        m = _module(Component(name="a", weight=40), Component(name="b", weight=60))
        assert m.declared_weight == 100


# ─── REGISTRY ─────────────────────────────────────────────────────────────────

class TestModuleRegistry:
    def test_find_by_id_first_match(self):
        """Doppelte IDs: der zuerst geladene Eintrag gewinnt."""
        reg = ModuleRegistry()
        reg.add_module(_module(id=1, code="FIRST"))
        reg.add_module(_module(id=1, code="SECOND"))
        assert len(reg) == 2
        assert reg.find_by_id(1).code == "FIRST"

    def test_find_by_code_case_insensitive(self):
        reg = ModuleRegistry([_module(code="CS101")])
        assert reg.find_by_code("cs101") is not None
        assert reg.find_by_code("CS999") is None

    def test_resolve_id_or_code(self):
        reg = ModuleRegistry([_module(id=7, code="MA201")])
        assert reg.resolve("7").code == "MA201"
        assert reg.resolve(" ma201 ").id == 7
        assert reg.resolve("8") is None

    def test_add_component_unknown_module(self):
        reg = ModuleRegistry([_module(id=1)])
        assert reg.add_component(1, Component(name="Exam", weight=100))
        assert not reg.add_component(99, Component(name="Exam", weight=100))
        assert len(reg.find_by_id(1).components) == 1

    def test_total_credits(self):
        reg = ModuleRegistry([_module(id=1, credits=15), _module(id=2, credits=30)])
        assert reg.total_credits == 45

    def test_modules_returns_copy(self):
        reg = ModuleRegistry([_module()])
        reg.modules.clear()
        assert len(reg) == 1


# ─── PLAUSIBILITÄTS-CHECK ─────────────────────────────────────────────────────

class TestValidate:
    def test_clean_data_is_valid(self):
        reg = ModuleRegistry([_module(
            Component(name="CW", weight=40),
            Component(name="Exam", weight=60),
        )])
        report = reg.validate()
        assert report.is_valid
        assert report.errors == []
        assert report.warnings == []

    def test_group_weight_counts_best_of_slots(self):
        """Fünf Sheets à 10, beste drei zählen: effektiv 30 + Exam 70 = 100."""
        comps = [Component(name=f"S{i}", weight=10, group_id=1, best_of=3)
                 for i in range(1, 6)]
        comps.append(Component(name="Exam", weight=70))
        report = ModuleRegistry([_module(*comps)]).validate()
        assert report.warnings == []

    def test_weights_not_100_warns(self):
        reg = ModuleRegistry([_module(Component(name="Exam", weight=90))])
        report = reg.validate()
        assert report.is_valid
        assert any("90.00 statt 100" in w for w in report.warnings)

    def test_weight_tolerance(self):
        reg = ModuleRegistry([_module(Component(name="Exam", weight=99.5))])
        assert reg.validate(weight_tolerance=1.0).warnings == []

    def test_empty_module_is_error(self):
        report = ModuleRegistry([_module()]).validate()
        assert not report.is_valid
        assert any("keine Komponenten" in e for e in report.errors)

    def test_duplicate_id_warns(self):
        reg = ModuleRegistry([
            _module(Component(name="Exam", weight=100), id=1, code="A"),
            _module(Component(name="Exam", weight=100), id=1, code="B"),
        ])
        assert any("doppelt" in w for w in reg.validate().warnings)

    def test_duplicate_component_name_warns(self):
        reg = ModuleRegistry([_module(
            Component(name="Quiz", weight=50),
            Component(name="Quiz", weight=50),
        )])
        assert any("'Quiz' doppelt" in w for w in reg.validate().warnings)

    def test_inconsistent_group_weights_warns(self):
        reg = ModuleRegistry([_module(
            Component(name="S1", weight=10, group_id=1, best_of=2),
            Component(name="S2", weight=20, group_id=1, best_of=2),
            Component(name="Exam", weight=80),
        )])
        warnings = reg.validate().warnings
        assert any("uneinheitliche Gewichte" in w and "S2" in w for w in warnings)

    def test_best_of_exceeds_members_warns(self):
        reg = ModuleRegistry([_module(
            Component(name="S1", weight=10, group_id=1, best_of=3),
            Component(name="S2", weight=10, group_id=1, best_of=3),
            Component(name="Exam", weight=70),
        )])
        assert any("dauerhaft offen" in w for w in reg.validate().warnings)

    def test_too_many_members_warns(self):
        comps = [Component(name=f"S{i}", weight=1, group_id=1, best_of=2)
                 for i in range(4)]
        comps.append(Component(name="Exam", weight=98))
        reg = ModuleRegistry([_module(*comps)])
        assert any("höchstens 3" in w for w in reg.validate(max_group_members=3).warnings)
