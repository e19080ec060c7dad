"""Tests für das Konfigurationssystem und die Kommandozeile."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.defaults import (
    DEFAULT_ASSUME_OTHER,
    DEFAULT_TARGET,
    EXAMPLE_COMPONENTS,
    EXAMPLE_MARKS,
    EXAMPLE_MODULES,
    default_grade_config,
)
from config.manager import ConfigManager
from config.schema import DataConfig, EngineConfig, GradeConfig, ProjectionConfig


def _manager(tmp_path: Path) -> ConfigManager:
    mgr = ConfigManager()
    mgr.CONFIG_DIR = tmp_path
    mgr.DEFAULT_CONFIG = tmp_path / "grade_config.yaml"
    return mgr


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_config_valid(self):
        config = default_grade_config()
        assert config.projection.target == DEFAULT_TARGET
        assert config.projection.assume_other == DEFAULT_ASSUME_OTHER
        assert config.data.data_dir == "grades"
        assert config.engine.max_group_members == 256

    def test_example_rows_have_headers(self):
        assert EXAMPLE_MODULES[0] == ["id", "code", "title", "credits"]
        assert EXAMPLE_COMPONENTS[0][:3] == ["module_id", "component_name", "weight"]
        assert EXAMPLE_MARKS[0] == ["module_id", "component_name", "mark"]

    def test_example_marks_reference_components(self):
        """Jede Beispielnote verweist auf eine existierende Komponente."""
        known = {(r[0], r[1]) for r in EXAMPLE_COMPONENTS[1:]}
        for row in EXAMPLE_MARKS[1:]:
            assert (row[0], row[1]) in known


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_target_out_of_range(self):
        with pytest.raises(ValidationError):
            ProjectionConfig(target=120)

    def test_assume_negative(self):
        with pytest.raises(ValidationError):
            ProjectionConfig(assume_other=-1)

    def test_empty_file_name_rejected(self):
        with pytest.raises(ValidationError):
            DataConfig(marks_file="   ")

    def test_file_name_stripped(self):
        assert DataConfig(modules_file=" m.csv ").modules_file == "m.csv"

    def test_cap_must_be_positive(self):
        with pytest.raises(ValidationError):
            EngineConfig(max_group_members=0)

    def test_partial_dict(self):
        """Fehlende Abschnitte werden mit Standardwerten gefüllt."""
        config = GradeConfig.model_validate({"projection": {"target": 60}})
        assert config.projection.target == 60
        assert config.projection.assume_other == 70
        assert config.data.modules_file == "modules.csv"


# ─── CONFIG MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        config = default_grade_config().model_copy(update={
            "programme_name": "MSc Data Science",
            "projection": ProjectionConfig(target=60, assume_other=55),
        })
        mgr.save(config)
        loaded = mgr.load()
        assert loaded == config

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.save(default_grade_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "─── Prognose ───" in text
        assert "max_group_members: 256" in text

    def test_first_run_check(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        assert mgr.first_run_check()
        mgr.save(default_grade_config())
        assert not mgr.first_run_check()

    def test_load_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            _manager(tmp_path).load()

    def test_load_or_default_without_file(self, tmp_path: Path):
        assert _manager(tmp_path).load_or_default() == default_grade_config()

    def test_invalid_values_raise_value_error(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.DEFAULT_CONFIG.write_text("projection:\n  target: 150\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            mgr.load()

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.DEFAULT_CONFIG.write_text("", encoding="utf-8")
        assert mgr.load() == default_grade_config()


# ─── CLI ──────────────────────────────────────────────────────────────────────

class TestCli:
    def test_cli_help(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    @pytest.mark.parametrize("command", [
        "init", "show", "module", "overall", "mark", "clear",
        "validate", "export", "menu",
    ])
    def test_command_registered(self, command):
        from click.testing import CliRunner
        from main import cli
        result = CliRunner().invoke(cli, [command, "--help"])
        assert result.exit_code == 0

    def test_show_without_data(self):
        """show ohne Datendateien → Fehlermeldung und Exit-Code 1."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["show"])
            assert result.exit_code == 1
            assert "Import fehlgeschlagen" in result.output

    def test_init_creates_files(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init"])
            assert result.exit_code == 0
            assert Path("config/grade_config.yaml").exists()
            for name in ("modules.csv", "components.csv", "marks.csv"):
                assert (Path("grades") / name).exists()

    def test_show_and_validate_example(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])
            result = runner.invoke(cli, ["show"])
            assert result.exit_code == 0
            assert "CS101" in result.output
            assert "Gesamtprognose" in result.output
            result = runner.invoke(cli, ["validate"])
            assert result.exit_code == 0

    def test_module_detail(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])
            result = runner.invoke(cli, ["module", "cs102"])
            assert result.exit_code == 0
            assert "Best-of-N-Gruppen" in result.output
            result = runner.invoke(cli, ["module", "CS999"])
            assert result.exit_code == 1

    def test_mark_and_clear(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])
            result = runner.invoke(cli, ["mark", "1", "Exam", "65"])
            assert result.exit_code == 0
            marks = Path("grades/marks.csv").read_text(encoding="utf-8")
            assert "1,Exam,65.00" in marks

            result = runner.invoke(cli, ["clear", "CS101", "Exam"])
            assert result.exit_code == 0
            marks = Path("grades/marks.csv").read_text(encoding="utf-8")
            assert "1,Exam,\n" in marks

    def test_mark_rejects_bad_input(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])
            assert runner.invoke(cli, ["mark", "1", "Nope", "50"]).exit_code == 1
            assert runner.invoke(cli, ["mark", "1", "Exam", "150"]).exit_code == 1
            assert "1,Exam,\n" in Path("grades/marks.csv").read_text(encoding="utf-8")

    def test_set_target(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["config", "set-target", "75"])
            assert result.exit_code == 0
            mgr = ConfigManager()
            assert mgr.load().projection.target == 75
            result = runner.invoke(cli, ["config", "set-target", "120"])
            assert result.exit_code == 1
            assert mgr.load().projection.target == 75

    def test_export(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])
            result = runner.invoke(cli, ["export", "-o", "bericht.xlsx"])
            assert result.exit_code == 0
            assert Path("bericht.xlsx").exists()

    def test_menu_keeps_target(self):
        """Im Menü geänderte Zielnote steht beim nächsten Aufruf wieder bereit."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])
            result = runner.invoke(cli, ["menu"], input="6\n80\n0\n")
            assert result.exit_code == 0
            assert ConfigManager().load().projection.target == 80

    def test_menu_without_changes_leaves_config(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])
            before = Path("config/grade_config.yaml").read_text(encoding="utf-8")
            result = runner.invoke(cli, ["menu"], input="0\n")
            assert result.exit_code == 0
            assert Path("config/grade_config.yaml").read_text(encoding="utf-8") == before

    def test_skipped_row_listed_once(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init"])
            with open("grades/components.csv", "a", encoding="utf-8") as f:
                f.write("99,Ghost,10,0,0\n")
            result = runner.invoke(cli, ["show"])
            assert result.exit_code == 0
            assert result.output.count("unbekannte Modul-ID 99") == 1
            assert "Zeilen übernommen" in result.output
