from config.schema import (
    DataConfig,
    EngineConfig,
    GradeConfig,
    ProjectionConfig,
)


DEFAULT_TARGET = 70.0
DEFAULT_ASSUME_OTHER = 70.0


def default_grade_config() -> GradeConfig:
    """Standard-Konfiguration: Ziel 70 %, Annahme 70 %, Daten unter ./grades."""
    return GradeConfig(
        programme_name="BSc Computer Science",
        projection=ProjectionConfig(target=DEFAULT_TARGET,
                                    assume_other=DEFAULT_ASSUME_OTHER),
        data=DataConfig(),
        engine=EngineConfig(),
    )


# ─── BEISPIELDATEN (für `init`) ───────────────────────────────────────────────
# Zeilen inkl. Kopfzeile, Felder wie in den CSV-Dateien.

EXAMPLE_MODULES: list[list[str]] = [
    ["id", "code", "title", "credits"],
    ["1", "CS101", "Programming I", "15"],
    ["2", "CS102", "Discrete Mathematics", "15"],
    ["3", "CS103", "Databases, Design & SQL", "30"],
]

# Gruppe 1 in CS102: fünf Problem Sheets, die besten drei zählen je 10 %.
EXAMPLE_COMPONENTS: list[list[str]] = [
    ["module_id", "component_name", "weight", "group_id", "best_of"],
    ["1", "Coursework", "40", "0", "0"],
    ["1", "Exam", "60", "0", "0"],
    ["2", "Problem Sheet 1", "10", "1", "3"],
    ["2", "Problem Sheet 2", "10", "1", "3"],
    ["2", "Problem Sheet 3", "10", "1", "3"],
    ["2", "Problem Sheet 4", "10", "1", "3"],
    ["2", "Problem Sheet 5", "10", "1", "3"],
    ["2", "Exam", "70", "0", "0"],
    ["3", "Group Project", "30", "0", "0"],
    ["3", "Lab \"SQL\" Test", "20", "0", "0"],
    ["3", "Exam", "50", "0", "0"],
]

EXAMPLE_MARKS: list[list[str]] = [
    ["module_id", "component_name", "mark"],
    ["1", "Coursework", "78.00"],
    ["1", "Exam", ""],
    ["2", "Problem Sheet 1", "85.00"],
    ["2", "Problem Sheet 2", "62.00"],
    ["2", "Problem Sheet 3", ""],
    ["2", "Problem Sheet 4", ""],
    ["2", "Problem Sheet 5", ""],
    ["2", "Exam", ""],
    ["3", "Group Project", "71.50"],
    ["3", "Lab \"SQL\" Test", ""],
    ["3", "Exam", ""],
]
