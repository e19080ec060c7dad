from pydantic import BaseModel, Field, field_validator


# ─── PROGNOSE ───

class ProjectionConfig(BaseModel):
    """Zielwerte für die Prognose."""
    # Angestrebte Gesamtnote in Prozent (z.B. 70 = First Class)
    target: float = Field(70.0, ge=0, le=100,
        description="Zielnote in Prozent")
    # Angenommene Note für alle übrigen offenen Komponenten
    assume_other: float = Field(70.0, ge=0, le=100,
        description="Angenommene Note für übrige offene Komponenten")


# ─── DATENDATEIEN ───

class DataConfig(BaseModel):
    """Lage der CSV-Dateien."""
    # Verzeichnis mit modules.csv, components.csv, marks.csv
    data_dir: str = Field("grades",
        description="Datenverzeichnis")
    # Moduldatei: id,code,title,credits
    modules_file: str = Field("modules.csv",
        description="Module (id,code,title,credits)")
    # Komponentendatei: module_id,component_name,weight[,group_id,best_of]
    components_file: str = Field("components.csv",
        description="Komponenten (module_id,component_name,weight[,group_id,best_of])")
    # Notendatei: module_id,component_name,mark (optional)
    marks_file: str = Field("marks.csv",
        description="Noten (module_id,component_name,mark)")
    # Noten beim Verlassen des Menüs automatisch speichern
    autosave: bool = Field(True,
        description="Noten beim Beenden automatisch speichern")

    @field_validator("modules_file", "components_file", "marks_file")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Dateiname darf nicht leer sein")
        return v.strip()


# ─── RECHENKERN ───

class EngineConfig(BaseModel):
    """Grenzen und Toleranzen des Rechenkerns."""
    # Maximale Anzahl berücksichtigter Noten je Best-of-N-Gruppe
    max_group_members: int = Field(256, ge=1, le=4096,
        description="Max. Noten je Best-of-N-Gruppe")
    # Toleranz beim Check "Gewichte ergeben 100"
    weight_tolerance: float = Field(0.01, ge=0, le=5,
        description="Toleranz für Gewichtssumme")


# ─── GESAMT-CONFIG ───

class GradeConfig(BaseModel):
    """Gesamtkonfiguration des Notenrechners."""
    # Name des Studiengangs (nur Anzeige)
    programme_name: str = Field("BSc Computer Science",
        description="Studiengang")
    # Ziel- und Annahmewerte
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    # CSV-Dateien
    data: DataConfig = Field(default_factory=DataConfig)
    # Rechenkern
    engine: EngineConfig = Field(default_factory=EngineConfig)
