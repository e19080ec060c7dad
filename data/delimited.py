"""Zeilenweiser Parser für kommagetrennte Datensätze (modules.csv, components.csv, marks.csv).

Regeln:
  - Felder sind durch Komma getrennt.
  - Ein Feld, das mit '"' beginnt, ist ein Quoted-Feld: Inhalt bis zum
    schließenden Anführungszeichen, '""' steht für ein literales '"'.
    Der Inhalt wird NICHT getrimmt.
  - Nach dem schließenden '"' werden Leerzeichen und ein optionales Komma
    übersprungen.
  - Nicht gequotete Felder laufen bis zum nächsten Komma und werden getrimmt.
  - Endet die Zeile auf ',', wird ein zusätzliches leeres Feld angehängt.
"""

from typing import BinaryIO, Iterator, Optional, TextIO, Union


class DelimitedParseError(ValueError):
    """Zeile konnte nicht geparst werden (z.B. fehlendes schließendes Anführungszeichen)."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"Zeile {line_number}: {message}"
        super().__init__(message)


QUOTE = '"'
SEPARATOR = ","


def parse_line(line: str) -> list[str]:
    """Zerlegt eine Textzeile in ihre Felder.

    Zeilenumbrüche am Ende werden entfernt. Eine leere Zeile ergibt eine
    leere Liste. Fehlt das schließende Anführungszeichen eines Quoted-Felds,
    wird DelimitedParseError geworfen; es entsteht nie eine halbe Zeile.
    """
    line = line.rstrip("\r\n")
    fields: list[str] = []
    pos = 0
    end = len(line)

    while pos < end:
        if line[pos] == QUOTE:
            value, pos = _read_quoted(line, pos + 1)
            while pos < end and line[pos].isspace():
                pos += 1
            if pos < end and line[pos] == SEPARATOR:
                pos += 1
            fields.append(value)
        else:
            stop = line.find(SEPARATOR, pos)
            if stop < 0:
                stop = end
            fields.append(line[pos:stop].strip())
            pos = stop + 1 if stop < end else stop

    # "a,b," → drei Felder
    if line.endswith(SEPARATOR):
        fields.append("")

    return fields


def _read_quoted(line: str, pos: int) -> tuple[str, int]:
    """Liest ein Quoted-Feld ab pos (hinter dem öffnenden '"').

    Gibt (Inhalt, Position hinter dem schließenden '"') zurück.
    """
    parts: list[str] = []
    start = pos
    end = len(line)
    while pos < end:
        if line[pos] == QUOTE:
            if pos + 1 < end and line[pos + 1] == QUOTE:
                parts.append(line[start:pos])
                parts.append(QUOTE)
                pos += 2
                start = pos
                continue
            parts.append(line[start:pos])
            return "".join(parts), pos + 1
        pos += 1
    raise DelimitedParseError("Schließendes Anführungszeichen fehlt")


def _needs_quoting(value: str) -> bool:
    return (
        SEPARATOR in value
        or QUOTE in value
        or "\n" in value
        or "\r" in value
        or value != value.strip()
    )


def format_field(value: str) -> str:
    """Quotet ein Feld nur wenn nötig."""
    if _needs_quoting(value):
        return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE
    return value


def format_row(fields: list[str]) -> str:
    """Serialisiert Felder zu einer Zeile, die parse_line exakt zurückliest.

    Sonderfall: eine Zeile aus genau einem leeren Feld wird als '""'
    geschrieben, sonst wäre sie von einer leeren Zeile nicht unterscheidbar.
    """
    if len(fields) == 1 and fields[0] == "":
        return QUOTE * 2
    return SEPARATOR.join(format_field(str(f)) for f in fields)


class DelimitedReader:
    """Liest Datensätze zeilenweise aus einem Text- oder Binärstrom.

    read_row() hat drei klar getrennte Ergebnisse:
      - Liste der Felder  → Zeile gelesen
      - None              → Ende der Eingabe
      - DelimitedParseError → Zeile fehlerhaft (der Leser bleibt benutzbar)

    Binärströme werden zeilenweise mit encoding dekodiert; eine Zeile mit
    ungültigen Bytes ist ein Parse-Fehler dieser einen Zeile.
    """

    def __init__(self, stream: Union[TextIO, BinaryIO], encoding: str = "utf-8-sig"):
        self._stream = stream
        self.encoding = encoding
        self.line_number = 0

    def read_row(self) -> Optional[list[str]]:
        raw = self._stream.readline()
        if not raw:
            return None
        self.line_number += 1
        if isinstance(raw, bytes):
            try:
                raw = raw.decode(self.encoding)
            except UnicodeDecodeError as e:
                raise DelimitedParseError(
                    f"Ungültige Zeichenkodierung (kein {self.encoding}, Byte {e.start + 1})",
                    self.line_number,
                ) from e
        try:
            return parse_line(raw)
        except DelimitedParseError as e:
            raise DelimitedParseError(str(e), self.line_number) from e

    def __iter__(self) -> Iterator[list[str]]:
        while True:
            row = self.read_row()
            if row is None:
                return
            yield row
