"""Assignment table rows, search and CSV export/import for the admin view."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from dispersal.core.types import Position
from dispersal.distribution.manager import PlacementManager

logger = logging.getLogger(__name__)

CSV_HEADER = ["Base", "Position", "Capacity", "Assigned Aircraft", "Notes"]
CALLSIGN_SEPARATOR = "; "


class CsvFormatError(ValueError):
    """CSV text that cannot be imported."""


@dataclass
class TableRow:
    id: str  # position id
    base: str
    position_name: str
    capacity: int
    assigned_aircraft: list[str] = field(default_factory=list)  # callsigns
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "base": self.base,
            "position_name": self.position_name,
            "capacity": self.capacity,
            "assigned_aircraft": list(self.assigned_aircraft),
            "notes": self.notes,
        }


def build_table_rows(
    manager: PlacementManager,
    notes: Mapping[str, str] | None = None,
) -> list[TableRow]:
    """One row per position, in store order."""
    notes = notes or {}
    store = manager.store
    rows = []
    for position in store.positions:
        base = store.get_base(position.base_id)
        rows.append(TableRow(
            id=position.id,
            base=base.name if base else "Unknown",
            position_name=position.name,
            capacity=position.capacity,
            assigned_aircraft=[
                a.callsign for a in manager.get_assigned_aircraft(position.id)
            ],
            notes=notes.get(position.id, ""),
        ))
    return rows


def filter_rows(rows: Iterable[TableRow], query: str) -> list[TableRow]:
    """Case-insensitive match on base, position name or any callsign."""
    q = query.lower()
    return [
        r for r in rows
        if q in r.base.lower()
        or q in r.position_name.lower()
        or any(q in c.lower() for c in r.assigned_aircraft)
    ]


def group_by_base(rows: Iterable[TableRow]) -> dict[str, list[TableRow]]:
    grouped: dict[str, list[TableRow]] = {}
    for row in rows:
        grouped.setdefault(row.base, []).append(row)
    return grouped


def export_csv(rows: Iterable[TableRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow([
            row.base,
            row.position_name,
            row.capacity,
            CALLSIGN_SEPARATOR.join(row.assigned_aircraft),
            row.notes,
        ])
    return buf.getvalue()


def import_csv(text: str, positions: Iterable[Position]) -> dict[str, str]:
    """Read position notes back from an exported table.

    Rows are matched to positions by name; unmatched rows are skipped.
    Assignments in the file are informational and are not applied.

    Returns:
        Mapping of position id to note for every matched row.

    Raises:
        CsvFormatError: If there is no data row after the header.
    """
    records = [r for r in csv.reader(io.StringIO(text)) if r]
    if len(records) < 2:
        raise CsvFormatError("CSV needs a header line and at least one data row")

    by_name = {p.name: p for p in positions}
    notes: dict[str, str] = {}
    matched = 0
    for parts in records[1:]:
        if len(parts) < 4:
            continue
        position = by_name.get(parts[1].strip())
        if position is None:
            continue
        matched += 1
        if len(parts) >= 5:
            notes[position.id] = parts[4].strip()
    logger.info("Imported %d table rows", matched)
    return notes
