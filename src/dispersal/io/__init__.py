"""Fixture loading and admin-table CSV exchange."""

from dispersal.io.fixtures import FixtureError, load_fixture
from dispersal.io.table import (
    CsvFormatError,
    TableRow,
    build_table_rows,
    export_csv,
    filter_rows,
    group_by_base,
    import_csv,
)

__all__ = [
    "CsvFormatError",
    "FixtureError",
    "TableRow",
    "build_table_rows",
    "export_csv",
    "filter_rows",
    "group_by_base",
    "import_csv",
    "load_fixture",
]
