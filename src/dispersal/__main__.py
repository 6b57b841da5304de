"""DISPERSAL CLI entry point.

Usage:
    python -m dispersal                              # Default config + fixture, distribute, print table
    python -m dispersal --config custom.yaml         # Custom config
    python -m dispersal --strategy cluster           # Override the strategy
    python -m dispersal --max-per-position 2         # Cap every position at 2 for this run
    python -m dispersal --export-csv out.csv         # Write the assignment table
    python -m dispersal --import-notes old.csv       # Carry notes from an earlier export
    python -m dispersal --serve --port 8080          # Serve the HTTP API instead
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dispersal.core.clock import create_clock
from dispersal.core.config import DispersalConfig
from dispersal.core.types import Operator, OperatorRole
from dispersal.distribution.config import DistributionStrategy
from dispersal.distribution.manager import PlacementManager
from dispersal.io.fixtures import FixtureError, load_fixture
from dispersal.io.table import (
    CsvFormatError,
    build_table_rows,
    export_csv,
    group_by_base,
    import_csv,
)
from dispersal.utils.logging import setup_logging

logger = logging.getLogger("dispersal.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dispersal",
        description="DISPERSAL - aircraft placement and auto-distribution",
    )
    parser.add_argument(
        "--config",
        "-c",
        default="config/default.yaml",
        help="Path to configuration YAML file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--fixture",
        "-f",
        default=None,
        help="Override the fixture file with bases, positions and aircraft",
    )
    parser.add_argument(
        "--strategy",
        "-s",
        default=None,
        choices=[s.value for s in DistributionStrategy],
        help="Override the distribution strategy",
    )
    parser.add_argument(
        "--max-per-position",
        type=int,
        default=None,
        help="Cap aircraft per position for this run (0 = position capacity)",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        default=False,
        help="Clear all position assignments before distributing",
    )
    parser.add_argument(
        "--no-distribute",
        action="store_true",
        default=False,
        help="Only print the current table, do not run auto-distribution",
    )
    parser.add_argument(
        "--export-csv",
        default=None,
        help="Write the assignment table to this CSV file",
    )
    parser.add_argument(
        "--import-notes",
        default=None,
        help="Read position notes from a previously exported table CSV",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        default=False,
        help="Serve the HTTP API instead of running once (also dispersal.api.enabled)",
    )
    parser.add_argument("--host", default=None, help="Override API host")
    parser.add_argument("--port", type=int, default=None, help="Override API port")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        default=False,
        help="Validate config against the pydantic schema before starting",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Path to log file (default: no file logging)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=False,
        help="Output logs as JSON instead of human-readable",
    )
    return parser


def _print_table(manager: PlacementManager, notes: dict[str, str]) -> None:
    rows = build_table_rows(manager, notes)
    width = max((len(r.position_name) for r in rows), default=8)
    for base, base_rows in group_by_base(rows).items():
        print(base)
        for row in base_rows:
            used = len(row.assigned_aircraft)
            line = (
                f"  {row.position_name:<{width}} "
                f"{used}/{row.capacity}  {', '.join(row.assigned_aircraft)}"
            )
            if row.notes:
                line += f"  [{row.notes}]"
            print(line)
    unassigned = manager.get_unassigned_aircraft()
    if unassigned:
        print(f"Unassigned: {', '.join(a.callsign for a in unassigned)}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    config = DispersalConfig(args.config)
    try:
        cfg = config.load(validate=args.validate_config)
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: Config validation failed:\n{e}", file=sys.stderr)
        return 1

    if args.strategy is not None:
        config.override("dispersal.distribution.strategy", args.strategy)
    if args.max_per_position is not None:
        config.override("dispersal.distribution.max_per_position", args.max_per_position)
    if args.fixture is not None:
        config.override("dispersal.fixture", args.fixture)

    root = cfg.dispersal
    log_level = args.log_level or root.system.get("log_level", "INFO")
    log_file = args.log_file or root.system.get("log_file", None)
    log_json = args.log_json or root.system.get("log_json", False)
    setup_logging(log_level, log_file=log_file, log_json=log_json)

    op_cfg = root.get("operator") or {}
    operator = Operator(
        id=str(op_cfg.get("id", "guest")),
        username=str(op_cfg.get("username", "guest")),
        role=OperatorRole(op_cfg.get("role", "viewer")),
    )

    fixture = root.get("fixture")
    if not fixture:
        print("Error: no fixture configured (dispersal.fixture)", file=sys.stderr)
        return 1
    fixture_path = config.resolve_path(str(fixture))
    try:
        store = load_fixture(fixture_path, clock=create_clock(root.get("time")))
    except (FileNotFoundError, FixtureError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    manager = PlacementManager.from_config(root, store)
    manager.set_operator(operator)

    notes: dict[str, str] = {}
    if args.import_notes:
        try:
            text = Path(args.import_notes).read_text(encoding="utf-8-sig")
            notes = import_csv(text, store.positions)
        except (FileNotFoundError, CsvFormatError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    api_cfg = root.get("api") or {}
    if args.serve or api_cfg.get("enabled", False):
        import uvicorn

        from dispersal.api.server import create_app

        app = create_app(manager)
        app.state.notes = notes
        uvicorn.run(
            app,
            host=args.host or api_cfg.get("host", "127.0.0.1"),
            port=args.port or int(api_cfg.get("port", 8080)),
            log_level=log_level.lower(),
        )
        return 0

    if args.clear:
        manager.clear_all_assignments()
    if not args.no_distribute:
        result = manager.run_auto_distribute()
        logger.info("Placed %d aircraft", result.placed_count)

    _print_table(manager, notes)

    if args.export_csv:
        out = Path(args.export_csv)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(export_csv(build_table_rows(manager, notes)), encoding="utf-8")
        print(f"Wrote {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
