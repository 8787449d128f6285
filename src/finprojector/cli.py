"""
Command-line interface for FinProjector.

Reads instrument records from a JSON file and writes projection results as
JSON. Exit codes: 0 on success, 1 on input errors, 2 when some records were
flagged and excluded.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from typing import Any

from finprojector import __version__
from finprojector.aggregator import ProjectionAggregator
from finprojector.config import EngineConfig, load_config
from finprojector.core.dates import parse_date
from finprojector.core.decimal_math import ZERO, to_decimal
from finprojector.core.errors import ConfigError, InvalidInputError, ProjectionError
from finprojector.core.results import PortfolioReport

logger = logging.getLogger("finprojector")

SECTION_ALIASES = {
    "debts": ("debts", "debt"),
    "investments": ("investments", "investment"),
    "recurring": ("recurring", "recurringTransactions", "recurring_transactions", "obligations"),
}


def _load_json(path: str) -> Any:
    """Load JSON from file path ('-' reads stdin)."""
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class ProjectionEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimals, dates and result objects."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, date):
            return obj.isoformat()
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        return super().default(obj)


def _write_json(data: Any, output: str | None) -> None:
    """Write data as JSON to ``output`` or stdout."""
    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, cls=ProjectionEncoder)
            f.write("\n")
    else:
        json.dump(data, sys.stdout, indent=2, cls=ProjectionEncoder)
        sys.stdout.write("\n")


def _section(payload: Any, name: str) -> list:
    """Pick a list of records from a bare list or a keyed document."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in SECTION_ALIASES[name]:
            if key in payload:
                records = payload[key]
                if not isinstance(records, list):
                    raise ValueError(f"'{key}' must be a list of records")
                return records
        return []
    raise ValueError("input must be a JSON list or object")


def _check_options(args) -> None:
    """Reject bad option values before any record is projected."""
    if getattr(args, "extra", None) is not None:
        args.extra = to_decimal(args.extra, "--extra")
        if args.extra < ZERO:
            raise InvalidInputError(f"--extra must not be negative, got {args.extra}")
    if getattr(args, "days", None) is not None and args.days < 0:
        raise InvalidInputError(f"--days must not be negative, got {args.days}")


def _exit_code(*reports: PortfolioReport) -> int:
    return 2 if any(r.has_flags() for r in reports) else 0


def cmd_debt(args, aggregator: ProjectionAggregator, now: date) -> int:
    """Payoff projection for each debt, plus the debt summary."""
    records = _section(_load_json(args.input), "debts")
    report = aggregator.project_debts(records, now, args.extra)
    results = {
        key: projection.to_dict(include_schedule=args.schedule)
        for key, projection in report.results.items()
    }
    _write_json(
        {
            "now": now,
            "summary": aggregator.debt_summary(records),
            "total_interest": report.total,
            "results": results,
            "flagged": report.flagged,
        },
        args.output,
    )
    return _exit_code(report)


def cmd_compare(args, aggregator: ProjectionAggregator, now: date) -> int:
    """Baseline versus accelerated payoff for each debt."""
    records = _section(_load_json(args.input), "debts")
    report = aggregator.compare_debts(records, args.extra, now)
    _write_json({"now": now, "extra_payment": args.extra, **report.to_dict()}, args.output)
    return _exit_code(report)


def cmd_investment(args, aggregator: ProjectionAggregator, now: date) -> int:
    """Returns, projections and allocation for investments."""
    records = _section(_load_json(args.input), "investments")
    report = aggregator.investment_metrics(records, now)
    _write_json(
        {
            "now": now,
            "portfolio": aggregator.portfolio_metrics(records),
            "growth_projection": aggregator.growth_projection(records),
            "results": report.results,
            "flagged": report.flagged,
        },
        args.output,
    )
    return _exit_code(report)


def cmd_recurring(args, aggregator: ProjectionAggregator, now: date) -> int:
    """Upcoming occurrences of recurring obligations."""
    records = _section(_load_json(args.input), "recurring")
    report = aggregator.upcoming(records, now, args.days)
    upcoming = sorted(
        (item for items in report.results.values() for item in items),
        key=lambda item: (item.date, item.obligation_id or ""),
    )
    _write_json(
        {
            "now": now,
            "days_ahead": args.days if args.days is not None else aggregator.config.upcoming_days,
            "net_amount": report.total,
            "upcoming": upcoming,
            "flagged": report.flagged,
        },
        args.output,
    )
    return _exit_code(report)


def cmd_portfolio(args, aggregator: ProjectionAggregator, now: date) -> int:
    """Everything at once from a document with debts, investments and recurring."""
    payload = _load_json(args.input)
    if not isinstance(payload, dict):
        raise ValueError("portfolio input must be a JSON object")
    debts = _section(payload, "debts")
    investments = _section(payload, "investments")
    recurring = _section(payload, "recurring")

    debt_report = aggregator.project_debts(debts, now)
    investment_report = aggregator.investment_metrics(investments, now)
    upcoming_report = aggregator.upcoming(recurring, now)
    _write_json(
        {
            "now": now,
            "debts": {"summary": aggregator.debt_summary(debts), **debt_report.to_dict()},
            "investments": {
                "portfolio": aggregator.portfolio_metrics(investments),
                "growth_projection": aggregator.growth_projection(investments),
                **investment_report.to_dict(),
            },
            "recurring": upcoming_report.to_dict(),
        },
        args.output,
    )
    return _exit_code(debt_report, investment_report, upcoming_report)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="finprojector",
        description="Deterministic projections for debts, investments and recurring obligations",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--now",
        help="Reference date YYYY-MM-DD for all projections (default: today)",
    )
    parser.add_argument("--config", help="YAML or JSON engine configuration file")
    parser.add_argument("--max-periods", type=int, help="Override the schedule cap")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_io(p: argparse.ArgumentParser) -> None:
        p.add_argument("input", help="JSON file with records ('-' for stdin)")
        p.add_argument("-o", "--output", help="Write JSON to this file instead of stdout")

    p_debt = sub.add_parser("debt", help="Project payoff for debts")
    add_io(p_debt)
    p_debt.add_argument("--extra", default="0", help="Extra monthly principal payment")
    p_debt.add_argument("--schedule", action="store_true", help="Include full schedules")
    p_debt.set_defaults(func=cmd_debt)

    p_cmp = sub.add_parser("compare", help="Compare baseline and accelerated payoff")
    add_io(p_cmp)
    p_cmp.add_argument("--extra", required=True, help="Extra monthly principal payment")
    p_cmp.set_defaults(func=cmd_compare)

    p_inv = sub.add_parser("investment", help="Returns and projections for investments")
    add_io(p_inv)
    p_inv.set_defaults(func=cmd_investment)

    p_rec = sub.add_parser("recurring", help="Upcoming recurring occurrences")
    add_io(p_rec)
    p_rec.add_argument("--days", type=int, help="Look-ahead window in days")
    p_rec.set_defaults(func=cmd_recurring)

    p_all = sub.add_parser("portfolio", help="Debts, investments and recurring in one run")
    add_io(p_all)
    p_all.set_defaults(func=cmd_portfolio)

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``finprojector`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_config(args.config) if args.config else EngineConfig()
        if args.max_periods is not None:
            config = EngineConfig.from_dict({**config.to_dict(), "max_periods": args.max_periods})
        now = parse_date(args.now, "--now") if args.now else date.today()
        _check_options(args)
        return args.func(args, ProjectionAggregator(config), now)
    except (OSError, json.JSONDecodeError, ConfigError, ProjectionError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
