"""Campus event search from the command line.

Prints how a query is interpreted (date, range, time, cost, activity, mode)
and the SMS reply the pipeline would send.

Usage:
    python scripts/search_cli.py "free pizza tomorrow"
    python scripts/search_cli.py --interpret-only "basketball this weekend"
    python scripts/search_cli.py --reference-date 2025-01-06   # interactive
    python scripts/search_cli.py --metrics-port 9000           # interactive + /metrics
"""

import argparse
import sys
from datetime import date, datetime
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config.logging_config import setup_logging
from src.config.settings import get_settings
from src.domain.models import ExtractedFacets
from src.observability.metrics import ensure_metrics_exporter
from src.services.date_resolver import get_reference_datetime
from src.services.query_interpreter import QueryInterpreter
from src.use_cases.handle_inbound_message import HandleInboundMessageUseCase
from src.use_cases.pipeline_factories import (
    create_inbound_handler,
    create_search_clients,
    create_search_executor,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search campus events like an SMS user")
    parser.add_argument("query", nargs="?", help="Query text (omit for interactive mode)")
    parser.add_argument("--tenant", help="Tenant/school (default: settings.default_tenant)")
    parser.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        help="Pin today's date (YYYY-MM-DD) for reproducible results",
    )
    parser.add_argument(
        "--interpret-only",
        action="store_true",
        help="Only show extracted facets; no API keys needed",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while the session runs",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser.parse_args(argv)


def describe_facets(facets: ExtractedFacets) -> str:
    rows = [
        ("mode", facets.mode.value),
        ("date", facets.target_date.isoformat() if facets.target_date else "-"),
        (
            "range",
            f"{facets.date_range.start} .. {facets.date_range.end}"
            if facets.date_range
            else "-",
        ),
        (
            "time",
            facets.time_constraint.model_dump_json(exclude_none=True)
            if facets.time_constraint
            else "-",
        ),
        ("cost", facets.cost_intent.value if facets.cost_intent else "-"),
        ("activity", facets.activity_type or "-"),
        ("keywords", ", ".join(facets.keywords) or "-"),
    ]
    return "\n".join(f"  {name:<9}{value}" for name, value in rows)


def run_query(
    text: str,
    tenant: str,
    reference: datetime,
    handler: HandleInboundMessageUseCase | None,
) -> None:
    facets = QueryInterpreter().interpret(text, reference.date(), reference.time())
    print("Interpretation (rules only):")
    print(describe_facets(facets))

    if handler is None:
        return

    replies = handler.handle(text, tenant, reference_datetime=reference)
    for index, reply in enumerate(replies, start=1):
        print(f"\n--- SMS {index}/{len(replies)} ({len(reply)} chars) ---")
        print(reply)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(log_level=args.log_level, json_logs=args.json_logs)

    if args.interpret_only:
        tenant = args.tenant or "campus"
        tz_name = "America/New_York"
        handler = None
        executor = None
    else:
        settings = get_settings()
        tenant = args.tenant or settings.default_tenant
        tz_name = settings.tz_default
        executor = create_search_executor()
        handler = create_inbound_handler(
            settings=settings,
            clients=create_search_clients(settings),
            executor=executor,
        )
        if args.metrics_port:
            ensure_metrics_exporter(args.metrics_port)

    reference = get_reference_datetime(tz_name)
    if args.reference_date:
        reference = reference.replace(
            year=args.reference_date.year,
            month=args.reference_date.month,
            day=args.reference_date.day,
        )

    try:
        if args.query:
            run_query(args.query, tenant, reference, handler)
            return 0

        print(f"Searching {tenant} events for {reference.date():%a %Y-%m-%d}. Ctrl-D to quit.")
        while True:
            try:
                text = input("\n> ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                return 0
            if text:
                run_query(text, tenant, reference, handler)
    finally:
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)


if __name__ == "__main__":
    sys.exit(main())
