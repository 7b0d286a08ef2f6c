"""CLI for airline flight search."""

import argparse
import asyncio
import logging
import sys
from datetime import date

from skyfare.reference import airline_name
from skyfare.search.config import get_settings
from skyfare.search.errors import NoSourcesAuthorized
from skyfare.search.models import Airline, Caller, SearchRequest, SortKey
from skyfare.search.search_log import JsonlSearchLog
from skyfare.search.service import SearchService, SearchView
from skyfare.search.stats import PERIODS, compute_search_stats


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Search VietJet and Vietnam Airlines fares")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search flights across airline sources")
    search.add_argument("--route", "-r", required=True, help="Route as ORIGIN-DEST (e.g. SGN-HAN)")
    search.add_argument("--date", "-d", required=True, help="Departure date (YYYY-MM-DD)")
    search.add_argument("--return-date", help="Return date (YYYY-MM-DD) for round trips")
    search.add_argument("--adults", type=int, default=1)
    search.add_argument("--children", type=int, default=0)
    search.add_argument("--infants", type=int, default=0)
    search.add_argument("--user", "-u", default="cli", help="Caller identity recorded in the search log")
    search.add_argument(
        "--permit",
        help="Comma-separated sources the caller may use (default: all enabled sources)",
    )
    search.add_argument(
        "--sort",
        choices=[k.value for k in SortKey],
        default=SortKey.PRICE.value,
        help="Result ordering",
    )
    search.add_argument(
        "--reveal",
        type=int,
        default=0,
        help="Relax the default filters this many times (show more results)",
    )
    search.add_argument("--output", "-o", help="Write displayed results to CSV file")

    stats = sub.add_parser("stats", help="Search counts per user from the search log")
    stats.add_argument("--period", "-p", choices=PERIODS, default="all")
    stats.add_argument("--month", "-m", help="Month (YYYY-MM) for --period month")
    stats.add_argument("--day", help="Day (YYYY-MM-DD) for --period day")
    return parser.parse_args(argv)


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _build_request(args) -> SearchRequest:
    parts = args.route.upper().split("-")
    if len(parts) != 2:
        _fail(f"Invalid route format: {args.route}. Expected ORIGIN-DEST (e.g. SGN-HAN)")
    try:
        departure = date.fromisoformat(args.date)
        return_date = date.fromisoformat(args.return_date) if args.return_date else None
        return SearchRequest(
            origin=parts[0],
            destination=parts[1],
            departure_date=departure,
            return_date=return_date,
            adults=args.adults,
            children=args.children,
            infants=args.infants,
        )
    except ValueError as e:
        _fail(str(e))


def _ring(airline: Airline, count: int) -> None:
    print(f"\a{airline_name(airline)}: {count} flights arrived", file=sys.stderr)


def _print_view(view: SearchView) -> None:
    for notice in view.notices:
        print(f"Note: {notice}", file=sys.stderr)
    if not view.flights:
        print("No flights found.", file=sys.stderr)
        return
    for airline, flights in view.by_airline().items():
        print(f"\n{airline_name(airline)} ({len(flights)} flights)")
        for f in flights:
            leg = f.departure
            line = f"  {leg.date} {leg.time} {leg.airport}"
            if leg.arrival_airport:
                line += f"-{leg.arrival_airport}"
            line += f"  stops={leg.stops}  {f.duration}  {f.baggage_type or '-'}  {f.price:,.0f}"
            if f.return_leg:
                line += f"  | return {f.return_leg.date} {f.return_leg.time} stops={f.return_leg.stops}"
            print(line)
    if view.more_available:
        print("\nMore results available (use --reveal).", file=sys.stderr)


async def _run_search(service: SearchService, request: SearchRequest, caller: Caller, args) -> SearchView:
    view = None
    async for view in service.search(request, caller):
        print(
            f"[{len(view.state.accumulated)} flights, {len(view.state.pending)} sources pending]",
            file=sys.stderr,
        )
    view = service.update_filters(sort_by=SortKey(args.sort))
    for _ in range(max(args.reveal, 0)):
        view = service.reveal_more()
    return view


def run_search(args, settings) -> None:
    request = _build_request(args)
    permitted = args.permit.split(",") if args.permit else [a.value for a in settings.enabled_sources]
    try:
        caller = Caller.from_codes(args.user, [p for p in permitted if p.strip()])
    except ValueError as e:
        _fail(str(e))

    service = SearchService.from_settings(
        settings, search_log=JsonlSearchLog(settings.search_log_path), notifier=_ring
    )
    try:
        view = asyncio.run(_run_search(service, request, caller, args))
    except NoSourcesAuthorized as e:
        _fail(e.user_message)

    _print_view(view)
    df = view.to_dataframe()
    if args.output and not df.empty:
        df.to_csv(args.output, index=False)
        print(f"\nWrote {len(df)} rows to {args.output}", file=sys.stderr)


def run_stats(args, settings) -> None:
    try:
        day = date.fromisoformat(args.day) if args.day else None
        stats = compute_search_stats(
            JsonlSearchLog(settings.search_log_path).entries(),
            period=args.period,
            month=args.month,
            day=day,
        )
    except ValueError as e:
        _fail(str(e))

    print(f"\n{stats.label}: {stats.total_searches} searches")
    df = stats.user_dataframe()
    if df.empty:
        print("No search data.", file=sys.stderr)
    else:
        print(df.to_string(index=False))


def main(argv=None):
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    if args.command == "search":
        run_search(args, settings)
    else:
        run_stats(args, settings)


if __name__ == "__main__":
    main()
