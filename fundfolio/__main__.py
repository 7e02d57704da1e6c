# fundfolio/__main__.py
"""
Command-line entry point.

Usage:
    python -m fundfolio catalog --search "flexi cap"
    python -m fundfolio catalog --csv base.csv returns.csv costs.csv
    python -m fundfolio parse my_funds.csv
    python -m fundfolio summary --portfolio my_funds.json --years 15
    python -m fundfolio add "Alpha Flexi Cap Fund" --weekly 1500
    python -m fundfolio update alphaflexicapfund-0 2000
    python -m fundfolio remove alphaflexicapfund-0
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .agents.fund_data_agent import FundDataAgent, build_catalog, load_local_sources
from .agents.portfolio_agent import PortfolioAgent
from .agents.portfolio_store import DebouncedWriter, JsonBinStore, LocalFileStore, parse_portfolio_document
from .analytics.aggregator import contribution_breakdown
from .config import Settings, load_settings
from .ingest.parser import parse_file
from .results import Failure


def _make_store(settings: Settings):
    if settings.use_remote_store:
        return JsonBinStore(
            bin_id=settings.jsonbin_bin_id,
            api_key=settings.jsonbin_api_key,
            base_url=settings.jsonbin_base_url,
            request_timeout_seconds=settings.request_timeout_seconds,
        )
    return LocalFileStore(Path(settings.portfolio_file))


def _make_agent(settings: Settings) -> PortfolioAgent:
    store = _make_store(settings)
    fetcher = FundDataAgent(sources=settings.csv_sources,
                            request_timeout_seconds=settings.request_timeout_seconds)
    return PortfolioAgent(
        store,
        writer=DebouncedWriter(store, delay_seconds=settings.save_debounce_seconds),
        default_portfolio_loader=lambda: fetcher.load_default_portfolio(settings.default_portfolio_url),
        forecast_years=settings.forecast_years,
    )


def _load_catalog(csv_files: Optional[List[str]], settings: Settings):
    if csv_files:
        return build_catalog(load_local_sources(csv_files))
    agent = FundDataAgent(sources=settings.csv_sources,
                          request_timeout_seconds=settings.request_timeout_seconds)
    return agent.load_catalog()


def _save(agent: PortfolioAgent) -> int:
    result = agent.flush()
    if isinstance(result, Failure):
        print(f"✗ Error saving portfolio: {result.describe()}", file=sys.stderr)
        return 1
    print(json.dumps({"portfolio": [h.to_record() for h in agent.holdings]}, indent=2, default=str))
    return 0


def _cmd_catalog(args, settings: Settings) -> int:
    result, report = _load_catalog(args.csv, settings)

    if isinstance(result, Failure):
        print(json.dumps({"error": result.describe(), "report": report.model_dump()}, indent=2))
        return 1

    funds = result.value.search(args.search, limit=args.limit) if args.search is not None else result.value.funds
    print(json.dumps({
        "funds": [f.to_record() for f in funds],
        "report": report.model_dump(),
    }, indent=2, default=str))
    return 0


def _cmd_parse(args, settings: Settings) -> int:
    try:
        records, notes = parse_file(args.file)
    except (FileNotFoundError, ValueError) as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps({"records": records, "parse_notes": notes}, indent=2))
    return 0


def _cmd_summary(args, settings: Settings) -> int:
    agent = _make_agent(settings)

    if args.portfolio:
        try:
            data = json.loads(Path(args.portfolio).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"✗ Error reading portfolio: {e}", file=sys.stderr)
            return 1
        parsed = parse_portfolio_document(data, source=args.portfolio)
        if isinstance(parsed, Failure):
            print(f"✗ Error: {parsed.describe()}", file=sys.stderr)
            return 1
        agent.load_holdings(parsed.value)
    else:
        agent.load_initial_portfolio()

    summary = agent.summary(years=args.years)
    breakdown = contribution_breakdown(agent.holdings, sort_by=args.sort_by, ascending=args.ascending)
    print(json.dumps({
        "summary": summary.model_dump(by_alias=True),
        "breakdown": breakdown.to_dict(orient="records"),
    }, indent=2, default=str))
    return 0


def _cmd_add(args, settings: Settings) -> int:
    result, _ = _load_catalog(args.csv, settings)
    if isinstance(result, Failure):
        print(f"✗ Error: {result.describe()}", file=sys.stderr)
        return 1
    fund = result.value.get(args.fund) or result.value.find_by_name(args.fund)
    if fund is None:
        print(f"✗ Error: no fund named {args.fund!r} in the catalog", file=sys.stderr)
        return 1

    agent = _make_agent(settings)
    agent.load_initial_portfolio()
    try:
        agent.add_fund(fund, args.weekly)
    except ValueError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1
    return _save(agent)


def _cmd_update(args, settings: Settings) -> int:
    agent = _make_agent(settings)
    agent.load_initial_portfolio()
    try:
        agent.update_weekly_investment(args.fund_id, args.weekly)
    except KeyError:
        print(f"✗ Error: {args.fund_id} is not in your portfolio", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1
    return _save(agent)


def _cmd_remove(args, settings: Settings) -> int:
    agent = _make_agent(settings)
    agent.load_initial_portfolio()
    try:
        agent.remove_fund(args.fund_id)
    except KeyError:
        print(f"✗ Error: {args.fund_id} is not in your portfolio", file=sys.stderr)
        return 1
    return _save(agent)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="fundfolio", description="Mutual fund portfolio analyzer")
    sub = parser.add_subparsers(dest="command", required=True)

    p_catalog = sub.add_parser("catalog", help="Load and list the reconciled fund catalog")
    p_catalog.add_argument("--csv", nargs="+", metavar="FILE",
                           help="Local CSV files in priority order (base, supplement 1, supplement 2)")
    p_catalog.add_argument("--search", default=None, help="Case-insensitive fund name filter")
    p_catalog.add_argument("--limit", type=int, default=50)

    p_parse = sub.add_parser("parse", help="Parse one local fund CSV file")
    p_parse.add_argument("file")

    p_summary = sub.add_parser("summary", help="Allocation, weighted stats and forecast for a portfolio")
    p_summary.add_argument("--portfolio", default=None, help="Portfolio JSON file (defaults to the stored portfolio)")
    p_summary.add_argument("--years", type=int, default=None)
    p_summary.add_argument("--sort-by", default="weeklyInvestment")
    p_summary.add_argument("--ascending", action="store_true")

    p_add = sub.add_parser("add", help="Add a catalog fund to the stored portfolio")
    p_add.add_argument("fund", help="Fund id or exact fund name")
    p_add.add_argument("--weekly", required=True, help="Weekly investment amount")
    p_add.add_argument("--csv", nargs="+", metavar="FILE", help="Local CSV files instead of the remote catalog")

    p_update = sub.add_parser("update", help="Change the weekly investment of a held fund")
    p_update.add_argument("fund_id")
    p_update.add_argument("weekly")

    p_remove = sub.add_parser("remove", help="Remove a fund from the stored portfolio")
    p_remove.add_argument("fund_id")

    args = parser.parse_args(argv)
    settings = load_settings()

    handlers = {
        "catalog": _cmd_catalog,
        "parse": _cmd_parse,
        "summary": _cmd_summary,
        "add": _cmd_add,
        "update": _cmd_update,
        "remove": _cmd_remove,
    }
    return handlers[args.command](args, settings)


if __name__ == "__main__":
    sys.exit(main())
