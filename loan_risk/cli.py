"""Command-line interface for the dual-asset loan risk engine."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import AppConfig, load_config
from .interfaces.price_oracle import PriceFeedError, PriceOracle
from .logging_setup import configure_logging
from .models import MarketPrices
from .oracles import StaticOracle
from .report import (
    format_assessment_report,
    format_portfolio,
    format_quote,
    format_scenarios,
    format_settlement,
)
from .services import RiskService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="dual-asset-risk",
        description="Dual-asset collateralized loan risk engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--collateral-price",
        type=float,
        default=None,
        help="Override collateral USD price (requires --debt-price)",
    )
    parser.add_argument(
        "--debt-price",
        type=float,
        default=None,
        help="Override debt-asset USD price (requires --collateral-price)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("assess", help="Assess every active loan")
    sub.add_parser("portfolio", help="Portfolio-level risk summary")

    quote_parser = sub.add_parser("quote", help="Size a new loan")
    quote_parser.add_argument("collateral", type=float, help="Collateral amount")
    quote_parser.add_argument(
        "--target-ltv",
        type=float,
        default=40.0,
        help="Target LTV percentage (default: 40)",
    )
    quote_parser.add_argument(
        "--term",
        type=int,
        default=60,
        help="Loan term in days (default: 60)",
    )

    settle_parser = sub.add_parser("settle", help="Estimate liquidation of a loan")
    settle_parser.add_argument("loan_id", help="Loan identifier")

    scenario_parser = sub.add_parser(
        "scenario", help="Re-assess a loan under what-if price moves"
    )
    scenario_parser.add_argument("loan_id", help="Loan identifier")

    return parser


def _price_override(args: argparse.Namespace) -> PriceOracle | None:
    if args.collateral_price is None and args.debt_price is None:
        return None
    return StaticOracle(MarketPrices(args.collateral_price, args.debt_price))


async def _run(args: argparse.Namespace, config: AppConfig) -> str:
    """Execute the selected command and return its report."""
    service = RiskService(config, oracle=_price_override(args))

    if args.command == "assess":
        prices, rows = await service.evaluate()
        return format_assessment_report(rows, prices, config.assets)
    if args.command == "portfolio":
        prices, summary = await service.portfolio()
        return format_portfolio(summary, prices, config.assets)
    if args.command == "quote":
        _, quote = await service.quote(args.collateral, args.target_ltv, args.term)
        return format_quote(quote, config.assets)
    if args.command == "settle":
        loan, settlement = await service.settle(args.loan_id)
        return format_settlement(loan, settlement, config.assets)
    if args.command == "scenario":
        prices, loan, baseline, outcomes = await service.scenarios(args.loan_id)
        return format_scenarios(loan, baseline, outcomes, prices, config.assets)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if (args.collateral_price is None) != (args.debt_price is None):
        parser.error("--collateral-price and --debt-price must be given together")

    configure_logging(args.log_level)

    try:
        config = load_config(args.config)
        output = asyncio.run(_run(args, config))
    except (FileNotFoundError, ValueError, PriceFeedError) as e:
        logger.error("%s", e)
        sys.exit(1)

    print(output)
