"""Plain-text rendering of risk records.

Only reads fields of the records it is given; never recomputes LTV.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone

from .config import AssetsConfig
from .models import (
    LiquidationSettlement,
    Loan,
    LoanQuote,
    MarketPrices,
    PortfolioSummary,
    RiskAssessment,
    RiskTier,
    ScenarioOutcome,
)
from .portfolio import effective_tier

_TIER_MARKERS: dict[RiskTier, str] = {
    RiskTier.LOW: "✅ LOW",
    RiskTier.MEDIUM: "🟡 MEDIUM",
    RiskTier.HIGH: "⚠️ HIGH",
    RiskTier.CRITICAL: "🚨 CRITICAL",
}


def _now_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _price(value: float) -> str:
    if not math.isfinite(value):
        return "n/a"
    # Sub-cent collateral tokens need more precision than dollars-and-cents.
    return f"${value:,.6f}" if abs(value) < 1 else f"${value:,.4f}"


def _pct(value: float) -> str:
    return f"{value:.2f}%" if math.isfinite(value) else "n/a"


def _loan_label(loan: Loan) -> str:
    label = loan.loan_id or "(unnamed loan)"
    if loan.borrower:
        label += f" · {loan.borrower}"
    return label


def tier_marker(tier: RiskTier) -> str:
    return _TIER_MARKERS[tier]


def format_prices(prices: MarketPrices, assets: AssetsConfig) -> str:
    return (
        f"{assets.collateral}: {_price(prices.collateral_price_usd)} · "
        f"{assets.debt}: {_price(prices.debt_asset_price_usd)}"
    )


def format_assessment(
    loan: Loan, assessment: RiskAssessment, assets: AssetsConfig
) -> str:
    """Multi-line block describing one loan's risk."""
    tier = effective_tier(loan, assessment)
    status = tier_marker(tier)
    if tier is RiskTier.CRITICAL and not assessment.is_determinable:
        status += " (UNDETERMINABLE)"

    return (
        f"📊 {_loan_label(loan)}\n"
        f"{status}\n"
        f"Collateral: {loan.collateral_amount:,.4f} {assets.collateral}\n"
        f"Debt: {loan.debt_amount:,.4f} {assets.debt}\n"
        f"LTV: {_pct(assessment.current_ltv)} · "
        f"Liquidation at {loan.liquidation_threshold_pct:.2f}%\n"
        f"Liquidation price {assets.collateral}: "
        f"{_price(assessment.liquidation_price_collateral)} "
        f"({_pct(assessment.collateral_drop_pct_to_liquidation)} drop)\n"
        f"Liquidation price {assets.debt}: "
        f"{_price(assessment.liquidation_price_debt_asset)} "
        f"({_pct(assessment.debt_asset_rise_pct_to_liquidation)} rise)"
    )


def format_assessment_report(
    rows: list[tuple[Loan, RiskAssessment]],
    prices: MarketPrices,
    assets: AssetsConfig,
) -> str:
    body = (
        "\n\n".join(format_assessment(loan, a, assets) for loan, a in rows)
        if rows
        else "No active loans found."
    )
    return (
        f"📋 Loan Risk Report\n"
        f"{format_prices(prices, assets)}\n"
        f"\n"
        f"{body}\n"
        f"\n"
        f"{_now_str()} UTC"
    )


def format_portfolio(
    summary: PortfolioSummary, prices: MarketPrices, assets: AssetsConfig
) -> str:
    tiers = " · ".join(
        f"{tier.value}: {summary.tier_counts.get(tier, 0)}" for tier in RiskTier
    )
    eligible = ", ".join(summary.liquidation_eligible) or "none"
    return (
        f"━━ Portfolio ({summary.active_loans} active loans) ━━\n"
        f"{format_prices(prices, assets)}\n"
        f"\n"
        f"Collateral: {summary.total_collateral:,.4f} {assets.collateral} "
        f"(${summary.collateral_value_usd:,.2f})\n"
        f"Debt: {summary.total_debt:,.4f} {assets.debt} "
        f"(${summary.debt_value_usd:,.2f})\n"
        f"Aggregate LTV: {_pct(summary.aggregate_ltv)} · "
        f"Average LTV: {_pct(summary.average_ltv)}\n"
        f"Tiers: {tiers}\n"
        f"At risk: {summary.at_risk_count} · Liquidation eligible: {eligible}\n"
        f"\n"
        f"{_now_str()} UTC"
    )


def format_quote(quote: LoanQuote, assets: AssetsConfig) -> str:
    return (
        f"💱 Loan quote — {quote.term_days} days at {quote.annual_rate_pct:.2f}% APR\n"
        f"\n"
        f"Collateral: {quote.collateral_amount:,.4f} {assets.collateral}\n"
        f"Borrow: {quote.borrow_amount:,.4f} {assets.debt}\n"
        f"Fixed interest: {quote.fixed_interest:,.4f} {assets.debt}\n"
        f"Total debt: {quote.total_debt:,.4f} {assets.debt}\n"
        f"Initial LTV: {_pct(quote.initial_ltv)} · {tier_marker(quote.risk_tier)}\n"
        f"Liquidation price {assets.collateral}: "
        f"{_price(quote.liquidation_price_collateral)}\n"
        f"Liquidation price {assets.debt}: "
        f"{_price(quote.liquidation_price_debt_asset)}"
    )


def format_settlement(
    loan: Loan, settlement: LiquidationSettlement, assets: AssetsConfig
) -> str:
    return (
        f"⚖️ Liquidation estimate — {_loan_label(loan)}\n"
        f"\n"
        f"Debt: {settlement.total_debt:,.4f} {assets.debt}\n"
        f"Penalty: {settlement.penalty:,.4f} {assets.debt}\n"
        f"Collateral seized: {settlement.collateral_seized:,.4f} {assets.collateral}\n"
        f"Collateral returned: {settlement.collateral_returned:,.4f} {assets.collateral}"
    )


def _change(value: float) -> str:
    return f"{value:+.2f}" if math.isfinite(value) else "n/a"


def format_scenarios(
    loan: Loan,
    baseline: RiskAssessment,
    outcomes: list[ScenarioOutcome],
    prices: MarketPrices,
    assets: AssetsConfig,
) -> str:
    lines = [
        f"🔮 Price scenarios — {_loan_label(loan)}",
        format_prices(prices, assets),
        f"Current LTV: {_pct(baseline.current_ltv)} · "
        f"{tier_marker(effective_tier(loan, baseline))}",
        "",
    ]
    if not outcomes:
        lines.append("No scenarios configured.")
    for outcome in outcomes:
        scenario = outcome.scenario
        line = (
            f"{scenario.name} ({assets.collateral} "
            f"{scenario.collateral_change_pct:+.0f}%, {assets.debt} "
            f"{scenario.debt_asset_change_pct:+.0f}%): "
            f"LTV {_pct(outcome.assessment.current_ltv)} "
            f"({_change(outcome.ltv_change)}) · "
            f"{tier_marker(effective_tier(loan, outcome.assessment))}"
        )
        if outcome.liquidation_eligible:
            line += " · LIQUIDATION"
        lines.append(line)
    return "\n".join(lines)
