"""Portfolio-level aggregation over independent per-loan assessments."""
from __future__ import annotations

from typing import Iterable

from .engine import assess_risk, compute_ltv, is_liquidation_eligible
from .models import Loan, MarketPrices, PortfolioSummary, RiskAssessment, RiskTier

AT_RISK_TIERS = (RiskTier.HIGH, RiskTier.CRITICAL)


def effective_tier(loan: Loan, assessment: RiskAssessment) -> RiskTier:
    """Tier to act on.

    A debt-free loan is never at risk (its debt-asset liquidation price is
    infinite). Otherwise an undeterminable assessment counts as critical.
    """
    if loan.debt_amount == 0 and loan.collateral_amount > 0:
        return RiskTier.LOW
    if not assessment.is_determinable:
        return RiskTier.CRITICAL
    return assessment.risk_tier


def summarize_portfolio(loans: Iterable[Loan], prices: MarketPrices) -> PortfolioSummary:
    """Aggregate the active loans in ``loans`` at one price snapshot."""
    active = [loan for loan in loans if loan.is_active]

    tier_counts = {tier: 0 for tier in RiskTier}
    eligible: list[str] = []
    ltv_sum = 0.0
    total_collateral = 0.0
    total_debt = 0.0

    for index, loan in enumerate(active):
        assessment = assess_risk(loan, prices)
        tier_counts[effective_tier(loan, assessment)] += 1
        ltv_sum += assessment.current_ltv
        total_collateral += loan.collateral_amount
        total_debt += loan.debt_amount
        if is_liquidation_eligible(loan, prices):
            eligible.append(loan.loan_id or f"#{index}")

    return PortfolioSummary(
        active_loans=len(active),
        total_collateral=total_collateral,
        total_debt=total_debt,
        collateral_value_usd=total_collateral * prices.collateral_price_usd,
        debt_value_usd=total_debt * prices.debt_asset_price_usd,
        aggregate_ltv=compute_ltv(
            total_collateral,
            total_debt,
            prices.collateral_price_usd,
            prices.debt_asset_price_usd,
        ),
        average_ltv=ltv_sum / len(active) if active else 0.0,
        tier_counts=tier_counts,
        at_risk_count=sum(tier_counts[tier] for tier in AT_RISK_TIERS),
        liquidation_eligible=tuple(eligible),
    )
