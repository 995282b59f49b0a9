"""Dual-asset risk engine — pure functions, no I/O, no state.

Collateral and debt are two independently priced assets, both valued in USD.
Every LTV in the package comes from ``compute_ltv``; the liquidation prices
are that same equation solved for one price while the other is held fixed.

Nothing here raises. Degenerate inputs (zero or negative amounts or prices)
give ``inf``/``nan`` results instead of ``ZeroDivisionError``; callers that
act on a result must check ``RiskAssessment.is_determinable``.
"""
from __future__ import annotations

import math

from .models import Loan, MarketPrices, RiskAssessment, RiskTier

# Tier boundaries as fractions of the loan's liquidation threshold.
HIGH_RISK_FRACTION = 0.90
MEDIUM_RISK_FRACTION = 0.75


def _divide(numerator: float, denominator: float) -> float:
    """IEEE-754 division: x/0 gives signed inf, 0/0 gives nan."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def _clamp_non_negative(value: float) -> float:
    # nan passes through; max(0.0, nan) would give 0.0.
    if math.isnan(value):
        return value
    return max(0.0, value)


def compute_ltv(
    collateral_amount: float,
    debt_amount: float,
    collateral_price_usd: float,
    debt_asset_price_usd: float,
) -> float:
    """Loan-to-value as a percentage of USD collateral value.

    Returns 0.0 when the collateral is worth nothing. Not clamped above 100.
    """
    collateral_value_usd = collateral_amount * collateral_price_usd
    debt_value_usd = debt_amount * debt_asset_price_usd

    if collateral_value_usd <= 0:
        return 0.0
    return (debt_value_usd / collateral_value_usd) * 100


def compute_liquidation_price_collateral(
    debt_amount: float,
    collateral_amount: float,
    debt_asset_price_usd: float,
    liquidation_threshold_pct: float,
) -> float:
    """Collateral USD price at which LTV reaches the threshold.

    Holds the debt-asset price at its current value.
    """
    debt_value_usd = debt_amount * debt_asset_price_usd
    return _divide(debt_value_usd, collateral_amount) * _divide(
        100, liquidation_threshold_pct
    )


def compute_liquidation_price_debt_asset(
    debt_amount: float,
    collateral_amount: float,
    collateral_price_usd: float,
    liquidation_threshold_pct: float,
) -> float:
    """Debt-asset USD price at which LTV reaches the threshold.

    Holds the collateral price at its current value.
    """
    collateral_value_usd = collateral_amount * collateral_price_usd
    return _divide(collateral_value_usd * (liquidation_threshold_pct / 100), debt_amount)


def classify_risk(current_ltv: float, liquidation_threshold_pct: float) -> RiskTier:
    """Map an LTV to a tier relative to the liquidation threshold.

    First match wins; ``nan`` falls through to LOW, so callers should screen
    non-finite assessments (see ``portfolio.effective_tier``).
    """
    if current_ltv >= liquidation_threshold_pct:
        return RiskTier.CRITICAL
    if current_ltv >= HIGH_RISK_FRACTION * liquidation_threshold_pct:
        return RiskTier.HIGH
    if current_ltv >= MEDIUM_RISK_FRACTION * liquidation_threshold_pct:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def _current_ltv(loan: Loan, prices: MarketPrices) -> float:
    return compute_ltv(
        loan.collateral_amount,
        loan.debt_amount,
        prices.collateral_price_usd,
        prices.debt_asset_price_usd,
    )


def assess_risk(loan: Loan, prices: MarketPrices) -> RiskAssessment:
    """Full risk picture of ``loan`` at ``prices``."""
    current_ltv = _current_ltv(loan, prices)

    liquidation_price_collateral = compute_liquidation_price_collateral(
        loan.debt_amount,
        loan.collateral_amount,
        prices.debt_asset_price_usd,
        loan.liquidation_threshold_pct,
    )
    liquidation_price_debt_asset = compute_liquidation_price_debt_asset(
        loan.debt_amount,
        loan.collateral_amount,
        prices.collateral_price_usd,
        loan.liquidation_threshold_pct,
    )

    collateral_drop = _divide(
        prices.collateral_price_usd - liquidation_price_collateral,
        prices.collateral_price_usd,
    ) * 100
    debt_asset_rise = _divide(
        liquidation_price_debt_asset - prices.debt_asset_price_usd,
        prices.debt_asset_price_usd,
    ) * 100

    return RiskAssessment(
        current_ltv=current_ltv,
        liquidation_price_collateral=liquidation_price_collateral,
        liquidation_price_debt_asset=liquidation_price_debt_asset,
        collateral_drop_pct_to_liquidation=_clamp_non_negative(collateral_drop),
        debt_asset_rise_pct_to_liquidation=_clamp_non_negative(debt_asset_rise),
        risk_tier=classify_risk(current_ltv, loan.liquidation_threshold_pct),
    )


def is_liquidation_eligible(loan: Loan, prices: MarketPrices) -> bool:
    """True when the loan's current LTV is at or past its threshold."""
    return _current_ltv(loan, prices) >= loan.liquidation_threshold_pct
