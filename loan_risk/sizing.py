"""Loan sizing at creation time and liquidation settlement estimates.

All LTV and liquidation-price figures go through ``engine``; nothing here
carries its own LTV formula.
"""
from __future__ import annotations

from .config import LendingConfig
from .engine import (
    classify_risk,
    compute_liquidation_price_collateral,
    compute_liquidation_price_debt_asset,
    compute_ltv,
)
from .loans import validate_market_prices
from .models import LiquidationSettlement, Loan, LoanQuote, MarketPrices

DAYS_PER_YEAR = 365


def max_borrow_amount(
    collateral_amount: float,
    collateral_price_usd: float,
    debt_asset_price_usd: float,
    target_ltv_pct: float,
) -> float:
    """Debt-asset amount whose LTV equals ``target_ltv_pct`` at these prices.

    Inverse of ``compute_ltv`` in the debt amount; both prices are held at
    their creation-time values.
    """
    if debt_asset_price_usd <= 0:
        return 0.0
    collateral_value_usd = collateral_amount * collateral_price_usd
    if collateral_value_usd <= 0:
        return 0.0
    return collateral_value_usd * (target_ltv_pct / 100) / debt_asset_price_usd


def fixed_interest(principal: float, annual_rate_pct: float, term_days: int) -> float:
    """Up-front interest for the full term, owed even on early repayment."""
    return principal * (annual_rate_pct / 100) * (term_days / DAYS_PER_YEAR)


def quote_loan(
    collateral_amount: float,
    prices: MarketPrices,
    *,
    target_ltv_pct: float,
    term_days: int,
    lending: LendingConfig,
) -> LoanQuote:
    """Size a new loan against ``collateral_amount``.

    The principal is sized at ``target_ltv_pct``, itself bounded by the
    protocol's ``min_ltv``/``max_ltv``; that bound applies to the principal
    only. Initial LTV and liquidation prices are computed on principal plus
    fixed interest, i.e. the debt the engine will see once the loan exists,
    so a quote at ``max_ltv`` reports an initial LTV slightly above it.

    Raises:
        ValueError: invalid prices, collateral, target LTV or term.
    """
    validate_market_prices(prices)
    if collateral_amount <= 0:
        raise ValueError("Collateral amount must be positive")
    if not lending.min_ltv <= target_ltv_pct <= lending.max_ltv:
        raise ValueError(
            f"Target LTV {target_ltv_pct}% outside allowed range "
            f"{lending.min_ltv}%–{lending.max_ltv}%"
        )
    if term_days not in lending.interest_rates:
        terms = ", ".join(str(t) for t in sorted(lending.interest_rates))
        raise ValueError(f"Unsupported term {term_days} days (choose from {terms})")

    borrow = max_borrow_amount(
        collateral_amount,
        prices.collateral_price_usd,
        prices.debt_asset_price_usd,
        target_ltv_pct,
    )

    rate = lending.interest_rates[term_days]
    interest = fixed_interest(borrow, rate, term_days)
    total_debt = borrow + interest
    threshold = lending.liquidation_threshold

    initial_ltv = compute_ltv(
        collateral_amount,
        total_debt,
        prices.collateral_price_usd,
        prices.debt_asset_price_usd,
    )
    return LoanQuote(
        collateral_amount=collateral_amount,
        borrow_amount=borrow,
        fixed_interest=interest,
        total_debt=total_debt,
        initial_ltv=initial_ltv,
        liquidation_price_collateral=compute_liquidation_price_collateral(
            total_debt, collateral_amount, prices.debt_asset_price_usd, threshold
        ),
        liquidation_price_debt_asset=compute_liquidation_price_debt_asset(
            total_debt, collateral_amount, prices.collateral_price_usd, threshold
        ),
        risk_tier=classify_risk(initial_ltv, threshold),
        term_days=term_days,
        annual_rate_pct=rate,
    )


def liquidation_settlement(
    loan: Loan, prices: MarketPrices, liquidation_fee_pct: float
) -> LiquidationSettlement:
    """Estimate collateral seized and returned if ``loan`` is liquidated now.

    The penalty is charged on the debt in debt-asset units; the debt plus
    penalty is converted to collateral units at current prices and capped at
    the loan's collateral.
    """
    validate_market_prices(prices)

    penalty = loan.debt_amount * (liquidation_fee_pct / 100)
    to_recover_usd = (loan.debt_amount + penalty) * prices.debt_asset_price_usd
    seized = min(to_recover_usd / prices.collateral_price_usd, loan.collateral_amount)

    return LiquidationSettlement(
        total_debt=loan.debt_amount,
        penalty=penalty,
        collateral_seized=seized,
        collateral_returned=max(0.0, loan.collateral_amount - seized),
    )
