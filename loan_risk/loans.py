"""Parsing and validation of raw loan records — no I/O.

Loans arrive from storage as plain dicts (YAML, JSON, a database row). They
are validated here, once, so the risk engine only ever sees typed ``Loan``
records.
"""
from __future__ import annotations

import math
from typing import Any, Iterable

from .models import Loan, LoanStatus, MarketPrices


def _as_float(value: Any, field_name: str, loan_ref: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(
            f"Loan '{loan_ref}' has non-numeric {field_name}: {value!r}"
        ) from None
    if not math.isfinite(number):
        raise ValueError(f"Loan '{loan_ref}' has non-finite {field_name}")
    return number


def _non_negative(value: Any, field_name: str, loan_ref: str) -> float:
    number = _as_float(value, field_name, loan_ref)
    if number < 0:
        raise ValueError(f"Loan '{loan_ref}' has negative {field_name}")
    return number


def validate_market_prices(prices: MarketPrices) -> MarketPrices:
    """Return ``prices`` unchanged if both are finite and positive."""
    for name in ("collateral_price_usd", "debt_asset_price_usd"):
        value = getattr(prices, name)
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Invalid {name}: {value!r} (must be finite and > 0)")
    return prices


def _parse_opening_prices(raw: dict[str, Any] | None, loan_ref: str) -> MarketPrices | None:
    if not raw:
        return None
    prices = MarketPrices(
        collateral_price_usd=_as_float(
            raw.get("collateral_price_usd"), "opening collateral price", loan_ref
        ),
        debt_asset_price_usd=_as_float(
            raw.get("debt_asset_price_usd"), "opening debt asset price", loan_ref
        ),
    )
    try:
        return validate_market_prices(prices)
    except ValueError as e:
        raise ValueError(f"Loan '{loan_ref}': {e}") from None


def parse_loan(
    raw: dict[str, Any], default_threshold_pct: float | None = None
) -> Loan:
    """Build a validated ``Loan`` from a raw record.

    Debt is either given directly as ``debt_amount`` or as
    ``borrowed_amount`` plus ``accrued_interest``, which are summed.

    Args:
        raw: Storage record.
        default_threshold_pct: Used when the record has no
            ``liquidation_threshold``.
    """
    loan_id = str(raw.get("id", ""))
    loan_ref = loan_id or "<unnamed>"

    collateral = _non_negative(raw.get("collateral_amount"), "collateral_amount", loan_ref)

    if "debt_amount" in raw:
        debt = _non_negative(raw["debt_amount"], "debt_amount", loan_ref)
    else:
        borrowed = _non_negative(raw.get("borrowed_amount"), "borrowed_amount", loan_ref)
        interest = _non_negative(
            raw.get("accrued_interest", 0.0), "accrued_interest", loan_ref
        )
        debt = borrowed + interest

    threshold_raw = raw.get("liquidation_threshold", default_threshold_pct)
    if threshold_raw is None:
        raise ValueError(f"Loan '{loan_ref}' has no liquidation_threshold")
    threshold = _as_float(threshold_raw, "liquidation_threshold", loan_ref)
    if not 0 < threshold <= 100:
        raise ValueError(
            f"Loan '{loan_ref}' liquidation_threshold {threshold} outside (0, 100]"
        )

    status_raw = str(raw.get("status", LoanStatus.ACTIVE.value)).lower()
    try:
        status = LoanStatus(status_raw)
    except ValueError:
        raise ValueError(f"Loan '{loan_ref}' has unknown status '{status_raw}'") from None

    return Loan(
        collateral_amount=collateral,
        debt_amount=debt,
        liquidation_threshold_pct=threshold,
        loan_id=loan_id,
        borrower=str(raw.get("borrower", "")),
        status=status,
        opening_prices=_parse_opening_prices(raw.get("opening_prices"), loan_ref),
    )


def parse_loans(
    raw_loans: Iterable[dict[str, Any]], default_threshold_pct: float | None = None
) -> tuple[Loan, ...]:
    """Parse many records; loan ids must be unique when present."""
    loans: list[Loan] = []
    seen: set[str] = set()
    for raw in raw_loans:
        loan = parse_loan(raw, default_threshold_pct)
        if loan.loan_id:
            if loan.loan_id in seen:
                raise ValueError(f"Duplicate loan id '{loan.loan_id}'")
            seen.add(loan.loan_id)
        loans.append(loan)
    return tuple(loans)
