"""Data models — all frozen (immutable)."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum


class RiskTier(str, Enum):
    """Distance of a loan's LTV from its liquidation threshold."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class LoanStatus(str, Enum):
    ACTIVE = "active"
    LIQUIDATED = "liquidated"
    REPAID = "repaid"
    MATURED = "matured"


@dataclass(frozen=True)
class MarketPrices:
    """USD prices of the collateral and debt assets at one instant.

    No validation happens here: the risk engine accepts degenerate prices.
    Use ``loans.validate_market_prices`` at the feed boundary.
    """

    collateral_price_usd: float
    debt_asset_price_usd: float


@dataclass(frozen=True)
class Loan:
    """Static terms of a dual-asset loan.

    ``debt_amount`` is in debt-asset units and already includes accrued
    interest. ``opening_prices`` is kept for display and audit only; risk is
    always computed from current market prices.
    """

    collateral_amount: float
    debt_amount: float
    liquidation_threshold_pct: float
    loan_id: str = ""
    borrower: str = ""
    status: LoanStatus = LoanStatus.ACTIVE
    opening_prices: MarketPrices | None = None

    @property
    def is_active(self) -> bool:
        return self.status is LoanStatus.ACTIVE


@dataclass(frozen=True)
class RiskAssessment:
    """Risk of one loan against one price snapshot. Never cache across ticks."""

    current_ltv: float
    liquidation_price_collateral: float
    liquidation_price_debt_asset: float
    collateral_drop_pct_to_liquidation: float
    debt_asset_rise_pct_to_liquidation: float
    risk_tier: RiskTier

    @property
    def is_determinable(self) -> bool:
        """False when any numeric field is inf or nan (degenerate inputs)."""
        return all(
            math.isfinite(v)
            for v in (
                self.current_ltv,
                self.liquidation_price_collateral,
                self.liquidation_price_debt_asset,
                self.collateral_drop_pct_to_liquidation,
                self.debt_asset_rise_pct_to_liquidation,
            )
        )


@dataclass(frozen=True)
class LoanQuote:
    """Sizing of a prospective loan at creation-time prices."""

    collateral_amount: float
    borrow_amount: float
    fixed_interest: float
    total_debt: float
    initial_ltv: float
    liquidation_price_collateral: float
    liquidation_price_debt_asset: float
    risk_tier: RiskTier
    term_days: int
    annual_rate_pct: float


@dataclass(frozen=True)
class LiquidationSettlement:
    """Estimated outcome of liquidating a loan at given prices.

    ``total_debt`` and ``penalty`` are in debt-asset units; the collateral
    fields are in collateral-asset units.
    """

    total_debt: float
    penalty: float
    collateral_seized: float
    collateral_returned: float


@dataclass(frozen=True)
class PortfolioSummary:
    """Aggregated risk across active loans."""

    active_loans: int
    total_collateral: float
    total_debt: float
    collateral_value_usd: float
    debt_value_usd: float
    aggregate_ltv: float
    average_ltv: float
    tier_counts: dict[RiskTier, int] = field(default_factory=dict)
    at_risk_count: int = 0
    liquidation_eligible: tuple[str, ...] = ()


@dataclass(frozen=True)
class PriceScenario:
    """What-if percentage move applied to both prices of a snapshot."""

    name: str
    collateral_change_pct: float = 0.0
    debt_asset_change_pct: float = 0.0


@dataclass(frozen=True)
class ScenarioOutcome:
    """A loan re-assessed under one shocked price snapshot."""

    scenario: PriceScenario
    prices: MarketPrices
    assessment: RiskAssessment
    ltv_change: float
    liquidation_eligible: bool
