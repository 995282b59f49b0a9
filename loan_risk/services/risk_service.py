"""Risk evaluation orchestration — one fresh price snapshot per call."""
from __future__ import annotations

import logging

from ..config import AppConfig
from ..engine import assess_risk
from ..interfaces.price_oracle import PriceOracle
from ..models import (
    LiquidationSettlement,
    Loan,
    LoanQuote,
    MarketPrices,
    PortfolioSummary,
    RiskAssessment,
    RiskTier,
    ScenarioOutcome,
)
from ..oracles import build_oracle
from ..portfolio import effective_tier, summarize_portfolio
from ..scenarios import assess_scenarios
from ..sizing import liquidation_settlement, quote_loan

logger = logging.getLogger(__name__)


class RiskService:
    """Evaluates configured loans against the configured price oracle.

    Assessments are derived on every call and never cached: an assessment
    made against an older snapshot is unsound for liquidation decisions.
    """

    def __init__(self, config: AppConfig, oracle: PriceOracle | None = None) -> None:
        self._config = config
        self._oracle: PriceOracle = oracle if oracle is not None else build_oracle(config)

    @property
    def active_loans(self) -> list[Loan]:
        return [loan for loan in self._config.loans if loan.is_active]

    def get_loan(self, loan_id: str) -> Loan:
        for loan in self._config.loans:
            if loan.loan_id == loan_id:
                return loan
        raise ValueError(f"Unknown loan '{loan_id}'")

    def get_active_loan(self, loan_id: str) -> Loan:
        loan = self.get_loan(loan_id)
        if not loan.is_active:
            raise ValueError(f"Loan '{loan_id}' is not active ({loan.status.value})")
        return loan

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    async def evaluate(self) -> tuple[MarketPrices, list[tuple[Loan, RiskAssessment]]]:
        """Assess every active loan at a freshly fetched snapshot."""
        prices = await self._oracle.fetch_market_prices()

        rows: list[tuple[Loan, RiskAssessment]] = []
        for loan in self.active_loans:
            assessment = assess_risk(loan, prices)
            tier = effective_tier(loan, assessment)
            logger.info(
                "Loan %s · LTV: %.2f%%  threshold: %.2f%%  tier: %s",
                loan.loan_id or "<unnamed>",
                assessment.current_ltv,
                loan.liquidation_threshold_pct,
                tier.value,
            )
            if tier is RiskTier.CRITICAL:
                logger.warning(
                    "Loan %s is at or past liquidation (LTV %.2f%% >= %.2f%%)",
                    loan.loan_id or "<unnamed>",
                    assessment.current_ltv,
                    loan.liquidation_threshold_pct,
                )
            rows.append((loan, assessment))
        return prices, rows

    async def portfolio(self) -> tuple[MarketPrices, PortfolioSummary]:
        prices = await self._oracle.fetch_market_prices()
        summary = summarize_portfolio(self._config.loans, prices)
        logger.info(
            "Portfolio · %d active loans · aggregate LTV %.2f%% · %d at risk",
            summary.active_loans,
            summary.aggregate_ltv,
            summary.at_risk_count,
        )
        return prices, summary

    async def quote(
        self,
        collateral_amount: float,
        target_ltv_pct: float,
        term_days: int,
    ) -> tuple[MarketPrices, LoanQuote]:
        prices = await self._oracle.fetch_market_prices()
        quote = quote_loan(
            collateral_amount,
            prices,
            target_ltv_pct=target_ltv_pct,
            term_days=term_days,
            lending=self._config.lending,
        )
        return prices, quote

    async def settle(self, loan_id: str) -> tuple[Loan, LiquidationSettlement]:
        loan = self.get_active_loan(loan_id)
        prices = await self._oracle.fetch_market_prices()
        settlement = liquidation_settlement(
            loan, prices, self._config.lending.liquidation_fee
        )
        return loan, settlement

    async def scenarios(
        self, loan_id: str
    ) -> tuple[MarketPrices, Loan, RiskAssessment, list[ScenarioOutcome]]:
        """Re-assess one active loan under each configured price scenario."""
        loan = self.get_active_loan(loan_id)
        prices = await self._oracle.fetch_market_prices()
        baseline = assess_risk(loan, prices)
        outcomes = assess_scenarios(loan, prices, self._config.scenarios)
        for outcome in outcomes:
            if outcome.liquidation_eligible:
                logger.warning(
                    "Loan %s would be liquidated under '%s' (LTV %.2f%%)",
                    loan.loan_id,
                    outcome.scenario.name,
                    outcome.assessment.current_ltv,
                )
        return prices, loan, baseline, outcomes
