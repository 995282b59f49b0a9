"""Integration tests for the RiskService — full flow with mocked price feed."""
from __future__ import annotations

import logging
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from loan_risk.config import AppConfig
from loan_risk.interfaces.price_oracle import PriceFeedError
from loan_risk.models import MarketPrices, PriceScenario, RiskTier
from loan_risk.oracles import PythOracle, StaticOracle, build_oracle
from loan_risk.services import RiskService


def _oracle_returning(*snapshots: MarketPrices) -> AsyncMock:
    oracle = AsyncMock()
    oracle.fetch_market_prices.side_effect = list(snapshots)
    return oracle


class TestBuildOracle:
    def test_static_provider(self, sample_app_config: AppConfig) -> None:
        assert isinstance(build_oracle(sample_app_config), StaticOracle)

    def test_pyth_provider(self, sample_app_config: AppConfig) -> None:
        cfg = replace(
            sample_app_config,
            price_oracle=replace(sample_app_config.price_oracle, provider="pyth"),
        )
        oracle = build_oracle(cfg)
        assert isinstance(oracle, PythOracle)
        assert oracle.price_feeds == {"XPM": "0xaaa111", "XRP": "bbb222"}

    def test_static_oracle_rejects_bad_prices(self) -> None:
        with pytest.raises(ValueError):
            StaticOracle(MarketPrices(0.0, 3.0))


class TestEvaluate:
    @pytest.mark.asyncio
    async def test_assesses_active_loans_only(self, sample_app_config: AppConfig) -> None:
        service = RiskService(sample_app_config)
        prices, rows = await service.evaluate()

        assert prices == MarketPrices(0.02, 3.0)
        assert [loan.loan_id for loan, _ in rows] == ["loan-1", "loan-2", "loan-3"]
        tiers = {loan.loan_id: a.risk_tier for loan, a in rows}
        assert tiers == {
            "loan-1": RiskTier.MEDIUM,
            "loan-2": RiskTier.LOW,
            "loan-3": RiskTier.CRITICAL,
        }

    @pytest.mark.asyncio
    async def test_fresh_snapshot_every_call(self, sample_app_config: AppConfig) -> None:
        oracle = _oracle_returning(
            MarketPrices(0.02, 3.0),
            MarketPrices(0.02, 6.0),
        )
        service = RiskService(sample_app_config, oracle=oracle)

        _, first = await service.evaluate()
        _, second = await service.evaluate()

        assert oracle.fetch_market_prices.await_count == 2
        assert first[0][1].risk_tier is RiskTier.MEDIUM
        assert second[0][1].risk_tier is RiskTier.CRITICAL
        assert second[0][1].current_ltv == pytest.approx(100.0)

    @pytest.mark.asyncio
    async def test_logs_critical_loans(
        self, sample_app_config: AppConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        service = RiskService(sample_app_config)
        with caplog.at_level(logging.INFO, logger="loan_risk.services.risk_service"):
            await service.evaluate()

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "loan-3" in warnings[0].getMessage()

    @pytest.mark.asyncio
    async def test_feed_failure_propagates(self, sample_app_config: AppConfig) -> None:
        oracle = AsyncMock()
        oracle.fetch_market_prices.side_effect = PriceFeedError("down")
        service = RiskService(sample_app_config, oracle=oracle)

        with pytest.raises(PriceFeedError):
            await service.evaluate()


class TestPortfolioAndSizing:
    @pytest.mark.asyncio
    async def test_portfolio(self, sample_app_config: AppConfig) -> None:
        _, summary = await RiskService(sample_app_config).portfolio()
        assert summary.active_loans == 3
        assert summary.liquidation_eligible == ("loan-3",)

    @pytest.mark.asyncio
    async def test_quote_uses_lending_config(self, sample_app_config: AppConfig) -> None:
        _, quote = await RiskService(sample_app_config).quote(150_000, 40.0, 90)
        assert quote.borrow_amount == pytest.approx(400.0)
        assert quote.annual_rate_pct == 15.0

    @pytest.mark.asyncio
    async def test_settle(self, sample_app_config: AppConfig) -> None:
        loan, settlement = await RiskService(sample_app_config).settle("loan-1")
        assert loan.loan_id == "loan-1"
        assert settlement.penalty == pytest.approx(50.0)

    @pytest.mark.asyncio
    async def test_settle_unknown_loan(self, sample_app_config: AppConfig) -> None:
        with pytest.raises(ValueError, match="Unknown loan"):
            await RiskService(sample_app_config).settle("missing")

    @pytest.mark.asyncio
    async def test_settle_repaid_loan_rejected(self, sample_app_config: AppConfig) -> None:
        oracle = _oracle_returning(MarketPrices(0.02, 3.0))
        service = RiskService(sample_app_config, oracle=oracle)
        with pytest.raises(ValueError, match="Loan 'loan-4' is not active \\(repaid\\)"):
            await service.settle("loan-4")
        oracle.fetch_market_prices.assert_not_awaited()


class TestScenarios:
    @pytest.mark.asyncio
    async def test_runs_configured_scenarios(self, sample_app_config: AppConfig) -> None:
        cfg = replace(
            sample_app_config,
            scenarios=(
                PriceScenario("stable"),
                PriceScenario("crash", -30.0, 0.0),
            ),
        )
        prices, loan, baseline, outcomes = await RiskService(cfg).scenarios("loan-1")

        assert prices == MarketPrices(0.02, 3.0)
        assert loan.loan_id == "loan-1"
        assert baseline.current_ltv == pytest.approx(50.0)
        assert [o.scenario.name for o in outcomes] == ["stable", "crash"]
        assert [o.liquidation_eligible for o in outcomes] == [False, True]

    @pytest.mark.asyncio
    async def test_logs_liquidating_scenarios(
        self, sample_app_config: AppConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        cfg = replace(sample_app_config, scenarios=(PriceScenario("crash", -30.0, 0.0),))
        with caplog.at_level(logging.WARNING, logger="loan_risk.services.risk_service"):
            await RiskService(cfg).scenarios("loan-1")

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "'crash'" in warnings[0].getMessage()

    @pytest.mark.asyncio
    async def test_inactive_loan_rejected(self, sample_app_config: AppConfig) -> None:
        with pytest.raises(ValueError, match="not active"):
            await RiskService(sample_app_config).scenarios("loan-4")
