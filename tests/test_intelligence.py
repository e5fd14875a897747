"""
Holder / project analyses, the manipulation report and trending discovery,
with every external source replaced by AsyncMocks.

Run: python -m pytest tests/test_intelligence.py -v
"""
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from conftest import EVM_CONTRACT, EVM_WALLET, SOL_MINT, SOL_WALLET, make_pair
from token_intel.errors import NotFoundError
from token_intel.risk_engine import intelligence
from token_intel.storage.models import AiAnalysis


def analyses(db, entity_type):
    return db.query(AiAnalysis).filter(AiAnalysis.entity_type == entity_type).all()


# =============================================================================
# HOLDERS
# =============================================================================

class TestAnalyzeHolder:

    @pytest.mark.asyncio
    async def test_missing_holder(self, db, sources):
        with pytest.raises(NotFoundError):
            await intelligence.analyze_holder(db, "nope")
        assert analyses(db, "holder") == []

    @pytest.mark.asyncio
    async def test_solana_holder_skips_etherscan(self, db, sources, make_project, make_holder):
        h = make_holder(make_project(), percentage=26.7, balance=25_000_000_000)
        res = await intelligence.analyze_holder(db, h.id)

        sources.evm_transfers.assert_not_awaited()
        sources.sol_transfers.assert_awaited_once_with(SOL_MINT)
        assert res.risk_level == "critical"
        assert res.is_insider and res.is_whale
        assert res.recent_transactions == 0
        assert res.ai_notes.endswith("Immediate investigation. Strong insider trading signals detected.")

        rows = analyses(db, "holder")
        assert len(rows) == 1
        assert rows[0].entity_id == h.id
        assert rows[0].analysis_type == "holder_risk"
        assert rows[0].confidence == res.confidence
        payload = json.loads(rows[0].result)
        assert set(payload) == {"riskLevel", "riskNumeric", "flags", "isInsider", "isWhale", "recentTransactions"}
        assert payload["riskNumeric"] == res.risk_numeric

    @pytest.mark.asyncio
    async def test_solana_holder_uses_mint_transfers(self, db, sources, make_project, make_holder):
        h = make_holder(make_project())
        inbound = {"from_address": "seller", "to_address": SOL_WALLET}
        sources.sol_transfers.return_value = [inbound] * 9 + [
            {"from_address": SOL_WALLET, "to_address": "buyer"},
            {"from_address": SOL_WALLET, "to_address": "buyer"},
            {"from_address": "x", "to_address": "y"},
        ]

        res = await intelligence.analyze_holder(db, h.id)

        # the unrelated x -> y transfer is not counted
        assert res.recent_transactions == 11
        assert "Rapid accumulation: 9 inbound transfers recently" in res.flags

    @pytest.mark.asyncio
    async def test_evm_holder_uses_transfer_history(self, db, sources, make_project, make_holder):
        p = make_project(name="Uniswap", symbol="UNI", chain="ethereum", contract_address=EVM_CONTRACT)
        h = make_holder(p, wallet_address=EVM_WALLET)
        sources.evm_transfers.return_value = [{"to": EVM_WALLET.lower()}] * 9 + [{"to": "0xother"}] * 3

        res = await intelligence.analyze_holder(db, h.id)

        sources.evm_transfers.assert_awaited_once_with("ethereum", EVM_CONTRACT, EVM_WALLET)
        assert res.recent_transactions == 12
        assert any(f.startswith("Rapid accumulation") for f in res.flags)

    @pytest.mark.asyncio
    async def test_failing_explorer_counts_as_no_history(self, db, sources, make_project, make_holder):
        p = make_project(name="Uniswap", symbol="UNI", chain="ethereum", contract_address=EVM_CONTRACT)
        h = make_holder(p, wallet_address=EVM_WALLET)
        sources.evm_transfers.side_effect = httpx.ConnectError("down")

        res = await intelligence.analyze_holder(db, h.id)

        assert res.recent_transactions == 0
        assert res.risk_level == "low"
        assert len(analyses(db, "holder")) == 1

    @pytest.mark.asyncio
    async def test_recent_holder(self, db, sources, make_project, make_holder):
        h = make_holder(make_project(), first_seen=datetime.now(timezone.utc) - timedelta(days=1))
        res = await intelligence.analyze_holder(db, h.id)
        assert res.flags == ["New holder: first seen within last 7 days"]

    @pytest.mark.asyncio
    async def test_holder_row_is_not_modified(self, db, sources, make_project, make_holder):
        h = make_holder(make_project(), percentage=30.0)
        await intelligence.analyze_holder(db, h.id)
        db.refresh(h)
        assert h.risk_score is None
        assert h.ai_notes is None


# =============================================================================
# PROJECTS
# =============================================================================

class TestAnalyzeProject:

    @pytest.mark.asyncio
    async def test_missing_project(self, db, sources):
        with pytest.raises(NotFoundError):
            await intelligence.analyze_project(db, "nope")

    @pytest.mark.asyncio
    async def test_empty_project_still_scores(self, db, sources, make_project):
        p = make_project(contract_address="")
        res = await intelligence.analyze_project(db, p.id)

        sources.search_pairs.assert_awaited_once_with("BONK")
        sources.pairs_by_token.assert_not_awaited()
        assert res.holder_count == 0
        assert res.risk_score == 20
        assert res.overall_risk == "medium"
        assert res.flags == ["Very few tracked holders: 0"]
        assert res.price_usd is None and res.dex_url is None

        rows = analyses(db, "project")
        assert len(rows) == 1
        payload = json.loads(rows[0].result)
        assert payload["holderCount"] == 0
        assert payload["overallRisk"] == "medium"
        assert rows[0].confidence == 55

    @pytest.mark.asyncio
    async def test_market_data_is_merged(self, db, sources, make_project, make_holder):
        p = make_project()
        make_holder(p, wallet_address="a", balance=900.0, percentage=9.0)
        make_holder(p, wallet_address="b", balance=100.0, percentage=1.0)
        sources.pairs_by_token.return_value = [
            make_pair(liquidity=1_000, url="thin"),
            make_pair(liquidity=500_000, url="deep", buys=90, sells=10),
        ]
        sources.search_coin.return_value = [{"id": "bonk"}]
        sources.coin_detail.return_value = {
            "market_data": {"current_price": {"usd": 0.00002}, "market_cap": {"usd": 1_500_000_000}},
            "community_data": {"twitter_followers": 700_000},
            "links": {"twitter_screen_name": "bonk_inu", "homepage": ["", "https://bonk.example"],
                      "telegram_channel_identifier": "bonkchat"},
        }

        res = await intelligence.analyze_project(db, p.id)

        sources.pairs_by_token.assert_awaited_once_with(SOL_MINT)
        sources.coin_detail.assert_awaited_once_with("bonk")
        # solana projects are never priced by contract
        sources.contract_price.assert_not_awaited()
        assert res.dex_url == "deep"
        assert res.buy_pressure == 90
        assert res.price_usd == 0.00002
        assert res.market_cap == 1_500_000_000
        assert res.twitter_followers == 700_000
        assert res.twitter == "https://twitter.com/bonk_inu"
        assert res.website == "https://bonkcoin.com"
        assert res.telegram == "https://t.me/bonk"
        assert [t.address for t in res.top_holders] == ["a", "b"]
        assert res.concentration == pytest.approx(100.0)
        assert "Strong buy pressure: 90% buys" in res.flags

    @pytest.mark.asyncio
    async def test_price_falls_back_to_pair(self, db, sources, make_project):
        p = make_project(name="Uniswap", symbol="UNI", chain="ethereum", contract_address=EVM_CONTRACT)
        sources.pairs_by_token.return_value = [make_pair(price="7.42")]
        res = await intelligence.analyze_project(db, p.id)
        sources.contract_price.assert_awaited_once_with("ethereum", EVM_CONTRACT)
        assert res.price_usd == 7.42

    @pytest.mark.asyncio
    async def test_contract_price_wins(self, db, sources, make_project):
        p = make_project(name="Uniswap", symbol="UNI", chain="ethereum", contract_address=EVM_CONTRACT)
        sources.pairs_by_token.return_value = [make_pair(price="7.42")]
        sources.contract_price.return_value = 7.5
        res = await intelligence.analyze_project(db, p.id)
        assert res.price_usd == 7.5

    @pytest.mark.asyncio
    async def test_price_change_falls_back_to_coingecko(self, db, sources, make_project):
        p = make_project()
        sources.search_coin.return_value = [{"id": "bonk"}]
        sources.coin_detail.return_value = {"market_data": {"price_change_percentage_24h": -7.5}}
        res = await intelligence.analyze_project(db, p.id)
        assert res.dex_url is None
        assert res.price_change_24h == -7.5

    @pytest.mark.asyncio
    async def test_price_change_prefers_pair(self, db, sources, make_project):
        p = make_project()
        sources.pairs_by_token.return_value = [make_pair()]
        sources.search_coin.return_value = [{"id": "bonk"}]
        sources.coin_detail.return_value = {"market_data": {"price_change_percentage_24h": -7.5}}
        res = await intelligence.analyze_project(db, p.id)
        assert res.price_change_24h == -3.5
    @pytest.mark.asyncio
    async def test_onchain_holder_hint(self, db, sources, make_project, make_holder):
        p = make_project(name="Uniswap", symbol="UNI", chain="ethereum", contract_address=EVM_CONTRACT)
        make_holder(p, wallet_address=EVM_WALLET)
        sources.evm_holders.return_value = [{"TokenHolderAddress": f"0x{i}"} for i in range(50)]

        res = await intelligence.analyze_project(db, p.id)

        assert res.flags[0] == "On-chain: 50 holders found (1 tracked locally)"
        # few holders 20 + a lone holder is 100% of the top 10, 30
        assert res.risk_score == 50

    @pytest.mark.asyncio
    async def test_every_source_down(self, db, sources, make_project, make_holder):
        p = make_project(name="Uniswap", symbol="UNI", chain="ethereum", contract_address=EVM_CONTRACT)
        make_holder(p, wallet_address=EVM_WALLET)
        boom = httpx.ConnectError("down")
        for m in (sources.pairs_by_token, sources.search_coin, sources.sentiment,
                  sources.contract_price, sources.evm_holders):
            m.side_effect = boom

        res = await intelligence.analyze_project(db, p.id)

        assert res.flags == ["Very few tracked holders: 1", "Top 10 holders control 100.0% of supply"]
        assert res.twitter_mentions == 0
        assert len(analyses(db, "project")) == 1

    @pytest.mark.asyncio
    async def test_suspicious_market(self, db, sources, make_project):
        p = make_project()
        sources.pairs_by_token.return_value = [make_pair(volume=2_000_000, liquidity=50_000, buys=5, sells=95)]
        sentiment = dict(sources.sentiment.return_value, is_suspicious_activity=True, mention_count=40)
        sources.sentiment.return_value = sentiment

        res = await intelligence.analyze_project(db, p.id)

        # few holders 20 + suspicious volume 25 + bots 15 + heavy selling 20
        assert res.risk_score == 80
        assert res.overall_risk == "critical"
        assert res.is_suspicious_volume is True
        assert res.twitter_mentions == 40


# =============================================================================
# MANIPULATION REPORT
# =============================================================================

class TestManipulationReport:

    @pytest.mark.asyncio
    async def test_needs_contract_or_symbol(self, sources):
        with pytest.raises(ValueError):
            await intelligence.build_manipulation_report(contract="  ", chain="solana", symbol="")

    @pytest.mark.asyncio
    async def test_solana_contract(self, sources):
        sources.sol_holders.return_value = [
            {"owner": "whale", "amount": 800},
            {"owner": "fish", "amount": 200},
        ]
        sources.pairs_by_token.return_value = [make_pair(buys=50, sells=50)]

        rep = await intelligence.build_manipulation_report(contract=SOL_MINT, chain="solana")

        sources.sol_holders.assert_awaited_once_with(SOL_MINT)
        sources.evm_holders.assert_not_awaited()
        assert rep.onchain.holder_count == 2
        assert rep.onchain.top_holder_pct == pytest.approx(80.0)
        assert rep.onchain.top10_pct == pytest.approx(100.0)
        assert rep.onchain.whale_count == 2
        assert rep.onchain.wash_trading_pct == 60
        # extreme concentration 35 + wash trading 25
        assert rep.risk_score == 60
        assert rep.risk_level == "high"
        assert rep.symbol == "BONK"
        assert rep.confidence == 62
        assert rep.recommendation.startswith("Extreme caution")

    @pytest.mark.asyncio
    async def test_evm_contract(self, sources):
        sources.evm_holders.return_value = [
            {"TokenHolderAddress": f"0x{i}", "TokenHolderQuantity": "100"} for i in range(20)
        ]
        rep = await intelligence.build_manipulation_report(contract=EVM_CONTRACT, chain="ethereum", symbol="UNI")

        sources.evm_holders.assert_awaited_once_with("ethereum", EVM_CONTRACT)
        assert rep.onchain.top10_pct == pytest.approx(50.0)
        assert rep.onchain.whale_count == 0
        assert rep.risk_score == 0
        assert rep.risk_level == "low"

    @pytest.mark.asyncio
    async def test_symbol_only(self, sources):
        sources.search_pairs.return_value = [make_pair(buys=95, sells=5)]
        rep = await intelligence.build_manipulation_report(symbol="BONK")

        sources.sol_holders.assert_not_awaited()
        sources.pairs_by_token.assert_not_awaited()
        sources.search_pairs.assert_awaited_once_with("BONK")
        assert rep.onchain.buy_pressure == 95
        assert rep.flags == ["95% buy pressure - possible coordinated pump"]
        assert rep.price_usd == 1.25

    @pytest.mark.asyncio
    async def test_degrades_when_sources_fail(self, sources):
        sources.sol_holders.side_effect = httpx.ReadTimeout("slow")
        sources.pairs_by_token.side_effect = httpx.ReadTimeout("slow")
        rep = await intelligence.build_manipulation_report(contract=SOL_MINT, chain="solana", symbol="BONK")
        assert rep.onchain.holder_count == 0
        assert rep.onchain.buy_pressure is None
        assert rep.risk_level == "low"

    @pytest.mark.asyncio
    async def test_malformed_solana_mint_skips_solscan(self, sources):
        rep = await intelligence.build_manipulation_report(contract="not-a-mint", chain="solana", symbol="BONK")
        sources.sol_holders.assert_not_awaited()
        sources.pairs_by_token.assert_awaited_once_with("not-a-mint")
        assert rep.onchain.holder_count == 0


# =============================================================================
# TRENDING
# =============================================================================

class TestTrending:

    @pytest.mark.asyncio
    async def test_maps_coingecko_items(self, sources):
        sources.trending.return_value = [
            {"id": "pepe", "name": "Pepe", "symbol": "pepe", "market_cap_rank": 30,
             "data": {"price_change_percentage_24h": {"usd": 12.5}}},
            {"id": "wif", "name": "dogwifhat", "symbol": "wif", "market_cap_rank": None},
        ]
        out = await intelligence.discover_trending_projects()
        assert [(t.symbol, t.rank, t.price_change_24h) for t in out] == [("PEPE", 30, 12.5), ("WIF", None, 0.0)]

    @pytest.mark.asyncio
    async def test_unavailable(self, sources):
        sources.trending.side_effect = httpx.ConnectError("down")
        assert await intelligence.discover_trending_projects() == []
