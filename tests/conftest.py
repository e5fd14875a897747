import os
import tempfile

# must be set before token_intel.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SNAPSHOT_DIR"] = tempfile.mkdtemp(prefix="token_intel_test_")
os.environ["TWITTER_BEARER_TOKEN"] = ""
os.environ["ETHERSCAN_API_KEY"] = "test-key"
os.environ["COINGECKO_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from token_intel.main import app  # noqa: E402
from token_intel.sources import coingecko, dexscreener, etherscan, solscan, twitter  # noqa: E402
from token_intel.storage import records  # noqa: E402
from token_intel.storage.db import SessionLocal, drop_db, init_db  # noqa: E402

SOL_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
SOL_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
EVM_CONTRACT = "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984"
EVM_WALLET = "0x47173B170C64d16393a52e6C480b3Ad8c302ba1e"


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture(autouse=True)
def fresh_db():
    drop_db()
    init_db()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def make_project(db):
    def _make(**kw):
        data = {"name": "Bonk", "symbol": "BONK", "chain": "solana", "contract_address": SOL_MINT}
        data.update(kw)
        return records.create_project(db, data)
    return _make


@pytest.fixture
def make_holder(db):
    def _make(project, **kw):
        data = {
            "project_id": project.id,
            "wallet_address": SOL_WALLET,
            "chain": project.chain,
            "balance": 1000.0,
            "percentage": 1.0,
            "first_seen": datetime.now(timezone.utc) - timedelta(days=60),
        }
        data.update(kw)
        return records.create_holder(db, data)
    return _make


# =============================================================================
# EXTERNAL SOURCES
# =============================================================================

@pytest.fixture
def sources(monkeypatch):
    """Every outbound lookup replaced by an AsyncMock returning an empty result."""
    m = SimpleNamespace(
        pairs_by_token=AsyncMock(return_value=[]),
        search_pairs=AsyncMock(return_value=[]),
        search_coin=AsyncMock(return_value=[]),
        coin_detail=AsyncMock(return_value=None),
        contract_price=AsyncMock(return_value=None),
        trending=AsyncMock(return_value=[]),
        top_coins=AsyncMock(return_value=[]),
        sentiment=AsyncMock(return_value=twitter.empty_sentiment()),
        evm_holders=AsyncMock(return_value=[]),
        evm_transfers=AsyncMock(return_value=[]),
        sol_holders=AsyncMock(return_value=[]),
        sol_meta=AsyncMock(return_value=None),
        sol_transfers=AsyncMock(return_value=[]),
    )
    monkeypatch.setattr(dexscreener, "get_pairs_by_token", m.pairs_by_token)
    monkeypatch.setattr(dexscreener, "search_pairs", m.search_pairs)
    monkeypatch.setattr(coingecko, "search_coin", m.search_coin)
    monkeypatch.setattr(coingecko, "get_coin_detail", m.coin_detail)
    monkeypatch.setattr(coingecko, "get_token_price_by_contract", m.contract_price)
    monkeypatch.setattr(coingecko, "get_trending_coins", m.trending)
    monkeypatch.setattr(coingecko, "get_top_coins", m.top_coins)
    monkeypatch.setattr(twitter, "analyze_social_sentiment", m.sentiment)
    monkeypatch.setattr(etherscan, "get_token_holders", m.evm_holders)
    monkeypatch.setattr(etherscan, "get_token_transfers", m.evm_transfers)
    monkeypatch.setattr(solscan, "get_token_holders", m.sol_holders)
    monkeypatch.setattr(solscan, "get_token_meta", m.sol_meta)
    monkeypatch.setattr(solscan, "get_token_transfers", m.sol_transfers)
    return m


def make_pair(*, liquidity=250_000.0, volume=100_000.0, buys=60, sells=40, price="1.25", url="https://dex/pair"):
    return {
        "url": url,
        "priceUsd": price,
        "baseToken": {"name": "Bonk", "symbol": "BONK"},
        "txns": {"h24": {"buys": buys, "sells": sells}},
        "volume": {"h24": volume},
        "liquidity": {"usd": liquidity},
        "priceChange": {"h24": -3.5},
        "info": {
            "websites": [{"url": "https://bonkcoin.com"}],
            "socials": [{"type": "twitter", "url": "https://twitter.com/bonk_inu"},
                        {"type": "telegram", "url": "https://t.me/bonk"}],
        },
    }
