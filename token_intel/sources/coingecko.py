"""
CoinGecko market data (demo API).
"""
from typing import List, Optional

import httpx

from ..config import settings

COINGECKO_BASE = "https://api.coingecko.com/api/v3"
SEARCH_LIMIT = 5

# our chain ids -> CoinGecko asset platform ids
PLATFORMS = {
    "ethereum": "ethereum",
    "bnb": "binance-smart-chain",
    "polygon": "polygon-pos",
    "arbitrum": "arbitrum-one",
    "base": "base",
    "optimism": "optimistic-ethereum",
    "avalanche": "avalanche",
    "fantom": "fantom",
    "solana": "solana",
}


def _headers():
    h = {}
    if settings.COINGECKO_API_KEY:
        h["x-cg-demo-api-key"] = settings.COINGECKO_API_KEY
    return h


async def _get(path: str, params: dict | None = None):
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        r = await client.get(f"{COINGECKO_BASE}{path}", params=params, headers=_headers())
        r.raise_for_status()
        return r.json()


async def get_top_coins(limit: int = 100) -> List[dict]:
    params = {
        "vs_currency": "usd",
        "order": "market_cap_desc",
        "per_page": limit,
        "page": 1,
        "sparkline": "false",
        "price_change_percentage": "7d",
    }
    return await _get("/coins/markets", params) or []


async def get_coin_detail(coin_id: str) -> Optional[dict]:
    params = {
        "localization": "false",
        "tickers": "false",
        "market_data": "true",
        "community_data": "true",
        "developer_data": "true",
    }
    return await _get(f"/coins/{coin_id}", params)


async def search_coin(query: str) -> List[dict]:
    data = await _get("/search", {"query": query}) or {}
    return (data.get("coins") or [])[:SEARCH_LIMIT]


async def get_token_price_by_contract(chain: str, contract_address: str) -> Optional[float]:
    platform = PLATFORMS.get(chain)
    if not platform:
        return None
    data = await _get(f"/simple/token_price/{platform}",
                      {"contract_addresses": contract_address, "vs_currencies": "usd"}) or {}
    return (data.get(contract_address.lower()) or {}).get("usd")


async def get_trending_coins() -> List[dict]:
    data = await _get("/search/trending") or {}
    return [c["item"] for c in data.get("coins") or [] if c.get("item")]
