"""
DexScreener client: DEX pairs, liquidity, volume and social links for tokens
on every chain. Free API, no key.
"""
from typing import List, Optional

import httpx

from ..config import settings
from ..risk_engine.weights import W
from ..utils.numbers import round_half_up, to_float

DEXSCREENER_BASE = "https://api.dexscreener.com"
SEARCH_LIMIT = 10


async def _get(path: str, params: dict | None = None) -> dict:
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        r = await client.get(f"{DEXSCREENER_BASE}{path}", params=params)
        r.raise_for_status()
        return r.json() or {}


async def get_pairs_by_token(contract_address: str) -> List[dict]:
    data = await _get(f"/latest/dex/tokens/{contract_address}")
    return data.get("pairs") or []


async def search_pairs(query: str) -> List[dict]:
    data = await _get("/latest/dex/search", params={"q": query})
    return (data.get("pairs") or [])[:SEARCH_LIMIT]


def best_liquidity_pair(pairs: List[dict]) -> Optional[dict]:
    """Pair with the highest USD liquidity; the first one wins a tie."""
    if not pairs:
        return None
    return max(pairs, key=lambda p: to_float((p.get("liquidity") or {}).get("usd")))


def extract_social_links(pair: dict) -> dict:
    info = pair.get("info") or {}
    links = {}
    websites = info.get("websites") or []
    if websites and websites[0].get("url"):
        links["website"] = websites[0]["url"]
    for s in info.get("socials") or []:
        kind = (s.get("type") or "").lower()
        if kind in ("twitter", "telegram") and s.get("url"):
            links[kind] = s["url"]
    return links


def get_trading_activity(pair: dict) -> dict:
    h24 = ((pair.get("txns") or {}).get("h24")) or {}
    buys = int(h24.get("buys") or 0)
    sells = int(h24.get("sells") or 0)
    total = buys + sells
    buy_pressure = round_half_up(buys / total * 100) if total > 0 else 50

    volume = to_float((pair.get("volume") or {}).get("h24"))
    liquidity = to_float((pair.get("liquidity") or {}).get("usd"))

    return {
        "buys24h": buys,
        "sells24h": sells,
        "volume24h": volume,
        "buy_pressure": buy_pressure,
        "price_change24h": to_float((pair.get("priceChange") or {}).get("h24")),
        "liquidity": liquidity,
        "is_high_activity": total > W.HIGH_ACTIVITY_TXNS,
        # pairs without reported liquidity are not flagged
        "is_suspicious_volume": volume > W.SUSPICIOUS_VOLUME_USD and 0 < liquidity < W.LOW_LIQUIDITY_USD,
    }
