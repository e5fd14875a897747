"""
Risk intelligence: loads records, fans out to the external sources and
hands the merged metrics to the scoring functions in ``core``.

External lookups degrade: a failing source is logged and replaced by its
empty default so scoring proceeds with fewer signals. Only a missing
primary record (holder, project) aborts an analysis.
"""
import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Awaitable, List, Optional

from sqlalchemy.orm import Session

from ..sources import coingecko, dexscreener, etherscan, solscan, twitter
from ..storage import records
from ..storage.models import AiAnalysis, enum_value
from ..utils.address import is_solana_address, short_address
from ..utils.logger import LogContext, setup_logger
from ..utils.numbers import to_float
from . import core
from .results import (
    HolderIntelligence, ManipulationReport, OnChainMetrics, ProjectIntelligence,
    SocialMetrics, TopHolder, TrendingProject,
)
from .weights import W

logger = setup_logger(__name__)

DEFAULT_CHAIN = "solana"


async def _safe(label: str, aw: Awaitable, default: Any):
    try:
        return await aw
    except Exception as e:
        logger.warning(f"{label} unavailable, continuing without it: {e!r}")
        return default


async def _skip(default: Any = None):
    return default


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _record_analysis(db: Session, entity_type: str, entity_id: str, analysis_type: str,
                     result: dict, confidence: int) -> AiAnalysis:
    row = AiAnalysis(
        entity_type=entity_type,
        entity_id=entity_id,
        analysis_type=analysis_type,
        result=json.dumps(result),
        confidence=confidence,
    )
    db.add(row)
    db.commit()
    return row


# ------------------------------------------------------------------ holders

def _solana_wallet_transfers(raw: List[dict], wallet: str) -> List[dict]:
    """Mint-wide Solscan transfers narrowed to one wallet, as ``from``/``to`` rows."""
    out = []
    for tx in raw or []:
        src, dst = tx.get("from_address") or "", tx.get("to_address") or ""
        if wallet in (src, dst):
            out.append({"from": src, "to": dst})
    return out


async def analyze_holder(db: Session, holder_id: str, now: Optional[datetime] = None) -> HolderIntelligence:
    holder = records.get_holder(db, holder_id)
    project = holder.project
    chain = enum_value(holder.chain) or (enum_value(project.chain) if project else None) or DEFAULT_CHAIN
    contract = project.contract_address if project else ""

    with LogContext(logger, f"holder analysis {short_address(holder.wallet_address)} on {chain}"):
        transfers = None
        if contract and etherscan.is_evm_chain(chain):
            transfers = await _safe(
                f"{chain} transfers for {short_address(holder.wallet_address)}",
                etherscan.get_token_transfers(chain, contract, holder.wallet_address),
                [],
            )
        elif contract and chain == "solana":
            raw = await _safe(f"solana transfers for {short_address(contract)}", solscan.get_token_transfers(contract), [])
            transfers = _solana_wallet_transfers(raw, holder.wallet_address)

        res = core.score_holder(
            wallet_address=holder.wallet_address,
            chain=chain,
            balance=holder.balance,
            percentage=holder.percentage,
            first_seen=holder.first_seen,
            transfers=transfers,
            now=now,
        )

        _record_analysis(db, "holder", holder.id, "holder_risk", {
            "riskLevel": res["risk_level"],
            "riskNumeric": res["risk_numeric"],
            "flags": res["flags"],
            "isInsider": res["is_insider"],
            "isWhale": res["is_whale"],
            "recentTransactions": res["recent_transactions"],
        }, res["confidence"])

    return HolderIntelligence(
        holder_id=holder.id,
        wallet_address=holder.wallet_address,
        chain=chain,
        balance=holder.balance,
        percentage=holder.percentage,
        first_seen=holder.first_seen.isoformat(),
        recent_transactions=res["recent_transactions"],
        is_whale=res["is_whale"],
        is_insider=res["is_insider"],
        risk_level=res["risk_level"],
        risk_numeric=res["risk_numeric"],
        confidence=res["confidence"],
        flags=res["flags"],
        recommendation=res["recommendation"],
        ai_notes=core.holder_notes(res["flags"], res["recommendation"]),
    )


# ------------------------------------------------------------------ projects

def _gecko_usd(detail: Optional[dict], key: str) -> Optional[float]:
    v = (((detail or {}).get("market_data") or {}).get(key) or {}).get("usd")
    return to_float(v) if v is not None else None


def _gecko_change(detail: Optional[dict]) -> Optional[float]:
    return to_float(((detail or {}).get("market_data") or {}).get("price_change_percentage_24h"), None)


def _gecko_links(detail: Optional[dict]) -> dict:
    return (detail or {}).get("links") or {}


async def analyze_project(db: Session, project_id: str) -> ProjectIntelligence:
    project = records.get_project(db, project_id)
    chain = enum_value(project.chain) or DEFAULT_CHAIN
    contract = project.contract_address or ""
    symbol, name = project.symbol, project.name

    with LogContext(logger, f"project analysis {symbol} on {chain}"):
        holders = records.holders_by_balance(db, project.id)

        pairs_call = dexscreener.get_pairs_by_token(contract) if contract else dexscreener.search_pairs(symbol)
        pairs, gecko_hits, sentiment = await asyncio.gather(
            _safe("DexScreener pairs", pairs_call, []),
            _safe("CoinGecko search", coingecko.search_coin(symbol), []),
            _safe("social sentiment", twitter.analyze_social_sentiment(symbol, name), twitter.empty_sentiment()),
        )

        best = dexscreener.best_liquidity_pair(pairs)
        trading = dexscreener.get_trading_activity(best) if best else None
        links = dexscreener.extract_social_links(best) if best else {}

        gecko_id = gecko_hits[0].get("id") if gecko_hits else None
        want_onchain = bool(contract) and etherscan.is_evm_chain(chain) and len(holders) < W.PROJECT_FEW_HOLDERS
        detail, contract_price, onchain = await asyncio.gather(
            _safe("CoinGecko detail", coingecko.get_coin_detail(gecko_id), None) if gecko_id else _skip(),
            _safe("contract price", coingecko.get_token_price_by_contract(chain, contract), None)
            if contract and chain != "solana" else _skip(),
            _safe("on-chain holders", etherscan.get_token_holders(chain, contract), None)
            if want_onchain else _skip(),
        )

        price = contract_price or _gecko_usd(detail, "current_price") or (to_float(best.get("priceUsd")) if best else None) or None

        dist = core.holder_distribution([
            {"address": h.wallet_address, "balance": h.balance, "percentage": h.percentage} for h in holders
        ])
        res = core.score_project(
            holder_count=dist["holder_count"],
            whale_count=dist["whale_count"],
            concentration=dist["concentration"],
            trading=trading,
            sentiment=sentiment,
            onchain_holder_count=len(onchain) if onchain is not None else None,
        )

        _record_analysis(db, "project", project.id, "project_risk", {
            "overallRisk": res["overall_risk"],
            "riskScore": res["risk_score"],
            "flags": res["flags"],
            "holderCount": dist["holder_count"],
            "whaleCount": dist["whale_count"],
            "concentration": dist["concentration"],
        }, res["confidence"])

    gl = _gecko_links(detail)
    handle = gl.get("twitter_screen_name") or (links["twitter"].rstrip("/").rsplit("/", 1)[-1] if links.get("twitter") else None)
    homepage = next((u for u in gl.get("homepage") or [] if u), None)
    tg = gl.get("telegram_channel_identifier")

    return ProjectIntelligence(
        project_id=project.id,
        name=name,
        symbol=symbol,
        chain=chain,
        contract_address=contract,
        price_usd=price,
        price_change_24h=trading["price_change24h"] if trading else _gecko_change(detail),
        market_cap=_gecko_usd(detail, "market_cap"),
        volume_24h=trading["volume24h"] if trading else None,
        liquidity=trading["liquidity"] if trading else None,
        holder_count=dist["holder_count"],
        top_holders=[TopHolder(**h) for h in dist["top_holders"]],
        whale_count=dist["whale_count"],
        concentration=dist["concentration"],
        twitter_followers=((detail or {}).get("community_data") or {}).get("twitter_followers"),
        twitter_mentions=sentiment["mention_count"],
        sentiment_score=sentiment["sentiment_score"],
        is_viral=sentiment["is_viral"],
        overall_risk=res["overall_risk"],
        risk_score=res["risk_score"],
        flags=res["flags"],
        confidence=res["confidence"],
        dex_url=best.get("url") if best else None,
        buy_pressure=trading["buy_pressure"] if trading else None,
        is_suspicious_volume=bool(trading and trading["is_suspicious_volume"]),
        website=links.get("website") or homepage,
        twitter=f"https://twitter.com/{handle}" if handle else links.get("twitter"),
        telegram=links.get("telegram") or (f"https://t.me/{tg}" if tg else None),
        analyzed_at=_now_iso(),
    )


# ------------------------------------------------------- manipulation report

def _explorer_holders(chain: str, raw: List[dict]) -> List[dict]:
    """Normalise Solscan / Etherscan holder rows to address + balance + share."""
    rows = []
    for h in raw or []:
        if chain == "solana":
            address = h.get("owner") or h.get("address") or ""
            balance = to_float(h.get("amount"))
        else:
            address = h.get("TokenHolderAddress") or h.get("address") or ""
            balance = to_float(h.get("TokenHolderQuantity") or h.get("balance"))
        rows.append({"address": address, "balance": balance})
    total = sum(r["balance"] for r in rows)
    for r in rows:
        r["percentage"] = r["balance"] / total * 100 if total > 0 else 0.0
    return rows


async def _fetch_explorer_holders(chain: str, contract: str) -> List[dict]:
    if chain == "solana":
        if not is_solana_address(contract):
            raise ValueError(f"not a Solana mint: {short_address(contract)}")
        return await solscan.get_token_holders(contract)
    return await etherscan.get_token_holders(chain, contract)


async def build_manipulation_report(contract: str = "", chain: str = DEFAULT_CHAIN,
                                    symbol: str = "") -> ManipulationReport:
    contract = (contract or "").strip()
    symbol = (symbol or "").strip()
    chain = chain or DEFAULT_CHAIN
    if not contract and not symbol:
        raise ValueError("contract or symbol is required")

    query = symbol or contract
    with LogContext(logger, f"manipulation report {query} on {chain}"):
        raw_holders, pairs, sentiment, gecko_hits, search_hits = await asyncio.gather(
            _safe("explorer holders", _fetch_explorer_holders(chain, contract), []) if contract else _skip([]),
            _safe("DexScreener pairs", dexscreener.get_pairs_by_token(contract), []) if contract else _skip([]),
            _safe("social sentiment", twitter.analyze_social_sentiment(symbol or contract[:8], symbol or query),
                  twitter.empty_sentiment()),
            _safe("CoinGecko search", coingecko.search_coin(query), []),
            _safe("DexScreener search", dexscreener.search_pairs(query), []),
        )

        holders = _explorer_holders(chain, raw_holders)
        dist = core.holder_distribution(holders)
        top = dist["top_holders"]

        best = dexscreener.best_liquidity_pair(pairs) or dexscreener.best_liquidity_pair(search_hits)
        trading = dexscreener.get_trading_activity(best) if best else None

        onchain = OnChainMetrics(
            holder_count=dist["holder_count"],
            top_holder_pct=top[0]["percentage"] if top else 0.0,
            top10_pct=min(100.0, dist["concentration"]),
            whale_count=dist["whale_count"],
            wash_trading_pct=core.wash_trading_pct(trading["buys24h"], trading["sells24h"]) if trading else 0,
            suspicious_volume=bool(trading and trading["is_suspicious_volume"]),
            buy_pressure=trading["buy_pressure"] if trading else None,
            volume_24h=trading["volume24h"] if trading else None,
            liquidity=trading["liquidity"] if trading else None,
        )
        social = SocialMetrics(
            mentions=sentiment["mention_count"],
            sentiment_score=sentiment["sentiment_score"],
            bot_activity=sentiment["is_suspicious_activity"],
            is_viral=sentiment["is_viral"],
            influencer_mentions=sentiment["influencer_mentions"],
        )

        res = core.score_manipulation(
            top10_pct=onchain.top10_pct,
            whale_count=onchain.whale_count,
            wash_pct=onchain.wash_trading_pct,
            suspicious_volume=onchain.suspicious_volume,
            buy_pressure=onchain.buy_pressure,
            bot_activity=social.bot_activity,
            is_viral=social.is_viral,
            mentions=social.mentions,
            sentiment_score=social.sentiment_score,
            influencer_mentions=social.influencer_mentions,
        )

    base = (best or {}).get("baseToken") or {}
    gecko = gecko_hits[0] if gecko_hits else {}
    return ManipulationReport(
        contract=contract,
        chain=chain,
        symbol=base.get("symbol") or symbol or contract[:8],
        name=base.get("name") or gecko.get("name") or symbol or None,
        price_usd=to_float(best.get("priceUsd")) if best and best.get("priceUsd") else None,
        market_cap=to_float(best.get("marketCap")) if best and best.get("marketCap") else None,
        dex_url=best.get("url") if best else None,
        onchain=onchain,
        social=social,
        top_holders=[TopHolder(**h) for h in top],
        risk_score=res["risk_score"],
        risk_level=res["risk_level"],
        flags=res["flags"],
        verdict=res["verdict"],
        recommendation=res["recommendation"],
        confidence=res["confidence"],
        generated_at=_now_iso(),
    )


# ------------------------------------------------------------------ trending

async def discover_trending_projects() -> List[TrendingProject]:
    items = await _safe("CoinGecko trending", coingecko.get_trending_coins(), [])
    out = []
    for item in items:
        change = ((item.get("data") or {}).get("price_change_percentage_24h") or {}).get("usd")
        out.append(TrendingProject(
            id=item.get("id") or "",
            name=item.get("name") or "",
            symbol=(item.get("symbol") or "").upper(),
            rank=item.get("market_cap_rank"),
            price_change_24h=to_float(change),
        ))
    return out
