import asyncio
import os
from tempfile import mkstemp
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from starlette.background import BackgroundTask

from .. import schemas
from ..notifications import NotificationChannel
from ..pdf_report.build import build_pdf
from ..risk_engine import intelligence
from ..sources import coingecko, dexscreener, etherscan, solscan, twitter
from ..storage import records
from ..storage.models import Chain
from ..storage.snapshots import load_snapshot, save_snapshot
from ..utils.logger import setup_logger
from .deps import get_channel, get_db

logger = setup_logger(__name__)

router = APIRouter(prefix="/api")

ACTIONS = ("analyze_holder", "analyze_project", "discover_trending")
DATA_SOURCES = ("Etherscan (EVM)", "Solscan (Solana)", "CoinGecko (prices)", "DexScreener (DEX)", "Twitter/X (social)")
TOKEN_HOLDERS_SHOWN = 20
TOKEN_TRANSFERS_SHOWN = 10
TOP_COINS = 20
PROJECT_SNAPSHOT = "project"


@router.get("/ai")
async def ai_info():
    return {
        "status": "ok",
        "actions": list(ACTIONS),
        "chains": [c.value for c in Chain],
        "data_sources": list(DATA_SOURCES),
    }


@router.post("/ai")
async def ai_action(body: schemas.AnalyzeRequest, db: Session = Depends(get_db),
                    channel: NotificationChannel = Depends(get_channel)):
    if body.action == "discover_trending":
        return await intelligence.discover_trending_projects()
    if body.action not in ACTIONS:
        raise ValueError(f"Unknown action: {body.action}")
    if not body.entity_id:
        raise ValueError("entity_id is required")

    if body.action == "analyze_holder":
        result = await intelligence.analyze_holder(db, body.entity_id)
        channel.publish("info", f"Holder {result.wallet_address[:8]}... analyzed: {result.risk_level} risk")
        return result

    result = await intelligence.analyze_project(db, body.entity_id)
    save_snapshot(PROJECT_SNAPSHOT, result.project_id, result.model_dump())
    channel.publish("info", f"Project {result.symbol} analyzed: {result.overall_risk} risk")
    return result


@router.get("/intelligence")
async def market_intelligence(type: str = "trending", q: str = "", chain: str = "", contract: str = "",
                              name: str = ""):
    if type == "trending":
        trending, top = await asyncio.gather(coingecko.get_trending_coins(), coingecko.get_top_coins(TOP_COINS))
        return {"trending": trending, "top_coins": top}

    if type == "search":
        if not q:
            raise ValueError("q is required")
        coins, pairs = await asyncio.gather(coingecko.search_coin(q), dexscreener.search_pairs(q))
        return {"coins": coins, "pairs": pairs}

    if type == "token":
        if not contract:
            raise ValueError("contract is required")
        return await _token_intelligence(chain or "ethereum", contract)

    if type == "social":
        if not q:
            raise ValueError("q is required (token symbol)")
        return await twitter.analyze_social_sentiment(q, name or q)

    if type == "chains":
        return {"chains": [{"id": k, **v} for k, v in etherscan.EVM_CHAINS.items()]}

    raise ValueError(f"Unknown type: {type}")


async def _token_intelligence(chain: str, contract: str) -> dict:
    if chain == "solana":
        meta, holders, pairs = await asyncio.gather(
            solscan.get_token_meta(contract),
            solscan.get_token_holders(contract),
            dexscreener.get_pairs_by_token(contract),
        )
        transfers = None
    else:
        holders, transfers, pairs = await asyncio.gather(
            etherscan.get_token_holders(chain, contract),
            etherscan.get_token_transfers(chain, contract),
            dexscreener.get_pairs_by_token(contract),
        )
        meta = None

    best = dexscreener.best_liquidity_pair(pairs)
    out = {
        "holders": holders[:TOKEN_HOLDERS_SHOWN],
        "trading": dexscreener.get_trading_activity(best) if best else None,
        "dex_url": best.get("url") if best else None,
    }
    if meta is not None:
        out["meta"] = meta
    if transfers is not None:
        out["transfers"] = transfers[:TOKEN_TRANSFERS_SHOWN]
    return out


@router.get("/report")
async def manipulation_report(contract: str = "", chain: str = "solana", symbol: str = ""):
    return await intelligence.build_manipulation_report(contract=contract, chain=chain, symbol=symbol)


@router.get("/projects/{project_id}/report.pdf")
async def project_report_pdf(project_id: str, db: Session = Depends(get_db)):
    project = records.get_project(db, project_id)
    snap = load_snapshot(PROJECT_SNAPSHOT, project.id)
    if snap is None:
        logger.info(f"no fresh analysis for project {project.id}, running one")
        result = await intelligence.analyze_project(db, project.id)
        snap = result.model_dump()
        save_snapshot(PROJECT_SNAPSHOT, project.id, snap)

    fd, path = mkstemp(suffix=".pdf")
    os.close(fd)
    build_pdf(snap, path)
    return FileResponse(
        path,
        media_type="application/pdf",
        filename=f"token-risk-{project.symbol.lower()}.pdf",
        background=BackgroundTask(os.remove, path),
    )


@router.get("/notifications")
async def notifications(limit: Optional[int] = None, channel: NotificationChannel = Depends(get_channel)):
    return [n.as_dict() for n in channel.recent(limit)]
