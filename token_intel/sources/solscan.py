import httpx

from ..config import settings

SOLSCAN_BASE = "https://pro-api.solscan.io/v2.0"
PAGE_SIZE = 40


def _headers():
    h = {}
    if settings.SOLSCAN_API_KEY:
        h["token"] = settings.SOLSCAN_API_KEY
    return h


async def _get(path: str, params: dict):
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        r = await client.get(f"{SOLSCAN_BASE}{path}", params=params, headers=_headers())
        r.raise_for_status()
        body = r.json()
    # v2 wraps payloads in {"success": ..., "data": ...}
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


async def get_token_holders(mint_address: str) -> list:
    data = await _get("/token/holders", {"address": mint_address, "page": 1, "page_size": PAGE_SIZE})
    if not isinstance(data, dict):
        return []
    return data.get("items") or []


async def get_token_meta(mint_address: str) -> dict | None:
    return await _get("/token/meta", {"address": mint_address})


async def get_token_transfers(mint_address: str) -> list:
    data = await _get("/token/transfer", {
        "address": mint_address, "page": 1, "page_size": PAGE_SIZE,
        "sort_by": "block_time", "sort_order": "desc",
    })
    return data if isinstance(data, list) else []
