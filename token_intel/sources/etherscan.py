"""
Etherscan-family explorers. One API key works across every chain below.
"""
from typing import List

import httpx

from ..config import settings

EVM_CHAINS = {
    "ethereum": {"name": "Ethereum", "api_url": "https://api.etherscan.io/api", "native_symbol": "ETH"},
    "bnb": {"name": "BNB Chain", "api_url": "https://api.bscscan.com/api", "native_symbol": "BNB"},
    "polygon": {"name": "Polygon", "api_url": "https://api.polygonscan.com/api", "native_symbol": "MATIC"},
    "arbitrum": {"name": "Arbitrum", "api_url": "https://api.arbiscan.io/api", "native_symbol": "ETH"},
    "base": {"name": "Base", "api_url": "https://api.basescan.org/api", "native_symbol": "ETH"},
    "optimism": {"name": "Optimism", "api_url": "https://api-optimistic.etherscan.io/api", "native_symbol": "ETH"},
    "fantom": {"name": "Fantom", "api_url": "https://api.ftmscan.com/api", "native_symbol": "FTM"},
    "avalanche": {"name": "Avalanche", "api_url": "https://api.snowtrace.io/api", "native_symbol": "AVAX"},
}

PAGE_SIZE = 50
HOLDER_PAGE_SIZE = 100
NO_TRANSACTIONS = "No transactions found"


class UnknownChainError(ValueError):
    pass


class ExplorerError(RuntimeError):
    pass


def is_evm_chain(chain: str) -> bool:
    return chain in EVM_CHAINS


async def _call(chain: str, params: dict):
    cfg = EVM_CHAINS.get(chain)
    if not cfg:
        raise UnknownChainError(f"Unknown chain: {chain}")
    q = dict(params, apikey=settings.ETHERSCAN_API_KEY)
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        r = await client.get(cfg["api_url"], params=q)
        r.raise_for_status()
        data = r.json()
    if str(data.get("status")) == "0" and data.get("message") != NO_TRANSACTIONS:
        raise ExplorerError(f"{cfg['name']} explorer: {data.get('message')} - {data.get('result')}")
    return data.get("result")


def _as_list(result) -> List[dict]:
    return result if isinstance(result, list) else []


async def get_token_holders(chain: str, contract_address: str) -> List[dict]:
    result = await _call(chain, {
        "module": "token", "action": "tokenholderlist",
        "contractaddress": contract_address, "page": 1, "offset": HOLDER_PAGE_SIZE,
    })
    return _as_list(result)


async def get_token_transfers(chain: str, contract_address: str, address: str | None = None) -> List[dict]:
    params = {
        "module": "account", "action": "tokentx",
        "contractaddress": contract_address, "page": 1, "offset": PAGE_SIZE, "sort": "desc",
    }
    if address:
        params["address"] = address
    return _as_list(await _call(chain, params))
