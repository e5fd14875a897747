"""
Wipe the database and load a small multi-chain demo set.

    python -m token_intel.seed
"""
from datetime import datetime, timedelta, timezone

from .storage import records
from .storage.db import SessionLocal, drop_db, init_db
from .storage.models import Severity
from .utils.logger import setup_logger

logger = setup_logger(__name__)

PROJECTS = [
    {"name": "Bonk", "symbol": "BONK", "chain": "solana",
     "contract_address": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
     "description": "The first Solana dog coin.", "website": "https://bonkcoin.com",
     "total_supply": 93526183890996},
    {"name": "Jupiter", "symbol": "JUP", "chain": "solana",
     "contract_address": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
     "description": "Solana liquidity aggregator.", "website": "https://jup.ag",
     "total_supply": 10000000000},
    {"name": "Uniswap", "symbol": "UNI", "chain": "ethereum",
     "contract_address": "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984",
     "description": "Decentralized exchange protocol.", "website": "https://uniswap.org",
     "total_supply": 1000000000},
    {"name": "Pepe", "symbol": "PEPE", "chain": "ethereum",
     "contract_address": "0x6982508145454Ce325dDbE47a25d4ec3d2311933",
     "description": "The memecoin of Ethereum.", "website": "https://pepe.vip",
     "total_supply": 420690000000000},
    {"name": "PancakeSwap", "symbol": "CAKE", "chain": "bnb",
     "contract_address": "0x0E09FaBB73Bd3Ade0a17ECC321fD13a19e81cE82",
     "description": "BNB Chain DEX & yield farming.", "website": "https://pancakeswap.finance",
     "total_supply": 750000000},
]

# symbol -> decimals, supply, price, market_cap
TOKENS = {
    "BONK": (5, 93526183890996, 0.0000234, 2188512),
    "JUP": (6, 10000000000, 0.82, 8200000000),
    "UNI": (18, 1000000000, 7.42, 7420000000),
    "PEPE": (18, 420690000000000, 0.00001234, 5191314600),
    "CAKE": (18, 750000000, 2.34, 1755000000),
}

HOLDERS = [
    ("BONK", "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM", 5000000000, 5.34, True, None, None),
    ("BONK", "BonkF6M3Na3GpTwBb8jY5oGGnoBJfLfSHs4Y9oU7VCL1", 3200000000, 3.42, False, None, None),
    ("BONK", "HN7cABqLq46Es1jh92dQQisAq662SmxELLLsHHe4YWrH", 25000000000, 26.7, True, "high",
     "Possible insider: 26.7% concentration"),
    ("JUP", "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4", 2500000000, 25.0, True, None, None),
    ("UNI", "0x47173B170C64d16393a52e6C480b3Ad8c302ba1e", 15000000, 1.5, False, None, None),
    ("UNI", "0x1a9C8182C09F50C8318d769245beA52c32BE35BC", 85000000, 8.5, True, "medium", None),
    ("PEPE", "0xF977814e90dA44bFA03b6295A0616a897441aceC", 50000000000000, 11.88, True, None, None),
    ("CAKE", "0x73feaa1eE314F8c655E354234017bE2193C9E24E", 120000000, 16.0, True, "high",
     "MasterChef contract, highest CAKE holder"),
    ("CAKE", "0x000000000000000000000000000000000000dEaD", 50000000, 6.67, True, None, None),
]

EVENTS = [
    ("BONK", "parse_completed", "success", "Parsed 3 holders for Bonk (Solana)"),
    ("UNI", "parse_completed", "success", "Parsed 2 holders for Uniswap (Ethereum)"),
    ("CAKE", "parse_completed", "success", "Parsed 2 holders for PancakeSwap (BNB)"),
    ("BONK", "ai_analysis", "warning", "Potential insider wallet: HN7cABq... holds 26.7% of BONK"),
    (None, "system_start", "info", "Token intel engine initialized"),
    ("CAKE", "ai_analysis", "info", "PancakeSwap MasterChef contract identified as top holder"),
]


def seed():
    drop_db()
    init_db()
    db = SessionLocal()
    try:
        projects = {p["symbol"]: records.create_project(db, dict(p)) for p in PROJECTS}
        logger.info(f"{len(projects)} projects")

        for p in projects.values():
            decimals, supply, price, market_cap = TOKENS[p.symbol]
            records.create_token(db, {
                "project_id": p.id, "name": p.name, "symbol": p.symbol, "chain": p.chain,
                "contract_address": p.contract_address, "decimals": decimals,
                "supply": supply, "price": price, "market_cap": market_cap,
            })
        logger.info(f"{len(TOKENS)} tokens")

        # spread first_seen so the "new holder" rule has something to bite on
        now = datetime.now(timezone.utc)
        for i, (symbol, wallet, balance, pct, whale, risk, notes) in enumerate(HOLDERS):
            p = projects[symbol]
            records.create_holder(db, {
                "project_id": p.id, "wallet_address": wallet, "chain": p.chain,
                "balance": balance, "percentage": pct, "is_whale": whale,
                "risk_score": risk, "ai_notes": notes,
                "first_seen": now - timedelta(days=3 * i),
            })
        logger.info(f"{len(HOLDERS)} holders")

        for symbol, type_, severity, message in EVENTS:
            records.create_event(db, {
                "project_id": projects[symbol].id if symbol else None,
                "type": type_, "severity": Severity(severity), "message": message,
            })
        logger.info(f"{len(EVENTS)} events")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
    logger.info("seed complete")
