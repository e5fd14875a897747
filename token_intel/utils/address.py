import base58

SOLANA_MIN_LEN = 32
SOLANA_KEY_BYTES = 32
EVM_ADDRESS_LEN = 42


def solana_pubkey_bytes(addr_b58: str) -> bytes:
    raw = base58.b58decode(addr_b58)
    if len(raw) != SOLANA_KEY_BYTES:
        raise ValueError(f"Solana address must decode to {SOLANA_KEY_BYTES} bytes, got {len(raw)}")
    return raw


def is_solana_address(addr: str) -> bool:
    if len(addr) < SOLANA_MIN_LEN:
        return False
    try:
        solana_pubkey_bytes(addr)
    except ValueError:
        return False
    return True


def is_anomalous_address(chain: str, addr: str) -> bool:
    """Shape check used by the holder heuristic.

    solana: shorter than 32 chars.
    ethereum/bnb: missing "0x" prefix or not 42 chars long.
    Other chains are not checked.
    """
    if chain == "solana":
        return len(addr) < SOLANA_MIN_LEN
    if chain in ("ethereum", "bnb"):
        return not addr.startswith("0x") or len(addr) != EVM_ADDRESS_LEN
    return False


def short_address(addr: str, n: int = 8) -> str:
    return f"{addr[:n]}..." if len(addr) > n else addr
