"""
Risk heuristics for holders, projects and contracts.

Everything here is pure: inputs are already-fetched records and metrics,
outputs are plain dicts. Fetching, persistence and degradation live in
``risk_engine.intelligence``.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..utils.address import is_anomalous_address
from ..utils.numbers import round_half_up
from .weights import W

LEVELS = ("low", "medium", "high", "critical")

HOLDER_RECOMMENDATIONS = {
    "critical": "Immediate investigation. Strong insider trading signals detected.",
    "high": "Monitor closely. Track wallet for unusual activity.",
    "medium": "Standard monitoring. Some risk factors present.",
    "low": "No immediate concerns. Normal holder behavior.",
}

REPORT_RECOMMENDATIONS = {
    "critical": "DO NOT BUY. If holding, consider immediate exit. High probability of coordinated dump.",
    "high": "Extreme caution. Small position only if any. Set tight stop-loss. Monitor whale wallets.",
    "medium": "Proceed with caution. Verify team identity, audit status, and lock status before investing.",
    "low": "Low risk detected. Standard position sizing recommended.",
}
REPORT_SAFE_RECOMMENDATION = "Relatively safe profile. Normal risk management applies."


class _Tally:
    """Accumulates reasons in the order the rules fire."""

    def __init__(self):
        self.score = 0
        self.reasons: List[Dict[str, Any]] = []

    def add(self, code: str, weight: int, detail: str):
        self.reasons.append({"code": code, "weight": weight, "detail": detail})
        self.score += weight

    def note(self, code: str, detail: str):
        self.add(code, 0, detail)

    @property
    def flags(self) -> List[str]:
        return [r["detail"] for r in self.reasons]


def clamp_score(raw: float) -> int:
    return int(max(W.SCORE_MIN, min(W.SCORE_MAX, raw)))


def risk_level(score: float) -> str:
    if score < W.BAND_MEDIUM:
        return "low"
    if score < W.BAND_HIGH:
        return "medium"
    if score < W.BAND_CRITICAL:
        return "high"
    return "critical"


def confidence(flag_count: int, base: int, step: int) -> int:
    return min(W.CONFIDENCE_CAP, base + step * flag_count)


def _aware(ts: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def days_since(ts: datetime, now: Optional[datetime] = None) -> int:
    now = _aware(now or datetime.now(timezone.utc))
    return (now - _aware(ts)).days


# ------------------------------------------------------------------ holders

def score_holder(
    *,
    wallet_address: str,
    chain: str,
    balance: float,
    percentage: Optional[float],
    first_seen: datetime,
    transfers: Optional[Sequence[dict]] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Score one wallet.

    ``transfers`` is the recent transfer history from a chain explorer, or
    None when no lookup was made (or it failed). The rules fire in a fixed
    order because the insider rule reads the score accumulated so far.
    """
    t = _Tally()
    pct = percentage or 0.0

    if pct > W.HOLDER_WHALE_PCT:
        t.add("WHALE", W.HOLDER_WHALE, f"Whale: holds {pct:.2f}% of supply")
    if pct > W.HOLDER_DOMINANT_PCT:
        t.add("DOMINANT_HOLDER", W.HOLDER_DOMINANT, f"Dominant holder: controls >{W.HOLDER_DOMINANT_PCT}% of supply")

    if balance > W.HOLDER_HIGH_BALANCE:
        t.add("HIGH_BALANCE", W.HOLDER_HIGH_BALANCE_PTS, f"Extremely high balance: {balance / 1e9:.2f}B tokens")

    if days_since(first_seen, now) < W.HOLDER_NEW_DAYS:
        t.add("NEW_HOLDER", W.HOLDER_NEW, f"New holder: first seen within last {W.HOLDER_NEW_DAYS} days")

    is_insider = t.score >= W.HOLDER_INSIDER_SCORE or pct > W.HOLDER_INSIDER_PCT
    if is_insider:
        t.add("POTENTIAL_INSIDER", W.HOLDER_INSIDER, "Potential insider: matches accumulation pattern")

    if is_anomalous_address(chain, wallet_address):
        label = "Solana" if chain == "solana" else "EVM"
        t.add("ADDRESS_FORMAT", W.HOLDER_ADDRESS_SHAPE, f"Non-standard {label} address format")

    recent = len(transfers) if transfers is not None else 0
    if recent > W.HOLDER_RAPID_MIN_TXNS:
        me = wallet_address.lower()
        inbound = sum(1 for tx in transfers if (tx.get("to") or "").lower() == me)
        if inbound > W.HOLDER_RAPID_MIN_INBOUND:
            t.add("RAPID_ACCUMULATION", W.HOLDER_RAPID, f"Rapid accumulation: {inbound} inbound transfers recently")

    score = clamp_score(t.score)
    level = risk_level(score)
    flags = t.flags
    return {
        "risk_numeric": score,
        "risk_level": level,
        "flags": flags,
        "reasons": t.reasons,
        "is_insider": is_insider,
        "is_whale": pct > W.HOLDER_IS_WHALE_PCT or balance > W.HOLDER_IS_WHALE_BALANCE,
        "recent_transactions": recent,
        "confidence": confidence(len(flags), W.HOLDER_CONFIDENCE_BASE, W.HOLDER_CONFIDENCE_STEP),
        "recommendation": HOLDER_RECOMMENDATIONS[level],
    }


def holder_notes(flags: List[str], recommendation: str) -> str:
    if not flags:
        return "No suspicious patterns detected."
    return f"{' | '.join(flags)} - {recommendation}"


# ------------------------------------------------------------------ projects

def holder_distribution(holders: Sequence[dict], top_n: int = W.PROJECT_TOP_N) -> dict:
    """Top-N shares recomputed from raw balances.

    Each holder is ``{"address", "balance", "percentage"}``; ``percentage``
    is the stored share and only feeds the whale count.
    """
    ranked = sorted(holders, key=lambda h: h["balance"], reverse=True)
    total = sum(h["balance"] for h in ranked)
    top = [
        {"address": h["address"], "percentage": (h["balance"] / total * 100) if total > 0 else 0.0}
        for h in ranked[:top_n]
    ]
    return {
        "holder_count": len(ranked),
        "top_holders": top,
        "whale_count": sum(1 for h in ranked if (h.get("percentage") or 0) > W.PROJECT_WHALE_PCT),
        "concentration": sum(h["percentage"] for h in top),
    }


def score_project(
    *,
    holder_count: int,
    whale_count: int,
    concentration: float,
    trading: Optional[dict] = None,
    sentiment: Optional[dict] = None,
    onchain_holder_count: Optional[int] = None,
) -> dict:
    t = _Tally()

    if onchain_holder_count is not None and onchain_holder_count > holder_count:
        t.note("ONCHAIN_HOLDERS", f"On-chain: {onchain_holder_count} holders found ({holder_count} tracked locally)")

    if holder_count < W.PROJECT_FEW_HOLDERS:
        t.add("FEW_HOLDERS", W.PROJECT_FEW_HOLDERS_PTS, f"Very few tracked holders: {holder_count}")
    if whale_count > W.PROJECT_WHALE_MIN:
        t.add("WHALES", W.PROJECT_WHALE_EACH * whale_count,
              f"{whale_count} whales holding >{W.PROJECT_WHALE_PCT}% each")
    if concentration > W.PROJECT_CONCENTRATION:
        t.add("CONCENTRATION", W.PROJECT_CONCENTRATION_PTS,
              f"Top {W.PROJECT_TOP_N} holders control {concentration:.1f}% of supply")
    elif concentration > W.PROJECT_CONCENTRATION_WARN:
        t.note("CONCENTRATION_WARN", f"Top {W.PROJECT_TOP_N} holders control {concentration:.1f}% of supply (elevated)")

    if trading and trading.get("is_suspicious_volume"):
        t.add("SUSPICIOUS_VOLUME", W.PROJECT_SUSPICIOUS_VOLUME, "Suspicious: high volume with low liquidity")
    if sentiment and sentiment.get("is_suspicious_activity"):
        t.add("BOT_ACTIVITY", W.PROJECT_BOT_ACTIVITY, "Suspicious social: possible bot activity detected")
    if sentiment and sentiment.get("is_viral"):
        t.note("VIRAL", "Viral: trending on Twitter/X")

    if trading:
        bp = trading["buy_pressure"]
        if bp > W.PROJECT_BUY_PRESSURE:
            t.note("BUY_PRESSURE", f"Strong buy pressure: {bp}% buys")
        if bp < W.PROJECT_SELL_PRESSURE:
            t.add("HEAVY_SELLING", W.PROJECT_SELL_PRESSURE_PTS, f"Heavy selling: only {bp}% buys")

    score = clamp_score(t.score)
    flags = t.flags
    return {
        "risk_score": score,
        "overall_risk": risk_level(score),
        "flags": flags,
        "reasons": t.reasons,
        "confidence": confidence(len(flags), W.PROJECT_CONFIDENCE_BASE, W.PROJECT_CONFIDENCE_STEP),
    }


# ------------------------------------------------------- manipulation report

def wash_trading_pct(buys: int, sells: int) -> int:
    """Circular-volume estimate from buy/sell symmetry; 0 when one side is empty."""
    if not buys or not sells:
        return 0
    return round_half_up(min(100, min(buys, sells) / max(buys, sells, 1) * W.REPORT_WASH_SCALE))


def score_manipulation(
    *,
    top10_pct: float,
    whale_count: int,
    wash_pct: int,
    suspicious_volume: bool,
    buy_pressure: Optional[int],
    bot_activity: bool,
    is_viral: bool,
    mentions: int,
    sentiment_score: int,
    influencer_mentions: int,
) -> dict:
    t = _Tally()

    if top10_pct > W.REPORT_EXTREME_CONCENTRATION:
        t.add("EXTREME_CONCENTRATION", W.REPORT_EXTREME_CONCENTRATION_PTS,
              f"Top 10 wallets control {top10_pct:.0f}% of supply - extreme concentration")
    elif top10_pct > W.REPORT_HIGH_CONCENTRATION:
        t.add("HIGH_CONCENTRATION", W.REPORT_HIGH_CONCENTRATION_PTS,
              f"Top 10 wallets control {top10_pct:.0f}% of supply - high concentration")
    if whale_count > W.REPORT_WHALE_MIN:
        t.add("WHALES", W.REPORT_WHALES, f"{whale_count} whale wallets detected holding >5% each")
    if wash_pct > W.REPORT_WASH_PCT:
        t.add("WASH_TRADING", W.REPORT_WASH, f"{wash_pct}% of volume appears circular - wash trading pattern")
    if suspicious_volume:
        t.add("SUSPICIOUS_VOLUME", W.REPORT_SUSPICIOUS_VOLUME,
              "High volume relative to liquidity - artificial volume inflation suspected")
    if buy_pressure is not None and buy_pressure < W.REPORT_SELL_PRESSURE:
        t.add("COORDINATED_SELLING", W.REPORT_SELL_PRESSURE_PTS,
              f"Only {buy_pressure}% buy pressure - coordinated selling detected")
    if buy_pressure is not None and buy_pressure > W.REPORT_PUMP_PRESSURE:
        t.add("COORDINATED_PUMP", W.REPORT_PUMP_PRESSURE_PTS,
              f"{buy_pressure}% buy pressure - possible coordinated pump")

    if bot_activity:
        t.add("BOT_ACTIVITY", W.REPORT_BOT_ACTIVITY,
              "Bot activity detected in social mentions - artificial hype suspected")
    if is_viral and t.score > W.REPORT_VIRAL_MIN_SCORE:
        t.add("VIRAL_ANOMALY", W.REPORT_VIRAL_ANOMALY,
              "Viral social activity coincides with on-chain anomalies - coordinated campaign likely")
    if mentions > W.REPORT_UNIFORM_MENTIONS and sentiment_score > W.REPORT_UNIFORM_SENTIMENT:
        t.add("UNIFORM_SENTIMENT", W.REPORT_UNIFORM,
              f"{mentions} mentions with {sentiment_score}% positive sentiment - suspiciously uniform")
    if influencer_mentions > W.REPORT_INFLUENCER_MIN:
        t.add("INFLUENCERS", W.REPORT_INFLUENCERS, f"{influencer_mentions} high-engagement accounts promoting token")

    score = clamp_score(t.score)
    level = risk_level(score)
    flags = t.flags
    return {
        "risk_score": score,
        "risk_level": level,
        "flags": flags,
        "reasons": t.reasons,
        "verdict": build_verdict(level, flags, top10_pct=top10_pct, whale_count=whale_count,
                                 wash_pct=wash_pct, bot_activity=bot_activity, buy_pressure=buy_pressure),
        "recommendation": report_recommendation(level, buy_pressure),
        "confidence": confidence(len(flags), W.REPORT_CONFIDENCE_BASE, W.REPORT_CONFIDENCE_STEP),
    }


def build_verdict(level: str, flags: List[str], *, top10_pct: float, whale_count: int,
                  wash_pct: int, bot_activity: bool, buy_pressure: Optional[int]) -> str:
    if level == "critical":
        parts = ["This token exhibits multiple simultaneous manipulation signals that are highly "
                 "consistent with a coordinated market manipulation scheme."]
        if top10_pct > 60:
            parts.append(f"Supply concentration is extreme: the top 10 wallets control {top10_pct:.0f}% "
                         "of all tokens, giving them full price control.")
        if wash_pct > W.REPORT_WASH_PCT:
            parts.append(f"Approximately {wash_pct}% of trading volume appears circular, indicating "
                         "artificial volume inflation to attract retail buyers.")
        if bot_activity:
            parts.append("Social media activity shows bot-like patterns; the positive sentiment is "
                         "likely manufactured.")
        parts.append("The combination of on-chain concentration and off-chain hype is a textbook "
                     "pump-and-dump setup.")
        return " ".join(parts)
    if level == "high":
        parts = ["This token shows significant risk indicators that warrant serious caution."]
        if whale_count > 2:
            parts.append(f"{whale_count} large wallets hold disproportionate supply, creating dump risk.")
        if buy_pressure is not None and buy_pressure < 30:
            parts.append(f"Buy pressure is only {buy_pressure}%, suggesting active distribution by insiders.")
        if flags:
            parts.append(f"{len(flags)} anomalies were detected across on-chain and social data.")
        parts.append("This does not necessarily mean manipulation is occurring, but the risk profile "
                     "is elevated.")
        return " ".join(parts)
    if level == "medium":
        parts = ["This token has some risk factors worth monitoring, but no definitive manipulation "
                 "signals were detected."]
        if top10_pct > 40:
            parts.append(f"Supply concentration is moderate: top 10 wallets hold {top10_pct:.0f}%.")
        parts.append("Standard due diligence is recommended before any significant position.")
        return " ".join(parts)
    return ("No significant manipulation signals detected. On-chain distribution appears healthy, "
            "trading patterns are within normal ranges, and social activity does not show "
            "coordinated bot behavior. This does not guarantee the token is safe; always do your "
            "own research.")


def report_recommendation(level: str, buy_pressure: Optional[int]) -> str:
    if level == "low" and buy_pressure and buy_pressure > W.REPORT_SAFE_BUY_PRESSURE:
        return REPORT_SAFE_RECOMMENDATION
    return REPORT_RECOMMENDATIONS[level]

