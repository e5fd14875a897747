from typing import List, Optional

from pydantic import BaseModel, Field


class TopHolder(BaseModel):
    address: str
    percentage: float


class HolderIntelligence(BaseModel):
    holder_id: str
    wallet_address: str
    chain: str
    balance: float
    percentage: Optional[float] = None
    first_seen: str
    recent_transactions: int = 0
    is_whale: bool
    is_insider: bool
    risk_level: str
    risk_numeric: int
    confidence: int
    flags: List[str] = Field(default_factory=list)
    recommendation: str
    ai_notes: str


class ProjectIntelligence(BaseModel):
    project_id: str
    name: str
    symbol: str
    chain: str
    contract_address: str

    price_usd: Optional[float] = None
    price_change_24h: Optional[float] = None
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None
    liquidity: Optional[float] = None

    holder_count: int
    top_holders: List[TopHolder] = Field(default_factory=list)
    whale_count: int
    concentration: float

    twitter_followers: Optional[int] = None
    twitter_mentions: int = 0
    sentiment_score: int = 0
    is_viral: bool = False

    overall_risk: str
    risk_score: int
    flags: List[str] = Field(default_factory=list)
    confidence: int

    dex_url: Optional[str] = None
    buy_pressure: Optional[int] = None
    is_suspicious_volume: bool = False

    website: Optional[str] = None
    twitter: Optional[str] = None
    telegram: Optional[str] = None

    analyzed_at: str


class OnChainMetrics(BaseModel):
    holder_count: int = 0
    top_holder_pct: float = 0.0
    top10_pct: float = 0.0
    whale_count: int = 0
    wash_trading_pct: int = 0
    suspicious_volume: bool = False
    buy_pressure: Optional[int] = None
    volume_24h: Optional[float] = None
    liquidity: Optional[float] = None


class SocialMetrics(BaseModel):
    mentions: int = 0
    sentiment_score: int = 0
    bot_activity: bool = False
    is_viral: bool = False
    influencer_mentions: int = 0


class ManipulationReport(BaseModel):
    contract: str
    chain: str
    symbol: str
    name: Optional[str] = None
    price_usd: Optional[float] = None
    market_cap: Optional[float] = None
    dex_url: Optional[str] = None
    onchain: OnChainMetrics
    social: SocialMetrics
    top_holders: List[TopHolder] = Field(default_factory=list)
    risk_score: int
    risk_level: str
    flags: List[str] = Field(default_factory=list)
    verdict: str
    recommendation: str
    confidence: int
    generated_at: str


class TrendingProject(BaseModel):
    id: str
    name: str
    symbol: str
    rank: Optional[int] = None
    price_change_24h: float = 0.0
