from datetime import datetime
from typing import ClassVar, FrozenSet, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .storage.models import Chain, ProjectStatus, RiskLevel, Severity


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class _In(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_default(cls, v, info):
        # form posts send "" for untouched inputs
        if isinstance(v, str) and v.strip() == "":
            field = cls.model_fields[info.field_name]
            return None if field.is_required() else field.default
        return v


class _Patch(_In):
    # nullable columns a client may clear with null or ""
    CLEARABLE: ClassVar[FrozenSet[str]] = frozenset()

    def changes(self) -> dict:
        """Fields the client sent; a null only clears a clearable column."""
        sent = self.model_dump(exclude_unset=True)
        return {k: v for k, v in sent.items() if v is not None or k in self.CLEARABLE}


class _Out(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --------------------------------- projects ---------------------------------

class ProjectCreate(_In):
    name: str
    symbol: str
    chain: Chain = Chain.SOLANA
    contract_address: str = Field("", validation_alias=_alias("contract_address", "contractAddress", "mintAddress", "mint_address"))
    network: str = "mainnet"
    description: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = Field(None, validation_alias=_alias("image_url", "imageUrl"))
    total_supply: Optional[float] = Field(None, ge=0, validation_alias=_alias("total_supply", "totalSupply"))
    status: ProjectStatus = ProjectStatus.ACTIVE


class ProjectUpdate(_Patch):
    CLEARABLE: ClassVar[FrozenSet[str]] = frozenset({"description", "website", "image_url", "total_supply"})

    name: Optional[str] = None
    symbol: Optional[str] = None
    chain: Optional[Chain] = None
    contract_address: Optional[str] = Field(None, validation_alias=_alias("contract_address", "contractAddress", "mintAddress", "mint_address"))
    network: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = Field(None, validation_alias=_alias("image_url", "imageUrl"))
    total_supply: Optional[float] = Field(None, ge=0, validation_alias=_alias("total_supply", "totalSupply"))
    status: Optional[ProjectStatus] = None


class ProjectRef(_Out):
    id: str
    name: str
    symbol: str
    chain: Chain


class ProjectOut(_Out):
    id: str
    name: str
    symbol: str
    chain: Chain
    contract_address: str
    network: str
    description: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = None
    total_supply: Optional[float] = None
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime


# ---------------------------------- tokens ----------------------------------

class TokenCreate(_In):
    project_id: str = Field(validation_alias=_alias("project_id", "projectId"))
    name: str
    symbol: str
    chain: Chain = Chain.SOLANA
    contract_address: str = Field(validation_alias=_alias("contract_address", "contractAddress"))
    decimals: int = Field(9, ge=0, le=36)
    supply: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    market_cap: Optional[float] = Field(None, ge=0, validation_alias=_alias("market_cap", "marketCap"))


class TokenUpdate(_Patch):
    CLEARABLE: ClassVar[FrozenSet[str]] = frozenset({"supply", "price", "market_cap"})

    name: Optional[str] = None
    symbol: Optional[str] = None
    chain: Optional[Chain] = None
    contract_address: Optional[str] = Field(None, validation_alias=_alias("contract_address", "contractAddress"))
    decimals: Optional[int] = Field(None, ge=0, le=36)
    supply: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    market_cap: Optional[float] = Field(None, ge=0, validation_alias=_alias("market_cap", "marketCap"))


class TokenOut(_Out):
    id: str
    project_id: str
    name: str
    symbol: str
    chain: Chain
    contract_address: str
    decimals: int
    supply: Optional[float] = None
    price: Optional[float] = None
    market_cap: Optional[float] = None
    created_at: datetime
    updated_at: datetime
    project: Optional[ProjectRef] = None


# ---------------------------------- holders ---------------------------------

class HolderCreate(_In):
    project_id: str = Field(validation_alias=_alias("project_id", "projectId"))
    wallet_address: str = Field(validation_alias=_alias("wallet_address", "walletAddress"))
    chain: Chain = Chain.SOLANA
    balance: float = Field(ge=0)
    percentage: Optional[float] = Field(None, ge=0, le=100)
    is_whale: bool = Field(False, validation_alias=_alias("is_whale", "isWhale"))
    risk_score: Optional[RiskLevel] = Field(None, validation_alias=_alias("risk_score", "riskScore"))
    ai_notes: Optional[str] = Field(None, validation_alias=_alias("ai_notes", "aiNotes"))
    first_seen: Optional[datetime] = Field(None, validation_alias=_alias("first_seen", "firstSeen"))


class HolderUpdate(_Patch):
    CLEARABLE: ClassVar[FrozenSet[str]] = frozenset({"percentage", "risk_score", "ai_notes"})

    wallet_address: Optional[str] = Field(None, validation_alias=_alias("wallet_address", "walletAddress"))
    chain: Optional[Chain] = None
    balance: Optional[float] = Field(None, ge=0)
    percentage: Optional[float] = Field(None, ge=0, le=100)
    is_whale: Optional[bool] = Field(None, validation_alias=_alias("is_whale", "isWhale"))
    risk_score: Optional[RiskLevel] = Field(None, validation_alias=_alias("risk_score", "riskScore"))
    ai_notes: Optional[str] = Field(None, validation_alias=_alias("ai_notes", "aiNotes"))


class HolderOut(_Out):
    id: str
    project_id: str
    wallet_address: str
    chain: Chain
    balance: float
    percentage: Optional[float] = None
    is_whale: bool
    risk_score: Optional[RiskLevel] = None
    ai_notes: Optional[str] = None
    first_seen: datetime
    last_updated: datetime
    project: Optional[ProjectRef] = None


# ---------------------------------- events ----------------------------------

class EventCreate(_In):
    project_id: Optional[str] = Field(None, validation_alias=_alias("project_id", "projectId"))
    type: str
    severity: Severity = Severity.INFO
    message: str


class EventProjectRef(_Out):
    id: str
    name: str
    symbol: str


class EventOut(_Out):
    id: str
    project_id: Optional[str] = None
    type: str
    severity: Severity
    message: str
    created_at: datetime
    project: Optional[EventProjectRef] = None


class ProjectDetail(ProjectOut):
    tokens: List[TokenOut] = []
    holders: List[HolderOut] = []
    events: List[EventOut] = []


class StatsOut(BaseModel):
    projects: int
    tokens: int
    holders: int
    events: int
    recent_events: List[EventOut]


# ---------------------------------- analysis --------------------------------

class AnalyzeRequest(_In):
    action: str
    entity_id: Optional[str] = Field(None, validation_alias=_alias("entity_id", "entityId"))
