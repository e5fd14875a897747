import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import relationship

from .db import Base


class Chain(str, enum.Enum):
    SOLANA = "solana"
    ETHEREUM = "ethereum"
    BNB = "bnb"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"
    BASE = "base"
    OPTIMISM = "optimism"
    FANTOM = "fantom"
    AVALANCHE = "avalanche"


class ProjectStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Severity(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_value(v):
    return v.value if isinstance(v, enum.Enum) else v


def _enum(cls):
    # store the plain value ("solana"), not the member name ("SOLANA")
    return Enum(cls, values_callable=lambda e: [m.value for m in e], native_enum=False, length=16)


class Project(Base):
    __tablename__ = "projects"
    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    symbol = Column(String, nullable=False, index=True)
    chain = Column(_enum(Chain), nullable=False, default=Chain.SOLANA)
    contract_address = Column(String, nullable=False, default="", index=True)
    network = Column(String, nullable=False, default="mainnet")
    description = Column(Text)
    website = Column(String)
    image_url = Column(String)
    total_supply = Column(Float)
    status = Column(_enum(ProjectStatus), nullable=False, default=ProjectStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    tokens = relationship("Token", back_populates="project", cascade="all, delete-orphan")
    holders = relationship("Holder", back_populates="project", cascade="all, delete-orphan")
    events = relationship("Event", back_populates="project")


class Token(Base):
    __tablename__ = "tokens"
    id = Column(String, primary_key=True, default=_uuid)
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    symbol = Column(String, nullable=False)
    chain = Column(_enum(Chain), nullable=False, default=Chain.SOLANA)
    contract_address = Column(String, nullable=False, unique=True)
    decimals = Column(Integer, nullable=False, default=9)
    supply = Column(Float)
    price = Column(Float)
    market_cap = Column(Float)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    project = relationship("Project", back_populates="tokens")


class Holder(Base):
    __tablename__ = "holders"
    id = Column(String, primary_key=True, default=_uuid)
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    wallet_address = Column(String, nullable=False, index=True)
    chain = Column(_enum(Chain), nullable=False, default=Chain.SOLANA)
    balance = Column(Float, nullable=False)
    percentage = Column(Float)
    is_whale = Column(Boolean, nullable=False, default=False)
    risk_score = Column(_enum(RiskLevel))
    ai_notes = Column(Text)
    first_seen = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    project = relationship("Project", back_populates="holders")


class Event(Base):
    __tablename__ = "events"
    id = Column(String, primary_key=True, default=_uuid)
    project_id = Column(String, ForeignKey("projects.id", ondelete="SET NULL"), index=True)
    type = Column(String, nullable=False)
    severity = Column(_enum(Severity), nullable=False, default=Severity.INFO)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    project = relationship("Project", back_populates="events")


class AiAnalysis(Base):
    __tablename__ = "ai_analyses"
    id = Column(String, primary_key=True, default=_uuid)
    entity_type = Column(String, nullable=False, index=True)
    entity_id = Column(String, nullable=False, index=True)
    analysis_type = Column(String, nullable=False)
    result = Column(Text, nullable=False)
    confidence = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
