import os
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./token_intel.db")

    ETHERSCAN_API_KEY: str = os.getenv("ETHERSCAN_API_KEY", "")
    COINGECKO_API_KEY: str = os.getenv("COINGECKO_API_KEY", "")
    SOLSCAN_API_KEY: str = os.getenv("SOLSCAN_API_KEY", "")
    TWITTER_BEARER_TOKEN: Optional[str] = os.getenv("TWITTER_BEARER_TOKEN")

    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "20"))

    SNAPSHOT_DIR: str = os.getenv("SNAPSHOT_DIR", "/tmp/token_intel_snapshots")
    SNAPSHOT_TTL_MINUTES: int = int(os.getenv("SNAPSHOT_TTL_MINUTES", "120"))  # 2h

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
