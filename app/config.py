"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class DocumentsConfig(BaseSettings):
    tax_rate: float = 0.10
    currency: str = "USD"


class PortalConfig(BaseSettings):
    link_days: int = 30


class DashboardConfig(BaseSettings):
    upcoming_window_days: int = 1
    upcoming_limit: int = 10


class AccountingConfig(BaseSettings):
    base_url: str = ""
    access_token: str = ""
    realm_id: str = ""
    timeout_seconds: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.access_token and self.realm_id)


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/service_desk.db"
    log_level: str = "INFO"
    documents: DocumentsConfig = Field(default_factory=DocumentsConfig)
    portal: PortalConfig = Field(default_factory=PortalConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    accounting: AccountingConfig = Field(default_factory=AccountingConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    docs = DocumentsConfig(**y.get("documents", {}))
    portal = PortalConfig(**y.get("portal", {}))
    dash = DashboardConfig(**y.get("dashboard", {}))
    acct = AccountingConfig(**y.get("accounting", {}))
    db_url = y.get("database", {}).get("url", "sqlite+aiosqlite:///data/service_desk.db")
    return Settings(
        database_url=db_url,
        log_level=y.get("log_level", "INFO"),
        documents=docs,
        portal=portal,
        dashboard=dash,
        accounting=acct,
    )
