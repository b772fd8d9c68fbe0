from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from capital_hub.shared.enums import Env


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    env: Env = Env.dev
    log_level: str = "INFO"

    database_url: str = "sqlite+pysqlite:///./capital_hub.db"

    # Dev-only actor header
    dev_actor_header: str = "X-DEV-ACTOR"

    # Fund metrics: simplified IRR assumes a fixed holding period (years).
    metrics_assumed_holding_years: int = 3

    # Portfolio concentration thresholds (percent of total invested)
    concentration_single_investment_threshold: float = 20.0
    concentration_sector_threshold: float = 40.0
    concentration_min_investments: int = 8

    # Optimistic concurrency: attempts per unit of work before surfacing a conflict
    uow_max_attempts: int = 3


settings = Settings()
