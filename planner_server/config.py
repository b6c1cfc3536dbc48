# -*- coding: utf-8 -*-
"""Runtime settings read from the environment."""
from __future__ import annotations

import os
import typing as t
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    openai_api_key: t.Optional[str] = None
    openai_model: str = "gpt-5"
    email_api_url: t.Optional[str] = None
    email_timeout: float = 30.0
    data_file: str = "planner_state.json"
    service_port: int = 8004
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Collect settings from environment variables, falling back to defaults."""
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-5"),
        email_api_url=os.getenv("EMAIL_API_URL") or None,
        email_timeout=float(os.getenv("EMAIL_TIMEOUT", "30")),
        data_file=os.getenv("PLANNER_DATA_FILE", "planner_state.json"),
        service_port=int(os.getenv("PLANNER_SERVICE_PORT", "8004")),
        log_level=os.getenv("PLANNER_LOG_LEVEL", "INFO").upper(),
    )
