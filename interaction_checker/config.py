from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_RXNORM_BASE_URL = "https://rxnav.nlm.nih.gov/REST"
DEFAULT_OPENFDA_LABEL_URL = "https://api.fda.gov/drug/label.json"


def parse_origins(value: str) -> List[str]:
    # CORS_ORIGINS="http://localhost:3000,https://your-frontend.com" or "*"
    if value.strip() == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    rxnorm_base_url: str = DEFAULT_RXNORM_BASE_URL
    openfda_label_url: str = DEFAULT_OPENFDA_LABEL_URL
    openfda_api_key: Optional[str] = None
    openfda_label_limit: int = 200
    http_timeout: float = 15.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    openai_api_key: Optional[str] = None
    llm_base_url: Optional[str] = None
    llm_model: str = "gpt-4.1-mini"
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Build Settings from the environment (a local .env file is honoured).
    Empty strings count as unset.
    """
    load_dotenv()

    return Settings(
        rxnorm_base_url=os.getenv("RXNORM_BASE_URL", DEFAULT_RXNORM_BASE_URL).rstrip("/"),
        openfda_label_url=os.getenv("OPENFDA_LABEL_URL", DEFAULT_OPENFDA_LABEL_URL),
        openfda_api_key=os.getenv("OPENFDA_API_KEY", "").strip() or None,
        openfda_label_limit=int(os.getenv("OPENFDA_LABEL_LIMIT", "200")),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "15")),
        cors_origins=parse_origins(os.getenv("CORS_ORIGINS", "*")),
        openai_api_key=os.getenv("OPENAI_API_KEY", "").strip() or None,
        llm_base_url=os.getenv("LLM_BASE_URL", "").strip() or None,
        llm_model=os.getenv("LLM_MODEL", "gpt-4.1-mini"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
