from __future__ import annotations
import os, yaml
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

CONFIG_ENV = "DRUGLOOKUP_CONFIG"


def _env_expand(v: Any) -> Any:
    if isinstance(v, str):
        return os.path.expandvars(v)
    if isinstance(v, dict):
        return {k: _env_expand(x) for k, x in v.items()}
    if isinstance(v, list):
        return [_env_expand(x) for x in v]
    return v


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return _env_expand(data)


class Settings(BaseModel):
    """Runtime settings for the lookup pipeline."""

    openfda_base_url: str = "https://api.fda.gov/drug"
    openfda_api_key: str = ""
    curated_url: str = ""
    curated_api_key: str = ""
    request_timeout: float = Field(default=15.0, gt=0)
    rate_limit_per_sec: float = Field(default=4.0, gt=0)
    default_search_limit: int = Field(default=20, ge=1)
    min_query_length: int = Field(default=2, ge=1)
    max_healing_attempts: int = Field(default=2, ge=0)
    purpose_max_chars: int = Field(default=200, ge=1)
    user_agent: str = "druglookup/1.0 (+https://github.com/druglookup/druglookup)"


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Build Settings from a YAML file. Resolution order: explicit path, then the
    DRUGLOOKUP_CONFIG env var; with neither, defaults are used. The YAML may
    nest values under a top-level `druglookup:` key.
    """
    path = path or os.getenv(CONFIG_ENV)
    if not path:
        return Settings()
    data = load_yaml(path)
    data = data.get("druglookup", data)
    # unset ${VARS} survive expandvars verbatim; treat them as empty
    cleaned = {
        k: ("" if isinstance(v, str) and v.startswith("${") else v)
        for k, v in data.items()
    }
    return Settings(**cleaned)
