"""
Configuration loader for the Finvu AA consent gateway.

Defaults come from config/finvu_aa_config.yml; environment variables (loaded
from .env by src/api/main.py) override them. Finvu credentials and base URL
have no defaults and must be set, otherwise startup fails fast.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from src.integrations.contracts.finvu import ConsentPurpose
from src.integrations.finvu.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "finvu_aa_config.yml"

REQUIRED_ENV_VARS = ("FINVU_BASE_URL", "FINVU_USER_ID", "FINVU_PASSWORD")

# env var -> (section, key)
_ENV_OVERRIDES = {
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "APP_ENV": ("server", "environment"),
    "FINVU_BASE_URL": ("finvu", "base_url"),
    "FINVU_USER_ID": ("finvu", "user_id"),
    "FINVU_PASSWORD": ("finvu", "password"),
    "FINVU_TIMEOUT_SECONDS": ("finvu", "timeout_seconds"),
    "FINVU_DEFAULT_TEMPLATE": ("finvu", "default_template"),
    "FINVU_LSP_ID": ("finvu", "lsp_id"),
    "FINVU_REDIRECT_URL": ("finvu", "redirect_url"),
    "FINVU_RETURN_URL": ("finvu", "return_url"),
    "FINVU_AA_ID": ("finvu", "aa_id"),
    "FINVU_CONSENT_DESCRIPTION": ("finvu", "consent_description"),
    "REDIS_URL": ("session_store", "url"),
    "REDIS_DB": ("session_store", "db"),
}


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=3002, ge=1, le=65535)
    environment: str = "development"


class PurposeConfig(BaseModel):
    category_type: str = "Financial Reporting"
    code: str = "101"
    ref_uri: str = "https://api.rebit.org.in/aa/purpose/101.xml"
    text: str = "To offer customized financial products"

    def to_purpose(self) -> ConsentPurpose:
        return ConsentPurpose(
            category_type=self.category_type,
            code=self.code,
            ref_uri=self.ref_uri,
            text=self.text,
        )


class FinvuConfig(BaseModel):
    base_url: str
    user_id: str
    password: str = Field(repr=False)
    channel_id: str = "finsense"
    timeout_seconds: float = Field(default=30.0, gt=0)
    default_template: str = "FINVUDEMO_PERIODIC"
    lsp_id: str = "loanseva"
    redirect_url: str = "https://sdkredirect.finvu.in/"
    return_url: str = "http://localhost:8000/buyer/post-aa-consent"
    aa_id: str = "cookiejar-aa@finvu.in"
    consent_description: str = "Gold Loan Account Aggregator Consent"
    generate_redirect_url: str = "https://google.co.in"
    user_session_id: str = "sessionid123"
    customer_id_suffix: str = "@finvu"
    purpose: PurposeConfig = Field(default_factory=PurposeConfig)

    @property
    def v1_base_url(self) -> str:
        return self.base_url.replace("/V2", "/V1")


class SessionStoreConfig(BaseModel):
    url: Optional[str] = None
    db: int = Field(default=0, ge=0)
    health_check_key: str = "__health_check__"
    health_check_ttl: int = Field(default=5, ge=1)
    startup_check_key: str = "__redis_health_check__"
    startup_check_ttl: int = Field(default=10, ge=1)


class GatewayConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    finvu: FinvuConfig
    session_store: SessionStoreConfig = Field(default_factory=SessionStoreConfig)
    integrations_mode: Literal["real", "mock"] = "real"


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Gateway config file not found: {config_path}")
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _apply_env_overrides(data: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    for env_var, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(env_var)
        if value is None or value == "":
            continue
        data.setdefault(section, {})[key] = value

    mode = (environ.get("INTEGRATIONS_MODE") or "").strip().lower()
    if mode in {"mock", "test"}:
        data["integrations_mode"] = "mock"
    elif mode in {"real", "live"}:
        data["integrations_mode"] = "real"
    return data


def load_gateway_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GatewayConfig:
    """
    Load and validate gateway configuration.

    Args:
        config_path: YAML defaults file. Defaults to config/finvu_aa_config.yml
        environ: Environment mapping. Defaults to os.environ

    Raises:
        ConfigurationError: If required variables are missing or values are invalid
    """
    environ = os.environ if environ is None else environ

    missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
    if missing:
        raise ConfigurationError(f"Missing required environment variable(s): {', '.join(missing)}")

    data = _apply_env_overrides(_read_yaml(config_path or DEFAULT_CONFIG_PATH), environ)

    try:
        cfg = GatewayConfig(**data)
    except ValidationError as e:
        logger.error("Gateway config validation failed: %s", e)
        raise ConfigurationError(f"Invalid gateway configuration: {e}") from e

    logger.info("Loaded gateway config (environment=%s, mode=%s)", cfg.server.environment, cfg.integrations_mode)
    return cfg
