"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``DCRWALLET_``, nested via ``__``)
2. YAML config file (``config_path`` / ``DCRWALLET_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dcr_wallet.dcr.params import Network, NetworkParams, params_for

# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class FeeConfig(BaseSettings):
    """Fee policy settings."""

    model_config = SettingsConfigDict(
        env_prefix="DCRWALLET_FEE__",
        case_sensitive=False,
    )

    relay_fee_per_kb: int | None = Field(
        default=None,
        description="Fee rate in atoms per kB; network default when unset",
    )

    @field_validator("relay_fee_per_kb")
    @classmethod
    def _non_negative(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            msg = "relay_fee_per_kb must not be negative"
            raise ValueError(msg)
        return value


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``DCRWALLET_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="DCRWALLET_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    log_level: str = "INFO"
    config_path: str = ""

    network: Network = Field(
        default=Network.TESTNET,
        description="Network: mainnet, testnet or simnet",
    )
    fee: FeeConfig = Field(default_factory=FeeConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))

    def chain_params(self) -> NetworkParams:
        """Parameters of the configured network."""
        return params_for(self.network)

    def relay_fee_per_kb(self) -> int:
        """Configured fee rate, or the network default when unset."""
        if self.fee.relay_fee_per_kb is None:
            return self.chain_params().default_relay_fee_per_kb
        return self.fee.relay_fee_per_kb

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()
