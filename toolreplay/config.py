"""
Harness configuration - pydantic model plus YAML loading with ${VAR} substitution
"""

import logging
import os
import re
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class HarnessConfig(BaseModel):
    """
    Settings for one scripted exchange.

    Example config.yaml:
        harness:
          transport: http
          port: 0
          api_key: ${STUB_CREDENTIAL}
    """
    host: str = "127.0.0.1"
    port: int = 8089
    base_path: str = "/v1"
    api_key: str = "whatever"
    model: str = "gpt-3.5-turbo"

    # "inprocess" routes requests through an httpx transport, "http" binds a real port
    transport: Literal["inprocess", "http"] = "inprocess"

    prompt: str = "ignored..."
    max_iterations: int = 10
    timeout: float = 10.0

    model_config = ConfigDict(extra="ignore")  # Ignore unknown fields in YAML

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}{self.base_path}"

    def with_port(self, port: int) -> "HarnessConfig":
        """Copy with the port actually bound (when configured with port 0)"""
        return self.model_copy(update={"port": port})


def _load_yaml(path: str) -> Dict[str, Any]:
    """Read YAML config file with ${VAR} environment variable substitution."""
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigurationError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = re.sub(r"\$\{(\w+)\}", _replace_env, raw)
    return yaml.safe_load(resolved) or {}


def load_config(path: Optional[str] = None, **overrides) -> HarnessConfig:
    """
    Load a HarnessConfig.

    Args:
        path: YAML file; either a flat mapping or one with a ``harness:`` section.
            Defaults are used when None.
        **overrides: Values that win over the file

    Raises:
        ConfigurationError: On a missing environment variable or invalid values
    """
    data: Dict[str, Any] = {}
    if path:
        loaded = _load_yaml(path)
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file '{path}' must contain a mapping")
        data = loaded.get("harness", loaded)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"'harness' section of '{path}' must be a mapping")
        data = dict(data)
        logger.info(f"Harness config loaded from {path}")

    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return HarnessConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid harness config: {e}") from e
