import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests
import yaml
from dotenv import load_dotenv

DEFAULT_API_URL = "https://api.hybiscus.dev/api/v1/"
DEFAULT_TIMEOUT = 10


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def load_endpoints() -> Dict[str, str]:
    """Load the endpoint name -> path mapping shipped with the package.

    Raises:
        FileNotFoundError: If endpoints.yaml is not found.
        yaml.YAMLError: If the YAML file contains invalid syntax.
    """
    config_dir = os.path.dirname(__file__)
    with open(os.path.join(config_dir, "endpoints.yaml"), "r") as f:
        data = yaml.safe_load(f) or {}
    return dict(data.get("hybiscus", {}))


@dataclass
class HybiscusConfig:
    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    endpoints: Dict[str, str] = field(default_factory=load_endpoints)
    # HTTP session handle; tests pass a session mounted with a mock adapter
    session: Optional[requests.Session] = None

    def endpoint(self, name: str) -> str:
        try:
            return self.endpoints[name]
        except KeyError:
            raise ConfigurationError(f"Unknown endpoint: {name}") from None


def load_config(env_file: Optional[str] = None) -> HybiscusConfig:
    """Build a configuration value from environment variables.

    Args:
        env_file: Optional path to a .env file loaded before reading the
            environment. Variables already set in the environment win.

    Returns:
        A HybiscusConfig instance. The API key may be None here; the client
        refuses to start without one.

    Raises:
        ConfigurationError: If HYBISCUS_TIMEOUT is not a number.
    """
    if env_file:
        load_dotenv(env_file)

    api_key = os.getenv("HYBISCUS_API_KEY", "").strip() or None
    api_url = os.getenv("HYBISCUS_API_URL", "").strip() or DEFAULT_API_URL

    raw_timeout = os.getenv("HYBISCUS_TIMEOUT", "").strip()
    timeout: float = DEFAULT_TIMEOUT
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"HYBISCUS_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from None

    return HybiscusConfig(api_key=api_key, api_url=api_url, timeout=timeout)
