"""
Service configuration, read once from the environment at startup.
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

DEFAULT_PORT = 8080
DEFAULT_HOST = "127.0.0.1"
CDP_ENDPOINT_URL_DEFAULT = "http://localhost:9222"


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("true", "1", "yes")


@dataclass
class ServiceConfig:
    """Configuration shared by the session provider and the request handler."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    use_local_playwright: bool = False
    cdp_endpoint_url: str = CDP_ENDPOINT_URL_DEFAULT
    headless: bool = True
    script_timeout: Optional[float] = None

    @property
    def mode(self) -> str:
        return "local" if self.use_local_playwright else "cdp"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "mode": self.mode,
            "cdp_endpoint": None if self.use_local_playwright else self.cdp_endpoint_url,
            "headless": self.headless,
            "script_timeout": self.script_timeout,
        }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        env = os.environ if environ is None else environ

        try:
            port = int(env.get("PORT") or DEFAULT_PORT)
        except ValueError:
            raise ConfigError(f"Invalid PORT: {env.get('PORT')!r}")

        timeout_raw = env.get("SCRIPT_TIMEOUT_SECONDS", "").strip()
        script_timeout = None
        if timeout_raw:
            try:
                script_timeout = float(timeout_raw)
            except ValueError:
                raise ConfigError(f"Invalid SCRIPT_TIMEOUT_SECONDS: {timeout_raw!r}")
            if script_timeout < 0:
                raise ConfigError("SCRIPT_TIMEOUT_SECONDS must not be negative")
            # 0 keeps the unbounded behaviour
            if script_timeout == 0:
                script_timeout = None

        return cls(
            host=env.get("HOST") or DEFAULT_HOST,
            port=port,
            # Only the exact string "true" enables local launch
            use_local_playwright=env.get("USE_LOCAL_PLAYWRIGHT") == "true",
            cdp_endpoint_url=env.get("CDP_ENDPOINT_URL") or CDP_ENDPOINT_URL_DEFAULT,
            headless=_parse_bool(env.get("HEADLESS"), True),
            script_timeout=script_timeout,
        )
