import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_PLACEHOLDER_TOKENS = frozenset({"your-api-token", "changeme"})
_MIN_TOKEN_LENGTH = 10
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _load_env() -> None:
    app_env = os.getenv("APP_ENV", "local")
    # project root (confluence_mcp/configuration/settings.py -> ../../)
    project_root = Path(__file__).parent.parent.parent
    load_dotenv(project_root / f".env.{app_env}")
    load_dotenv(project_root / ".env")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    app_env: str
    server_name: str
    site_name: str               # host or URL; ConfluenceAdapter derives the API URLs
    api_token: str
    email: str | None            # set: basic auth, unset: bearer token
    skip_connection_test: bool
    request_timeout: float
    log_level: str
    log_dir: str


def build_settings() -> Settings:
    """Read configuration once at startup. Missing values are fatal."""
    _load_env()

    required_vars = ("CONFLUENCE_SITE_NAME", "CONFLUENCE_API_TOKEN")
    missing = [k for k in required_vars if not os.getenv(k)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    api_token = os.environ["CONFLUENCE_API_TOKEN"].strip()
    if api_token in _PLACEHOLDER_TOKENS or len(api_token) < _MIN_TOKEN_LENGTH:
        raise RuntimeError("CONFLUENCE_API_TOKEN appears to be invalid or not set")

    timeout_raw = os.getenv("REQUEST_TIMEOUT", "30")
    try:
        request_timeout = float(timeout_raw)
    except ValueError:
        raise RuntimeError(f"REQUEST_TIMEOUT must be a number of seconds: {timeout_raw!r}")

    project_root = Path(__file__).parent.parent.parent

    return Settings(
        app_env=os.getenv("APP_ENV", "local"),
        server_name=os.getenv("SERVER_NAME", "confluence-cloud-mcp-server"),
        site_name=os.environ["CONFLUENCE_SITE_NAME"].strip(),
        api_token=api_token,
        email=os.getenv("CONFLUENCE_EMAIL") or None,
        skip_connection_test=_env_flag("SKIP_API_CONNECTION_TEST"),
        request_timeout=request_timeout,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_dir=os.getenv("LOG_DIR", str(project_root / "logs")),
    )
