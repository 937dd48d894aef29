"""Configuration loading for fbTimeCheck."""
import os
from dataclasses import dataclass, field, replace
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

ENV_FILE_NAME = ".env"
DEFAULT_BASE_URL = "https://api.freshbooks.com"
DEFAULT_MINIMUM_HOURS_PER_MONTH = 160

ACCESS_TOKEN_KEY = "FRESHBOOKS_ACCESS_TOKEN"
REFRESH_TOKEN_KEY = "FRESHBOOKS_REFRESH_TOKEN"

# Config attribute -> environment variable
REQUIRED_SETTINGS = {
    "client_id": "FRESHBOOKS_CLIENT_ID",
    "client_secret": "FRESHBOOKS_CLIENT_SECRET",
    "redirect_uri": "FRESHBOOKS_REDIRECT_URI",
    "business_id": "FRESHBOOKS_BUSINESS_ID",
}


@dataclass(frozen=True)
class Credentials:
    """OAuth token pair. Token rotation produces a new value."""

    access_token: str = ""
    refresh_token: str = ""

    def with_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> "Credentials":
        """Return new credentials, keeping the current refresh token if none is given."""
        return replace(
            self,
            access_token=access_token,
            refresh_token=refresh_token or self.refresh_token,
        )

    @property
    def has_access_token(self) -> bool:
        return bool(self.access_token and self.access_token.strip())


@dataclass(frozen=True)
class Config:
    """Settings loaded once at startup and passed to every collaborator."""

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    business_id: str = ""
    base_url: str = DEFAULT_BASE_URL
    env_path: str = ENV_FILE_NAME
    minimum_hours_per_month: int = DEFAULT_MINIMUM_HOURS_PER_MONTH
    credentials: Credentials = field(default_factory=Credentials)

    def validate(self) -> None:
        """Check that all required settings are present.

        Raises:
            ConfigError: If a required setting is missing
        """
        for attr, env_key in REQUIRED_SETTINGS.items():
            if not getattr(self, attr):
                raise ConfigError(f"Missing required environment variable: {env_key}")


def get_env_path() -> str:
    """Get the path of the env file (FRESHBOOKS_ENV_FILE or ./.env)."""
    return os.getenv("FRESHBOOKS_ENV_FILE") or os.path.join(os.getcwd(), ENV_FILE_NAME)


def load_environment(env_path: str) -> None:
    """Load environment variables from the env file if it exists.

    Variables already exported in the shell take precedence.
    """
    if os.path.exists(env_path):
        load_dotenv(env_path, override=False)


def _get_minimum_hours() -> int:
    value = os.getenv("FRESHBOOKS_MIN_MONTHLY_HOURS")
    if not value:
        return DEFAULT_MINIMUM_HOURS_PER_MONTH
    try:
        minimum = int(value)
    except ValueError:
        raise ConfigError(f"FRESHBOOKS_MIN_MONTHLY_HOURS must be an integer, got '{value}'")
    if minimum < 0:
        raise ConfigError("FRESHBOOKS_MIN_MONTHLY_HOURS must not be negative")
    return minimum


def load_config(env_path: Optional[str] = None) -> Config:
    """Build the configuration from the env file and the process environment.

    Args:
        env_path: Path to the env file (optional, defaults to get_env_path())

    Returns:
        Config instance
    """
    env_path = env_path or get_env_path()
    load_environment(env_path)

    return Config(
        client_id=os.getenv("FRESHBOOKS_CLIENT_ID", ""),
        client_secret=os.getenv("FRESHBOOKS_CLIENT_SECRET", ""),
        redirect_uri=os.getenv("FRESHBOOKS_REDIRECT_URI", ""),
        business_id=os.getenv("FRESHBOOKS_BUSINESS_ID", ""),
        base_url=(os.getenv("FRESHBOOKS_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        env_path=env_path,
        minimum_hours_per_month=_get_minimum_hours(),
        credentials=Credentials(
            access_token=os.getenv(ACCESS_TOKEN_KEY, ""),
            refresh_token=os.getenv(REFRESH_TOKEN_KEY, ""),
        ),
    )
