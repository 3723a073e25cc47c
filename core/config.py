"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for credcore happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Singleton via lru_cache: get_settings() instantiates Settings once at first
call and returns the cached instance afterwards. The auth core never calls
get_settings() itself; the API lifespan and the CLI read the key here and
hand it to TokenIssuer.configure() explicitly.

TOKEN_KEY policy:
  Dev mode (DEBUG=true) with no key set: a random key is generated with a
  warning. Tokens do not survive a restart -- acceptable for local dev.

  Production mode: an empty key is left empty. TokenIssuer.configure()
  rejects it with ConfigurationError(MISSING_KEY) at startup, and also
  rejects keys shorter than 64 bytes, so the process never serves traffic
  with a weak key.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("credcore.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in tests
    without a real .env file. Field names map to upper-case env var names
    (token_key -> TOKEN_KEY).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured".
    token_key: str = ""

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = "sqlite:///credcore.db"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost:4200", "https://localhost:4200"]

    @model_validator(mode="after")
    def generate_dev_token_key(self) -> "Settings":
        """Generate a throwaway TOKEN_KEY in dev mode when none is configured.

        64 random bytes as hex gives a 128-character key, comfortably above
        the 64-byte minimum TokenIssuer enforces.
        """
        if not self.token_key and self.debug:
            self.token_key = secrets.token_hex(64)
            logger.warning("Using auto-generated TOKEN_KEY. Issued tokens will not survive a restart.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
