# @TASK P0-T0.2 - pydantic-settings 기반 클라이언트 설정

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ScriptO client settings.

    All values are loaded from environment variables.
    A .env file in the working directory is also supported.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Backend ---
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    REQUEST_TIMEOUT: float = 30.0  # seconds, 0 disables the deadline
    HEALTH_PATH: str = "/health"

    # --- Credentials ---
    TOKEN_STORE_PATH: str = "~/.scripto/token.json"  # empty = in-memory only

    # --- Strokes ---
    STROKE_THINNING_THRESHOLD: float = 2.0
    DEFAULT_STROKE_COLOR: str = "black"
    DEFAULT_STROKE_WIDTH: float = 2.0

    @property
    def request_timeout(self) -> float | None:
        """Timeout passed to httpx; ``None`` when the deadline is disabled."""
        return self.REQUEST_TIMEOUT if self.REQUEST_TIMEOUT > 0 else None


@lru_cache
def get_settings() -> Settings:
    """Return cached client settings singleton."""
    return Settings()
