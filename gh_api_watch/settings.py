"""Application settings loaded from environment variables and .env file."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import RunOptions

DEFAULT_DAYS_BACK = 7
DEFAULT_MAX_PAGES = 2
DEFAULT_PER_PAGE = 50
DEFAULT_DETAIL_WORKERS = 2
DEFAULT_EVENT_LOG_LIMIT = 1000
DEFAULT_QUERIES_FILE = "queries.yaml"

# (low, high, default); out-of-range values fall back to the default
BOUNDS = {
    "days_back": (1, 365, DEFAULT_DAYS_BACK),
    "max_pages": (1, 10, DEFAULT_MAX_PAGES),
    "per_page": (10, 100, DEFAULT_PER_PAGE),
    "detail_workers": (1, 8, DEFAULT_DETAIL_WORKERS),
}


def clamp_setting(name: str, value: int | None) -> int:
    """Return value if within the allowed range for name, else the default."""
    low, high, default = BOUNDS[name]
    if value is None or not low <= value <= high:
        return default
    return value


class Settings(BaseSettings):
    """Settings for the search watcher."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_token: str | None = None
    days_back: int = DEFAULT_DAYS_BACK
    max_pages: int = DEFAULT_MAX_PAGES
    per_page: int = DEFAULT_PER_PAGE
    use_commit_check: bool = True
    include_repo_search: bool = True
    queries_file: str = DEFAULT_QUERIES_FILE
    detail_workers: int = DEFAULT_DETAIL_WORKERS
    event_log_limit: int = DEFAULT_EVENT_LOG_LIMIT

    @field_validator("days_back", "max_pages", "per_page", "detail_workers")
    @classmethod
    def _within_bounds(cls, value: int, info) -> int:
        return clamp_setting(info.field_name, value)

    @field_validator("event_log_limit")
    @classmethod
    def _positive_limit(cls, value: int) -> int:
        return value if value >= 1 else DEFAULT_EVENT_LOG_LIMIT

    def run_options(self) -> RunOptions:
        return RunOptions(
            days_back=self.days_back,
            max_pages=self.max_pages,
            per_page=self.per_page,
            use_commit_check=self.use_commit_check,
            include_repo_search=self.include_repo_search,
            detail_workers=self.detail_workers,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
