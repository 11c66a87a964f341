import os

class Settings:
    """Application settings, read from environment variables on every access."""

    @property
    def app_name(self) -> str:
        return "Visitor Stats Worker"

    @property
    def salt(self) -> str:
        return os.getenv("SALT", "")

    @property
    def api_key(self) -> str:
        return os.getenv("API_KEY", "")

    @property
    def trust_x_forwarded_for(self) -> bool:
        # only enable behind a proxy that overwrites X-Forwarded-For
        return os.getenv("TRUST_X_FORWARDED_FOR", "").lower() in ("1", "true", "yes")

    @property
    def total_cache_ttl_seconds(self) -> int:
        return int(os.getenv("TOTAL_CACHE_TTL_SECONDS", "60"))

    @property
    def retention_days(self) -> int:
        return int(os.getenv("RETENTION_DAYS", "90"))

    @property
    def retention_sweep_interval_seconds(self) -> int:
        # 0 disables the in-process sweeper (cron calls cleanup_visits.py instead)
        return int(os.getenv("RETENTION_SWEEP_INTERVAL_SECONDS", "0"))

_settings_instance = None

def get_settings() -> Settings:
    """Returns the shared Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance

def clear_settings_cache():
    global _settings_instance
    _settings_instance = None
