from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Text-generation enrichment
    enrichment_enabled: bool = True
    enrichment_provider: str = "huggingface"
    enrichment_timeout_seconds: float = 10.0

    hf_api_token: str = ""
    hf_model: str = "google/flan-t5-large"
    hf_api_base: str = "https://api-inference.huggingface.co"

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    # Parser defaults
    default_reminder_minutes: int = 10
    user_timezone: str = ""  # empty = server local time

    # Sentry error tracking
    sentry_dsn: str = ""
    sentry_environment: str = "production"

    log_level: str = "INFO"

    @property
    def has_huggingface(self) -> bool:
        return bool(self.hf_api_token)

    @property
    def has_gemini(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def has_enrichment(self) -> bool:
        if not self.enrichment_enabled:
            return False
        if self.enrichment_provider == "gemini":
            return self.has_gemini
        return self.has_huggingface

    @property
    def has_sentry(self) -> bool:
        return bool(self.sentry_dsn)


settings = Settings()
