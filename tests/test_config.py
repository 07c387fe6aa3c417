from taskreminder.config import Settings


def make_settings(**overrides) -> Settings:
    # _env_file=None keeps a developer's .env out of the tests
    return Settings(_env_file=None, **overrides)


def test_defaults(monkeypatch):
    for name in ("HF_API_TOKEN", "GEMINI_API_KEY", "SENTRY_DSN", "USER_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)

    settings = make_settings()

    assert settings.default_reminder_minutes == 10
    assert settings.enrichment_provider == "huggingface"
    assert settings.user_timezone == ""
    assert settings.has_enrichment is False
    assert settings.has_sentry is False


def test_huggingface_enrichment_needs_token():
    assert make_settings(hf_api_token="hf_x").has_enrichment is True
    assert make_settings(hf_api_token="", gemini_api_key="g").has_enrichment is False


def test_gemini_enrichment_needs_key():
    settings = make_settings(enrichment_provider="gemini", gemini_api_key="g", hf_api_token="")
    assert settings.has_enrichment is True
    assert make_settings(enrichment_provider="gemini", gemini_api_key="").has_enrichment is False


def test_enrichment_can_be_disabled():
    assert make_settings(hf_api_token="hf_x", enrichment_enabled=False).has_enrichment is False


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("DEFAULT_REMINDER_MINUTES", "25")
    monkeypatch.setenv("USER_TIMEZONE", "Europe/Berlin")

    settings = make_settings()

    assert settings.default_reminder_minutes == 25
    assert settings.user_timezone == "Europe/Berlin"
