"""Tests for Sentry error tracking integration."""

from unittest.mock import patch

import httpx
from sentry_sdk.integrations.logging import LoggingIntegration

import taskreminder.sentry
from taskreminder.sentry import (
    _before_send,
    _scrub_dict,
    add_breadcrumb,
    flush,
    init_sentry,
    is_enabled,
)


class TestSentryInit:
    def setup_method(self) -> None:
        taskreminder.sentry._initialized = False

    def teardown_method(self) -> None:
        taskreminder.sentry._initialized = False

    def test_init_without_dsn_returns_false(self) -> None:
        assert init_sentry(dsn="") is False
        assert is_enabled() is False

    def test_init_with_none_dsn_returns_false(self) -> None:
        assert init_sentry(dsn=None) is False

    def test_init_with_dsn(self) -> None:
        with patch("taskreminder.sentry.sentry_sdk.init") as sdk_init:
            assert init_sentry(dsn="https://key@sentry.example/1", release="t@1") is True

        assert is_enabled() is True
        kwargs = sdk_init.call_args.kwargs
        assert kwargs["release"] == "t@1"
        assert kwargs["send_default_pii"] is False
        assert kwargs["before_send"] is _before_send
        integration = kwargs["integrations"][0]
        assert isinstance(integration, LoggingIntegration)

    def test_second_init_is_noop(self) -> None:
        with patch("taskreminder.sentry.sentry_sdk.init") as sdk_init:
            init_sentry(dsn="https://key@sentry.example/1", release="t@1")
            init_sentry(dsn="https://key@sentry.example/1", release="t@1")

        sdk_init.assert_called_once()


class TestHelpersWhenDisabled:
    def setup_method(self) -> None:
        taskreminder.sentry._initialized = False

    def test_breadcrumb_and_flush_are_silent(self) -> None:
        with (
            patch("taskreminder.sentry.sentry_sdk.add_breadcrumb") as crumb,
            patch("taskreminder.sentry.sentry_sdk.flush") as sdk_flush,
        ):
            add_breadcrumb("parsed", data={"title": "Call mom"})
            flush()
        crumb.assert_not_called()
        sdk_flush.assert_not_called()


class TestHelpersWhenEnabled:
    def setup_method(self) -> None:
        taskreminder.sentry._initialized = True

    def teardown_method(self) -> None:
        taskreminder.sentry._initialized = False

    def test_breadcrumb_uses_parser_category(self) -> None:
        with patch("taskreminder.sentry.sentry_sdk.add_breadcrumb") as crumb:
            add_breadcrumb("parsed")
        crumb.assert_called_once_with(message="parsed", category="parser", level="info", data={})


class TestDataScrubbing:
    def test_scrub_token(self) -> None:
        data = {"token": "secret123", "name": "test"}
        _scrub_dict(data)
        assert data == {"token": "[REDACTED]", "name": "test"}

    def test_scrub_nested_dicts(self) -> None:
        data = {"outer": {"authorization": "Bearer hf_xxx", "value": "ok"}, "api_key": "x"}
        _scrub_dict(data)
        assert data["outer"]["authorization"] == "[REDACTED]"
        assert data["outer"]["value"] == "ok"
        assert data["api_key"] == "[REDACTED]"

    def test_scrub_case_insensitive(self) -> None:
        data = {"TOKEN": "secret"}
        _scrub_dict(data)
        assert data["TOKEN"] == "[REDACTED]"

    def test_scrub_provider_credentials(self) -> None:
        data = {
            "hf_api_token": "hf_xxx",
            "gemini_api_key": "g-xxx",
            "sentry_dsn": "https://xxx@sentry.example/1",
        }
        _scrub_dict(data)
        assert all(value == "[REDACTED]" for value in data.values())


class TestBeforeSend:
    def test_filters_network_timeouts(self) -> None:
        error = httpx.ReadTimeout("slow")
        assert _before_send({}, {"exc_info": (type(error), error, None)}) is None

    def test_filters_connect_errors(self) -> None:
        error = httpx.ConnectError("refused")
        assert _before_send({}, {"exc_info": (type(error), error, None)}) is None

    def test_passes_other_exceptions(self) -> None:
        event: dict = {"exception": {}}
        hint = {"exc_info": (RuntimeError, RuntimeError("error"), None)}
        assert _before_send(event, hint) is event

    def test_scrubs_request_and_breadcrumbs(self) -> None:
        event = {
            "request": {"headers": {"authorization": "Bearer xxx"}},
            "breadcrumbs": {"values": [{"data": {"token": "abc", "title": "Call mom"}}]},
        }
        result = _before_send(event, {})
        assert result["request"]["headers"]["authorization"] == "[REDACTED]"
        assert result["breadcrumbs"]["values"][0]["data"] == {
            "token": "[REDACTED]",
            "title": "Call mom",
        }
