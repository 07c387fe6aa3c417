import pytest

from taskreminder.services.reminder_offset import (
    OFFSET_RULES,
    extract_reminder_offset,
    to_minutes,
)


class TestAdvanceNotice:
    def test_minutes_before(self):
        result = extract_reminder_offset(
            "meeting with team on Friday at 10 AM, remind me 30 minutes before"
        )
        assert result.minutes_before == 30
        assert result.is_direct_timing is False
        assert result.remaining_text == "meeting with team on Friday at 10 AM,"

    def test_hours_ahead_converted_to_minutes(self):
        result = extract_reminder_offset("dentist tomorrow at 9 am, remind me 2 hours ahead")
        assert result.minutes_before == 120

    def test_set_reminder_before(self):
        result = extract_reminder_offset("set a reminder for 15 min before the standup")
        assert result.minutes_before == 15
        assert "the standup" in result.remaining_text

    def test_alert_me_hr_before(self):
        result = extract_reminder_offset("alert me 1 hr before the call")
        assert result.minutes_before == 60
        assert result.matched_phrase == "alert me 1 hr before"

    def test_notify_me_before(self):
        result = extract_reminder_offset("notify me 5 minutes before lunch")
        assert result.minutes_before == 5

    def test_case_insensitive(self):
        result = extract_reminder_offset("Pay rent REMIND ME 10 MINUTES BEFORE")
        assert result.minutes_before == 10
        assert result.remaining_text == "Pay rent"


class TestDirectTiming:
    def test_remind_me_in(self):
        result = extract_reminder_offset("remind me in 1 hour to check emails")
        assert result.is_direct_timing is True
        assert result.minutes_before == 0
        assert result.remaining_text == "check emails"
        assert result.matched_phrase == "remind me in 1 hour"

    def test_only_a_whole_word_to_is_dropped(self):
        result = extract_reminder_offset("remind me in 1 hour tomorrow-ish")
        assert result.remaining_text == "tomorrow-ish"
        result = extract_reminder_offset("remind me in 1 hour toast the bread")
        assert result.remaining_text == "toast the bread"

    def test_alert_me_after(self):
        result = extract_reminder_offset("alert me after 20 minutes")
        assert result.is_direct_timing is True
        assert result.minutes_before == 0

    def test_notification_in(self):
        result = extract_reminder_offset("stretch, notification in 45 mins")
        assert result.is_direct_timing is True


class TestDefaults:
    def test_no_reminder_phrase(self):
        result = extract_reminder_offset("remind me to call mom at 3 PM")
        assert result.minutes_before == 10
        assert result.is_direct_timing is False
        assert result.remaining_text == "remind me to call mom at 3 PM"
        assert result.matched_phrase == ""

    def test_custom_default(self):
        result = extract_reminder_offset("buy milk", default_minutes=15)
        assert result.minutes_before == 15


def test_advance_rules_come_before_direct_rules():
    assert [rule.direct for rule in OFFSET_RULES] == [False, False, False, True, True, True, True]


def test_first_matching_rule_wins_over_earlier_position():
    # The direct-timing phrase appears first in the text, but advance-notice
    # rules are tried first.
    result = extract_reminder_offset("alert me in 5 minutes, remind me 30 minutes before")
    assert result.minutes_before == 30
    assert result.is_direct_timing is False


@pytest.mark.parametrize(
    ("amount", "unit", "expected"),
    [(5, "min", 5), (5, "minute", 5), (2, "hour", 120), (3, "hr", 180), (1, "HOUR", 60)],
)
def test_to_minutes(amount, unit, expected):
    assert to_minutes(amount, unit) == expected
