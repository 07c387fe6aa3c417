import argparse
import json
import logging
import sys
from datetime import datetime

from taskreminder.config import settings
from taskreminder.sentry import flush as sentry_flush
from taskreminder.sentry import init_sentry


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _build_parser(enrich: bool):
    from taskreminder.services.parser import get_task_parser

    if enrich and settings.has_enrichment:
        from taskreminder.services.llm_parser import get_enriched_parser

        return get_enriched_parser()
    return get_task_parser()


def _parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def parse_message(message: str, now: str | None, enrich: bool) -> int:
    if not message.strip():
        print("Error: message is required", file=sys.stderr)
        return 2

    parser = _build_parser(enrich)
    draft = parser.parse(message, _parse_now(now))
    print(json.dumps(draft.to_dict(), indent=2))
    return 0


def parse_examples(now: str | None, enrich: bool) -> int:
    from taskreminder.services.chatbot import EXAMPLE_MESSAGES

    parser = _build_parser(enrich)
    when = _parse_now(now)
    results = [
        {"message": message, "parsedData": parser.parse(message, when).to_dict()}
        for message in EXAMPLE_MESSAGES
    ]
    print(json.dumps(results, indent=2))
    return 0


def check_config() -> int:
    print("Task Reminder Configuration Check\n")

    checks = [
        ("Enrichment enabled", settings.enrichment_enabled),
        ("Hugging Face token", settings.has_huggingface),
        ("Gemini API key", settings.has_gemini),
        ("Sentry DSN", settings.has_sentry),
    ]
    for name, configured in checks:
        symbol = "+" if configured else "-"
        print(f"  [{symbol}] {name}: {'OK' if configured else 'MISSING'}")

    print()
    print(f"  Provider: {settings.enrichment_provider}")
    print(f"  Timeout: {settings.enrichment_timeout_seconds:.1f}s")
    print(f"  Default reminder: {settings.default_reminder_minutes} min")
    print(f"  Timezone: {settings.user_timezone or 'server local'}")
    print()
    if settings.has_enrichment:
        print("Text-generation enrichment active.")
    else:
        print("Rule-based parsing only.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Natural-language task reminder parser")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    parse_cmd = subparsers.add_parser("parse", help="Parse a message into a task draft")
    parse_cmd.add_argument("message", help="Free-text task message")
    examples_cmd = subparsers.add_parser("examples", help="Parse the sample chatbot messages")
    for cmd in (parse_cmd, examples_cmd):
        cmd.add_argument("--now", help="ISO-8601 timestamp to treat as the current time")
        cmd.add_argument(
            "--no-enrich",
            action="store_true",
            help="Skip text-generation enrichment",
        )
    subparsers.add_parser("check", help="Check configuration")

    args = parser.parse_args(argv)

    setup_logging()
    init_sentry(
        dsn=settings.sentry_dsn if settings.has_sentry else None,
        environment=settings.sentry_environment,
    )

    try:
        if args.command == "parse":
            return parse_message(args.message, args.now, not args.no_enrich)
        if args.command == "examples":
            return parse_examples(args.now, not args.no_enrich)
        if args.command == "check":
            return check_config()
        parser.print_help()
        return 1
    finally:
        sentry_flush(timeout=2.0)


if __name__ == "__main__":
    sys.exit(main())
