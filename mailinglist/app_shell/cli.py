import argparse
import json
import logging
import os
import sys
from pathlib import Path

from mailinglist.adapters.sqlite.migrator import SQLiteMigrator
from mailinglist.app_shell.config import ConfigurationError, Settings, load_settings
from mailinglist.app_shell.context import ServiceContext
from mailinglist.app_shell.logging_setup import configure_logging
from mailinglist.core.entities import NewsletterIssue
from mailinglist.core.errors import StoreError

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> int:
    db_dir = os.path.dirname(settings.database.path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    migrator = SQLiteMigrator(settings.database.path, settings.database.migrations_dir)
    try:
        applied = migrator.run_migrations()
    except (RuntimeError, OSError) as e:
        logger.error("Migration failed: %s", e)
        return 1
    print(f"Applied {len(applied)} migration(s).")
    return 0


def handle_deliver(settings: Settings, args: argparse.Namespace) -> int:
    html_path = Path(args.html)
    text_path = Path(args.text)
    for path in (html_path, text_path):
        if not path.exists():
            logger.error("File %s not found.", path)
            return 2

    try:
        issue = NewsletterIssue(
            title=args.title,
            html_content=html_path.read_text(encoding="utf-8"),
            text_content=text_path.read_text(encoding="utf-8"),
        )
    except ValueError as e:
        logger.error("Invalid issue: %s", e)
        return 2

    ctx = ServiceContext.create(settings)
    try:
        report = ctx.delivery_pipeline.deliver(issue)
    except StoreError as e:
        logger.error("Delivery aborted: %s", e)
        return 1

    print(json.dumps(report.to_dict(), indent=2))
    return 1 if report.has_failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mailing list CLI")
    parser.add_argument(
        "--config-dir",
        default="configuration",
        help="Directory holding base.yaml and <environment>.yaml",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # deliver
    deliver_parser = subparsers.add_parser(
        "deliver", help="Send a newsletter issue to all confirmed subscribers"
    )
    deliver_parser.add_argument("--title", required=True, help="Issue title (email subject)")
    deliver_parser.add_argument("--html", required=True, help="Path to the HTML body")
    deliver_parser.add_argument("--text", required=True, help="Path to the plain text body")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(Path(args.config_dir))
    except ConfigurationError as e:
        print(f"CRITICAL: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.application.log_level)

    if args.command == "migrate":
        return handle_migrate(settings, args)
    elif args.command == "deliver":
        return handle_deliver(settings, args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
