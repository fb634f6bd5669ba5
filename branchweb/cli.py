"""CLI interface for the Branch client."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from branchweb.client import Branch
from branchweb.core.config import Config, load_config
from branchweb.core.logging import setup_logging
from branchweb.errors import BranchError
from branchweb.model.page import PageContext

logger = logging.getLogger(__name__)

USER_AGENT = "branchweb-cli/0.1.0"


def parse_json_arg(value: str | None) -> dict[str, Any]:
    """argparse type for JSON object arguments. An empty value means {}."""
    if not value:
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise argparse.ArgumentTypeError(f"expected a JSON object, got: {value}")
    return parsed


def build_config(args: argparse.Namespace) -> Config:
    """Load the config file and apply command-line overrides.

    The CLI keeps its session in a file so it survives between invocations.
    """
    overrides = {
        "app_id": args.app_id,
        "storage": {"backend": "file", "path": args.storage},
        "logging": {"level": args.log_level},
    }
    return load_config(args.config, overrides=overrides)


async def run_command(branch: Branch, args: argparse.Namespace) -> Any:
    """Initialize the session and run the selected command."""
    session = await branch.initialize()
    command = args.command

    if command == "init":
        return session
    if command == "identify":
        return await branch.set_identity(args.identity)
    if command == "logout":
        return await branch.logout()
    if command == "event":
        return await branch.event(args.name, args.metadata or {})
    if command == "link":
        request = {"data": args.data or {}}
        for name in ("channel", "feature", "stage"):
            if getattr(args, name):
                request[name] = getattr(args, name)
        if args.tags:
            request["tags"] = args.tags
        return {"url": await branch.link(request)}
    if command == "click":
        return await branch.link_click(args.url)
    if command == "sms":
        request = {"phone": args.phone, "data": args.data or {}}
        if args.new:
            return await branch.send_sms_new(request)
        return await branch.send_sms(request)
    if command == "referrals":
        return await branch.referrals()
    if command == "credits":
        return await branch.credits()
    if command == "redeem":
        return await branch.redeem(args.amount, args.bucket)
    raise ValueError(f"Unknown command: {command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branchweb",
        description="Talk to the Branch deep linking API from the command line",
    )
    parser.add_argument("--config", "-c", type=Path, default=None, help="Path to YAML config file")
    parser.add_argument("--app-id", help="Branch app ID (overrides config)")
    parser.add_argument("--storage", type=Path, help="Session file (overrides config)")
    parser.add_argument("--page-url", default="", help="Page URL; a #r:<id> fragment marks a link arrival")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="Start or resume the session")

    identify = subparsers.add_parser("identify", help="Set the user identity")
    identify.add_argument("identity")

    subparsers.add_parser("logout", help="Log out the current identity")

    event = subparsers.add_parser("event", help="Track an event")
    event.add_argument("name")
    event.add_argument("--metadata", type=parse_json_arg, help="Event metadata as a JSON object")

    link = subparsers.add_parser("link", help="Create a deep link")
    link.add_argument("--data", type=parse_json_arg, help="Link data as a JSON object")
    link.add_argument("--channel")
    link.add_argument("--feature")
    link.add_argument("--stage")
    link.add_argument("--tags", nargs="*")

    click = subparsers.add_parser("click", help="Register a click on a link")
    click.add_argument("url")

    sms = subparsers.add_parser("sms", help="Text a link to a phone number")
    sms.add_argument("phone")
    sms.add_argument("--data", type=parse_json_arg, help="Link data as a JSON object")
    sms.add_argument("--new", action="store_true", help="Always create a new link")

    subparsers.add_parser("referrals", help="Show referral counts")
    subparsers.add_parser("credits", help="Show credit balances")

    redeem = subparsers.add_parser("redeem", help="Redeem credits")
    redeem.add_argument("amount", type=int)
    redeem.add_argument("bucket")

    return parser


async def run(args: argparse.Namespace) -> int:
    config = build_config(args)
    setup_logging(
        level=config.logging.level,
        directory=config.logging.directory,
        max_size_mb=config.logging.max_size_mb,
        backup_count=config.logging.backup_count,
        to_file=config.logging.to_file,
    )

    page = PageContext.from_url(args.page_url, user_agent=USER_AGENT)
    async with Branch(config, page=page) as branch:
        try:
            result = await run_command(branch, args)
        except BranchError as e:
            logger.error(f"{args.command} failed: {e}")
            return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    # Load .env BEFORE config so ${VAR} expansion works
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        exit_code = asyncio.run(run(args))
    except KeyboardInterrupt:
        return
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Invalid YAML in config: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
