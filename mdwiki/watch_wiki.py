#!/usr/bin/env python3
"""
Keep HTML output folders in sync with wiki markdown folders.

Usage:
  mdwiki --input ./wiki --output ./site
  mdwiki --input ./wiki --output ./site --auto-create --ask-to-open
  mdwiki --config wikis.json --render-all
  mdwiki --input ./wiki --output ./site --render-all --once

The --config file is a JSON list of records:
  [{"Name": "Notes", "InputPath": "...", "OutputPath": "...",
    "AutoCreateNewFiles": true, "AskToOpenNewFiles": false}]
"""

from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from .commands import CommandQueue
from .settings import Settings, get_settings
from .wiki_config import WikiConfiguration, WikiConfigurationRecord, load_configurations

logger = logging.getLogger(__name__)


# -- user interaction (main thread only) --
def ask_on_console(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def open_in_browser(path: Path) -> None:
    webbrowser.open(path.resolve().as_uri())


# -- CLI --
def non_negative_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {text}")
    return value


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch wiki markdown folders and regenerate their HTML pages.")
    parser.add_argument("--config", type=Path, help="JSON file with a list of wiki configurations")
    parser.add_argument("--input", type=Path, help="Folder with the markdown documents")
    parser.add_argument("--output", type=Path, help="Folder for the generated HTML pages")
    parser.add_argument("--name", type=str, default="", help="Display name of the configuration")
    parser.add_argument("--auto-create", action="store_true", help="Create missing documents for new wiki links")
    parser.add_argument("--ask-to-open", action="store_true", help="Offer to open documents created from wiki links")
    parser.add_argument("--render-all", action="store_true", help="Render every document before watching")
    parser.add_argument("--once", action="store_true", help="Render every document and exit without watching")
    parser.add_argument("--debounce", type=non_negative_float, help="Seconds to wait for a changed file to settle")
    parser.add_argument("--log-level", type=str, help="Logging level (default from MDWIKI_LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)

    if args.config is None and (args.input is None or args.output is None):
        parser.error("either --config or both --input and --output are required")
    return args


def build_records(args: argparse.Namespace) -> List[WikiConfigurationRecord]:
    if args.config is not None:
        return load_configurations(args.config)
    return [
        WikiConfigurationRecord(
            name=args.name or args.input.name,
            input_path=args.input.expanduser(),
            output_path=args.output.expanduser(),
            auto_create_new_files=args.auto_create,
            ask_to_open_new_files=args.ask_to_open,
        )
    ]


def build_settings(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    updates = {}
    if args.debounce is not None:
        updates["debounce_seconds"] = args.debounce
    if args.log_level:
        updates["log_level"] = args.log_level
    if not updates:
        return settings
    # rebuilt rather than copied so the overrides are validated
    return Settings(**{**settings.model_dump(), **updates})


def run(
    configurations: Sequence[WikiConfiguration],
    commands: CommandQueue,
    render_all: bool = False,
    once: bool = False,
    poll_seconds: float = 0.5,
) -> int:
    """Render and/or watch until interrupted; returns the exit status."""
    if render_all or once:
        for configuration in configurations:
            configuration.render_all()
        commands.run_pending()
    if once:
        return 0

    started = [c for c in configurations if c.start()]
    if not started:
        logger.error("No configuration could be started")
        return 1
    try:
        while True:
            commands.run_pending(timeout=poll_seconds)
    except KeyboardInterrupt:
        logger.info("Stopping")
    finally:
        for configuration in configurations:
            configuration.dispose()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        settings = build_settings(args)
    except ValidationError as exc:
        raise SystemExit(f"Invalid settings: {exc}")
    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")

    try:
        records = build_records(args)
    except (OSError, ValidationError) as exc:
        raise SystemExit(f"Cannot read configurations: {exc}")

    commands = CommandQueue()
    configurations = [
        WikiConfiguration(record, settings, commands, prompt=ask_on_console, opener=open_in_browser)
        for record in records
    ]
    sys.exit(run(configurations, commands, render_all=args.render_all, once=args.once))


if __name__ == "__main__":
    main()
