#!/usr/bin/env python3
"""
ELIZA Responder - Main Entry Point
==================================

This is the main entry point for the ELIZA responder.
It provides a command-line interface for chatting with the
responder and for inspecting rule tables.

Usage:
    python main.py                          # Chat on stdin/stdout
    python main.py --say "I need a break"   # One reply
    python main.py --tui                    # Start terminal UI
    python main.py --web                    # Start web UI
    python main.py --check-rules            # Validate the active rule table
    python main.py --export-rules rules.txt # Write the active rule table
"""

import sys
import argparse
import random
from pathlib import Path
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, Config
from core.logging import setup_logging, get_logger
from core.exceptions import ElizaError, PatternCompileFailure
from rules.loader import is_url, save_rule_table
from rules.patterns import RegexPattern
from rules.table import RuleTable
from rules.templates import placeholders
from services.responder import Responder, create_responder

logger = get_logger("main")

EXIT_WORDS = ("quit", "exit", "bye", "goodbye")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ELIZA Responder - rule-based conversational responder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                             Chat in the terminal
  python main.py --say "I am tired"          Print one reply
  python main.py --rules my_rules.txt        Chat using rules from a file
  python main.py --web --port 9000           Start web UI on port 9000
  python main.py --tui                       Start terminal UI
  python main.py --check-rules               Validate the active rules
  python main.py --export-rules rules.yaml   Save the active rules as YAML
        """
    )

    # Mode selection (mutually exclusive)
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--chat",
        action="store_true",
        help="Chat on stdin/stdout (default)"
    )
    mode_group.add_argument(
        "--say",
        type=str,
        metavar="TEXT",
        help="Print the reply to TEXT and exit"
    )
    mode_group.add_argument(
        "--tui",
        action="store_true",
        help="Start terminal UI"
    )
    mode_group.add_argument(
        "--web",
        action="store_true",
        help="Start web UI server"
    )
    mode_group.add_argument(
        "--check-rules",
        action="store_true",
        help="Compile every pattern and report problems"
    )
    mode_group.add_argument(
        "--export-rules",
        type=str,
        metavar="PATH",
        help="Write the active rule table (.yaml/.yml for YAML, otherwise line format)"
    )

    # Optional arguments
    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--rules",
        type=str,
        metavar="SOURCE",
        help="Rule file path or http(s) URL (overrides configuration)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject rule files with grammar violations"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for template selection"
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port for web UI (default from configuration)"
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Host for web UI (default from configuration)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    return parser.parse_args(argv)


def apply_overrides(config: Config, args: argparse.Namespace) -> None:
    """Apply command-line overrides to the loaded configuration."""
    if args.rules:
        if is_url(args.rules):
            config.rules.source = "url"
            config.rules.url = args.rules
        else:
            config.rules.source = "file"
            config.rules.path = args.rules
    if args.strict:
        config.rules.strict_parsing = True
    if args.seed is not None:
        config.engine.seed = args.seed
    if args.host:
        config.ui.web_host = args.host
    if args.port:
        config.ui.web_port = args.port
    if args.debug:
        config.debug = True
        config.logging.level = "DEBUG"

    config.validate()


def run_chat(responder: Responder, config: Config) -> None:
    """Line-based chat loop on stdin/stdout."""
    print(f"{config.ui.bot_label}: Hello. How are you feeling today?")

    while True:
        try:
            line = input(f"{config.ui.user_label}: ")
        except EOFError:
            print()
            break

        message = line.strip()
        if not message:
            continue
        if message.lower() in EXIT_WORDS:
            print(f"{config.ui.bot_label}: Goodbye. It was nice talking to you.")
            break

        print(f"{config.ui.bot_label}: {responder.respond(message)}")


def check_rules(table: RuleTable) -> int:
    """
    Report invalid patterns, out-of-range placeholders and a missing
    catch-all.

    Returns:
        Number of problems found
    """
    problems = 0

    print(f"\nChecking {len(table)} rules")
    print("-" * 30)

    for position, rule in enumerate(table, start=1):
        group_count = 0
        if isinstance(rule.pattern, RegexPattern):
            try:
                group_count = rule.pattern.compile().groups
            except PatternCompileFailure as e:
                print(f"  ✗ {position}. {rule.label}: {e.message}")
                problems += 1
                continue

        for template in rule.templates:
            unknown = [k for k in placeholders(template) if k < 1 or k > group_count]
            if unknown:
                refs = ", ".join(f"${k}" for k in unknown)
                print(f"  ! {position}. {rule.label}: {refs} has no matching group in {template!r}")
                problems += 1

    if table.has_catch_all():
        print("  ✓ Last rule is a catch-all")
    else:
        print("  ! No catch-all rule; unmatched input gets the fallback reply")

    print(f"\n{problems} problem(s) found")
    return problems


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        apply_overrides(config, args)

        setup_logging(
            log_dir=config.logging.log_dir or None,
            log_level=config.logging.level,
            json_format=config.logging.json_format,
            console_output=True
        )

        if args.web:
            from ui.web.app import run_app
            run_app(config.ui.web_host, config.ui.web_port, config.debug, config=config)
            return 0

        if args.tui:
            from ui.terminal.app import run_tui
            run_tui(config)
            return 0

        # One-shot modes need the real table, not a placeholder
        rng = random.Random(config.engine.seed)
        if args.say is not None or args.check_rules or args.export_rules:
            responder = Responder(config, rng=rng)
        else:
            responder = create_responder(config, rng=rng)

        if args.say is not None:
            print(responder.respond(args.say))
        elif args.check_rules:
            return 1 if check_rules(responder.table) else 0
        elif args.export_rules:
            save_rule_table(responder.table, args.export_rules)
            print(f"Wrote {len(responder.table)} rules to {args.export_rules}")
        else:
            run_chat(responder, config)

        return 0

    except ElizaError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0
    except Exception as e:
        print(f"\nUnexpected error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
