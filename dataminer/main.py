"""
Command line entry point for the ActiveSG slot dataminer.
"""

import argparse
import asyncio
import logging
import sys

from dataminer.config import MinerSettings
from dataminer.errors import InvalidGym
from dataminer.miner import run_cycle, run_forever
from dataminer.models import Credentials, all_gyms, parse_gym


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ActiveSG Slot Dataminer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -u me@example.com -p secret             # Poll every gym forever
  %(prog)s -u me@example.com -p secret -s          # Write struct-of-arrays JSON
  %(prog)s -u me@example.com -p secret --once --gym BISHAN
        """,
    )

    parser.add_argument("-u", "--username", required=True, help="username")
    parser.add_argument("-p", "--password", required=True, help="users password")
    parser.add_argument(
        "-s",
        "--is-soa",
        action="store_true",
        help="output data in struct of array",
    )
    parser.add_argument(
        "--gym",
        action="append",
        default=[],
        help="Gym to poll (repeatable, defaults to all gyms)",
    )
    parser.add_argument(
        "--once", action="store_true", help="Run a single cycle and exit"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point with argument parsing."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = MinerSettings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        gyms = [parse_gym(name) for name in args.gym or settings.gyms] or all_gyms()
    except InvalidGym as e:
        parser.error(str(e))

    credentials = Credentials(email=args.username, raw_password=args.password)

    try:
        if args.once:
            asyncio.run(run_cycle(credentials, gyms, settings, args.is_soa))
        else:
            asyncio.run(run_forever(credentials, settings, args.is_soa, gyms))
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
