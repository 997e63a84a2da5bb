"""
pheres CLI.
"""

import argparse
import logging

from rich.console import Console
from rich.logging import RichHandler

from pheres.cli.commands import agent, program, query, run
from pheres.core.config import RuntimeConfig


def setup_logging(verbose: bool = False):
    level = "DEBUG" if verbose else RuntimeConfig.from_env().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(prog="pheres", description="AgentSpeak interpreter")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    program.add_subparser(subparsers)
    run.add_subparser(subparsers)
    query.add_subparser(subparsers)
    agent.add_subparser(subparsers)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
