"""Run an agent program."""

import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from pheres.cli.commands.program import load_program
from pheres.core.agent import Agent
from pheres.core.config import RuntimeConfig
from pheres.core.errors import PheresError

console = Console()


def add_subparser(subparsers):
    parser = subparsers.add_parser("run", help="Run an agent until it has no events left")
    parser.add_argument("file", help="Path to .asl file")
    parser.add_argument("-g", "--goal", dest="goals", action="append", default=[],
                        help="Achievement goal to post before running (repeatable)")
    parser.add_argument("--max-cycles", type=int, default=None, help="Stop after N events")
    parser.add_argument("--name", help="Agent name (defaults to the file name)")
    parser.add_argument("--lenient", action="store_true", help="Skip bad clauses instead of stopping")
    parser.set_defaults(func=run_agent)


def run_agent(args):
    try:
        program = load_program(args.file, args.lenient)
        agent = Agent(program, name=args.name or Path(args.file).stem, config=RuntimeConfig.from_env())
        for goal in args.goals:
            agent.achieve(goal)
    except (FileNotFoundError, PheresError, ValueError) as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    cycles = agent.run(args.max_cycles)
    if agent.events:
        console.print(f"[yellow]Stopped after {cycles} events, {len(agent.events)} still pending[/yellow]")
