"""Query the beliefs of an agent program."""

import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from pheres.cli.commands.program import load_program
from pheres.core.agent import Agent
from pheres.core.config import RuntimeConfig
from pheres.core.errors import PheresError
from pheres.core.terms import format_term

console = Console()


def add_subparser(subparsers):
    parser = subparsers.add_parser("query", help="Print every solution of a query")
    parser.add_argument("file", help="Path to .asl file")
    parser.add_argument("query", help="Query, e.g. 'top(Disc, Pin)'")
    parser.add_argument("--run", action="store_true", help="Run the agent before querying")
    parser.add_argument("--lenient", action="store_true", help="Skip bad clauses instead of stopping")
    parser.set_defaults(func=run_query)


def run_query(args):
    try:
        program = load_program(args.file, args.lenient)
        agent = Agent(program, name=Path(args.file).stem, config=RuntimeConfig.from_env())
        if args.run:
            agent.run()
        solutions = agent.query(args.query)
    except (FileNotFoundError, PheresError, ValueError) as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    if not solutions:
        print("false.")
        return

    for solution in solutions:
        if solution:
            print(", ".join(f"{name}={format_term(value)}" for name, value in solution.items()))
        else:
            print("true.")
