# src/pheres/cli/commands/program.py
"""
Program commands: parse and example.
"""

import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from pheres.core.errors import ParseError
from pheres.core.parser import parse_program
from pheres.core.syntax import Program, format_program

console = Console()

EXAMPLE = """// Tower of Hanoi: three discs on two pins.

disc(large, 3).
disc(med, 2).
disc(small, 1).

on(large, 0, table).
on(med, 0, large).
on(small, 1, table).

// Discs standing directly on the table, with the pin they stand on.
top(Disc, Pin) :- on(Disc, Pin, Below) & not disc(Below, _).

// Count the discs, then report the first one found on the table.
!sort.

+!sort : top(Disc, Pin)
    <- .count(disc(_, _), N);
       .print("sorting ", N, " discs");
       .print(Disc).

-!sort <- .print("nothing to sort").
"""


def add_subparser(subparsers):
    parse_p = subparsers.add_parser("parse", help="Parse an .asl program and print it back")
    parse_p.add_argument("file", help="Path to .asl file")
    parse_p.add_argument("--lenient", action="store_true", help="Skip bad clauses instead of stopping")
    parse_p.set_defaults(func=program_parse)

    example_p = subparsers.add_parser("example", help="Show an example program")
    example_p.set_defaults(func=program_example)


def read_file(path: str) -> str:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if p.suffix != ".asl":
        console.print(f"[yellow]Warning: expected .asl extension, got {p.suffix or 'none'}[/yellow]")
    return p.read_text()


def load_program(path: str, lenient: bool = False) -> Program:
    """Read and parse a program, reporting skipped clauses in lenient mode."""
    program = parse_program(read_file(path), strict=not lenient)
    for error in program.errors:
        console.print(f"[yellow]✗ skipped: {escape(str(error))}[/yellow]")
    return program


def program_parse(args):
    try:
        program = load_program(args.file, args.lenient)
    except (FileNotFoundError, ParseError) as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    print(f"=== {args.file} ===\n")
    print(format_program(program))
    print("=== Summary ===")
    print(f"Beliefs: {len(program.beliefs)}")
    print(f"Rules: {len(program.rules)}")
    print(f"Goals: {len(program.goals)}")
    print(f"Plans: {len(program.plans)}")
    if program.errors:
        print(f"Errors: {len(program.errors)}")


def program_example(args):
    print(EXAMPLE)
