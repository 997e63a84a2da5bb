# src/pheres/core/terms.py
"""
Term model for AgentSpeak programs.

Tier 1 - Constants: Atom, Number, String
Tier 2 - Variables
Tier 3 - Compound terms (structs, lists, arithmetic expressions)
Tier 4 - Formatting
"""

from dataclasses import dataclass
from typing import Union


# === Tier 1: Constants ===

@dataclass(frozen=True)
class Atom:
    name: str

    @property
    def is_ground(self) -> bool:
        return True

    @property
    def variables(self) -> frozenset[str]:
        return frozenset()


@dataclass(frozen=True)
class Number:
    value: Union[int, float]

    @property
    def is_ground(self) -> bool:
        return True

    @property
    def variables(self) -> frozenset[str]:
        return frozenset()


@dataclass(frozen=True)
class String:
    value: str

    @property
    def is_ground(self) -> bool:
        return True

    @property
    def variables(self) -> frozenset[str]:
        return frozenset()


# === Tier 2: Variables ===

@dataclass(frozen=True)
class Var:
    name: str

    @property
    def is_ground(self) -> bool:
        return False

    @property
    def variables(self) -> frozenset[str]:
        return frozenset({self.name})

    @property
    def is_anonymous(self) -> bool:
        return self.name.startswith("_#")


# === Tier 3: Compound terms ===

@dataclass(frozen=True)
class Struct:
    functor: str
    args: tuple["Term", ...]

    @property
    def arity(self) -> int:
        return len(self.args)

    @property
    def is_ground(self) -> bool:
        return all(arg.is_ground for arg in self.args)

    @property
    def variables(self) -> frozenset[str]:
        names = set()
        for arg in self.args:
            names.update(arg.variables)
        return frozenset(names)


Term = Union[Atom, Number, String, Var, Struct]

TRUE = Atom("true")
FALSE = Atom("false")
NIL = Atom("[]")
CONS = "."

ARITHMETIC_OPS = frozenset({"+", "-", "*", "/", "div", "mod", "**"})


def struct(functor: str, *args: Term) -> Term:
    """Build a literal; a functor without arguments is an atom."""
    if not args:
        return Atom(functor)
    return Struct(functor, tuple(args))


def make_list(items, tail: Term = NIL) -> Term:
    result = tail
    for item in reversed(list(items)):
        result = Struct(CONS, (item, result))
    return result


def list_items(term: Term) -> tuple[list[Term], Term]:
    """Split a list term into its items and whatever ends it ([] for proper lists)."""
    items = []
    while isinstance(term, Struct) and term.functor == CONS and term.arity == 2:
        items.append(term.args[0])
        term = term.args[1]
    return items, term


def indicator(term: Term) -> tuple[str, int] | None:
    """Predicate indicator (name, arity) of a literal, None for non-literals."""
    if isinstance(term, Atom):
        return (term.name, 0)
    if isinstance(term, Struct):
        return (term.functor, term.arity)
    return None


def is_expression(term: Term) -> bool:
    if not isinstance(term, Struct):
        return False
    if term.functor in ARITHMETIC_OPS and term.arity == 2:
        return True
    return term.functor == "-" and term.arity == 1


def rename(term: Term, suffix: str) -> Term:
    """Rename every variable apart by appending a suffix."""
    if isinstance(term, Var):
        return Var(f"{term.name}#{suffix}")
    if isinstance(term, Struct):
        return Struct(term.functor, tuple(rename(a, suffix) for a in term.args))
    return term


def term_variables(term: Term) -> list[str]:
    """Named (non-anonymous) variables in order of first appearance."""
    names = []

    def visit(t):
        if isinstance(t, Var):
            if not t.is_anonymous and t.name not in names:
                names.append(t.name)
        elif isinstance(t, Struct):
            for arg in t.args:
                visit(arg)

    visit(term)
    return names


# === Tier 4: Formatting ===

_INFIX = {"+": 1, "-": 1, "*": 2, "/": 2, "div": 2, "mod": 2, "**": 3}


def format_term(term: Term) -> str:
    if isinstance(term, Atom):
        return term.name
    if isinstance(term, Number):
        return repr(term.value)
    if isinstance(term, String):
        escaped = term.value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    if isinstance(term, Var):
        return "_" if term.is_anonymous else term.name.split("#", 1)[0]
    if term.functor == CONS and term.arity == 2:
        items, tail = list_items(term)
        body = ", ".join(format_term(i) for i in items)
        if tail == NIL:
            return f"[{body}]"
        return f"[{body} | {format_term(tail)}]"
    if is_expression(term):
        if term.arity == 1:
            return f"-{_format_operand(term.args[0], 4)}"
        prec = _INFIX[term.functor]
        op = f" {term.functor} "
        return _format_operand(term.args[0], prec) + op + _format_operand(term.args[1], prec + 1)
    args = ", ".join(format_term(a) for a in term.args)
    return f"{term.functor}({args})"


def _format_operand(term: Term, prec: int) -> str:
    text = format_term(term)
    if is_expression(term) and term.arity == 2 and _INFIX[term.functor] < prec:
        return f"({text})"
    return text


def display(term: Term) -> str:
    """Text used by output actions: strings lose their quotes."""
    if isinstance(term, String):
        return term.value
    return format_term(term)
