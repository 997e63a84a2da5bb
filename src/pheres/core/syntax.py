# src/pheres/core/syntax.py
"""
Abstract syntax of AgentSpeak programs.

Formulas  - Literal, Not, And, Or, Relation
Triggers  - +!g  -!g  +?g  -?g  +b  -b
Plans     - [@label] trigger : context <- body.
Body      - Achieve, Test, AddBelief, RemoveBelief, ReplaceBelief,
            Action, Constraint, If, While
Program   - beliefs, rules, initial goals, plans (+ load errors)
"""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Union

from pheres.core.errors import ParseError
from pheres.core.terms import (
    TRUE, Atom, Number, String, Struct, Term, Var, format_term, rename, term_variables,
)


# === Formulas ===

@dataclass(frozen=True)
class Literal:
    term: Term


@dataclass(frozen=True)
class Not:
    formula: "Formula"


@dataclass(frozen=True)
class And:
    left: "Formula"
    right: "Formula"


@dataclass(frozen=True)
class Or:
    left: "Formula"
    right: "Formula"


@dataclass(frozen=True)
class Relation:
    op: str  # one of = == \== < <= > >=
    left: Term
    right: Term


Formula = Union[Literal, Not, And, Or, Relation]

TRUE_FORMULA = Literal(TRUE)


def rename_formula(formula: Formula, suffix: str) -> Formula:
    if isinstance(formula, Literal):
        return Literal(rename(formula.term, suffix))
    if isinstance(formula, Not):
        return Not(rename_formula(formula.formula, suffix))
    if isinstance(formula, And):
        return And(rename_formula(formula.left, suffix), rename_formula(formula.right, suffix))
    if isinstance(formula, Or):
        return Or(rename_formula(formula.left, suffix), rename_formula(formula.right, suffix))
    return Relation(formula.op, rename(formula.left, suffix), rename(formula.right, suffix))


def format_formula(formula: Formula) -> str:
    if isinstance(formula, Literal):
        return format_term(formula.term)
    if isinstance(formula, Not):
        inner = format_formula(formula.formula)
        if isinstance(formula.formula, (And, Or)):
            inner = f"({inner})"
        return f"not {inner}"
    if isinstance(formula, And):
        return f"{_wrap_or(formula.left)} & {_wrap_or(formula.right)}"
    if isinstance(formula, Or):
        return f"{format_formula(formula.left)} | {format_formula(formula.right)}"
    return f"{format_term(formula.left)} {formula.op} {format_term(formula.right)}"


def _wrap_or(formula: Formula) -> str:
    text = format_formula(formula)
    return f"({text})" if isinstance(formula, Or) else text


def formula_variables(formula: Formula) -> list[str]:
    """Named variables of a formula in order of first appearance."""
    if isinstance(formula, Literal):
        return term_variables(formula.term)
    if isinstance(formula, Not):
        return formula_variables(formula.formula)
    if isinstance(formula, (And, Or)):
        names = formula_variables(formula.left)
        return names + [n for n in formula_variables(formula.right) if n not in names]
    names = term_variables(formula.left)
    return names + [n for n in term_variables(formula.right) if n not in names]


def variables_of(node) -> set[str]:
    """Every variable (anonymous ones included) under a formula, statement or block."""
    if isinstance(node, (Atom, Number, String, Var, Struct)):
        return set(node.variables)
    if isinstance(node, tuple):
        return set().union(*(variables_of(item) for item in node))
    if is_dataclass(node):
        return set().union(*(variables_of(getattr(node, f.name)) for f in fields(node)))
    return set()


# === Rules ===

@dataclass(frozen=True)
class Rule:
    head: Term
    body: Formula

    def rename(self, suffix: str) -> "Rule":
        return Rule(rename(self.head, suffix), rename_formula(self.body, suffix))


def format_rule(rule: Rule) -> str:
    return f"{format_term(rule.head)} :- {format_formula(rule.body)}."


# === Triggers ===

class TriggerKind(Enum):
    ACHIEVE = "!"
    TEST = "?"
    BELIEF = ""


@dataclass(frozen=True)
class Trigger:
    operator: str  # "+" or "-"
    kind: TriggerKind
    literal: Term


def format_trigger(trigger: Trigger) -> str:
    return f"{trigger.operator}{trigger.kind.value}{format_term(trigger.literal)}"


# === Plan bodies ===

@dataclass(frozen=True)
class Achieve:
    goal: Term
    new_intention: bool = False  # !!g


@dataclass(frozen=True)
class Test:
    goal: Term


@dataclass(frozen=True)
class AddBelief:
    literal: Term


@dataclass(frozen=True)
class RemoveBelief:
    literal: Term


@dataclass(frozen=True)
class ReplaceBelief:
    literal: Term


@dataclass(frozen=True)
class Action:
    name: str
    args: tuple[Term, ...]
    internal: bool  # written .name(...)


@dataclass(frozen=True)
class Constraint:
    relation: Relation


@dataclass(frozen=True)
class If:
    condition: Formula
    then: tuple["Statement", ...]
    otherwise: tuple["Statement", ...] = ()


@dataclass(frozen=True)
class While:
    condition: Formula
    body: tuple["Statement", ...]


Statement = Union[Achieve, Test, AddBelief, RemoveBelief, ReplaceBelief, Action, Constraint, If, While]


def format_statement(stmt: Statement, indent: str = "") -> str:
    if isinstance(stmt, Achieve):
        return ("!!" if stmt.new_intention else "!") + format_term(stmt.goal)
    if isinstance(stmt, Test):
        return "?" + format_term(stmt.goal)
    if isinstance(stmt, AddBelief):
        return "+" + format_term(stmt.literal)
    if isinstance(stmt, RemoveBelief):
        return "-" + format_term(stmt.literal)
    if isinstance(stmt, ReplaceBelief):
        return "-+" + format_term(stmt.literal)
    if isinstance(stmt, Action):
        prefix = "." if stmt.internal else ""
        if not stmt.args:
            return prefix + stmt.name
        return f"{prefix}{stmt.name}({', '.join(format_term(a) for a in stmt.args)})"
    if isinstance(stmt, Constraint):
        return format_formula(stmt.relation)
    if isinstance(stmt, If):
        text = f"if ({format_formula(stmt.condition)}) {_format_block(stmt.then, indent)}"
        if stmt.otherwise:
            text += f" else {_format_block(stmt.otherwise, indent)}"
        return text
    return f"while ({format_formula(stmt.condition)}) {_format_block(stmt.body, indent)}"


def _format_block(body, indent: str) -> str:
    inner = indent + "    "
    lines = [inner + format_statement(s, inner) for s in body]
    return "{\n" + ";\n".join(lines) + "\n" + indent + "}"


# === Plans ===

@dataclass(frozen=True)
class Plan:
    trigger: Trigger
    context: Formula = TRUE_FORMULA
    body: tuple[Statement, ...] = ()
    label: Term | None = None


def format_plan(plan: Plan) -> str:
    text = ""
    if plan.label is not None:
        text = f"@{format_term(plan.label)}\n"
    text += format_trigger(plan.trigger)
    if plan.context != TRUE_FORMULA:
        text += f" : {format_formula(plan.context)}"
    if plan.body:
        steps = [format_statement(s, "    ") for s in plan.body]
        text += "\n    <- " + ";\n       ".join(steps)
    return text + "."


# === Program ===

@dataclass
class Program:
    """Parsed agent program."""
    beliefs: list[Term] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)
    goals: list[Term] = field(default_factory=list)
    plans: list[Plan] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "beliefs": [format_term(b) for b in self.beliefs],
            "rules": [format_rule(r) for r in self.rules],
            "goals": [format_term(g) for g in self.goals],
            "plans": [format_plan(p) for p in self.plans],
            "errors": [str(e) for e in self.errors],
        }


def format_program(program: Program) -> str:
    lines = []

    if program.beliefs:
        lines.append("// Beliefs")
        for belief in program.beliefs:
            lines.append(f"{format_term(belief)}.")
        lines.append("")

    if program.rules:
        lines.append("// Rules")
        for rule in program.rules:
            lines.append(format_rule(rule))
        lines.append("")

    if program.goals:
        lines.append("// Goals")
        for goal in program.goals:
            lines.append(f"!{format_term(goal)}.")
        lines.append("")

    if program.plans:
        lines.append("// Plans")
        for plan in program.plans:
            lines.append(format_plan(plan))
            lines.append("")

    return "\n".join(lines).rstrip() + "\n" if lines else ""
