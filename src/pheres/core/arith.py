# src/pheres/core/arith.py
"""
Arithmetic evaluation and comparison of terms.
"""

import math

from pheres.core.errors import EvaluationError
from pheres.core.terms import Number, String, Atom, Struct, Term, Var, format_term, is_expression
from pheres.core.unify import Substitution, substitute, walk


def evaluate(term: Term, theta: Substitution) -> int | float:
    term = walk(term, theta)

    if isinstance(term, Number):
        return term.value
    if isinstance(term, Var):
        raise EvaluationError(f"Unbound variable {format_term(term)} in arithmetic")
    if not is_expression(term):
        raise EvaluationError(f"Not a number: {format_term(substitute(term, theta))}")

    if term.arity == 1:
        return -evaluate(term.args[0], theta)

    left = evaluate(term.args[0], theta)
    right = evaluate(term.args[1], theta)
    op = term.functor

    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "**":
        return left ** right

    if right == 0:
        raise EvaluationError(f"Division by zero: {format_term(substitute(term, theta))}")
    if op == "/":
        return left / right
    if op == "div":
        return math.floor(left / right)
    return left % right


def resolve(term: Term, theta: Substitution) -> Term:
    """Substitute, then fold ground arithmetic subterms into numbers."""
    term = substitute(term, theta)
    return _fold(term)


def _fold(term: Term) -> Term:
    if not isinstance(term, Struct):
        return term
    if _numeric(term):
        return Number(evaluate(term, {}))
    return Struct(term.functor, tuple(_fold(a) for a in term.args))


def _numeric(term: Term) -> bool:
    if isinstance(term, Number):
        return True
    return is_expression(term) and all(_numeric(a) for a in term.args)


# Standard order: numbers < atoms < strings < structs, as in Prolog
_ORDER = {Number: 0, Atom: 1, String: 2, Struct: 3}


def compare(op: str, left: Term, right: Term, theta: Substitution) -> bool:
    left = resolve(left, theta)
    right = resolve(right, theta)

    if op == "==":
        return left == right
    if op == "\\==":
        return left != right

    key_l = _sort_key(left)
    key_r = _sort_key(right)

    if op == "<":
        return key_l < key_r
    if op == "<=":
        return key_l <= key_r
    if op == ">":
        return key_l > key_r
    if op == ">=":
        return key_l >= key_r
    raise EvaluationError(f"Unknown relation: {op}")


def _sort_key(term: Term):
    if isinstance(term, Var):
        raise EvaluationError(f"Unbound variable {format_term(term)} in comparison")
    rank = _ORDER[type(term)]
    if isinstance(term, Number):
        return (rank, term.value)
    if isinstance(term, Atom):
        return (rank, term.name)
    if isinstance(term, String):
        return (rank, term.value)
    return (rank, term.arity, term.functor, tuple(_sort_key(a) for a in term.args))
