# tests/test_arith.py
"""Tests for arithmetic and comparison."""

import pytest

from pheres.core.arith import compare, evaluate, resolve
from pheres.core.errors import EvaluationError
from pheres.core.parser import parse_term
from pheres.core.terms import Atom, Number, String, Var, struct


def test_evaluate_operators():
    assert evaluate(parse_term("1 + 2 * 3"), {}) == 7
    assert evaluate(parse_term("2 ** 3"), {}) == 8
    assert evaluate(parse_term("7 div 2"), {}) == 3
    assert evaluate(parse_term("7 mod 2"), {}) == 1
    assert evaluate(parse_term("7 / 2"), {}) == 3.5
    assert evaluate(parse_term("-(2 + 1)"), {}) == -3


def test_evaluate_with_bindings():
    assert evaluate(parse_term("N + 1"), {"N": Number(4)}) == 5


def test_evaluate_unbound_variable():
    with pytest.raises(EvaluationError, match="Unbound variable N"):
        evaluate(parse_term("N + 1"), {})


def test_evaluate_division_by_zero():
    with pytest.raises(EvaluationError, match="Division by zero"):
        evaluate(parse_term("1 / 0"), {})


def test_evaluate_non_number():
    with pytest.raises(EvaluationError, match="Not a number"):
        evaluate(parse_term("large + 1"), {})


def test_resolve_folds_ground_arithmetic():
    term = parse_term("count(N + 1, X)")
    assert resolve(term, {"N": Number(2)}) == struct("count", Number(3), Var("X"))


def test_resolve_leaves_unbound_expression():
    term = parse_term("N + 1")
    assert resolve(term, {}) == term


def test_compare_numbers():
    assert compare("<", parse_term("N"), Number(3), {"N": Number(2)})
    assert compare(">=", parse_term("1 + 2"), Number(3), {})
    assert not compare(">", Number(1), Number(2), {})


def test_compare_standard_order():
    assert compare("<", Number(100), Atom("a"), {})
    assert compare("<", Atom("a"), String("a"), {})
    assert compare("<", Atom("large"), Atom("small"), {})


def test_compare_structural_equality():
    assert compare("==", parse_term("on(a, 1)"), parse_term("on(a, 1)"), {})
    assert compare("\\==", Atom("a"), Atom("b"), {})


def test_compare_unbound_fails_loudly():
    with pytest.raises(EvaluationError):
        compare("<", Var("X"), Number(1), {})
