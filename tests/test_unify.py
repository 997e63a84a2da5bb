# tests/test_unify.py
"""Tests for unification and substitutions."""

from pheres.core.terms import Atom, Number, Var, struct
from pheres.core.unify import restrict, substitute, unify, walk


def test_unify_identical_constants():
    assert unify(Atom("a"), Atom("a")) == {}
    assert unify(Atom("a"), Atom("b")) is None
    assert unify(Number(1), Atom("a")) is None


def test_unify_binds_variable():
    theta = unify(Var("X"), Atom("large"))
    assert theta == {"X": Atom("large")}


def test_unify_structs():
    pattern = struct("on", Var("D"), Var("P"), Atom("table"))
    fact = struct("on", Atom("large"), Number(0), Atom("table"))
    theta = unify(pattern, fact)
    assert theta == {"D": Atom("large"), "P": Number(0)}


def test_unify_functor_or_arity_mismatch():
    assert unify(struct("on", Atom("a")), struct("at", Atom("a"))) is None
    assert unify(struct("on", Atom("a")), struct("on", Atom("a"), Atom("b"))) is None


def test_unify_repeated_variable():
    pattern = struct("p", Var("X"), Var("X"))
    assert unify(pattern, struct("p", Atom("a"), Atom("a"))) == {"X": Atom("a")}
    assert unify(pattern, struct("p", Atom("a"), Atom("b"))) is None


def test_unify_does_not_mutate_input():
    theta = {"X": Atom("a")}
    result = unify(Var("Y"), Atom("b"), theta)
    assert result == {"X": Atom("a"), "Y": Atom("b")}
    assert theta == {"X": Atom("a")}


def test_walk_and_substitute_chains():
    theta = {"X": Var("Y"), "Y": Atom("a")}
    assert walk(Var("X"), theta) == Atom("a")
    assert substitute(struct("p", Var("X"), Var("Z")), theta) == struct("p", Atom("a"), Var("Z"))


def test_occurs_check():
    looped = struct("f", Var("X"))
    assert unify(Var("X"), looped) == {"X": looped}
    assert unify(Var("X"), looped, occurs_check=True) is None


def test_restrict_keeps_only_named_bound():
    theta = {"X": Var("Y"), "Y": Atom("a"), "Z#1": Atom("b")}
    assert restrict(theta, ["X", "W"]) == {"X": Atom("a")}
