# tests/test_terms.py
"""Tests for the term model."""

from pheres.core.terms import (
    NIL, Atom, Number, String, Struct, Var,
    display, format_term, indicator, is_expression, list_items,
    make_list, rename, struct, term_variables,
)


# === Tier 1: Constants ===

def test_constant_equality():
    assert Atom("large") == Atom("large")
    assert Atom("large") != Atom("small")
    assert Number(3) == Number(3)
    assert String("a") != Atom("a")


def test_constants_are_ground():
    assert Atom("a").is_ground
    assert Number(1).is_ground
    assert String("x").is_ground
    assert Atom("a").variables == frozenset()


# === Tier 2: Variables ===

def test_variable_not_ground():
    v = Var("Disc")
    assert not v.is_ground
    assert v.variables == frozenset({"Disc"})
    assert not v.is_anonymous


def test_anonymous_variable():
    assert Var("_#3").is_anonymous
    assert not Var("_Named").is_anonymous


# === Tier 3: Compound terms ===

def test_struct_helpers():
    assert struct("sort") == Atom("sort")
    t = struct("on", Atom("large"), Number(0), Atom("table"))
    assert t == Struct("on", (Atom("large"), Number(0), Atom("table")))
    assert t.arity == 3
    assert t.is_ground


def test_struct_variables():
    t = struct("on", Var("D"), Number(0), Var("B"))
    assert not t.is_ground
    assert t.variables == frozenset({"D", "B"})


def test_indicator():
    assert indicator(Atom("sort")) == ("sort", 0)
    assert indicator(struct("top", Var("D"), Var("P"))) == ("top", 2)
    assert indicator(Var("X")) is None
    assert indicator(Number(1)) is None


def test_lists():
    lst = make_list([Number(1), Number(2)])
    items, tail = list_items(lst)
    assert items == [Number(1), Number(2)]
    assert tail == NIL
    assert list_items(NIL) == ([], NIL)


def test_expression_detection():
    assert is_expression(Struct("+", (Number(1), Var("X"))))
    assert is_expression(Struct("-", (Var("X"),)))
    assert not is_expression(struct("on", Atom("a"), Atom("b")))


def test_rename():
    t = struct("top", Var("Disc"), Atom("a"))
    assert rename(t, "7") == struct("top", Var("Disc#7"), Atom("a"))


def test_term_variables_order_and_anonymous():
    t = struct("p", Var("B"), Var("_#1"), Var("A"), Var("B"))
    assert term_variables(t) == ["B", "A"]


# === Tier 4: Formatting ===

def test_format_literal():
    assert format_term(struct("on", Atom("large"), Number(0), Atom("table"))) == "on(large, 0, table)"


def test_format_list():
    assert format_term(make_list([Atom("a"), Atom("b")])) == "[a, b]"
    assert format_term(make_list([Atom("a")], Var("T"))) == "[a | T]"
    assert format_term(NIL) == "[]"


def test_format_expression_precedence():
    sum_ = Struct("+", (Number(1), Number(2)))
    assert format_term(Struct("*", (sum_, Var("X")))) == "(1 + 2) * X"
    assert format_term(Struct("+", (Number(1), Struct("*", (Number(2), Var("X")))))) == "1 + 2 * X"


def test_format_hides_renaming():
    assert format_term(Var("Disc#e4")) == "Disc"
    assert format_term(Var("_#2")) == "_"


def test_format_string_and_display():
    s = String('say "hi"')
    assert format_term(s) == '"say \\"hi\\""'
    assert display(s) == 'say "hi"'
    assert display(Atom("large")) == "large"
