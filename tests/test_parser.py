# tests/test_parser.py
"""Tests for the AgentSpeak parser."""

import pytest

from pheres.core.errors import ParseError
from pheres.core.parser import parse_formula, parse_program, parse_term, parse_trigger
from pheres.core.syntax import (
    Achieve, Action, AddBelief, And, Constraint, If, Literal, Not, Or, Relation,
    RemoveBelief, ReplaceBelief, Test, Trigger, TriggerKind, While, format_program,
)
from pheres.core.terms import Atom, Number, String, Struct, Var, make_list, struct


# === Tier 1: Clauses ===

def test_parse_hanoi_fixture(hanoi_source):
    program = parse_program(hanoi_source)

    assert len(program.beliefs) == 6
    assert struct("on", Atom("med"), Number(0), Atom("large")) in program.beliefs
    assert len(program.rules) == 1
    assert program.goals == [Atom("sort")]
    assert len(program.plans) == 1
    assert program.errors == []


def test_parse_rule(hanoi_source):
    rule = parse_program(hanoi_source).rules[0]

    assert rule.head == struct("top", Var("Disc"), Var("Pin"))
    assert isinstance(rule.body, And)
    assert rule.body.left == Literal(struct("on", Var("Disc"), Var("Pin"), Var("Below")))
    assert isinstance(rule.body.right, Not)
    negated = rule.body.right.formula.term
    assert negated.functor == "disc"
    assert negated.args[0] == Var("Below")
    assert negated.args[1].is_anonymous


def test_parse_plan(hanoi_source):
    plan = parse_program(hanoi_source).plans[0]

    assert plan.trigger == Trigger("+", TriggerKind.ACHIEVE, Atom("sort"))
    assert plan.context == Literal(struct("top", Var("Disc"), Var("Pin")))
    assert plan.body == (Action("print", (Var("Disc"),), internal=True),)


def test_fact_with_variables_rejected():
    with pytest.raises(ParseError, match="unbound variables"):
        parse_program("on(X, 1).")


def test_missing_period():
    with pytest.raises(ParseError, match="expected '.' after fact, found end of input"):
        parse_program("disc(large, 3)")


# === Tier 2: Malformed input ===

def test_broken_fixture_reports_unterminated_comment(broken_path):
    with pytest.raises(ParseError) as info:
        parse_program(broken_path.read_text())

    error = info.value
    assert error.message == "unterminated block comment"
    assert (error.line, error.column) == (9, 11)
    assert error.source_line == "on(small, /* 1, table)."
    assert str(error).startswith("Line 9, column 11: unterminated block comment")


def test_broken_fixture_lenient_keeps_good_clauses(broken_path):
    program = parse_program(broken_path.read_text(), strict=False)

    assert len(program.errors) == 1
    assert len(program.beliefs) == 5
    assert struct("on", Atom("small"), Number(1), Atom("table")) not in program.beliefs


def test_lenient_recovers_at_next_clause():
    program = parse_program("a. b( . c.", strict=False)
    assert program.beliefs == [Atom("a"), Atom("c")]
    assert len(program.errors) == 1


def test_lenient_recovery_skips_internal_action_dots():
    source = "+!g <- .print(a) oops .print(b).\nok."
    program = parse_program(source, strict=False)
    assert program.beliefs == [Atom("ok")]
    assert len(program.errors) == 1


def test_lenient_recovery_stops_at_adjacent_clause():
    program = parse_program("p(X).q.", strict=False)
    assert program.beliefs == [Atom("q")]
    assert len(program.errors) == 1


def test_unknown_character():
    with pytest.raises(ParseError, match="unexpected character '\\$'"):
        parse_program("a($).")


def test_unterminated_string():
    with pytest.raises(ParseError, match="unterminated string"):
        parse_program('+!g <- .print("oops).')


def test_internal_action_needs_adjacent_name():
    with pytest.raises(ParseError, match="internal action name"):
        parse_program("+!g <- . print(a).")


# === Tier 3: Plan bodies ===

def test_body_statements():
    source = """
+!go(X) : ready & X > 0
    <- !prepare(X);
       !!log(X);
       ?at(Where);
       +moving(X);
       -ready;
       -+count(X + 1);
       Y = X * 2;
       drive(Where, Y);
       .print("done").
"""
    plan = parse_program(source).plans[0]

    assert plan.trigger == Trigger("+", TriggerKind.ACHIEVE, struct("go", Var("X")))
    assert plan.context == And(Literal(Atom("ready")), Relation(">", Var("X"), Number(0)))
    assert plan.body == (
        Achieve(struct("prepare", Var("X"))),
        Achieve(struct("log", Var("X")), new_intention=True),
        Test(struct("at", Var("Where"))),
        AddBelief(struct("moving", Var("X"))),
        RemoveBelief(Atom("ready")),
        ReplaceBelief(struct("count", Struct("+", (Var("X"), Number(1))))),
        Constraint(Relation("=", Var("Y"), Struct("*", (Var("X"), Number(2))))),
        Action("drive", (Var("Where"), Var("Y")), internal=False),
        Action("print", (String("done"),), internal=True),
    )


def test_if_else_and_while():
    source = """
+!count(N)
    <- while (N > 0) {
           .print(N);
           N2 = N - 1;
       }
       if (N == 0) { .print(zero) } else { .print(other) }.
"""
    body = parse_program(source).plans[0].body

    assert isinstance(body[0], While)
    assert body[0].condition == Relation(">", Var("N"), Number(0))
    assert len(body[0].body) == 2
    assert isinstance(body[1], If)
    assert body[1].then == (Action("print", (Atom("zero"),), internal=True),)
    assert body[1].otherwise == (Action("print", (Atom("other"),), internal=True),)


def test_else_if_chain():
    plan = parse_program("+!g(X) <- if (X < 0) { .print(neg) } else if (X == 0) { .print(zero) }.").plans[0]
    outer = plan.body[0]
    assert isinstance(outer.otherwise[0], If)
    assert outer.otherwise[0].otherwise == ()


def test_triggers_and_labels():
    program = parse_program("""
@failed -!g <- .print(failed).
+?where(X) <- X = here.
+light(on).
-light(on) : true <- .print(dark).
""")
    triggers = [p.trigger for p in program.plans]

    assert triggers == [
        Trigger("-", TriggerKind.ACHIEVE, Atom("g")),
        Trigger("+", TriggerKind.TEST, struct("where", Var("X"))),
        Trigger("+", TriggerKind.BELIEF, struct("light", Atom("on"))),
        Trigger("-", TriggerKind.BELIEF, struct("light", Atom("on"))),
    ]
    assert program.plans[0].label == Atom("failed")
    assert program.plans[2].body == ()


# === Tier 4: Terms and formulas ===

def test_parse_term_lists():
    assert parse_term("[1, 2 | T]") == make_list([Number(1), Number(2)], Var("T"))
    assert parse_term("[]") == Atom("[]")


def test_parse_term_numbers_and_strings():
    assert parse_term("-3") == Number(-3)
    assert parse_term("2.5") == Number(2.5)
    assert parse_term('"a\\nb"') == String("a\nb")


def test_parse_formula_grouping():
    assert parse_formula("(a | b) & c") == And(Or(Literal(Atom("a")), Literal(Atom("b"))), Literal(Atom("c")))
    assert parse_formula("(X + 1) > 2") == Relation(">", Struct("+", (Var("X"), Number(1))), Number(2))
    assert parse_formula("not not a") == Not(Not(Literal(Atom("a"))))


def test_parse_trigger():
    assert parse_trigger("+!sort") == Trigger("+", TriggerKind.ACHIEVE, Atom("sort"))


def test_format_program_reparses(hanoi_source):
    program = parse_program(hanoi_source)
    again = parse_program(format_program(program))

    assert again.beliefs == program.beliefs
    assert again.rules == program.rules
    assert again.goals == program.goals
    assert again.plans == program.plans
