# src/pheres/core/beliefs.py
"""
Belief base and rule engine.

Facts are ground literals stored per predicate indicator (name/arity) in
insertion order. Rules are evaluated on demand by backward chaining:
queries unify against facts first, then against rule heads, solving the
rule body with the head's bindings.

Formulas are solved lazily:
  - conjunctions left to right, short-circuiting on the first failure
  - disjunctions in order
  - negation as failure: `not F` succeeds once iff F has no solution
    under the current substitution
"""

import itertools
import logging
from typing import Iterator

from pheres.core.arith import compare, resolve
from pheres.core.config import RuntimeConfig
from pheres.core.errors import ResolutionError
from pheres.core.syntax import And, Formula, Literal, Not, Or, Program, Relation, Rule
from pheres.core.terms import FALSE, TRUE, Struct, Term, Var, format_term, indicator
from pheres.core.unify import Substitution, substitute, unify, walk

logger = logging.getLogger(__name__)


class BeliefBase:
    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or RuntimeConfig()
        self._facts: dict[tuple[str, int], list[Term]] = {}
        self._rules: dict[tuple[str, int], list[Rule]] = {}
        self._renames = itertools.count(1)

    @classmethod
    def from_program(cls, program: Program, config: RuntimeConfig | None = None) -> "BeliefBase":
        beliefs = cls(config)
        for fact in program.beliefs:
            beliefs.assert_fact(fact)
        for rule in program.rules:
            beliefs.add_rule(rule)
        return beliefs

    # --- storage ---

    def assert_fact(self, fact: Term) -> bool:
        """Add a ground fact. Returns False if it was already believed."""
        key = _check_fact(fact)
        facts = self._facts.setdefault(key, [])
        if fact in facts:
            return False
        facts.append(fact)
        logger.debug("+%s", format_term(fact))
        return True

    def retract(self, pattern: Term) -> list[Term]:
        """Remove every fact unifying with pattern; returns what was removed."""
        key = indicator(pattern)
        facts = self._facts.get(key, [])
        removed = [f for f in facts if self._unify(pattern, f, {}) is not None]
        if removed:
            self._facts[key] = [f for f in facts if f not in removed]
            for fact in removed:
                logger.debug("-%s", format_term(fact))
        return removed

    def remove(self, pattern: Term, theta: Substitution | None = None) -> Substitution | None:
        """Remove the first fact unifying with pattern under theta; returns the extended bindings."""
        theta = theta or {}
        key = indicator(walk(pattern, theta))
        facts = self._facts.get(key, [])
        for i, fact in enumerate(facts):
            result = self._unify(pattern, fact, theta)
            if result is not None:
                del facts[i]
                logger.debug("-%s", format_term(fact))
                return result
        return None

    def replace(self, fact: Term) -> list[Term]:
        """Drop every belief with the fact's name and arity, then assert the fact."""
        name, arity = _check_fact(fact)
        removed = []
        if arity:
            removed = self.retract(Struct(name, tuple(Var(f"_#{i}") for i in range(arity))))
        else:
            removed = self.retract(fact)
        self.assert_fact(fact)
        return removed

    def add_rule(self, rule: Rule):
        self._rules.setdefault(indicator(rule.head), []).append(rule)

    def facts(self) -> list[Term]:
        return [f for facts in self._facts.values() for f in facts]

    def rules(self) -> list[Rule]:
        return [r for rules in self._rules.values() for r in rules]

    def __len__(self) -> int:
        return sum(len(facts) for facts in self._facts.values())

    def __contains__(self, fact: Term) -> bool:
        return fact in self._facts.get(indicator(fact), ())

    # --- queries ---

    def query(self, literal: Term, theta: Substitution | None = None) -> Iterator[Substitution]:
        """Lazily yield every substitution under which literal holds."""
        return self._query(literal, theta or {}, 0)

    def solve(self, formula: Formula, theta: Substitution | None = None) -> Iterator[Substitution]:
        return self._solve(formula, theta or {}, 0)

    def holds(self, formula: Formula, theta: Substitution | None = None) -> Substitution | None:
        """First solution of formula, or None."""
        return next(self.solve(formula, theta), None)

    def _solve(self, formula: Formula, theta: Substitution, depth: int) -> Iterator[Substitution]:
        if isinstance(formula, Literal):
            yield from self._query(formula.term, theta, depth)
        elif isinstance(formula, And):
            for partial in self._solve(formula.left, theta, depth):
                yield from self._solve(formula.right, partial, depth)
        elif isinstance(formula, Or):
            yield from self._solve(formula.left, theta, depth)
            yield from self._solve(formula.right, theta, depth)
        elif isinstance(formula, Not):
            if next(self._solve(formula.formula, theta, depth), None) is None:
                yield theta
        elif isinstance(formula, Relation):
            if formula.op == "=":
                result = self._unify(resolve(formula.left, theta), resolve(formula.right, theta), theta)
                if result is not None:
                    yield result
            elif compare(formula.op, formula.left, formula.right, theta):
                yield theta
        else:
            raise TypeError(f"Not a formula: {formula!r}")

    def _query(self, literal: Term, theta: Substitution, depth: int) -> Iterator[Substitution]:
        if depth > self.config.max_depth:
            raise ResolutionError(
                f"Resolution deeper than {self.config.max_depth} while proving "
                f"{format_term(substitute(literal, theta))}"
            )

        literal = walk(literal, theta)
        if literal == TRUE:
            yield theta
            return
        if literal == FALSE:
            return

        key = indicator(literal)
        if key is None:
            raise ResolutionError(f"Cannot query {format_term(literal)}: not a literal")

        # Snapshot so that updates made while a query is suspended do not leak into it
        for fact in list(self._facts.get(key, ())):
            result = self._unify(literal, fact, theta)
            if result is not None:
                yield result

        for rule in list(self._rules.get(key, ())):
            renamed = rule.rename(str(next(self._renames)))
            result = self._unify(literal, renamed.head, theta)
            if result is not None:
                yield from self._solve(renamed.body, result, depth + 1)

    def _unify(self, t1: Term, t2: Term, theta: Substitution) -> Substitution | None:
        return unify(t1, t2, theta, occurs_check=self.config.occurs_check)


def _check_fact(fact: Term) -> tuple[str, int]:
    """Predicate indicator of a storable fact; raises ValueError for anything else."""
    key = indicator(fact)
    if key is None:
        raise ValueError(f"Cannot assert {format_term(fact)}: not a literal")
    if not fact.is_ground:
        names = ", ".join(sorted(v.split("#", 1)[0] for v in fact.variables))
        raise ValueError(f"Cannot assert {format_term(fact)}: unbound variables {names}")
    return key
