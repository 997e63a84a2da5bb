# src/pheres/core/agent.py
"""
Plan executor.

An agent owns a belief base, a plan library, an action table and a queue
of events. Events are handled one at a time and each is processed fully
(plan selection, binding, body execution) before the next is considered.

Handling an event:
  1. relevant plans: same trigger operator and kind, unifying literal
  2. applicable plan: the first relevant plan, in declaration order, whose
     context has a solution; its first solution binds the plan variables
  3. an intention is created with that plan as its only frame and run to
     completion, one statement per step

A subgoal (!g) pushes a new frame on the same intention; when that frame
finishes its bindings flow back into the caller. A failure unwinds to the
nearest +!g frame and runs a matching -!g plan there if one applies.
"""

import itertools
import logging
import sys
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator, TextIO

from pheres.core.actions import ActionKind, ActionTable
from pheres.core.arith import resolve
from pheres.core.beliefs import BeliefBase
from pheres.core.config import RuntimeConfig
from pheres.core.errors import PheresError
from pheres.core.parser import parse_formula, parse_program, parse_term
from pheres.core.syntax import (
    Achieve, AddBelief, Constraint, Formula, If, Plan, Program, RemoveBelief,
    ReplaceBelief, Statement, Test, Trigger, TriggerKind, While,
    format_statement, format_trigger, formula_variables, variables_of,
)
from pheres.core.syntax import Action as ActionCall
from pheres.core.terms import Term, Var, format_term, indicator, rename
from pheres.core.unify import Substitution, restrict, substitute, unify, walk

logger = logging.getLogger(__name__)


@dataclass
class Event:
    trigger: Trigger


@dataclass
class Frame:
    """One intended means: a plan, its bindings and the statements still to run."""
    plan: Plan
    theta: Substitution
    literal: Term  # the event literal this frame answers, renamed apart
    cursor: deque = field(default_factory=deque)
    caller_goal: Term | None = None  # goal as the caller saw it, for bindings flowing back

    @property
    def trigger(self) -> Trigger:
        return self.plan.trigger


@dataclass(frozen=True)
class _Repeat:
    """Re-test of a running while loop. Variables in fresh were unbound on entry."""
    statement: While
    fresh: frozenset


class Intention:
    _ids = itertools.count(1)

    def __init__(self):
        self.id = next(Intention._ids)
        self.frames: list[Frame] = []
        self.steps = 0

    @property
    def done(self) -> bool:
        return not self.frames

    @property
    def top(self) -> Frame:
        return self.frames[-1]

    def push(self, frame: Frame):
        self.frames.append(frame)


class Agent:
    def __init__(
        self,
        program: Program,
        name: str = "agent",
        config: RuntimeConfig | None = None,
        actions: ActionTable | None = None,
        out: TextIO | None = None,
    ):
        self.name = name
        self.config = config or RuntimeConfig()
        self.program = program
        self.plans: list[Plan] = list(program.plans)
        self.actions = actions or ActionTable()
        self.out = out
        self.transcript: list[str] = []
        self.events: deque[Event] = deque()
        self._renames = itertools.count(1)

        self.beliefs = BeliefBase(self.config)
        for rule in program.rules:
            self.beliefs.add_rule(rule)
        for fact in program.beliefs:
            self.add_belief(fact)
        for goal in program.goals:
            self.post(Trigger("+", TriggerKind.ACHIEVE, goal))

    @classmethod
    def from_source(cls, text: str, strict: bool = True, **kwargs) -> "Agent":
        return cls(parse_program(text, strict=strict), **kwargs)

    # --- outside world ---

    def emit(self, text: str):
        """Write one line of agent output."""
        self.transcript.append(text)
        print(text, file=self.out or sys.stdout)

    def post(self, trigger: Trigger):
        logger.debug("[%s] event %s", self.name, format_trigger(trigger))
        self.events.append(Event(trigger))

    def achieve(self, goal: Term | str):
        if isinstance(goal, str):
            goal = parse_term(goal)
        self.post(Trigger("+", TriggerKind.ACHIEVE, goal))

    def add_belief(self, fact: Term | str) -> bool:
        if isinstance(fact, str):
            fact = parse_term(fact)
        added = self.beliefs.assert_fact(fact)
        if added:
            self.post(Trigger("+", TriggerKind.BELIEF, fact))
        return added

    def remove_belief(self, pattern: Term | str) -> list[Term]:
        if isinstance(pattern, str):
            pattern = parse_term(pattern)
        removed = self.beliefs.retract(pattern)
        for fact in removed:
            self.post(Trigger("-", TriggerKind.BELIEF, fact))
        return removed

    def query(self, formula: Formula | str) -> list[Substitution]:
        """All solutions of formula, restricted to its named variables."""
        if isinstance(formula, str):
            formula = parse_formula(formula)
        names = formula_variables(formula)
        return [restrict(theta, names) for theta in self.beliefs.solve(formula)]

    # --- reasoning cycle ---

    def run(self, max_cycles: int | None = None) -> int:
        """Handle queued events until none remain (or max_cycles); returns events handled."""
        cycles = 0
        while self.events and (max_cycles is None or cycles < max_cycles):
            self.handle(self.events.popleft())
            cycles += 1
        logger.info("[%s] handled %d events, %d pending", self.name, cycles, len(self.events))
        return cycles

    def handle(self, event: Event) -> bool:
        trigger = event.trigger
        selected = self.select_plan(trigger)

        if selected is None:
            if trigger.kind == TriggerKind.BELIEF:
                logger.debug("[%s] no plan for %s", self.name, format_trigger(trigger))
            else:
                logger.warning("[%s] no applicable plan for %s", self.name, format_trigger(trigger))
            return False

        intention = Intention()
        intention.push(selected)
        return self.run_intention(intention)

    def relevant_plans(self, trigger: Trigger) -> Iterator[Plan]:
        key = indicator(trigger.literal)
        for plan in self.plans:
            if (plan.trigger.operator == trigger.operator
                    and plan.trigger.kind == trigger.kind
                    and indicator(plan.trigger.literal) == key):
                yield plan

    def select_plan(self, trigger: Trigger, caller_goal: Term | None = None) -> Frame | None:
        """First applicable plan for trigger, as a ready-to-run frame."""
        literal = rename(trigger.literal, f"e{next(self._renames)}")
        for plan in self.relevant_plans(trigger):
            theta = unify(plan.trigger.literal, literal, {}, self.config.occurs_check)
            if theta is None:
                continue
            context = self.beliefs.holds(plan.context, theta)
            if context is None:
                continue
            logger.debug("[%s] %s selected for %s", self.name, _plan_name(plan), format_trigger(trigger))
            return Frame(plan, context, literal, deque(plan.body), caller_goal)
        return None

    def run_intention(self, intention: Intention) -> bool:
        """Step an intention until it finishes; False if it was dropped on failure."""
        while not intention.done:
            if not self.step(intention):
                return False
        return True

    def step(self, intention: Intention) -> bool:
        """Execute one statement of the intention's top frame."""
        frame = intention.top
        if not frame.cursor:
            return self._complete(intention)

        intention.steps += 1
        stmt = frame.cursor.popleft()
        if intention.steps > self.config.max_steps:
            return self._fail(intention, stmt, f"more than {self.config.max_steps} steps")

        try:
            ok = self.execute(intention, frame, stmt)
        except (PheresError, ValueError) as e:
            return self._fail(intention, stmt, str(e))
        if not ok:
            return self._fail(intention, stmt, "statement failed")
        return True

    def execute(self, intention: Intention, frame: Frame, stmt: Statement) -> bool:
        if isinstance(stmt, Achieve):
            goal = resolve(stmt.goal, frame.theta)
            trigger = Trigger("+", TriggerKind.ACHIEVE, goal)
            if stmt.new_intention:
                self.post(trigger)
                return True
            subgoal = self.select_plan(trigger, caller_goal=goal)
            if subgoal is None:
                logger.warning("[%s] no applicable plan for %s", self.name, format_trigger(trigger))
                return False
            intention.push(subgoal)
            return True

        if isinstance(stmt, Test):
            answer = next(self.beliefs.query(stmt.goal, frame.theta), None)
            if answer is not None:
                frame.theta = answer
                return True
            goal = resolve(stmt.goal, frame.theta)
            handler = self.select_plan(Trigger("+", TriggerKind.TEST, goal), caller_goal=goal)
            if handler is None:
                return False
            intention.push(handler)
            return True

        if isinstance(stmt, AddBelief):
            self.add_belief(resolve(stmt.literal, frame.theta))
            return True

        if isinstance(stmt, RemoveBelief):
            pattern = resolve(stmt.literal, frame.theta)
            theta = self.beliefs.remove(pattern, frame.theta)
            if theta is not None:
                frame.theta = theta
                self.post(Trigger("-", TriggerKind.BELIEF, substitute(pattern, theta)))
            return True

        if isinstance(stmt, ReplaceBelief):
            fact = resolve(stmt.literal, frame.theta)
            removed = self.beliefs.replace(fact)
            for old in removed:
                if old != fact:
                    self.post(Trigger("-", TriggerKind.BELIEF, old))
            if fact not in removed:
                self.post(Trigger("+", TriggerKind.BELIEF, fact))
            return True

        if isinstance(stmt, ActionCall):
            kind = ActionKind.BUILTIN if stmt.internal else ActionKind.USER
            theta = self.actions.get(stmt.name, kind).execute(self, stmt.args, frame.theta)
            if theta is None:
                return False
            frame.theta = theta
            return True

        if isinstance(stmt, Constraint):
            theta = self.beliefs.holds(stmt.relation, frame.theta)
            if theta is None:
                return False
            frame.theta = theta
            return True

        if isinstance(stmt, If):
            theta = self.beliefs.holds(stmt.condition, frame.theta)
            if theta is not None:
                frame.theta = theta
                frame.cursor.extendleft(reversed(stmt.then))
            else:
                frame.cursor.extendleft(reversed(stmt.otherwise))
            return True

        if isinstance(stmt, While):
            fresh = set()
            for name in variables_of(stmt):
                value = walk(Var(name), frame.theta)
                if isinstance(value, Var):
                    fresh.add(value.name)
            return self._iterate(frame, _Repeat(stmt, frozenset(fresh)))

        if isinstance(stmt, _Repeat):
            return self._iterate(frame, stmt)

        raise TypeError(f"Not a statement: {stmt!r}")

    def _iterate(self, frame: Frame, loop: "_Repeat") -> bool:
        """Test a while condition from the bindings the loop started with."""
        base = {k: v for k, v in frame.theta.items() if k not in loop.fresh}
        theta = self.beliefs.holds(loop.statement.condition, base)
        if theta is None:
            frame.theta = base
        else:
            frame.theta = theta
            frame.cursor.extendleft(reversed(loop.statement.body + (loop,)))
        return True

    def _complete(self, intention: Intention) -> bool:
        finished = intention.frames.pop()
        if intention.done or finished.caller_goal is None:
            return True

        caller = intention.top
        answer = substitute(finished.literal, finished.theta)
        # Variables the callee left unbound belong to its frame only
        suffix = f"c{next(self._renames)}"
        answer = substitute(answer, {name: Var(f"_#{name}#{suffix}") for name in answer.variables})
        theta = unify(finished.caller_goal, answer, caller.theta, self.config.occurs_check)
        if theta is None:
            return self._fail(intention, None, f"could not bind {format_term(answer)}")
        caller.theta = theta
        return True

    def _fail(self, intention: Intention, stmt: Statement | None, reason: str) -> bool:
        if isinstance(stmt, _Repeat):
            stmt = stmt.statement
        where = format_statement(stmt) if stmt is not None else "completion"
        logger.info("[%s] intention %d failed at %s: %s", self.name, intention.id, where, reason)

        while intention.frames:
            frame = intention.frames.pop()
            if frame.trigger.operator != "+" or frame.trigger.kind != TriggerKind.ACHIEVE:
                continue
            goal = substitute(frame.literal, frame.theta)
            handler = self.select_plan(Trigger("-", TriggerKind.ACHIEVE, goal))
            if handler is not None:
                intention.push(handler)
                return True

        logger.warning("[%s] dropped intention %d: %s failed (%s)", self.name, intention.id, where, reason)
        return False

    # --- inspection ---

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "beliefs": [format_term(f) for f in self.beliefs.facts()],
            "rules": len(self.beliefs.rules()),
            "plans": len(self.plans),
            "pending_events": [format_trigger(e.trigger) for e in self.events],
        }


def _plan_name(plan: Plan) -> str:
    if plan.label is not None:
        return "@" + format_term(plan.label)
    return format_trigger(plan.trigger)


def run_source(text: str, goals=(), strict: bool = True, **kwargs) -> Agent:
    """Parse, post the given goals and run to quiescence."""
    agent = Agent.from_source(text, strict=strict, **kwargs)
    for goal in goals:
        agent.achieve(goal)
    agent.run()
    return agent
