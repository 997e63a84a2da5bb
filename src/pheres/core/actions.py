# src/pheres/core/actions.py
"""
Actions a plan body can perform.

Each action:
  - Has a name (internal actions are written with a leading dot)
  - Is either a built-in or a user-defined (environment) action
  - Receives the calling agent, its arguments and the current bindings
  - Returns the extended bindings on success or None on failure

Built-ins register themselves in BUILTINS; every agent gets an
ActionTable seeded from it, to which the host adds its own actions.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable

from pheres.core.arith import resolve
from pheres.core.errors import ActionError
from pheres.core.syntax import Literal
from pheres.core.terms import Atom, Number, String, Struct, Term, Var, display, format_term, make_list
from pheres.core.unify import Substitution, substitute, unify

logger = logging.getLogger(__name__)


class ActionKind(Enum):
    BUILTIN = "builtin"
    USER = "user"


class Action(ABC):
    """Base class for all actions."""

    name: str
    kind: ActionKind = ActionKind.BUILTIN

    @abstractmethod
    def execute(self, agent, args: tuple[Term, ...], theta: Substitution) -> Substitution | None:
        pass


# Built-in registry
BUILTINS: dict[str, Action] = {}


def register_builtin(action: Action) -> Action:
    BUILTINS[action.name] = action
    return action


class FunctionAction(Action):
    """
    A user-defined action backed by a Python callable.

    The callable receives the agent and the resolved arguments. It returns
    True/None for success, False for failure, or a dict of bindings keyed
    by the names of variables passed as arguments.
    """
    kind = ActionKind.USER

    def __init__(self, name: str, fn: Callable[..., Any]):
        self.name = name
        self.fn = fn

    def execute(self, agent, args, theta):
        resolved = [resolve(a, theta) for a in args]
        result = self.fn(agent, *resolved)

        if result is None or result is True:
            return theta
        if result is False:
            return None
        if isinstance(result, dict):
            for arg in resolved:
                if isinstance(arg, Var) and arg.name.split("#", 1)[0] in result:
                    theta = unify(arg, to_term(result[arg.name.split("#", 1)[0]]), theta)
                    if theta is None:
                        return None
            return theta
        raise ActionError(f"Action {self.name} returned {result!r}; expected bool, None or dict")


def to_term(value) -> Term:
    """Convert a Python value returned by host code into a term."""
    if isinstance(value, (Atom, Number, String, Var, Struct)):
        return value
    if isinstance(value, bool):
        return Atom("true" if value else "false")
    if isinstance(value, (int, float)):
        return Number(value)
    if isinstance(value, str):
        return String(value)
    if isinstance(value, (list, tuple)):
        return make_list(to_term(v) for v in value)
    raise ActionError(f"Cannot convert {value!r} to a term")


class ActionTable:
    """Per-agent dispatch table, keyed by kind and name."""

    def __init__(self):
        self._actions: dict[tuple[ActionKind, str], Action] = {
            (action.kind, name): action for name, action in BUILTINS.items()
        }

    def register(self, name: str, fn: Callable[..., Any] | Action) -> Action:
        """Register a user action from a callable (or an Action instance)."""
        action = fn if isinstance(fn, Action) else FunctionAction(name, fn)
        self._actions[(action.kind, name)] = action
        return action

    def get(self, name: str, kind: ActionKind = ActionKind.USER) -> Action:
        key = (kind, name)
        if key not in self._actions:
            available = ", ".join(sorted(self.names(kind)))
            raise ActionError(f"Unknown {kind.value} action: {name}. Available: {available or 'none'}")
        return self._actions[key]

    def __contains__(self, name: str) -> bool:
        return any(key[1] == name for key in self._actions)

    def names(self, kind: ActionKind | None = None) -> list[str]:
        return [n for (k, n) in self._actions if kind is None or k == kind]


# === Built-ins ===

class PrintAction(Action):
    """.print(args...) writes the arguments, concatenated, as one line."""
    name = "print"

    def execute(self, agent, args, theta):
        text = "".join(display(resolve(a, theta)) for a in args)
        agent.emit(text)
        return theta


class PrintlnAction(PrintAction):
    name = "println"


class FailAction(Action):
    name = "fail"

    def execute(self, agent, args, theta):
        return None


class MyNameAction(Action):
    name = "my_name"

    def execute(self, agent, args, theta):
        if len(args) != 1:
            raise ActionError(".my_name expects 1 argument")
        return unify(args[0], Atom(agent.name), theta)


class CountAction(Action):
    """.count(Query, N) binds N to the number of solutions of Query."""
    name = "count"

    def execute(self, agent, args, theta):
        if len(args) != 2:
            raise ActionError(".count expects 2 arguments")
        query = Literal(substitute(args[0], theta))
        total = sum(1 for _ in agent.beliefs.solve(query, theta))
        return unify(args[1], Number(total), theta)


class FindAllAction(Action):
    """.findall(Template, Query, List) collects Template for every solution of Query."""
    name = "findall"

    def execute(self, agent, args, theta):
        if len(args) != 3:
            raise ActionError(".findall expects 3 arguments")
        template, query, target = args
        found = [
            substitute(template, solution)
            for solution in agent.beliefs.solve(Literal(substitute(query, theta)), theta)
        ]
        logger.debug(".findall %s: %d solutions", format_term(substitute(query, theta)), len(found))
        return unify(target, make_list(found), theta)


register_builtin(PrintAction())
register_builtin(PrintlnAction())
register_builtin(FailAction())
register_builtin(MyNameAction())
register_builtin(CountAction())
register_builtin(FindAllAction())
