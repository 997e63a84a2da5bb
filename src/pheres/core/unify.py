# src/pheres/core/unify.py
"""
Unification over immutable substitutions.

A substitution maps variable names to terms. Binding never mutates the
mapping it was given; it returns a new one, so bindings handed out by a
query stay valid whatever happens to the belief base afterwards.
"""

from pheres.core.terms import Struct, Term, Var


Substitution = dict[str, Term]


def walk(term: Term, theta: Substitution) -> Term:
    """Follow variable bindings until reaching an unbound variable or a non-variable."""
    while isinstance(term, Var) and term.name in theta:
        term = theta[term.name]
    return term


def substitute(term: Term, theta: Substitution) -> Term:
    """Apply a substitution all the way down."""
    term = walk(term, theta)
    if isinstance(term, Struct):
        return Struct(term.functor, tuple(substitute(a, theta) for a in term.args))
    return term


def unify(t1: Term, t2: Term, theta: Substitution | None = None,
          occurs_check: bool = False) -> Substitution | None:
    """
    Most general unifier of t1 and t2 extending theta, or None.
    """
    if theta is None:
        theta = {}

    t1 = walk(t1, theta)
    t2 = walk(t2, theta)

    if t1 == t2:
        return theta

    if isinstance(t1, Var):
        return _bind(t1, t2, theta, occurs_check)
    if isinstance(t2, Var):
        return _bind(t2, t1, theta, occurs_check)

    if isinstance(t1, Struct) and isinstance(t2, Struct):
        if t1.functor != t2.functor or t1.arity != t2.arity:
            return None
        for a1, a2 in zip(t1.args, t2.args):
            theta = unify(a1, a2, theta, occurs_check)
            if theta is None:
                return None
        return theta

    # Distinct constants, or a constant against a struct
    return None


def _bind(var: Var, term: Term, theta: Substitution, occurs_check: bool) -> Substitution | None:
    if occurs_check and occurs(var, term, theta):
        return None
    return {**theta, var.name: term}


def occurs(var: Var, term: Term, theta: Substitution) -> bool:
    term = walk(term, theta)
    if isinstance(term, Var):
        return term.name == var.name
    if isinstance(term, Struct):
        return any(occurs(var, a, theta) for a in term.args)
    return False


def restrict(theta: Substitution, names) -> Substitution:
    """Resolved bindings for the given variable names only."""
    result = {}
    for name in names:
        value = substitute(Var(name), theta)
        if value != Var(name):
            result[name] = value
    return result
