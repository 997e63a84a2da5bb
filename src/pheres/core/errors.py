# src/pheres/core/errors.py
"""
Exceptions raised by the interpreter.
"""


class PheresError(Exception):
    """Base class for interpreter errors."""


class ParseError(PheresError):
    def __init__(self, message: str, line: int, column: int, source_line: str = ""):
        self.message = message
        self.line = line
        self.column = column
        self.source_line = source_line
        text = f"Line {line}, column {column}: {message}"
        if source_line:
            text += f"\n  {source_line}\n  {' ' * (column - 1)}^"
        super().__init__(text)


class ResolutionError(PheresError):
    """Query resolution went deeper than the configured limit."""


class EvaluationError(PheresError):
    """Arithmetic on something that is not a bound number."""


class ActionError(PheresError):
    """An action could not be dispatched."""
