"""
Error handling for DSH expressions
Value-level exceptions, evaluation outcomes and the legacy "Error:" value convention
"""

from typing import Any, Optional, Union
from dataclasses import dataclass
from enum import Enum


ERROR_PREFIX = "Error:"


# ============================================================================
# EXCEPTIONS (raised by direct Value misuse)
# ============================================================================

class DshError(Exception):
    """Base class for DSH errors"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CastError(DshError, TypeError):
    """A typed accessor was called against an incompatible tag"""
    pass


class UnsupportedOperationError(DshError, TypeError):
    """An arithmetic operator was applied to a non-numeric value"""
    pass


# ============================================================================
# EVALUATION OUTCOMES
# ============================================================================

class ErrorKind(Enum):
    SYNTAX = "syntax"
    UNDEFINED_VARIABLE = "undefined_variable"
    TYPE = "type"
    ARITHMETIC = "arithmetic"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Ok:
    """Successful evaluation"""
    value: Any


@dataclass(frozen=True)
class Err:
    """Failed evaluation with its category and human-readable detail"""
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{ERROR_PREFIX} {self.message}"


EvalResult = Union[Ok, Err]


def syntax_error(message: str) -> Err:
    return Err(ErrorKind.SYNTAX, message)


def undefined_variable(name: str) -> Err:
    return Err(ErrorKind.UNDEFINED_VARIABLE, f"Undefined variable '{name}'")


def type_error(message: str) -> Err:
    return Err(ErrorKind.TYPE, message)


def arithmetic_error(message: str) -> Err:
    return Err(ErrorKind.ARITHMETIC, message)


def internal_error(exc: BaseException) -> Err:
    """Wrap an unexpected exception, keeping only its message text"""
    message = exc.message if isinstance(exc, DshError) else str(exc)
    return Err(ErrorKind.INTERNAL, message or type(exc).__name__)


# ============================================================================
# LEGACY VALUE CONVENTION
# ============================================================================

def to_error_value(error: Err):
    """Render an Err as the String value callers pattern-match on"""
    from values import Value
    return Value.of_string(str(error))


def to_value(result: EvalResult):
    """Collapse an evaluation outcome into a single Value"""
    if isinstance(result, Err):
        return to_error_value(result)
    return result.value


def is_error_value(value: Optional[Any]) -> bool:
    """True when value is a String value carrying the "Error:" prefix"""
    return (value is not None
            and value.is_string()
            and value.as_string().startswith(ERROR_PREFIX))


def error_message(value: Any) -> Optional[str]:
    """Detail text of an error value without its prefix, or None"""
    if not is_error_value(value):
        return None
    return value.as_string()[len(ERROR_PREFIX):].strip()
