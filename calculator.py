"""
DSH Calculator
Evaluates arithmetic expressions over shell variables.
Supports + - * / with the usual precedence, parentheses, integer and
decimal literals, and variable references.
"""

from typing import Any, Optional

from error_handling import (
  Ok,
  Err,
  EvalResult,
  syntax_error,
  undefined_variable,
  arithmetic_error,
  internal_error,
  to_value,
)
from parsing import DshGrammar, default_grammar, strip_outer_parentheses, split_by_precedence
from utilities import has_balanced_parentheses, operation_error
from values import Value


# ============================================================================
# OPERATORS
# ============================================================================

def apply_add(left: Value, right: Value) -> EvalResult:
  if not left.is_numeric() or not right.is_numeric():
    return operation_error('+', left, right)
  return Ok(left.add(right))


def apply_subtract(left: Value, right: Value) -> EvalResult:
  if not left.is_numeric() or not right.is_numeric():
    return operation_error('-', left, right)
  return Ok(left.subtract(right))


def apply_multiply(left: Value, right: Value) -> EvalResult:
  if not left.is_numeric() or not right.is_numeric():
    return operation_error('*', left, right)
  return Ok(left.multiply(right))


def apply_divide(left: Value, right: Value) -> EvalResult:
  if not left.is_numeric() or not right.is_numeric():
    return operation_error('/', left, right)
  if right.as_double() == 0:
    return arithmetic_error("Division by zero")
  return Ok(left.divide(right))


BINARY_OPERATORS = {
    '+': apply_add,
    '-': apply_subtract,
    '*': apply_multiply,
    '/': apply_divide,
}


# ============================================================================
# CALCULATOR
# ============================================================================

class Calculator:
  """Expression evaluator bound to a variable environment.

  The environment only needs a ``get(name)`` method returning a Value, or
  None when the name is not defined. It is read, never written.
  """

  def __init__(self, env: Any, debug: bool = False, grammar: Optional[DshGrammar] = None):
    self.env = env
    self.debug = debug
    self.grammar = grammar or default_grammar

  def evaluate(self, expression: str) -> Value:
    """Evaluate to a Value; failures come back as an "Error: ..." string value"""
    return to_value(self.evaluate_result(expression))

  def evaluate_result(self, expression: str) -> EvalResult:
    """Evaluate to Ok(value) or Err(kind, message). Never raises."""
    try:
      return self._evaluate(expression)
    except RecursionError:
      return syntax_error("Expression too deeply nested")
    except Exception as e:
      if self.debug:
        print(f"Evaluation failed: {type(e).__name__}: {e}")
      return internal_error(e)

  def _evaluate(self, expression: str) -> EvalResult:
    expression = expression.strip()
    if self.debug:
      print(f"Evaluating: {expression!r}")

    if not expression:
      return syntax_error("Empty expression")

    if not has_balanced_parentheses(expression):
      return syntax_error("Unbalanced parentheses in expression")

    expression = strip_outer_parentheses(expression)

    literal = self.grammar.parse_literal(expression)
    if literal is not None:
      return Ok(literal)

    if self.grammar.is_identifier(expression):
      return self._lookup(expression)

    parts = split_by_precedence(expression)
    if parts is not None:
      return self._evaluate_binary(*parts)

    return syntax_error(f"Invalid expression '{expression}'")

  def _lookup(self, name: str) -> EvalResult:
    value = self.env.get(name)
    if value is None:
      return undefined_variable(name)
    return Ok(value)

  def _evaluate_binary(self, left_text: str, op: str, right_text: str) -> EvalResult:
    if self.debug:
      print(f"Split: {left_text.strip()!r} {op} {right_text.strip()!r}")

    left = self._evaluate(left_text)
    if isinstance(left, Err):
      return left
    right = self._evaluate(right_text)
    if isinstance(right, Err):
      return right

    apply = BINARY_OPERATORS.get(op)
    if apply is None:
      return syntax_error(f"Unknown operator '{op}'")
    return apply(left.value, right.value)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_calculator(env: Any, debug: bool = False) -> Calculator:
  """Factory function returning a calculator bound to env"""
  return Calculator(env, debug=debug)


def create_debug_calculator(env: Any) -> Calculator:
  """Factory function returning a tracing calculator"""
  return create_calculator(env, debug=True)


def evaluate(expression: str, env: Any) -> Value:
  """Evaluate expression against env in one call"""
  return Calculator(env).evaluate(expression)
