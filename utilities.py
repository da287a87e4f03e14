"""
Utilities module for DSH
Common helpers shared by the calculator, symbol table and commands
"""

from typing import Any, Iterator, Optional, Tuple

from error_handling import Err, type_error


# ==================== TYPE NAME UTILITIES ====================

def type_name(value: Any) -> str:
  """
  Type name used in user-facing messages

  Args:
    value: Value instance or None

  Returns:
    Lower-case tag name, the custom name for custom values, or "null"

  Examples:
    type_name(Value.of(5)) -> "integer"
    type_name(Value.of_type(p, "Point")) -> "Point"
  """
  if value is None:
    return "null"
  return value.type_name


# ==================== ERROR MESSAGE BUILDERS ====================

OPERATION_VERBS = {
  '+': "add",
  '-': "subtract",
  '*': "multiply",
  '/': "divide",
}


def operation_error(op: str, left: Any, right: Any) -> Err:
  """
  Generate operand type error for a binary operator

  Args:
    op: Operator character
    left: Left operand value
    right: Right operand value

  Returns:
    Err of kind TYPE, e.g. "Cannot add string and integer"
  """
  verb = OPERATION_VERBS.get(op, f"apply '{op}' to")
  return type_error(f"Cannot {verb} {type_name(left)} and {type_name(right)}")


# ==================== PARENTHESIS UTILITIES ====================

def paren_depths(text: str) -> Iterator[Tuple[int, str, int]]:
  """
  Walk text tracking parenthesis depth

  Yields:
    (index, char, depth) where depth is the nesting level in effect for
    that character; parentheses themselves report the depth after them
  """
  depth = 0
  for index, char in enumerate(text):
    if char == '(':
      depth += 1
    elif char == ')':
      depth -= 1
    yield index, char, depth


def has_balanced_parentheses(text: str) -> bool:
  """
  Check that depth never goes negative and ends at zero

  Examples:
    has_balanced_parentheses("(a)+(b)") -> True
    has_balanced_parentheses("a)+(b") -> False
  """
  depth = 0
  for _, _, depth in paren_depths(text):
    if depth < 0:
      return False
  return depth == 0


# ==================== VALIDATION UTILITIES ====================

def validate_variable_name(name: Optional[str]) -> str:
  """
  Validate a name for storage in a symbol table

  Raises:
    ValueError if the name is missing, not a string, empty or blank
  """
  if not isinstance(name, str) or not name.strip():
    raise ValueError(f"Invalid variable name: {name!r}")
  return name
