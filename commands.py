"""
DSH Commands
Command contract and the commands the interactive shell runs against a
symbol table
"""

from typing import Any, List

from calculator import Calculator
from error_handling import Err
from parsing import default_grammar


class Result:
  """Outcome of a command: a success flag and a message"""

  def __init__(self, success: bool, message: str):
    self.success = success
    self.message = message

  def successful(self) -> bool:
    return self.success

  @staticmethod
  def ok(message: str = "") -> 'Result':
    return Result(True, message)

  @staticmethod
  def error(message: str) -> 'Result':
    return Result(False, "[Error]" + message)

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, Result):
      return NotImplemented
    return self.success == other.success and self.message == other.message

  def __repr__(self) -> str:
    return f"Result(success={self.success}, message={self.message!r})"


class Command:
  """An executable shell command.

  Subclasses validate their own arguments and report problems through the
  returned Result rather than by raising.
  """

  name = "command"
  arity = 0

  def __init__(self, debug: bool = False):
    self.debug = debug

  def execute(self, env: Any, args: List[str]) -> Result:
    raise NotImplementedError

  def check_arity(self, args: List[str]) -> Result:
    if len(args) != self.arity:
      return Result.error(f" {self.name} requires {self.arity} arguments, got {len(args)}")
    return Result.ok()


class AssignCommand(Command):
  """Creation command: evaluate an expression and bind it to a name"""

  name = "assign"
  arity = 2

  def execute(self, env: Any, args: List[str]) -> Result:
    checked = self.check_arity(args)
    if not checked.successful():
      return checked

    name, expression = args
    if not default_grammar.is_identifier(name.strip()):
      return Result.error(f" Invalid variable name '{name}'")

    outcome = Calculator(env, debug=self.debug).evaluate_result(expression)
    if isinstance(outcome, Err):
      return Result.error(f" {outcome.message}")

    env.set(name.strip(), outcome.value)
    return Result.ok(f"{name.strip()} = {outcome.value.as_string()}")


class EvaluateCommand(Command):
  """Evaluate an expression and report its text"""

  name = "evaluate"
  arity = 1

  def execute(self, env: Any, args: List[str]) -> Result:
    checked = self.check_arity(args)
    if not checked.successful():
      return checked

    outcome = Calculator(env, debug=self.debug).evaluate_result(args[0])
    if isinstance(outcome, Err):
      return Result.error(f" {outcome.message}")
    text = outcome.value.as_string()
    return Result.ok("null" if text is None else text)
