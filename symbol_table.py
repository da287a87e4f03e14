"""
DSH Symbol Table
Variable storage consulted by the calculator, plus an actor-backed variant
for sessions that share variables across threads
"""

from typing import Dict, Iterator, List, Optional, Tuple
import pykka

from utilities import validate_variable_name
from values import Value


# ============================================================================
# SYMBOL TABLE
# ============================================================================

class SymbolTable:
  """Name to Value mapping for a shell session.

  get() returns None for an undefined name, which is distinct from a name
  bound to Value.null().
  """

  def __init__(self, variables: Optional[Dict[str, Value]] = None):
    self._variables: Dict[str, Value] = {}
    for name, value in (variables or {}).items():
      self.set(name, value)

  def set(self, name: str, value: Value) -> None:
    """Bind or rebind a variable"""
    validate_variable_name(name)
    if not isinstance(value, Value):
      raise TypeError(f"Expected Value for '{name}', got {type(value).__name__}")
    self._variables[name] = value

  def get(self, name: str) -> Optional[Value]:
    return self._variables.get(name)

  def contains(self, name: str) -> bool:
    return name in self._variables

  def remove(self, name: str) -> Optional[Value]:
    """Unbind a variable, returning its previous value"""
    return self._variables.pop(name, None)

  def names(self) -> List[str]:
    return sorted(self._variables)

  def items(self) -> List[Tuple[str, Value]]:
    return sorted(self._variables.items())

  def clear(self) -> None:
    self._variables.clear()

  def __contains__(self, name: object) -> bool:
    return name in self._variables

  def __len__(self) -> int:
    return len(self._variables)

  def __iter__(self) -> Iterator[str]:
    return iter(self.names())


# ============================================================================
# SHARED SYMBOL TABLE (Using Pykka)
# ============================================================================

class SymbolTableActor(pykka.ThreadingActor):
  """Actor owning a SymbolTable; its mailbox serializes all access"""

  def __init__(self, variables: Optional[Dict[str, Value]] = None):
    super().__init__()
    self.table = SymbolTable(variables)

  def assign(self, name: str, value: Value) -> None:
    self.table.set(name, value)

  def lookup(self, name: str) -> Optional[Value]:
    return self.table.get(name)

  def contains(self, name: str) -> bool:
    return self.table.contains(name)

  def remove(self, name: str) -> Optional[Value]:
    return self.table.remove(name)

  def items(self) -> List[Tuple[str, Value]]:
    return self.table.items()

  def clear(self) -> None:
    self.table.clear()


class SharedSymbolTable:
  """Thread-safe symbol table with the same surface as SymbolTable.

  Calls block until the actor replies or `timeout` seconds pass. Errors
  raised inside the actor (e.g. an invalid name) are re-raised to the caller.
  """

  def __init__(self, variables: Optional[Dict[str, Value]] = None, timeout: Optional[float] = 5.0):
    self.timeout = timeout
    self._actor_ref = SymbolTableActor.start(variables)
    self._proxy = self._actor_ref.proxy()

  def set(self, name: str, value: Value) -> None:
    self._proxy.assign(name, value).get(timeout=self.timeout)

  def get(self, name: str) -> Optional[Value]:
    return self._proxy.lookup(name).get(timeout=self.timeout)

  def contains(self, name: str) -> bool:
    return self._proxy.contains(name).get(timeout=self.timeout)

  def remove(self, name: str) -> Optional[Value]:
    return self._proxy.remove(name).get(timeout=self.timeout)

  def items(self) -> List[Tuple[str, Value]]:
    return self._proxy.items().get(timeout=self.timeout)

  def names(self) -> List[str]:
    return [name for name, _ in self.items()]

  def clear(self) -> None:
    self._proxy.clear().get(timeout=self.timeout)

  def __contains__(self, name: object) -> bool:
    return self.contains(name)

  def __len__(self) -> int:
    return len(self.items())

  def __iter__(self) -> Iterator[str]:
    return iter(self.names())

  def is_alive(self) -> bool:
    return self._actor_ref.is_alive()

  def stop(self) -> None:
    """Stop the owning actor; later calls fail with pykka.ActorDeadError"""
    if self._actor_ref.is_alive():
      self._actor_ref.stop()

  def __enter__(self) -> 'SharedSymbolTable':
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    self.stop()
