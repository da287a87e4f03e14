"""
Symbol table tests for DSH
Plain and actor-backed variable storage
"""

import threading
import pykka
import pytest

from calculator import Calculator
from symbol_table import SharedSymbolTable, SymbolTable
from values import Value


class TestSymbolTable:
  """Single-threaded symbol table"""

  def test_set_and_get(self, env):
    env.set("x", Value.of(1))
    assert env.get("x") == Value.of_int(1)

  def test_set_overwrites(self, env):
    env.set("x", Value.of(1))
    env.set("x", Value.of("one"))
    assert env.get("x") == Value.of_string("one")

  def test_miss_is_distinct_from_null(self, env):
    env.set("nothing", Value.null())
    assert env.get("missing") is None
    assert env.get("nothing") == Value.null()
    assert "nothing" in env
    assert "missing" not in env

  @pytest.mark.parametrize("name", ["", "   ", None])
  def test_invalid_names_rejected(self, env, name):
    with pytest.raises(ValueError):
      env.set(name, Value.of(1))

  def test_only_values_are_stored(self, env):
    with pytest.raises(TypeError):
      env.set("x", 5)

  def test_remove_names_and_clear(self, env):
    env.set("b", Value.of(2))
    env.set("a", Value.of(1))
    assert env.names() == ["a", "b"]
    assert list(env) == ["a", "b"]
    assert env.remove("a") == Value.of(1)
    assert env.remove("a") is None
    assert len(env) == 1
    env.clear()
    assert len(env) == 0

  def test_initial_variables(self):
    table = SymbolTable({"x": Value.of(3)})
    assert table.items() == [("x", Value.of(3))]


class TestSharedSymbolTable:
  """Actor-backed symbol table"""

  @pytest.fixture
  def shared(self):
    table = SharedSymbolTable()
    yield table
    table.stop()

  def test_same_surface_as_symbol_table(self, shared):
    shared.set("x", Value.of(4))
    assert shared.get("x") == Value.of(4)
    assert shared.get("y") is None
    assert shared.contains("x")
    assert "x" in shared
    assert shared.names() == ["x"]
    assert len(shared) == 1
    assert shared.remove("x") == Value.of(4)
    shared.set("z", Value.of(1))
    shared.clear()
    assert len(shared) == 0

  def test_errors_propagate_to_caller(self, shared):
    with pytest.raises(ValueError):
      shared.set(" ", Value.of(1))
    # The actor keeps serving after a failed call
    shared.set("ok", Value.of(1))
    assert shared.get("ok") == Value.of(1)

  def test_calculator_reads_shared_table(self, shared):
    shared.set("x", Value.of(6))
    assert Calculator(shared).evaluate("x * 7") == Value.of_int(42)

  def test_concurrent_writers(self, shared):
    def writer(prefix):
      for i in range(50):
        shared.set(f"{prefix}{i}", Value.of(i))

    threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
    for thread in threads:
      thread.start()
    for thread in threads:
      thread.join()

    assert len(shared) == 200
    assert shared.get("c49") == Value.of(49)

  def test_stopped_table_rejects_calls(self):
    with SharedSymbolTable() as table:
      table.set("x", Value.of(1))
    assert not table.is_alive()
    with pytest.raises(pykka.ActorDeadError):
      table.get("x")
