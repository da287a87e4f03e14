"""
Test configuration for DSH tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from symbol_table import SymbolTable
from calculator import Calculator
from values import TypeRegistry, default_registry, register_type


@pytest.fixture
def env():
  """Provide a fresh symbol table for each test"""
  return SymbolTable()


@pytest.fixture
def calculator(env):
  """Provide a calculator bound to the test symbol table"""
  return Calculator(env)


@pytest.fixture
def registry():
  """Provide an isolated custom type registry"""
  return TypeRegistry()


@pytest.fixture
def point_type():
  """Register Point in the process-wide registry for the test's duration"""
  class Point:
    def __init__(self, x, y):
      self.x = x
      self.y = y

  register_type(Point, "Point")
  yield Point
  default_registry.unregister(Point)
