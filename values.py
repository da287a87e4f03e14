"""
DSH Values
Immutable tagged values with strict coercion and numeric widening
"""

from typing import Any, Dict, List, Optional, Tuple
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from enum import Enum
import array
import math
import operator
import struct

from error_handling import CastError, UnsupportedOperationError


# ============================================================================
# TAGS
# ============================================================================

class Tag(Enum):
  """Discriminant of a Value"""
  NULL = "null"
  INTEGER = "integer"
  LONG = "long"
  DOUBLE = "double"
  FLOAT = "float"
  BOOLEAN = "boolean"
  STRING = "string"
  LIST = "list"
  MAP = "map"
  COLLECTION = "collection"
  ARRAY = "array"
  OBJECT = "object"
  CUSTOM = "custom"


# Widening order: Integer < Long < Float < Double
NUMERIC_RANK = {
    Tag.INTEGER: 0,
    Tag.LONG: 1,
    Tag.FLOAT: 2,
    Tag.DOUBLE: 3,
}

COLLECTION_TAGS = (Tag.LIST, Tag.COLLECTION, Tag.ARRAY)

INT32_MIN, INT32_MAX = -(1 << 31), (1 << 31) - 1
INT64_MIN, INT64_MAX = -(1 << 63), (1 << 63) - 1

TRUTHY_STRINGS = frozenset({"true", "1", "yes", "on"})


# ============================================================================
# NUMERIC HELPERS
# ============================================================================

def wrap_int(value: int, bits: int) -> int:
  """Two's complement wraparound of an integer to the given width"""
  mask = (1 << bits) - 1
  value &= mask
  if value >> (bits - 1):
    value -= 1 << bits
  return value


def truncate_float(value: float, low: int, high: int) -> int:
  """Float to integer conversion: truncate toward zero, saturate, NaN is 0"""
  if math.isnan(value):
    return 0
  if value >= high:
    return high
  if value <= low:
    return low
  return int(value)


def to_float32(value: float) -> float:
  """Round a double to the nearest IEEE single precision value"""
  try:
    return struct.unpack("f", struct.pack("f", value))[0]
  except OverflowError:
    return math.copysign(math.inf, value)


def format_float32(value: float) -> str:
  """Shortest text that reads back as the same single precision value"""
  if not math.isfinite(value):
    return str(value)
  for digits in range(6, 10):
    text = "%.*g" % (digits, value)
    if to_float32(float(text)) == value:
      break
  else:
    text = repr(value)
  if text.lstrip("-").isdigit():
    text += ".0"
  return text


def ieee_divide(left: float, right: float) -> float:
  """Double division without a zero guard, as IEEE 754 defines it"""
  if right == 0.0:
    if left == 0.0 or math.isnan(left):
      return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)
  return left / right


# ============================================================================
# CUSTOM TYPE REGISTRY
# ============================================================================

class TypeRegistry:
  """Maps host classes to custom type names.

  Registrations are expected once at process start and only read afterwards;
  registering while evaluations are running is unsupported.
  """

  def __init__(self):
    self._types: Dict[type, str] = {}

  def register(self, cls: type, type_name: str) -> None:
    if not isinstance(cls, type):
      raise TypeError(f"Expected a class, got {cls!r}")
    if not isinstance(type_name, str) or not type_name.strip():
      raise ValueError("Custom type name must be a non-empty string")
    self._types[cls] = type_name

  def unregister(self, cls: type) -> None:
    self._types.pop(cls, None)

  def lookup(self, raw: Any) -> Optional[str]:
    """Custom name registered for the exact class of raw, if any"""
    return self._types.get(type(raw))

  def clear(self) -> None:
    self._types.clear()

  def __contains__(self, cls: type) -> bool:
    return cls in self._types

  def __len__(self) -> int:
    return len(self._types)


default_registry = TypeRegistry()


def register_type(cls: type, type_name: str) -> None:
  """Register a custom type name in the process-wide registry"""
  default_registry.register(cls, type_name)


# ============================================================================
# INFERENCE
# ============================================================================

def infer_tag(raw: Any, registry: Optional[TypeRegistry] = None) -> Tuple[Tag, Optional[str]]:
  """Infer (tag, custom_name) for a raw host value"""
  if raw is None:
    return Tag.NULL, None

  if registry is None:
    registry = default_registry
  custom_name = registry.lookup(raw)
  if custom_name is not None:
    return Tag.CUSTOM, custom_name

  # bool is an int subclass, so it has to be ruled out before the integer checks
  if isinstance(raw, int) and not isinstance(raw, bool):
    if INT32_MIN <= raw <= INT32_MAX:
      return Tag.INTEGER, None
    if INT64_MIN <= raw <= INT64_MAX:
      return Tag.LONG, None
    return Tag.OBJECT, None
  if isinstance(raw, float):
    return Tag.DOUBLE, None
  if isinstance(raw, bool):
    return Tag.BOOLEAN, None
  if isinstance(raw, str):
    return Tag.STRING, None
  if isinstance(raw, list):
    return Tag.LIST, None
  if isinstance(raw, Mapping):
    return Tag.MAP, None
  if isinstance(raw, (tuple, bytes, bytearray, array.array)):
    return Tag.ARRAY, None
  if isinstance(raw, Collection):
    return Tag.COLLECTION, None

  return Tag.OBJECT, None


# ============================================================================
# RENDERING
# ============================================================================

def render_raw(raw: Any) -> str:
  """Canonical shell text for a raw host value"""
  if raw is None:
    return "null"
  if isinstance(raw, Value):
    text = raw.as_string()
    return "null" if text is None else text
  if isinstance(raw, bool):
    return "true" if raw else "false"
  if isinstance(raw, str):
    return raw
  if isinstance(raw, Mapping):
    items = ", ".join(f"{render_raw(k)}={render_raw(v)}" for k, v in raw.items())
    return "{" + items + "}"
  if isinstance(raw, (bytes, bytearray)):
    return "[" + ", ".join(str(b) for b in raw) + "]"
  if isinstance(raw, (list, tuple, set, frozenset, array.array)):
    return "[" + ", ".join(render_raw(item) for item in raw) + "]"
  return str(raw)


# ============================================================================
# VALUE
# ============================================================================

@dataclass(frozen=True, eq=False)
class Value:
  """Immutable wrapper for a host value and its tag"""
  raw: Any
  tag: Tag
  custom_name: Optional[str] = None

  # -- construction ---------------------------------------------------------

  @classmethod
  def of(cls, raw: Any, registry: Optional[TypeRegistry] = None) -> 'Value':
    """Create a Value with an inferred tag"""
    tag, custom_name = infer_tag(raw, registry)
    if tag is Tag.LIST:
      raw = list(raw)
    elif tag is Tag.MAP:
      raw = dict(raw)
    return cls(raw, tag, custom_name)

  @classmethod
  def of_type(cls, raw: Any, type_name: str) -> 'Value':
    """Create a Value tagged with an explicit custom type name"""
    if not isinstance(type_name, str) or not type_name.strip():
      raise ValueError("Custom type name must be a non-empty string")
    return cls(raw, Tag.CUSTOM, type_name)

  @classmethod
  def null(cls) -> 'Value':
    return cls(None, Tag.NULL)

  @classmethod
  def of_int(cls, raw: int) -> 'Value':
    return cls(wrap_int(_require_int(raw), 32), Tag.INTEGER)

  @classmethod
  def of_long(cls, raw: int) -> 'Value':
    return cls(wrap_int(_require_int(raw), 64), Tag.LONG)

  @classmethod
  def of_double(cls, raw: float) -> 'Value':
    return cls(float(raw), Tag.DOUBLE)

  @classmethod
  def of_float(cls, raw: float) -> 'Value':
    return cls(to_float32(float(raw)), Tag.FLOAT)

  @classmethod
  def of_boolean(cls, raw: bool) -> 'Value':
    return cls(bool(raw), Tag.BOOLEAN)

  @classmethod
  def of_string(cls, raw: str) -> 'Value':
    if not isinstance(raw, str):
      raise TypeError(f"Expected str, got {type(raw).__name__}")
    return cls(raw, Tag.STRING)

  @classmethod
  def of_list(cls, raw) -> 'Value':
    return cls(list(raw), Tag.LIST)

  @classmethod
  def of_map(cls, raw) -> 'Value':
    return cls(dict(raw), Tag.MAP)

  # -- predicates -----------------------------------------------------------

  def is_null(self) -> bool:
    return self.tag is Tag.NULL

  def is_numeric(self) -> bool:
    return self.tag in NUMERIC_RANK

  def is_string(self) -> bool:
    return self.tag is Tag.STRING

  def is_boolean(self) -> bool:
    return self.tag is Tag.BOOLEAN

  def is_list(self) -> bool:
    return self.tag is Tag.LIST

  def is_map(self) -> bool:
    return self.tag is Tag.MAP

  def is_collection(self) -> bool:
    return self.tag in COLLECTION_TAGS

  def is_custom_type(self) -> bool:
    return self.tag is Tag.CUSTOM

  @property
  def type_name(self) -> str:
    """Lower-case tag name, or the custom name for custom values"""
    if self.tag is Tag.CUSTOM:
      return self.custom_name
    return self.tag.value

  # -- accessors ------------------------------------------------------------

  def _cast_error(self, target: str) -> CastError:
    return CastError(f"Cannot cast {self.type_name} to {target}")

  def as_int(self) -> int:
    if self.tag in (Tag.INTEGER, Tag.LONG):
      return wrap_int(self.raw, 32)
    if self.tag in (Tag.FLOAT, Tag.DOUBLE):
      return truncate_float(self.raw, INT32_MIN, INT32_MAX)
    raise self._cast_error("int")

  def as_long(self) -> int:
    if self.tag in (Tag.INTEGER, Tag.LONG):
      return wrap_int(self.raw, 64)
    if self.tag in (Tag.FLOAT, Tag.DOUBLE):
      return truncate_float(self.raw, INT64_MIN, INT64_MAX)
    raise self._cast_error("long")

  def as_double(self) -> float:
    if self.is_numeric():
      return float(self.raw)
    raise self._cast_error("double")

  def as_float(self) -> float:
    if self.is_numeric():
      return to_float32(float(self.raw))
    raise self._cast_error("float")

  def as_boolean(self) -> bool:
    """Lexical boolean coercion"""
    if self.tag is Tag.BOOLEAN:
      return self.raw
    if self.tag is Tag.NULL:
      return False
    if self.is_numeric():
      return float(self.raw) != 0.0
    if self.tag is Tag.STRING:
      return self.raw.strip().lower() in TRUTHY_STRINGS
    raise self._cast_error("boolean")

  def as_string(self) -> Optional[str]:
    """Total string coercion; NULL maps to None"""
    if self.tag is Tag.NULL:
      return None
    if self.tag is Tag.FLOAT:
      return format_float32(self.raw)
    return render_raw(self.raw)

  def as_list(self) -> List[Any]:
    if self.tag is Tag.LIST:
      return list(self.raw)
    raise self._cast_error("list")

  def as_map(self) -> Dict[Any, Any]:
    if self.tag is Tag.MAP:
      return dict(self.raw)
    raise self._cast_error("map")

  # -- arithmetic -----------------------------------------------------------

  def _widen(self, other: 'Value', operation: str) -> Tag:
    if not self.is_numeric() or not other.is_numeric():
      raise UnsupportedOperationError(f"{operation} requires numeric types")
    if NUMERIC_RANK[self.tag] >= NUMERIC_RANK[other.tag]:
      return self.tag
    return other.tag

  def _combine(self, other: 'Value', op, operation: str) -> 'Value':
    tag = self._widen(other, operation)
    if tag is Tag.DOUBLE:
      return Value.of_double(op(self.as_double(), other.as_double()))
    if tag is Tag.FLOAT:
      return Value.of_float(op(self.as_float(), other.as_float()))
    if tag is Tag.LONG:
      return Value.of_long(op(self.as_long(), other.as_long()))
    return Value.of_int(op(self.as_int(), other.as_int()))

  def add(self, other: 'Value') -> 'Value':
    return self._combine(other, operator.add, "Addition")

  def subtract(self, other: 'Value') -> 'Value':
    return self._combine(other, operator.sub, "Subtraction")

  def multiply(self, other: 'Value') -> 'Value':
    return self._combine(other, operator.mul, "Multiplication")

  def divide(self, other: 'Value') -> 'Value':
    """Double division; a zero divisor yields inf or NaN, not an error"""
    self._widen(other, "Division")
    return Value.of_double(ieee_divide(self.as_double(), other.as_double()))

  # -- identity -------------------------------------------------------------

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, Value):
      return NotImplemented
    return (self.tag is other.tag
            and self.custom_name == other.custom_name
            and self.raw == other.raw)

  def __hash__(self) -> int:
    # raw may be unhashable (lists, dicts)
    return hash((self.tag, self.custom_name))

  def __str__(self) -> str:
    return f"Value{{value={render_raw(self)}, type={self.type_name}}}"


def _require_int(raw: Any) -> int:
  if isinstance(raw, bool) or not isinstance(raw, int):
    raise TypeError(f"Expected int, got {type(raw).__name__}")
  return raw
