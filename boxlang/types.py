"""Runtime values for BoxLang.

The language has a small closed set of values. Numbers, booleans and
strings are carried as plain Python ``float``, ``bool`` and ``str``;
everything else has a class here:

* ``NullVal`` for ``Null`` (``NULL`` is the shared instance),
* ``ArrayVal`` for arrays, which are shared by reference so that two
  variables holding the same array observe each other's writes,
* ``ObjectVal`` for string-keyed objects,
* ``FunctionValue`` for user functions together with the scope they
  were declared in.

Native functions live in ``native_function.py``. Helpers for naming,
printing and truth-testing values are at the bottom of this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    from .ast import Node
    from .environment import Environment


class NullVal:
    """Marker object for the BoxLang ``null`` value."""
    def __eq__(self, other: Any) -> bool:
        return isinstance(other, NullVal)

    def __hash__(self) -> int:
        return hash(NullVal)

    def __repr__(self) -> str:
        return 'null'


NULL = NullVal()


@dataclass(eq=False)
class ArrayVal:
    """A mutable, ordered sequence of runtime values.

    Identity matters: assignment copies the reference, never the items.
    """
    items: List[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Array({self.items!r})"


@dataclass(eq=False)
class ObjectVal:
    properties: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Object({self.properties!r})"


@dataclass(eq=False)
class FunctionValue:
    """A user-defined function.

    ``closure`` is the scope that was active where the function was
    declared; calls run in a fresh child of it, never of the caller's scope.
    """
    name: str
    parameters: List[str]
    body: List['Node']
    closure: 'Environment'

    def __repr__(self) -> str:
        return f"<function {self.name}>"


def is_number(value: Any) -> bool:
    return isinstance(value, float)


def type_name(value: Any) -> str:
    """Return the BoxLang type name of a runtime value."""
    # bool before anything numeric: bool is an int subclass
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, float):
        return 'Number'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, NullVal):
        return 'Null'
    if isinstance(value, ArrayVal):
        return 'Array'
    if isinstance(value, ObjectVal):
        return 'Object'
    if isinstance(value, FunctionValue):
        return 'Function'
    from .native_function import NativeFunction
    if isinstance(value, NativeFunction):
        return 'NativeFunction'
    return type(value).__name__


def format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def to_string(value: Any) -> str:
    """Convert a value to the text ``print`` shows for it.

    Arrays print as their elements joined by ``", "``; nested arrays are
    bracketed so their boundaries stay visible.
    """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, ArrayVal):
        return ', '.join(_nested_to_string(item) for item in value.items)
    if isinstance(value, ObjectVal):
        entries = ', '.join(f"{k}: {_nested_to_string(v)}" for k, v in value.properties.items())
        return '{' + entries + '}'
    if isinstance(value, NullVal):
        return 'null'
    return repr(value)


def _nested_to_string(value: Any) -> str:
    if isinstance(value, ArrayVal):
        return '[' + to_string(value) + ']'
    return to_string(value)


def is_truthy(value: Any) -> bool:
    """Truth test used by ``if`` when its condition is not a boolean."""
    if isinstance(value, bool):
        return value
    if isinstance(value, NullVal):
        return False
    if isinstance(value, float):
        return value != 0
    if isinstance(value, str):
        return value != ''
    return True
