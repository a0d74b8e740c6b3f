from dataclasses import dataclass
from typing import Any, Callable, List, Optional


@dataclass
class NativeFunction:
    """A host-provided callable bound to a name in the global scope.

    ``fn`` receives the evaluated arguments and the calling scope and
    returns one runtime value. ``arity`` of ``None`` accepts any count.
    """
    name: str
    arity: Optional[int]
    fn: Callable[[List[Any], Any], Any]

    def __repr__(self) -> str:
        return f"<native {self.name}>"
