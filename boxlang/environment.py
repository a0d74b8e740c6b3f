from typing import Any, Dict, Optional, Set
from boxlang.errors import EvalError


class Environment:
    """One lexical scope: bindings, constant markers and a link to the enclosing scope."""
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}
        self.consts: Set[str] = set()

    def declare(self, name: str, value: Any, is_const: bool = False) -> Any:
        # shadowing an outer binding is fine, redeclaring in this scope is not
        if name in self.values:
            raise EvalError('DuplicateDeclaration', f'cannot declare {name}: it is already defined in this scope')
        self.values[name] = value
        if is_const:
            self.consts.add(name)
        return value

    def resolve(self, name: str) -> 'Environment':
        # membership, not truthiness: a binding holding 0 or false still exists
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env
            env = env.parent
        raise EvalError('UnknownVariable', f'variable {name} is not defined')

    def assign(self, name: str, value: Any) -> Any:
        env = self.resolve(name)
        if name in env.consts:
            raise EvalError('ConstantViolation', f'cannot assign to {name}: it was declared constant')
        env.values[name] = value
        return value

    def lookup(self, name: str) -> Any:
        return self.resolve(name).values[name]

    def child_scope(self) -> 'Environment':
        return Environment(self)
