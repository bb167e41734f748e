from types import MappingProxyType
from typing import Any, Dict, Mapping

from tonic.errors import TonicError, ErrorVal
from tonic.types import TypeSpec, default_value


def frame(values: Dict[str, Any]) -> Mapping[str, Any]:
    """Freeze a dict into a read-only frame."""
    return MappingProxyType(dict(values))


def declare_frame(decls, base: Mapping[str, Any] = MappingProxyType({})) -> Mapping[str, Any]:
    """Build a frame from `base` plus default-initialized declarations.

    Names already present in `base` keep their value, so formal parameters
    take precedence over locals declared with the same name.
    """
    values = dict(base)
    for decl in decls:
        if decl.name not in values:
            values[decl.name] = default_value(TypeSpec.parse(decl.type_name))
    return frame(values)


class Environment:
    """The (locals, globals) pair every evaluation step threads through.

    Both frames are read-only mappings. `set` and `with_globals` return a new
    Environment and leave this one untouched, so an evaluation only ever sees
    changes handed to it explicitly.
    """
    __slots__ = ('locals', 'globals')

    def __init__(self, locals: Mapping[str, Any], globals: Mapping[str, Any]):
        self.locals = locals
        self.globals = globals

    def __repr__(self) -> str:
        return f"Environment(locals={dict(self.locals)!r}, globals={dict(self.globals)!r})"

    def __contains__(self, name: str) -> bool:
        return name in self.locals or name in self.globals

    def get(self, name: str) -> Any:
        if name in self.locals:
            return self.locals[name]
        if name in self.globals:
            return self.globals[name]
        raise TonicError(ErrorVal('UndeclaredIdentifier', f'undeclared identifier {name}'))

    def set(self, name: str, value: Any) -> 'Environment':
        if name in self.locals:
            return Environment(_rebind(self.locals, name, value), self.globals)
        if name in self.globals:
            return Environment(self.locals, _rebind(self.globals, name, value))
        raise TonicError(ErrorVal('UndeclaredIdentifier', f'undeclared identifier {name}'))

    def scope_of(self, name: str) -> str:
        if name in self.locals:
            return 'local'
        if name in self.globals:
            return 'global'
        raise TonicError(ErrorVal('UndeclaredIdentifier', f'undeclared identifier {name}'))

    def with_globals(self, globals: Mapping[str, Any]) -> 'Environment':
        return Environment(self.locals, globals)


def _rebind(values: Mapping[str, Any], name: str, value: Any) -> Mapping[str, Any]:
    updated = dict(values)
    updated[name] = value
    return MappingProxyType(updated)
