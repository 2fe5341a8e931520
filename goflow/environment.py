"""Environment & call frames: per-invocation bindings and their save/restore."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import constants
from .trace_types import VariableSnapshot
from .values import ABSENT, FALSE, TRUE, ZERO, Value, to_plain


@dataclass
class Environment:
    """Bindings of the currently executing function.

    Loop bodies push a label onto ``scope_stack`` but share the same
    bindings, so a name declared inside a loop stays visible until the
    function returns.  ``scopes`` remembers the scope path that was current
    when each name was first bound.
    """

    variables: dict[str, Value] = field(default_factory=dict)
    types: dict[str, str] = field(default_factory=dict)
    scopes: dict[str, str] = field(default_factory=dict)
    scope_stack: list[str] = field(default_factory=list)

    @classmethod
    def for_function(cls, function_name: str) -> Environment:
        return cls(scope_stack=[function_name])

    def read(self, name: str) -> Value:
        """Value bound to *name*; unknown identifiers read as Int(0)."""
        if name in self.variables:
            return self.variables[name]
        if name == "true":
            return TRUE
        if name == "false":
            return FALSE
        return ZERO

    def has(self, name: str) -> bool:
        return name in self.variables

    def type_of(self, name: str) -> str:
        return self.types.get(name, constants.TYPE_AUTO)

    def write(self, name: str, value: Value, type_label: str):
        if name not in self.variables:
            self.scopes[name] = self.scope_path()
        self.variables[name] = value
        self.types[name] = type_label

    def push_scope(self, label: str):
        self.scope_stack.append(label)

    def pop_scope(self) -> str:
        return self.scope_stack.pop() if self.scope_stack else ""

    def scope_path(self) -> str:
        return constants.SCOPE_SEPARATOR.join(self.scope_stack)

    def snapshot(self) -> tuple[VariableSnapshot, ...]:
        """Independent copy of every binding, in binding order."""
        return tuple(
            VariableSnapshot(
                name=name,
                type=self.types.get(name, constants.TYPE_AUTO),
                value=to_plain(value),
                scope=self.scopes.get(name, ""),
            )
            for name, value in self.variables.items()
        )

    def clone(self) -> Environment:
        """Copy of the binding maps and scope stack.

        Container values are shared, so slices and maps still alias.
        """
        return Environment(
            variables=dict(self.variables),
            types=dict(self.types),
            scopes=dict(self.scopes),
            scope_stack=list(self.scope_stack),
        )


@dataclass
class CallFrame:
    """A function invocation plus the caller state saved when it started."""

    function_name: str
    saved_env: Environment | None = None
    saved_returned: bool = False
    saved_return_value: Value = ABSENT
    saved_loop_signal: str = ""
