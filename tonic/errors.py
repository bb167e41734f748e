from dataclasses import dataclass
from typing import Any


ERROR_KINDS = (
    'UndeclaredIdentifier',
    'UndefinedFunction',
    'ArityMismatch',
    'TypeMismatch',
    'InvalidOperation',
    'NotAnArray',
    'InvalidIndex',
    'IndexOutOfBounds',
    'EmptyArrayLiteral',
    'HeterogeneousArrayLiteral',
    'WrongArgumentType',
    'InvalidMixdownArgs',
    'NotMixable',
    'MainNotFound',
    'UnmatchedType',
    'StackOverflow',
)


@dataclass
class ErrorVal:
    """A Tonic runtime fault: one of `ERROR_KINDS` plus a readable message."""
    name: str
    message: str

    def __post_init__(self):
        if self.name not in ERROR_KINDS:
            raise ValueError(f"unknown error kind {self.name!r}")

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


class TonicError(Exception):
    """Exception type used to propagate Tonic runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"TonicError: {err.name}: {err.message}")
        self.err = err

    @property
    def kind(self) -> str:
        return self.err.name


@dataclass
class ReturnSignal:
    """Result of executing a `return`: the value and the globals at that point.

    Statement execution hands this back instead of an environment so that
    every enclosing statement stops and the nearest call can unwind,
    discarding the callee's locals.
    """
    value: Any
    globals: Any
