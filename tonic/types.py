"""Type definitions and helpers for Tonic.

This module defines the runtime value model used by the Tonic interpreter.
Integers, doubles and booleans are carried as plain Python values; pitches,
sounds and arrays are frozen dataclasses so that no operation can mutate a
value another binding still refers to. It also holds the pitch arithmetic
helpers and the textual rendering used by `print`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .errors import TonicError, ErrorVal


INT_BITS = 64
_INT_MODULUS = 1 << INT_BITS
_INT_MAX = (1 << (INT_BITS - 1)) - 1

NOTE_NAMES = ('C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B')
_FLATS = {'Db': 'C#', 'Eb': 'D#', 'Gb': 'F#', 'Ab': 'G#', 'Bb': 'A#'}
MAX_SEMITONE = 10 * len(NOTE_NAMES) - 1

SCALAR_KINDS = ('int', 'double', 'bool', 'pitch', 'sound')

# upper bound on the length of any array built by repetition or growth
MAX_ARRAY_LENGTH = 1_000_000


@dataclass(frozen=True)
class TypeSpec:
    """Represents a declarable Tonic type.

    A type is one of the scalar kinds ('int', 'double', 'bool', 'pitch',
    'sound') or an array of one of them. `int[]` becomes
    `TypeSpec(kind='array', elem=TypeSpec(kind='int'))`.
    """
    kind: str
    elem: Optional['TypeSpec'] = None

    def __repr__(self) -> str:
        if self.kind == 'array':
            return f"{self.elem!r}[]"
        return self.kind

    @staticmethod
    def parse(text: str) -> 'TypeSpec':
        name = text.strip()
        if name.endswith('[]'):
            inner = name[:-2].strip()
            if inner in SCALAR_KINDS:
                return TypeSpec('array', TypeSpec(inner))
        elif name in SCALAR_KINDS:
            return TypeSpec(name)
        raise TonicError(ErrorVal('TypeMismatch', f'unknown type {text!r}'))


@dataclass(frozen=True)
class PitchVal:
    """A note name plus octave digit, e.g. `C2` or `F#4`."""
    name: str

    def __repr__(self) -> str:
        return f"Pitch({self.name})"


@dataclass(frozen=True)
class SoundVal:
    """Represents a Tonic sound value.

    A sound is an ordered sequence of pitch names played for `duration`
    beats at the given `amplitude`. Sounds are the unit the track emitter
    serializes.
    """
    pitches: Tuple[str, ...]
    duration: float
    amplitude: int

    def __repr__(self) -> str:
        return f"Sound({list(self.pitches)!r}, {self.duration!r}, {self.amplitude!r})"


@dataclass(frozen=True)
class ArrayVal:
    """Represents a Tonic array value.

    Arrays are never empty and all items share the classification of the
    first. Both properties are enforced where arrays are built (literals,
    index assignment, repetition) rather than on every access.
    """
    items: Tuple[Any, ...]

    def __len__(self) -> int:
        return len(self.items)

    @property
    def elem_tag(self) -> str:
        return classify(self.items[0])

    def __repr__(self) -> str:
        return f"Array({list(self.items)!r})"


@dataclass(frozen=True)
class ElementRef:
    """Deferred reference to `array[index]`, bound by `for x in array` loops.

    The interpreter resolves it every time the loop variable is read, so
    writes to the array made inside the loop body are visible through it.
    """
    array: str
    index: int


def wrap_int(value: int) -> int:
    """Wrap an integer result into the signed 64-bit range."""
    value %= _INT_MODULUS
    if value > _INT_MAX:
        value -= _INT_MODULUS
    return value


def pitch_to_int(name: str) -> int:
    """Convert a pitch name such as `C#3` to its semitone offset from `C0`."""
    if len(name) < 2 or not name[-1].isdigit():
        raise TonicError(ErrorVal('InvalidOperation', f'invalid pitch {name!r}'))
    step = _FLATS.get(name[:-1], name[:-1])
    if step not in NOTE_NAMES:
        raise TonicError(ErrorVal('InvalidOperation', f'invalid pitch {name!r}'))
    return int(name[-1]) * len(NOTE_NAMES) + NOTE_NAMES.index(step)


def int_to_pitch(semitone: int) -> PitchVal:
    """Convert a semitone offset back to a pitch, spelling accidentals as sharps."""
    if semitone < 0 or semitone > MAX_SEMITONE:
        raise TonicError(ErrorVal('InvalidOperation', f'pitch offset {semitone} is out of range'))
    octave, step = divmod(semitone, len(NOTE_NAMES))
    return PitchVal(f"{NOTE_NAMES[step]}{octave}")


def classify(value: Any) -> str:
    """Return the type tag of a runtime value."""
    # bool is a subclass of int; test it first
    if isinstance(value, bool):
        return 'bool'
    if isinstance(value, int):
        return 'int'
    if isinstance(value, float):
        return 'double'
    if isinstance(value, PitchVal):
        return 'pitch'
    if isinstance(value, SoundVal):
        return 'sound'
    if isinstance(value, ArrayVal):
        return 'array'
    raise TonicError(ErrorVal('UnmatchedType', f'unmatched type {type(value).__name__}'))


def default_for_tag(tag: str) -> Any:
    if tag == 'int':
        return 0
    if tag == 'double':
        return 0.0
    if tag == 'bool':
        return False
    if tag == 'pitch':
        return PitchVal('C0')
    if tag == 'sound':
        return SoundVal((), 0.0, 0)
    raise TonicError(ErrorVal('UnmatchedType', f'no default value for {tag}'))


def default_value(type_spec: TypeSpec) -> Any:
    """Zero value for a declared type. Array defaults hold one default element."""
    if type_spec.kind == 'array':
        return ArrayVal((default_value(type_spec.elem),))
    return default_for_tag(type_spec.kind)


def default_like(value: Any) -> Any:
    """Default value with the same classification as `value`.

    Scalars map to `default_for_tag`; an array maps to a one-element array
    holding the default of its own element, so nested arrays keep their
    depth.
    """
    if isinstance(value, ArrayVal):
        return ArrayVal((default_like(value.items[0]),))
    return default_for_tag(classify(value))


def to_string(value: Any) -> str:
    """Convert a Tonic value to its string representation for printing."""
    tag = classify(value)
    if tag == 'bool':
        return 'true' if value else 'false'
    if tag == 'int':
        return str(value)
    if tag == 'double':
        return repr(value)
    if tag == 'pitch':
        return value.name
    if tag == 'sound':
        return f"|{', '.join(value.pitches)}|:{value.duration!r}:{value.amplitude}"
    return '[' + ','.join(to_string(item) for item in value.items) + ']'
