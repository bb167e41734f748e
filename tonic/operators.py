"""Operator resolution table for Tonic.

Tonic has no uniform numeric tower. Every binary operator is resolved by
looking up `(op, left_tag, right_tag)` in `BINARY_OPS`; the pair is legal
only if an entry exists. Unary operators use the smaller `UNARY_OPS` table.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Tuple

from .errors import TonicError, ErrorVal
from .types import (
    MAX_ARRAY_LENGTH, ArrayVal, SoundVal, classify, int_to_pitch, pitch_to_int, wrap_int,
)


BinaryFn = Callable[[Any, Any], Any]

NUMERIC_TAGS = ('int', 'double')


def _fail(message: str):
    raise TonicError(ErrorVal('InvalidOperation', message))


def _int_div(a: int, b: int) -> int:
    # truncates toward zero
    if b == 0:
        _fail('division by zero')
    q = abs(a) // abs(b)
    return wrap_int(q if (a >= 0) == (b >= 0) else -q)


def _int_mod(a: int, b: int) -> int:
    # result takes the sign of the dividend
    if b == 0:
        _fail('modulo by zero')
    return wrap_int(a - b * _int_div(a, b))


def _float_div(a: float, b: float) -> float:
    if b == 0:
        _fail('division by zero')
    return a / b


_ARITH: Dict[str, Callable[[Any, Any], Any]] = {
    '+': lambda a, b: a + b,
    '-': lambda a, b: a - b,
    '*': lambda a, b: a * b,
}

_COMPARE: Dict[str, Callable[[Any, Any], bool]] = {
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
    '<': lambda a, b: a < b,
    '>': lambda a, b: a > b,
    '<=': lambda a, b: a <= b,
    '>=': lambda a, b: a >= b,
}


def _pitch_op(fn: Callable[[int, int], int], pitch_left: bool) -> BinaryFn:
    """Apply `fn` to semitone values and convert back to a pitch."""
    if pitch_left:
        return lambda p, n: int_to_pitch(fn(pitch_to_int(p.name), n))
    return lambda n, p: int_to_pitch(fn(n, pitch_to_int(p.name)))


def _repeat_array(arr: ArrayVal, times: int) -> ArrayVal:
    if times < 1:
        _fail(f'cannot repeat an array {times} times')
    if len(arr) * times > MAX_ARRAY_LENGTH:
        _fail(f'repeating an array of {len(arr)} elements {times} times exceeds {MAX_ARRAY_LENGTH} elements')
    return ArrayVal(arr.items * times)


def _scale_sound(sound: SoundVal, factor: Any) -> SoundVal:
    return SoundVal(sound.pitches, sound.duration * factor, sound.amplitude)


def _build_table() -> Dict[Tuple[str, str, str], BinaryFn]:
    table: Dict[Tuple[str, str, str], BinaryFn] = {}

    for op, fn in _ARITH.items():
        table[(op, 'int', 'int')] = lambda a, b, fn=fn: wrap_int(fn(a, b))
        table[(op, 'int', 'double')] = lambda a, b, fn=fn: fn(float(a), b)
        table[(op, 'double', 'int')] = lambda a, b, fn=fn: fn(a, float(b))
        table[(op, 'double', 'double')] = fn

    table[('/', 'int', 'int')] = _int_div
    table[('/', 'int', 'double')] = lambda a, b: _float_div(float(a), b)
    table[('/', 'double', 'int')] = lambda a, b: _float_div(a, float(b))
    table[('/', 'double', 'double')] = _float_div
    table[('%', 'int', 'int')] = _int_mod

    # pitch arithmetic works on semitone offsets
    table[('+', 'pitch', 'int')] = _pitch_op(lambda p, n: p + n, pitch_left=True)
    table[('+', 'int', 'pitch')] = _pitch_op(lambda n, p: n + p, pitch_left=False)
    table[('-', 'pitch', 'int')] = _pitch_op(lambda p, n: p - n, pitch_left=True)
    table[('-', 'int', 'pitch')] = _pitch_op(lambda n, p: n - p, pitch_left=False)
    table[('*', 'pitch', 'int')] = _pitch_op(lambda p, n: p * n, pitch_left=True)
    table[('/', 'pitch', 'int')] = _pitch_op(_int_div, pitch_left=True)
    table[('/', 'int', 'pitch')] = _pitch_op(_int_div, pitch_left=False)
    table[('%', 'pitch', 'int')] = _pitch_op(_int_mod, pitch_left=True)
    table[('%', 'int', 'pitch')] = _pitch_op(_int_mod, pitch_left=False)

    table[('*', 'array', 'int')] = _repeat_array
    table[('*', 'int', 'array')] = lambda n, arr: _repeat_array(arr, n)
    for tag in NUMERIC_TAGS:
        table[('*', 'sound', tag)] = _scale_sound
        table[('*', tag, 'sound')] = lambda f, s: _scale_sound(s, f)

    table[('&&', 'bool', 'bool')] = lambda a, b: a and b
    table[('||', 'bool', 'bool')] = lambda a, b: a or b

    for op, fn in _COMPARE.items():
        for left in NUMERIC_TAGS:
            for right in NUMERIC_TAGS:
                table[(op, left, right)] = fn
        table[(op, 'bool', 'bool')] = fn
        table[(op, 'pitch', 'pitch')] = lambda a, b, fn=fn: fn(pitch_to_int(a.name), pitch_to_int(b.name))
        table[(op, 'pitch', 'int')] = lambda a, b, fn=fn: fn(pitch_to_int(a.name), b)
        table[(op, 'int', 'pitch')] = lambda a, b, fn=fn: fn(a, pitch_to_int(b.name))

    return table


BINARY_OPS = _build_table()

UNARY_OPS: Dict[Tuple[str, str], Callable[[Any], Any]] = {
    ('!', 'bool'): lambda a: not a,
    ('-', 'int'): lambda a: wrap_int(-a),
    ('-', 'double'): lambda a: -a,
}


def apply_binary_op(op: str, a: Any, b: Any) -> Any:
    left_tag, right_tag = classify(a), classify(b)
    fn = BINARY_OPS.get((op, left_tag, right_tag))
    if fn is None:
        _fail(f'operator {op} is not defined for {left_tag} and {right_tag}')
    return fn(a, b)


def apply_unary_op(op: str, a: Any) -> Any:
    tag = classify(a)
    fn = UNARY_OPS.get((op, tag))
    if fn is None:
        _fail(f'unary operator {op} is not defined for {tag}')
    return fn(a)
