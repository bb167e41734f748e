"""Interpreter for the Tonic language.

This module implements the Tonic evaluator: expression evaluation against
an explicit (locals, globals) environment, statement execution, and user
function calls. Every evaluation step returns the environment it leaves
behind and the caller carries that environment forward; nothing is shared
by mutation. A `return` travels back to the nearest call as a
`ReturnSignal` value rather than an exception.
"""

from __future__ import annotations

import json
import random
import sys
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from .ast import (
    Program, FuncDecl, Block, IfStmt, WhileStmt, ForStmt, LoopStmt,
    ReturnStmt, ExprStmt, Assign, BinaryOp, UnaryOp, Literal, Ident, ArrayLit,
    Call, Index, Node,
)
from .ast_json import ast_from_obj
from .builtin_function import BuiltinFunction
from .environment import Environment, declare_frame, frame
from .errors import TonicError, ErrorVal, ReturnSignal
from .operators import apply_binary_op, apply_unary_op
from .std import populate_standard_library
from .std.track import DEFAULT_TEMPO, TrackEmitter
from .types import (
    MAX_ARRAY_LENGTH, ArrayVal, ElementRef, PitchVal, SoundVal, classify,
    default_like, pitch_to_int, to_string,
)


Outcome = Union[Environment, ReturnSignal]

MAX_CALL_DEPTH = 500
# Python frames one Tonic call may use, for sizing the recursion limit
FRAMES_PER_CALL = 20


class Interpreter:
    """Core interpreter that executes a Tonic program tree."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 track_file: Union[str, Path] = 'track.txt', tempo: int = DEFAULT_TEMPO,
                 seed: Optional[int] = None, max_depth: int = MAX_CALL_DEPTH):
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None
        self.track = TrackEmitter(track_file, tempo)
        self.rng = random.Random(seed)
        self.builtins: Dict[str, BuiltinFunction] = populate_standard_library(self.track, self.rng)
        self.functions: Dict[str, FuncDecl] = {}
        self.max_depth = max_depth
        self.depth = 0

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def run(self, program: Program) -> Any:
        """Run `main` and return its value.

        The track file is reset to the sentinel before anything runs and
        again if the run fails, so a failed run never leaves a playable file.
        An interpreter may run several programs; each run starts from the
        configured tempo with no track written.
        """
        if self.debug_level > 0 and self.debug_fp is None:
            self.debug_fp = open(self.debug_file, 'a')
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(limit, self.max_depth * FRAMES_PER_CALL))
        try:
            self.depth = 0
            self.track.reset()
            self.functions = {}
            for fdecl in program.functions:
                if fdecl.name in self.functions:
                    self.debug(f"function {fdecl.name} redeclared; the later declaration wins")
                self.functions[fdecl.name] = fdecl
            globals = declare_frame(program.globals)
            if 'main' not in self.functions:
                raise TonicError(ErrorVal('MainNotFound', 'did not find the main() function'))
            self.debug(f"run: {len(self.functions)} functions, {len(globals)} globals")
            value, globals = self.call_function(self.functions['main'], [], globals)
            self.debug(f"run finished: main returned {to_string(value)}")
            return value
        except TonicError as ex:
            self.debug(f"run aborted: {ex}")
            self.track.reset()
            raise
        except RecursionError:
            self.debug("run aborted: Python recursion limit reached")
            self.track.reset()
            raise TonicError(ErrorVal('StackOverflow', 'expression or call nesting is too deep')) from None
        except Exception:
            self.track.reset()
            raise
        finally:
            sys.setrecursionlimit(limit)
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    # Statements
    def execute_block(self, statements: List[Node], env: Environment) -> Outcome:
        for stmt in statements:
            result = self.execute(stmt, env)
            # propagate return signals
            if isinstance(result, ReturnSignal):
                return result
            env = result
        return env

    def execute(self, node: Node, env: Environment) -> Outcome:
        if isinstance(node, Block):
            return self.execute_block(node.statements, env)
        if isinstance(node, ExprStmt):
            _, env = self.evaluate(node.expr, env)
            return env
        if isinstance(node, IfStmt):
            cond, env = self.evaluate(node.condition, env)
            taken = self.is_true(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {taken}")
            if taken:
                return self.execute(node.then_branch, env)
            if node.else_branch is not None:
                return self.execute(node.else_branch, env)
            return env
        if isinstance(node, WhileStmt):
            while True:
                cond, env = self.evaluate(node.condition, env)
                if not self.is_true(cond):
                    return env
                res = self.execute(node.body, env)
                if isinstance(res, ReturnSignal):
                    return res
                env = res
        if isinstance(node, ForStmt):
            if node.init is not None:
                _, env = self.evaluate(node.init, env)
            while True:
                if node.condition is not None:
                    cond, env = self.evaluate(node.condition, env)
                    if not self.is_true(cond):
                        return env
                res = self.execute(node.body, env)
                if isinstance(res, ReturnSignal):
                    return res
                env = res
                if node.post is not None:
                    _, env = self.evaluate(node.post, env)
        if isinstance(node, LoopStmt):
            return self.execute_loop(node, env)
        if isinstance(node, ReturnStmt):
            value = False
            if node.value is not None:
                value, env = self.evaluate(node.value, env)
            return ReturnSignal(value, env.globals)
        # catch any other nodes
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_loop(self, node: LoopStmt, env: Environment) -> Outcome:
        """`for var in array`: bind `var` to each element by reference.

        The length is taken once, before the first iteration. Each pass
        rebinds `var` (in whichever frame declares it) to `array[i]` rather
        than to a copy, so writes to the array or through `var` inside the
        body are seen on later reads. After the loop `var` still refers to
        the last slot.
        """
        if node.var == node.array:
            raise TonicError(ErrorVal('InvalidOperation', f'loop variable {node.var} cannot iterate over itself'))
        arr = self.resolve(env, node.array)
        if not isinstance(arr, ArrayVal):
            raise TonicError(ErrorVal('NotAnArray', f'{node.array} is not an array. Cannot loop over it'))
        for i in range(len(arr)):
            env = env.set(node.var, ElementRef(node.array, i))
            res = self.execute(node.body, env)
            if isinstance(res, ReturnSignal):
                return res
            env = res
        return env

    # Expressions
    def evaluate(self, node: Node, env: Environment) -> Tuple[Any, Environment]:
        if isinstance(node, Literal):
            return self.literal_value(node), env
        if isinstance(node, Ident):
            return self.resolve(env, node.name), env
        if isinstance(node, ArrayLit):
            items = []
            for element in node.elements:
                value, env = self.evaluate(element, env)
                items.append(value)
            return self.make_array(items), env
        if isinstance(node, Index):
            return self.evaluate_index(node, env)
        if isinstance(node, Assign):
            value, env = self.evaluate(node.value, env)
            return self.assign_lvalue(node.target, value, env)
        if isinstance(node, BinaryOp):
            left, env = self.evaluate(node.left, env)
            right, env = self.evaluate(node.right, env)
            return apply_binary_op(node.op, left, right), env
        if isinstance(node, UnaryOp):
            operand, env = self.evaluate(node.operand, env)
            return apply_unary_op(node.op, operand), env
        if isinstance(node, Call):
            return self.evaluate_call(node, env)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def literal_value(self, node: Literal) -> Any:
        value = node.value
        if node.literal_type == 'pitch':
            name = value.name if isinstance(value, PitchVal) else value
            pitch_to_int(name)  # rejects malformed names
            return PitchVal(name)
        if node.literal_type == 'double':
            return float(value)
        if node.literal_type == 'sound' and not isinstance(value, SoundVal):
            raise TonicError(ErrorVal('TypeMismatch', f'invalid sound literal {value!r}'))
        return value

    def make_array(self, items: List[Any]) -> ArrayVal:
        if not items:
            raise TonicError(ErrorVal('EmptyArrayLiteral', 'array literals cannot be empty'))
        first = classify(items[0])
        for position, item in enumerate(items[1:], start=1):
            if classify(item) != first:
                raise TonicError(ErrorVal(
                    'HeterogeneousArrayLiteral',
                    f'array element {position} is {classify(item)}, expected {first}',
                ))
        return ArrayVal(tuple(items))

    def resolve(self, env: Environment, name: str, seen: FrozenSet[str] = frozenset()) -> Any:
        """Current value of `name`, following loop-variable element references."""
        value = env.get(name)
        if isinstance(value, ElementRef):
            if name in seen:
                raise TonicError(ErrorVal('InvalidOperation', f'circular element reference through {name}'))
            arr = self.resolve(env, value.array, seen | {name})
            return self.element_at(arr, value.array, value.index)
        return value

    def element_at(self, arr: Any, name: str, index: int) -> Any:
        if not isinstance(arr, ArrayVal):
            raise TonicError(ErrorVal('NotAnArray', f'{name} is not an array. Cannot access index'))
        if index < 0 or index >= len(arr):
            raise TonicError(ErrorVal('IndexOutOfBounds', f'index {index} is out of bounds for {name} of length {len(arr)}'))
        return arr.items[index]

    def evaluate_subscript(self, node: Index, env: Environment) -> Tuple[int, Environment]:
        if not node.indices:
            raise TonicError(ErrorVal('InvalidIndex', f'error indexing array {node.array} without indices'))
        if len(node.indices) > 1:
            raise TonicError(ErrorVal('InvalidIndex', f'multi-dimensional indexing of {node.array} is not supported'))
        index, env = self.evaluate(node.indices[0], env)
        if classify(index) != 'int':
            raise TonicError(ErrorVal('InvalidIndex', f'array index must be int, got {classify(index)}'))
        return index, env

    def evaluate_index(self, node: Index, env: Environment) -> Tuple[Any, Environment]:
        arr = self.resolve(env, node.array)
        if not isinstance(arr, ArrayVal):
            raise TonicError(ErrorVal('NotAnArray', f'{node.array} is not an array. Cannot access index'))
        index, env = self.evaluate_subscript(node, env)
        # the subscript may have reassigned the array
        arr = self.resolve(env, node.array)
        return self.element_at(arr, node.array, index), env

    def assign_lvalue(self, target: Node, value: Any, env: Environment) -> Tuple[Any, Environment]:
        if isinstance(target, Ident):
            current = self.resolve(env, target.name)
            self.check_assignable(target.name, current, value)
            env = self.store(env, target.name, value)
            if self.debug_level >= 3:
                self.debug(f"assign {env.scope_of(target.name)} {target.name} = {to_string(value)}")
            return value, env
        if isinstance(target, Index):
            if not isinstance(self.resolve(env, target.array), ArrayVal):
                raise TonicError(ErrorVal('NotAnArray', f'{target.array} is not an array. Cannot assign to index'))
            index, env = self.evaluate_subscript(target, env)
            arr = self.resolve(env, target.array)
            if not isinstance(arr, ArrayVal):
                raise TonicError(ErrorVal('NotAnArray', f'{target.array} is not an array. Cannot assign to index'))
            env = self.store(env, target.array, self.replace_element(arr, target.array, index, value))
            if self.debug_level >= 3:
                self.debug(f"assign {target.array}[{index}] = {to_string(value)}")
            return value, env
        raise TonicError(ErrorVal('InvalidOperation', 'can only assign variables or array indices'))

    def check_assignable(self, name: str, current: Any, value: Any):
        current_tag, new_tag = classify(current), classify(value)
        if current_tag == 'array' and new_tag == 'array':
            current_tag, new_tag = current.elem_tag, value.elem_tag
        if current_tag != new_tag:
            raise TonicError(ErrorVal('TypeMismatch', f'cannot assign {new_tag} to {name}, which holds {current_tag}'))

    def replace_element(self, arr: ArrayVal, name: str, index: int, value: Any) -> ArrayVal:
        """Copy of `arr` with slot `index` set to `value`.

        Writing at or past the end grows the array, padding the gap with the
        default value of the stored value's type. The element type is not
        checked here; homogeneity is only enforced on array literals.
        """
        if index < 0:
            raise TonicError(ErrorVal('IndexOutOfBounds', f'index {index} is out of bounds for {name}'))
        if index >= MAX_ARRAY_LENGTH:
            raise TonicError(ErrorVal('IndexOutOfBounds', f'index {index} exceeds the largest array of {MAX_ARRAY_LENGTH} elements'))
        items = list(arr.items)
        if index < len(items):
            items[index] = value
        else:
            items.extend(default_like(value) for _ in range(len(items), index))
            items.append(value)
        return ArrayVal(tuple(items))

    def store(self, env: Environment, name: str, value: Any, seen: FrozenSet[str] = frozenset()) -> Environment:
        """Rebind `name`; a loop variable writes through to the element it refers to."""
        binding = env.get(name)
        if isinstance(binding, ElementRef):
            if name in seen:
                raise TonicError(ErrorVal('InvalidOperation', f'circular element reference through {name}'))
            arr = self.resolve(env, binding.array)
            self.element_at(arr, binding.array, binding.index)
            updated = self.replace_element(arr, binding.array, binding.index, value)
            return self.store(env, binding.array, updated, seen | {name})
        return env.set(name, value)

    def evaluate_call(self, node: Call, env: Environment) -> Tuple[Any, Environment]:
        builtin = self.builtins.get(node.name)
        fdecl = None
        if builtin is None:
            fdecl = self.functions.get(node.name)
            if fdecl is None:
                raise TonicError(ErrorVal('UndefinedFunction', f'undefined function {node.name}'))
        args = []
        for arg in node.args:
            value, env = self.evaluate(arg, env)
            args.append(value)
        if builtin is not None:
            if builtin.arity is not None and len(args) != builtin.arity:
                raise TonicError(ErrorVal('ArityMismatch', f"{builtin.name} expects {builtin.arity} arguments, got {len(args)}"))
            if self.debug_level >= 2:
                self.debug(f"call builtin {builtin.name}({', '.join(to_string(a) for a in args)})")
            return builtin.fn(args), env
        value, globals = self.call_function(fdecl, args, env.globals)
        return value, env.with_globals(globals)

    def call_function(self, fdecl: FuncDecl, args: List[Any], globals) -> Tuple[Any, Any]:
        """Call a user function and return `(value, globals)`.

        Formals are bound positionally in a fresh local frame, declared
        locals are default-initialized beside them, and the caller's locals
        are never visible. Falling off the end of the body yields `False`.
        """
        if len(args) != len(fdecl.params):
            raise TonicError(ErrorVal('ArityMismatch', f'wrong number of arguments to: {fdecl.name}'))
        bound = frame({param.name: arg for param, arg in zip(fdecl.params, args)})
        locals = declare_frame(fdecl.locals, bound)
        if self.debug_level >= 2:
            self.debug(f"call {fdecl.name}({', '.join(to_string(a) for a in args)})")
        if self.depth >= self.max_depth:
            raise TonicError(ErrorVal('StackOverflow', f'call depth exceeded {self.max_depth} calling {fdecl.name}'))
        self.depth += 1
        try:
            result = self.execute_block(fdecl.body, Environment(locals, globals))
        finally:
            self.depth -= 1
        if isinstance(result, ReturnSignal):
            if self.debug_level >= 2:
                self.debug(f"return from {fdecl.name}: {to_string(result.value)}")
            return result.value, result.globals
        return False, result.globals

    def is_true(self, value: Any) -> bool:
        # only Boolean(true) counts; anything else takes the false branch
        return isinstance(value, bool) and value


def load_program(file_path: Union[str, Path]) -> Program:
    """Read a program tree from its JSON encoding."""
    with open(file_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    program = ast_from_obj(data)
    if not isinstance(program, Program):
        raise ValueError(f"{file_path} does not contain a Program")
    return program


def run_program(program: Program, **options: Any) -> Any:
    """Convenience function to run a program tree with a fresh interpreter."""
    interpreter = Interpreter(**options)
    return interpreter.run(program)


def run_file(file_path: Union[str, Path], **options: Any) -> Interpreter:
    """Load and execute a JSON program file, returning the interpreter instance."""
    program = load_program(file_path)
    interpreter = Interpreter(**options)
    interpreter.run(program)
    return interpreter
