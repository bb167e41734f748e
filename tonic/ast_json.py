"""JSON serialization/deserialization for Tonic AST.

This module converts between Tonic AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. It is the interface the
external parser uses to hand programs to the interpreter: every node is an
object whose `"type"` key names the dataclass.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    Program,
    VarDecl,
    FuncParam,
    FuncDecl,
    Block,
    IfStmt,
    WhileStmt,
    ForStmt,
    LoopStmt,
    ReturnStmt,
    ExprStmt,
    Assign,
    BinaryOp,
    UnaryOp,
    Literal,
    Ident,
    ArrayLit,
    Call,
    Index,
)
from .types import PitchVal, SoundVal


def literal_to_obj(value: Any) -> Any:
    if isinstance(value, PitchVal):
        return value.name
    if isinstance(value, SoundVal):
        return {"pitches": list(value.pitches), "duration": value.duration, "amplitude": value.amplitude}
    return value


def literal_from_obj(value: Any, literal_type: str) -> Any:
    if literal_type == 'pitch':
        return PitchVal(value)
    if literal_type == 'sound':
        return SoundVal(tuple(value["pitches"]), float(value["duration"]), int(value["amplitude"]))
    if literal_type == 'double':
        return float(value)
    return value


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Program):
        return {
            "type": "Program",
            "globals": [ast_to_obj(v) for v in node.globals],
            "functions": [ast_to_obj(f) for f in node.functions],
        }
    if isinstance(node, VarDecl):
        return {"type": "VarDecl", "type_name": node.type_name, "name": node.name}
    if isinstance(node, FuncParam):
        return {"type": "FuncParam", "name": node.name, "type_name": node.type_name}
    if isinstance(node, FuncDecl):
        return {
            "type": "FuncDecl",
            "name": node.name,
            "params": [ast_to_obj(p) for p in node.params],
            "locals": [ast_to_obj(v) for v in node.locals],
            "body": [ast_to_obj(s) for s in node.body],
        }
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, WhileStmt):
        return {"type": "WhileStmt", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, ForStmt):
        return {
            "type": "ForStmt",
            "init": ast_to_obj(node.init),
            "condition": ast_to_obj(node.condition),
            "post": ast_to_obj(node.post),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, LoopStmt):
        return {"type": "LoopStmt", "var": node.var, "array": node.array, "body": ast_to_obj(node.body)}
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "value": ast_to_obj(node.value)}
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, Assign):
        return {"type": "Assign", "target": ast_to_obj(node.target), "value": ast_to_obj(node.value)}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": literal_to_obj(node.value), "literal_type": node.literal_type}
    if isinstance(node, Ident):
        return {"type": "Ident", "name": node.name}
    if isinstance(node, ArrayLit):
        return {"type": "ArrayLit", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, Index):
        return {"type": "Index", "array": node.array, "indices": [ast_to_obj(i) for i in node.indices]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(
            globals=[ast_from_obj(v) for v in obj.get("globals", [])],
            functions=[ast_from_obj(f) for f in obj.get("functions", [])],
        )
    if t == "VarDecl":
        return VarDecl(type_name=obj["type_name"], name=obj["name"])
    if t == "FuncParam":
        return FuncParam(name=obj["name"], type_name=obj.get("type_name"))
    if t == "FuncDecl":
        return FuncDecl(
            name=obj["name"],
            params=[_param_from_obj(p) for p in obj.get("params", [])],
            locals=[ast_from_obj(v) for v in obj.get("locals", [])],
            body=[ast_from_obj(s) for s in obj.get("body", [])],
        )
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "IfStmt":
        return IfStmt(
            condition=ast_from_obj(obj["condition"]),
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
        )
    if t == "WhileStmt":
        return WhileStmt(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "ForStmt":
        return ForStmt(
            init=ast_from_obj(obj.get("init")),
            condition=ast_from_obj(obj.get("condition")),
            post=ast_from_obj(obj.get("post")),
            body=ast_from_obj(obj["body"]),
        )
    if t == "LoopStmt":
        return LoopStmt(var=obj["var"], array=obj["array"], body=ast_from_obj(obj["body"]))
    if t == "ReturnStmt":
        return ReturnStmt(value=ast_from_obj(obj.get("value")))
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]))
    if t == "Assign":
        return Assign(target=ast_from_obj(obj["target"]), value=ast_from_obj(obj["value"]))
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "UnaryOp":
        return UnaryOp(op=obj["op"], operand=ast_from_obj(obj["operand"]))
    if t == "Literal":
        return Literal(value=literal_from_obj(obj["value"], obj["literal_type"]), literal_type=obj["literal_type"])
    if t == "Ident":
        return Ident(name=obj["name"])
    if t == "ArrayLit":
        return ArrayLit(elements=[ast_from_obj(e) for e in obj["elements"]])
    if t == "Call":
        return Call(name=obj["name"], args=[ast_from_obj(a) for a in obj.get("args", [])])
    if t == "Index":
        return Index(array=obj["array"], indices=[ast_from_obj(i) for i in obj["indices"]])

    raise ValueError(f"Unknown AST node type: {t}")


def _param_from_obj(obj: Any) -> FuncParam:
    # bare strings are accepted as untyped parameter names
    if isinstance(obj, str):
        return FuncParam(name=obj)
    return ast_from_obj(obj)
