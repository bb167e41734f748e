# Tonic language package
# This package provides the interpreter for the Tonic music language.
from .interpreter import run_program, run_file, load_program, Interpreter
from .errors import TonicError

__all__ = [
    'run_program',
    'run_file',
    'load_program',
    'Interpreter',
    'TonicError',
]
