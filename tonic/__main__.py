"""CLI entry point for the Tonic interpreter.

Usage:
    python -m tonic [-v|-vv|-vvv] [--track-file PATH] [--seed N] <program.json>

Options:
  -v              Increase debug verbosity (can be repeated)
  --track-file    Where to write the track file (default: track.txt)
  --seed          Seed for randomInt/randomDouble

The program file is the JSON encoding of a parsed Tonic program (see
`tonic.ast_json`). Debug information is written to `debug.txt` in the
current directory when verbosity is greater than zero.
"""

import argparse
import sys
from pathlib import Path
from .interpreter import load_program, Interpreter


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Tonic language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--track-file', default='track.txt', help='track file written by mixdown (default: track.txt)')
    parser.add_argument('--seed', type=int, default=None, help='seed for the random number built-ins')
    parser.add_argument('program', help='JSON program file to execute')
    args = parser.parse_args(argv)

    program_file = Path(args.program)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    try:
        program = load_program(program_file)
    except (ValueError, TypeError, KeyError) as e:
        print(f"Error: {program_file} is not a valid program: {e}", file=sys.stderr)
        sys.exit(1)
    interpreter = Interpreter(debug_level=args.v, track_file=args.track_file, seed=args.seed)
    try:
        interpreter.run(program)
    except Exception as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == '__main__':
    main()
