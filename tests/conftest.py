import pytest
from tonic.ast import Program, FuncDecl, VarDecl
from tonic.interpreter import Interpreter


@pytest.fixture
def track_file(tmp_path):
    return tmp_path / 'track.txt'


@pytest.fixture
def run_main(track_file):
    """Run `body` as the body of `main` and return main's value.

    `globals` and `locals` are lists of (type_name, name) pairs; `functions`
    are extra FuncDecls placed beside main.
    """
    def run(body, globals=(), locals=(), functions=(), **options):
        main = FuncDecl('main', [], [VarDecl(t, n) for t, n in locals], list(body))
        program = Program(
            globals=[VarDecl(t, n) for t, n in globals],
            functions=[main, *functions],
        )
        interp = Interpreter(track_file=track_file, **options)
        return interp.run(program)
    return run
