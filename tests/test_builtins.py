import random

import pytest
from tonic.ast import ArrayLit, Assign, Call, ExprStmt, Ident, Literal
from tonic.errors import TonicError
from tonic.std import populate_standard_library
from tonic.std.track import TrackEmitter
from tonic.types import ArrayVal, PitchVal, SoundVal

SOUND = SoundVal(('C2', 'E2'), 1.5, 100)


def lit(value, literal_type):
    return Literal(value, literal_type)


def show(expr):
    return ExprStmt(Call('print', [expr]))


@pytest.fixture
def std(track_file):
    return populate_standard_library(TrackEmitter(track_file), random.Random(7))


def call(std, name, *args):
    return std[name].fn(list(args))


@pytest.mark.parametrize('value, literal_type, expected', [
    (42, 'int', '42'),
    (1.5, 'double', '1.5'),
    (True, 'bool', 'true'),
    ('C2', 'pitch', 'C2'),
    (SOUND, 'sound', '|C2, E2|:1.5:100'),
])
def test_print_formats(run_main, capsys, value, literal_type, expected):
    run_main([show(lit(value, literal_type))])
    assert capsys.readouterr().out == expected + '\n'


def test_print_nested_array(run_main, capsys):
    inner = [ArrayLit([lit(1, 'int'), lit(2, 'int')]), ArrayLit([lit(3, 'int')])]
    run_main([show(ArrayLit(inner))])
    assert capsys.readouterr().out.strip() == '[[1,2],[3]]'


def test_print_returns_zero(run_main, capsys):
    run_main([show(Call('print', [lit(7, 'int')]))])
    assert capsys.readouterr().out.split() == ['7', '0']


def test_print_arity(run_main):
    with pytest.raises(TonicError) as exc:
        run_main([ExprStmt(Call('print', []))])
    assert exc.value.kind == 'ArityMismatch'


def test_sound_accessors(std):
    assert call(std, 'getAmplitude', SOUND) == 100
    assert call(std, 'getDuration', SOUND) == 1.5
    assert call(std, 'getPitches', SOUND) == ArrayVal((PitchVal('C2'), PitchVal('E2')))
    assert call(std, 'getPitches', PitchVal('A3')) == ArrayVal((PitchVal('A3'),))


def test_setters_return_new_sounds(std):
    louder = call(std, 'setAmplitude', SOUND, 90)
    assert call(std, 'getAmplitude', louder) == 90
    longer = call(std, 'setDuration', SOUND, 4.0)
    assert call(std, 'getDuration', longer) == 4.0
    pitches = ArrayVal((PitchVal('G3'),))
    assert call(std, 'getPitches', call(std, 'setPitches', SOUND, pitches)) == pitches
    # the original is never touched
    assert SOUND == SoundVal(('C2', 'E2'), 1.5, 100)


def test_get_pitches_of_empty_sound(std):
    with pytest.raises(TonicError) as exc:
        call(std, 'getPitches', SoundVal((), 0.0, 0))
    assert exc.value.kind == 'EmptyArrayLiteral'


@pytest.mark.parametrize('name, args', [
    ('getAmplitude', (5,)),
    ('getDuration', (PitchVal('C2'),)),
    ('getPitches', (1.5,)),
    ('setAmplitude', (SOUND, 1.5)),
    ('setDuration', (SOUND, 1)),
    ('setPitches', (SOUND, ArrayVal((1,)))),
    ('setPitches', (SOUND, PitchVal('C2'))),
    ('randomInt', (1.5,)),
    ('randomInt', (0,)),
    ('randomDouble', (3,)),
    ('length', (5,)),
    ('bpm', (1.5,)),
])
def test_wrong_argument_type(std, name, args):
    with pytest.raises(TonicError) as exc:
        call(std, name, *args)
    assert exc.value.kind == 'WrongArgumentType'


def test_random_values_are_in_range(std):
    for _ in range(50):
        n = call(std, 'randomInt', 10)
        assert isinstance(n, int) and 0 <= n < 10
        d = call(std, 'randomDouble', 2.0)
        assert isinstance(d, float) and 0.0 <= d < 2.0


def test_random_is_seeded(run_main, capsys):
    program = [show(Call('randomInt', [lit(1000, 'int')])), show(Call('randomDouble', [lit(1.0, 'double')]))]
    run_main(program, seed=11)
    first = capsys.readouterr().out
    run_main(program, seed=11)
    assert capsys.readouterr().out == first


def test_length(std):
    assert call(std, 'length', ArrayVal((1, 2, 3))) == 3


def test_round_trip_through_program(run_main, capsys):
    s = Ident('s')
    run_main([
        ExprStmt(Assign(s, Call('setAmplitude', [s, lit(90, 'int')]))),
        show(Call('getAmplitude', [s])),
        ExprStmt(Assign(s, Call('setDuration', [s, lit(0.5, 'double')]))),
        show(Call('getDuration', [s])),
        ExprStmt(Assign(s, Call('setPitches', [s, ArrayLit([lit('D3', 'pitch'), lit('F3', 'pitch')])]))),
        show(Call('getPitches', [s])),
        show(s),
    ], locals=[('sound', 's')])
    assert capsys.readouterr().out.split('\n')[:-1] == ['90', '0.5', '[D3,F3]', '|D3, F3|:0.5:90']
