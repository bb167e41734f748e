import pytest
from tonic.ast import (
    Assign, ArrayLit, BinaryOp, Call, ExprStmt, Ident, Index, Literal,
)
from tonic.errors import TonicError


def num(n):
    return Literal(n, 'int')


def pitch(name):
    return Literal(name, 'pitch')


def assign(name, expr):
    return ExprStmt(Assign(Ident(name), expr))


def set_index(name, i, expr):
    return ExprStmt(Assign(Index(name, [num(i)]), expr))


def show(expr):
    return ExprStmt(Call('print', [expr]))


def test_assignment_is_an_expression(run_main, capsys):
    run_main([show(Assign(Ident('x'), num(3))), show(Ident('x'))], globals=[('int', 'x')])
    assert capsys.readouterr().out.split() == ['3', '3']


def test_left_operand_effects_visible_to_right(run_main, capsys):
    run_main([show(BinaryOp('+', Assign(Ident('x'), num(2)), Ident('x')))], locals=[('int', 'x')])
    assert capsys.readouterr().out.strip() == '4'


@pytest.mark.parametrize('where', ['locals', 'globals', 'nowhere'])
def test_assign_undeclared_identifier(run_main, where):
    decls = {where: [('int', 'other')]} if where != 'nowhere' else {}
    with pytest.raises(TonicError) as exc:
        run_main([assign('x', num(1))], **decls)
    assert exc.value.kind == 'UndeclaredIdentifier'


def test_assign_type_mismatch(run_main):
    with pytest.raises(TonicError) as exc:
        run_main([assign('x', Literal(1.5, 'double'))], locals=[('int', 'x')])
    assert exc.value.kind == 'TypeMismatch'


def test_assign_arrays_compares_element_types(run_main, capsys):
    run_main([assign('a', ArrayLit([num(1), num(2)])), show(Ident('a'))], locals=[('int[]', 'a')])
    assert capsys.readouterr().out.strip() == '[1,2]'
    with pytest.raises(TonicError) as exc:
        run_main([assign('a', ArrayLit([Literal(True, 'bool')]))], locals=[('int[]', 'a')])
    assert exc.value.kind == 'TypeMismatch'


def test_empty_array_literal(run_main):
    with pytest.raises(TonicError) as exc:
        run_main([show(ArrayLit([]))])
    assert exc.value.kind == 'EmptyArrayLiteral'


def test_heterogeneous_array_literal(run_main):
    with pytest.raises(TonicError) as exc:
        run_main([show(ArrayLit([num(1), Literal(True, 'bool')]))])
    assert exc.value.kind == 'HeterogeneousArrayLiteral'


def test_array_literal_threads_environment(run_main, capsys):
    literal = ArrayLit([Assign(Ident('x'), num(1)), BinaryOp('+', Ident('x'), num(1))])
    run_main([show(literal)], locals=[('int', 'x')])
    assert capsys.readouterr().out.strip() == '[1,2]'


def test_index_read(run_main, capsys):
    run_main([
        assign('a', ArrayLit([num(4), num(5), num(6)])),
        show(Index('a', [BinaryOp('-', num(3), num(1))])),
    ], locals=[('int[]', 'a')])
    assert capsys.readouterr().out.strip() == '6'


def test_index_out_of_bounds(run_main):
    with pytest.raises(TonicError) as exc:
        run_main([
            assign('a', ArrayLit([num(1), num(2), num(3)])),
            show(Index('a', [num(5)])),
        ], locals=[('int[]', 'a')])
    assert exc.value.kind == 'IndexOutOfBounds'


@pytest.mark.parametrize('indices', [[Literal(True, 'bool')], [], [num(0), num(0)]])
def test_invalid_index(run_main, indices):
    with pytest.raises(TonicError) as exc:
        run_main([show(Index('a', indices))], locals=[('int[]', 'a')])
    assert exc.value.kind == 'InvalidIndex'


def test_index_not_an_array(run_main):
    with pytest.raises(TonicError) as exc:
        run_main([show(Index('n', [num(0)]))], locals=[('int', 'n')])
    assert exc.value.kind == 'NotAnArray'
    with pytest.raises(TonicError) as exc:
        run_main([set_index('n', 0, num(1))], locals=[('int', 'n')])
    assert exc.value.kind == 'NotAnArray'


def test_index_assign_within_bounds(run_main, capsys):
    run_main([
        assign('a', ArrayLit([num(1), num(2), num(3)])),
        set_index('a', 1, num(7)),
        show(Ident('a')),
    ], locals=[('int[]', 'a')])
    assert capsys.readouterr().out.strip() == '[1,7,3]'


def test_index_assign_past_the_end_grows(run_main, capsys):
    run_main([
        assign('a', ArrayLit([num(1), num(2), num(3)])),
        set_index('a', 5, num(9)),
        show(Ident('a')),
        show(Call('length', [Ident('a')])),
    ], globals=[('int[]', 'a')])
    assert capsys.readouterr().out.split() == ['[1,2,3,0,0,9]', '6']


def test_growth_fills_with_default_of_assigned_type(run_main, capsys):
    run_main([set_index('p', 2, pitch('D2')), show(Ident('p'))], locals=[('pitch[]', 'p')])
    assert capsys.readouterr().out.strip() == '[C0,C0,D2]'


def test_index_assign_errors(run_main):
    with pytest.raises(TonicError) as exc:
        run_main([set_index('a', -1, num(1))], locals=[('int[]', 'a')])
    assert exc.value.kind == 'IndexOutOfBounds'
    with pytest.raises(TonicError) as exc:
        run_main([set_index('a', 1_000_000, num(1))], locals=[('int[]', 'a')])
    assert exc.value.kind == 'IndexOutOfBounds'


def test_growth_with_a_different_type(run_main, capsys):
    run_main([set_index('a', 3, Literal(True, 'bool')), show(Ident('a'))], locals=[('int[]', 'a')])
    assert capsys.readouterr().out.strip() == '[0,false,false,true]'


def test_in_bounds_store_with_a_different_type(run_main, capsys):
    run_main([set_index('a', 0, Literal(1.5, 'double')), show(Ident('a'))], locals=[('int[]', 'a')])
    assert capsys.readouterr().out.strip() == '[1.5]'


def test_pitch_literals(run_main, capsys):
    run_main([show(BinaryOp('+', pitch('B3'), num(1)))])
    assert capsys.readouterr().out.strip() == 'C4'
    with pytest.raises(TonicError):
        run_main([show(pitch('X9'))])


def test_unary_and_binary_errors_abort(run_main):
    with pytest.raises(TonicError) as exc:
        run_main([show(BinaryOp('+', num(1), Literal(True, 'bool')))])
    assert exc.value.kind == 'InvalidOperation'
