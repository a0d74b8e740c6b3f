import json

import pytest

from boxlang.__main__ import main


def write_program(tmp_path, text, name='prog.box'):
    path = tmp_path / name
    path.write_text(text, encoding='utf-8')
    return path


def test_runs_source_file(tmp_path, capsys):
    path = write_program(tmp_path, 'box x = 2 end print(x add 3)')
    main([str(path)])
    assert capsys.readouterr().out == '5\n'


def test_emit_ast_then_run_it(tmp_path, capsys):
    path = write_program(tmp_path, 'print("from json")')
    main(['--emit-ast', str(path)])
    out_path = tmp_path / 'prog.box.ast.json'
    assert capsys.readouterr().out.strip() == str(out_path)
    data = json.loads(out_path.read_text(encoding='utf-8'))
    assert data['type'] == 'Program'

    main(['--ast', str(out_path)])
    assert capsys.readouterr().out == 'from json\n'


def test_runtime_error_exits_with_status_1(tmp_path, capsys):
    path = write_program(tmp_path, 'box r = 1 / 0 end')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith('Error: DivisionByZero')


def test_parse_error_exits_with_status_1(tmp_path, capsys):
    path = write_program(tmp_path, 'box x = 5')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert 'UnexpectedToken' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'nope.box')])
    assert excinfo.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_debug_output_goes_to_debug_file(tmp_path, capsys):
    path = write_program(tmp_path, 'box x = 1 end if x > 0 doIt print(x) end')
    debug_path = tmp_path / 'trace.txt'
    main(['-vvvv', '--debug-file', str(debug_path), str(path)])
    assert capsys.readouterr().out == '1\n'
    trace = debug_path.read_text(encoding='utf-8')
    assert 'run program' in trace
    assert 'declare variable x' in trace
    assert 'if condition' in trace
    assert 'call native print' in trace
    assert 'program finished' in trace


def test_deeply_nested_source_exits_with_status_1(tmp_path, capsys):
    path = write_program(tmp_path, 'box x = ' + '(' * 3000 + '1' + ')' * 3000 + ' end')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith('Error: StackOverflow')


@pytest.mark.parametrize('text', [
    '{"type": "Program"}',
    '{"type": "Teleport"}',
    '{"body": []}',
    'not json',
    '[]',
])
def test_invalid_ast_file_exits_with_status_1(tmp_path, capsys, text):
    path = write_program(tmp_path, text, name='bad.ast.json')
    with pytest.raises(SystemExit) as excinfo:
        main(['--ast', str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith('Error: invalid AST file')
