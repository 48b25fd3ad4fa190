import io
import logging

import pytest
import main


@pytest.fixture
def stdin(monkeypatch):
    """Fixture to feed raw bytes to the command's standard input."""
    def feed(data: bytes):
        monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(data)))
    return feed


def test_writes_canonical_form(stdin, capsysbinary):
    stdin(b'd3:fooi42e3:bar4:spame')
    assert main.main([]) == main.EXIT_OK
    assert capsysbinary.readouterr().out == b'd3:bar4:spam3:fooi42ee'


def test_check_canonical(stdin, capsysbinary):
    stdin(b'd3:bar4:spam3:fooi42ee')
    assert main.main(['--check']) == main.EXIT_OK
    assert capsysbinary.readouterr().out == b''


def test_check_not_canonical(stdin):
    stdin(b'd3:fooi42e3:bar4:spame')
    assert main.main(['--check']) == main.EXIT_NOT_CANONICAL


def test_trailing_bytes_warning(stdin, capsysbinary, caplog):
    stdin(b'i1eXYZ')
    with caplog.at_level(logging.WARNING):
        assert main.main([]) == main.EXIT_OK
    assert capsysbinary.readouterr().out == b'i1e'
    assert 'Ignoring 3 trailing bytes after index 3' in caplog.text


def test_decode_error(stdin, capsysbinary, caplog):
    stdin(b'i-0e')
    with caplog.at_level(logging.ERROR):
        assert main.main([]) == main.EXIT_ERROR
    assert capsysbinary.readouterr().out == b''
    assert 'MalformedTokenError' in caplog.text


def test_debug_logging(stdin, caplog):
    stdin(b'le')
    with caplog.at_level(logging.DEBUG):
        assert main.main(['--debug']) == main.EXIT_OK
    assert 'Decoded List from 2 bytes' in caplog.text


def test_unknown_argument(capsysbinary):
    assert main.main(['--verbose']) == main.EXIT_ERROR
    assert b'Usage' in capsysbinary.readouterr().err
