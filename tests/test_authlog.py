import pytest

from key2port.authlog import AuthLogs


def test_auth_writes_file_and_stdout(tmp_path, capsys):
    auth_path = tmp_path / "auth.log"
    error_path = tmp_path / "error.log"
    with AuthLogs(str(auth_path), str(error_path)) as logs:
        logs.auth("granted")
    assert auth_path.read_text() == "granted\n"
    assert error_path.read_text() == ""
    captured = capsys.readouterr()
    assert captured.out == "granted\n"
    assert captured.err == ""


def test_error_writes_file_and_stderr(tmp_path, capsys):
    auth_path = tmp_path / "auth.log"
    error_path = tmp_path / "error.log"
    with AuthLogs(str(auth_path), str(error_path)) as logs:
        logs.error("broken")
    assert error_path.read_text() == "broken\n"
    assert auth_path.read_text() == ""
    assert capsys.readouterr().err == "broken\n"


def test_appends_to_existing_file(tmp_path):
    auth_path = tmp_path / "auth.log"
    auth_path.write_text("old\n")
    logs = AuthLogs(str(auth_path), None)
    logs.auth("new")
    logs.close()
    assert auth_path.read_text() == "old\nnew\n"


def test_no_files_only_console(capsys):
    logs = AuthLogs(None, None)
    logs.auth("one")
    logs.error("two")
    logs.close()
    captured = capsys.readouterr()
    assert captured.out == "one\n"
    assert captured.err == "two\n"


def test_unopenable_path_raises(tmp_path):
    with pytest.raises(OSError):
        AuthLogs(str(tmp_path / "missing" / "auth.log"), None)