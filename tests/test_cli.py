from unittest.mock import patch

from typer.testing import CliRunner

from main import app

runner = CliRunner()


def test_init_db_creates_file(tmp_path):
    db_file = tmp_path / "books.db"
    result = runner.invoke(app, ["init-db", "--db-file", str(db_file)])
    assert result.exit_code == 0
    assert "Database ready" in result.stdout
    assert db_file.exists()


def test_init_db_aborts_on_unopenable_file(tmp_path):
    result = runner.invoke(app, ["init-db", "--db-file", str(tmp_path / "nope" / "books.db")])
    assert result.exit_code == 1
    assert "Cannot open database" in result.stdout


@patch("main.uvicorn.run")
def test_serve_command(mock_run, tmp_path):
    db_file = tmp_path / "books.db"
    result = runner.invoke(app, ["serve", "--host", "127.0.0.1", "--port", "9090", "--db-file", str(db_file)])
    assert result.exit_code == 0
    assert "listening on http://127.0.0.1:9090/" in result.stdout
    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args[0].state.database.db_file == str(db_file)
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9090


@patch("main.uvicorn.run")
def test_serve_aborts_without_database(mock_run, tmp_path):
    result = runner.invoke(app, ["serve", "--db-file", str(tmp_path / "nope" / "books.db")])
    assert result.exit_code == 1
    mock_run.assert_not_called()
