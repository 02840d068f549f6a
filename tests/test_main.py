import sys
from pathlib import Path

import pytest

from habitgrid import main as cli


@pytest.fixture(autouse=True)
def quiet(mocker):
    mocker.patch.object(cli, "setup_logging")


def test_default_command_serves(mocker):
    serve = mocker.patch.object(cli, "serve")
    assert cli.main([]) == 0
    serve.assert_called_once()


def test_serve_overrides(mocker, tmp_path):
    serve = mocker.patch.object(cli, "serve")
    data_file = tmp_path / "d.json"
    cli.main(["serve", "--host", "0.0.0.0", "--port", "5050", "--data-file", str(data_file)])
    settings = serve.call_args[0][0]
    assert settings.host == "0.0.0.0"
    assert settings.port == 5050
    assert settings.data_file == Path(data_file)


def test_dashboard_runs_streamlit(mocker):
    call = mocker.patch("habitgrid.main.subprocess.call", return_value=0)
    assert cli.main(["dashboard", "--server.port", "8502"]) == 0
    cmd = call.call_args[0][0]
    assert cmd[:4] == [sys.executable, "-m", "streamlit", "run"]
    assert cmd[4].endswith("dashboard.py")
    assert cmd[5:] == ["--server.port", "8502"]


def test_unknown_arguments_for_serve(mocker):
    mocker.patch.object(cli, "serve")
    with pytest.raises(SystemExit):
        cli.main(["serve", "--bogus"])


def test_serve_runs_flask_app(mocker, tmp_path):
    app = mocker.Mock()
    create_app = mocker.patch("habitgrid.web_app.create_app", return_value=app)
    settings = cli.load_settings()
    settings.data_file = tmp_path / "d.json"
    cli.serve(settings)
    create_app.assert_called_once_with(settings)
    app.run.assert_called_once_with(host=settings.host, port=settings.port, debug=settings.debug)
