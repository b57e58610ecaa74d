from unittest.mock import patch

import settings
import start_api


def test_launcher_runs_companion_app(capsys):
    with patch("start_api.uvicorn.run") as mock_run:
        start_api.main(["--port", "9000"])
    args, kwargs = mock_run.call_args
    assert args[0] == "api.main:app"
    assert kwargs["port"] == 9000
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["reload"] is False
    assert kwargs["reload_dirs"] is None
    assert settings.BACKEND_URL in capsys.readouterr().out


def test_launcher_reload_watches_source_packages():
    with patch("start_api.uvicorn.run") as mock_run:
        start_api.main(["--reload"])
    kwargs = mock_run.call_args.kwargs
    assert kwargs["reload"] is True
    assert "schedule" in kwargs["reload_dirs"]
