from __future__ import annotations

import json
import logging
from pathlib import Path

from pkgsync.cli import OutputFormatter
from pkgsync.core.exceptions import ConfigError
from pkgsync.core.logging_setup import configure_logging


def test_progress_goes_to_stderr_in_json_mode(capsys) -> None:
    OutputFormatter(json_mode=True).progress("Looking for new packages")
    out = capsys.readouterr()
    assert out.out == ""
    assert out.err.strip() == "Looking for new packages"


def test_progress_goes_to_stdout_in_text_mode(capsys) -> None:
    OutputFormatter().progress("Looking for new packages")
    assert capsys.readouterr().out.strip() == "Looking for new packages"


def test_json_error_carries_detail(capsys) -> None:
    OutputFormatter(json_mode=True).error(ConfigError("bad config"), error_code="config_error")
    payload = json.loads(capsys.readouterr().err)
    assert payload["error"] == "config_error"
    assert payload["message"] == "bad config"
    assert payload["detail"]["code"] == "ConfigError"


def test_configure_logging_writes_to_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "pkgsync.log"
    configure_logging(level="DEBUG", log_path=log_file)
    configure_logging(level="DEBUG", log_path=log_file)

    logging.getLogger("pkgsync.core.reconcile").debug("Installing acme/blog")

    assert log_file.read_text(encoding="utf-8").count("Installing acme/blog") == 1
