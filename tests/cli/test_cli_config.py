import json
from pathlib import Path

from quickxiv.cli import main
from tests.utils import logger_to_stderr


def test_config_check_json_success(capsys, tmp_path):
    config_text = """
logging_level = "DEBUG"

[summary]
model = "hf-mistral"
max_chars = 8000

[[llms]]
alias = "hf-mistral"
name = "mistralai/Mistral-7B-Instruct-v0.2"
api_key = "plain-key"
"""
    config_file = tmp_path / "config.toml"
    config_file.write_text(config_text)

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check", "--format", "json"])

    assert exit_code == 0

    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload["status"] == "ok"
    assert payload["warnings"] == []
    assert payload["config_path"].endswith("config.toml")


def test_config_check_text_reports_level(capsys, tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text('logging_level = "WARNING"\n')

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 0
    captured = capsys.readouterr()
    assert "Configuration OK" in captured.err
    assert "Logging level: WARNING" in captured.err
    assert "No LLM configurations defined" in captured.err


def test_config_check_missing_file(capsys, tmp_path):
    missing_path = tmp_path / "absent.toml"

    with logger_to_stderr():
        exit_code = main(["--config", str(missing_path), "config", "check"])

    assert exit_code == 2

    captured = capsys.readouterr()
    assert "Configuration error (missing_file" in captured.err
    assert str(missing_path) in captured.err


def test_config_check_validation_error(capsys, tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("unknown_field = 42\n")

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 3

    captured = capsys.readouterr()
    assert "validation_error" in captured.err
    assert "unknown_field" in captured.err


def test_config_explain_json(capsys):
    exit_code = main(["config", "explain", "--format", "json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    names = {field["name"] for field in payload["fields"]}
    assert {"summary.model", "llms[].base_url", "fetch.timeout", "cache.store_path"} <= names


def test_default_config_path_points_at_example():
    from quickxiv.cli import _default_config_path

    assert _default_config_path() == Path(__file__).resolve().parents[2] / "config" / "example.toml"
