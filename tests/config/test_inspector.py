from __future__ import annotations

from pathlib import Path

import pytest

from quickxiv.config.inspector import check_config, explain_config


_VALID = """
[summary]
model = "demo"

[[llms]]
alias = "demo"
name = "demo/model"
api_key = "env:QUICKXIV_INSPECTOR_KEY"
"""


def test_check_config_ok(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QUICKXIV_INSPECTOR_KEY", "value")
    path = tmp_path / "config.toml"
    path.write_text(_VALID, encoding="utf-8")

    result, exit_code, config = check_config(path)

    assert exit_code == 0
    assert result == {"status": "ok", "config_path": str(path), "warnings": []}
    assert config is not None


def test_check_config_warnings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("QUICKXIV_INSPECTOR_KEY", raising=False)
    path = tmp_path / "config.toml"
    path.write_text(_VALID.replace('model = "demo"', 'model = "other"'), encoding="utf-8")

    result, exit_code, _ = check_config(path)

    assert exit_code == 0
    assert any("'other' does not match" in warning for warning in result["warnings"])
    assert any("QUICKXIV_INSPECTOR_KEY" in warning for warning in result["warnings"])


def test_check_config_empty_file_warns(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("", encoding="utf-8")

    result, exit_code, _ = check_config(path)

    assert exit_code == 0
    assert len(result["warnings"]) == 2


@pytest.mark.parametrize(
    ("content", "kind", "code"),
    [
        (None, "missing_file", 2),
        ("summary = [", "invalid_format", 1),
        ("unknown_field = 1\n", "validation_error", 3),
    ],
)
def test_check_config_errors(tmp_path: Path, content: str | None, kind: str, code: int) -> None:
    path = tmp_path / "config.toml"
    if content is not None:
        path.write_text(content, encoding="utf-8")

    result, exit_code, config = check_config(path)

    assert exit_code == code
    assert config is None
    assert result["status"] == "error"
    assert result["error"]["type"] == kind


def test_validation_error_details(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[summary]\nmodel = 'x'\nhead_ratio = 2.0\n", encoding="utf-8")

    result, _, _ = check_config(path)

    assert result["error"]["details"][0]["loc"] == "summary.head_ratio"


def test_explain_config_flattens_nested_models() -> None:
    fields = {entry["name"]: entry for entry in explain_config()}

    assert fields["logging_level"]["default"] == "INFO"
    assert fields["summary.max_chars"]["default"] == 12000
    assert fields["cache.ttl_days"]["default"] == 7
    assert fields["llms[].api_key"]["required"] is True
    assert fields["llms"]["type"] == "list[LLMConfig]"
    assert fields["summary"]["type"] == "Optional[SummaryConfig]"
