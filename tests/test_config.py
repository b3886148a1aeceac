"""Tests for config.py — .covtree.yml parsing and validation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import yaml

from covtree.config import (
    CONFIG_FILE_NAME,
    CoverageConfig,
    CovtreeConfig,
    ReportConfig,
    _resolve_dict,
    _resolve_env_vars,
    load_config,
    validate_config,
)

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def _write_config(root: Path, data: dict[str, Any]) -> None:
    (root / CONFIG_FILE_NAME).write_text(yaml.dump(data), encoding="utf-8")


# ── _resolve_env_vars / _resolve_dict ─────────────────────────────────


class TestResolveEnvVars:
    def test_resolves_existing_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _resolve_env_vars("${MY_VAR}") == "hello"

    def test_missing_var_returns_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert _resolve_env_vars("${MISSING_VAR}") == ""

    def test_no_vars_unchanged(self) -> None:
        assert _resolve_env_vars("plain text") == "plain text"


class TestResolveDict:
    def test_resolves_nested_and_lists(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INNER", "resolved")
        result = _resolve_dict({"outer": {"inner": "${INNER}"}, "items": ["${INNER}", 3]})
        assert result["outer"]["inner"] == "resolved"
        assert result["items"] == ["resolved", 3]

    def test_passes_non_string_values(self) -> None:
        assert _resolve_dict({"n": 1, "b": True}) == {"n": 1, "b": True}


# ── load_config ───────────────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("COVTREE_ROOT_MODULE", raising=False)
        monkeypatch.delenv("COVTREE_GO_BINARY", raising=False)
        config = load_config(tmp_path)
        assert config.root == str(tmp_path.resolve())
        assert config.coverage == CoverageConfig()
        assert config.report == ReportConfig()

    def test_reads_sections(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {
                "coverage": {
                    "root_module": "github.com/acme/svc",
                    "go_binary": "/usr/local/go/bin/go",
                    "func_timeout": 30,
                    "fail_under": 75.5,
                    "sort_output": False,
                },
                "report": {"format": "json", "show_functions": True},
            },
        )
        config = load_config(tmp_path)
        assert config.coverage.root_module == "github.com/acme/svc"
        assert config.coverage.go_binary == "/usr/local/go/bin/go"
        assert config.coverage.func_timeout == 30.0
        assert config.coverage.fail_under == 75.5
        assert config.coverage.sort_output is False
        assert config.report.format == "json"
        assert config.report.show_functions is True

    def test_env_placeholders_expanded(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MODULE_PATH", "example.com/mod")
        _write_config(tmp_path, {"coverage": {"root_module": "${MODULE_PATH}"}})
        assert load_config(tmp_path).coverage.root_module == "example.com/mod"

    def test_env_fallbacks(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COVTREE_ROOT_MODULE", "example.com/env")
        monkeypatch.setenv("COVTREE_GO_BINARY", "go1.22")
        config = load_config(tmp_path)
        assert config.coverage.root_module == "example.com/env"
        assert config.coverage.go_binary == "go1.22"

    def test_non_mapping_section_ignored(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"coverage": ["not", "a", "mapping"]})
        assert load_config(tmp_path).coverage.fail_under == 0.0

    def test_non_mapping_document_ignored(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text("- just\n- a list\n", encoding="utf-8")
        assert load_config(tmp_path).raw == {}


# ── validate_config ───────────────────────────────────────────────────


class TestValidateConfig:
    def test_valid_defaults(self, tmp_path: Path) -> None:
        assert validate_config(CovtreeConfig(root=str(tmp_path))) == []

    def test_reports_each_error(self, tmp_path: Path) -> None:
        config = CovtreeConfig(
            root=str(tmp_path),
            coverage=CoverageConfig(
                root_module=" example.com/m",
                go_binary="",
                func_timeout=0,
                fail_under=120.0,
            ),
            report=ReportConfig(format="html"),
        )
        errors = validate_config(config)
        assert len(errors) == 5
        assert any("fail_under" in e for e in errors)
        assert any("func_timeout" in e for e in errors)
        assert any("go_binary" in e for e in errors)
        assert any("root_module" in e for e in errors)
        assert any("report.format" in e for e in errors)
