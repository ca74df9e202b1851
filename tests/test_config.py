"""Unit tests for Config and related Pydantic models (bootstrapper.config).

Tests cover:
- GitHubConfig / ServerConfig defaults and validation
- Config defaults and project_path
- Config.github_token (present, missing, blank)
- Config.from_env
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from bootstrapper.config import Config, GitHubConfig, ServerConfig
from bootstrapper.errors import InputError
from bootstrapper.models import CssFramework, Framework


class TestGitHubConfig:
    @pytest.mark.unit
    def test_defaults(self):
        cfg = GitHubConfig()
        assert cfg.api_base == "https://api.github.com"
        assert cfg.timeout == 30.0

    @pytest.mark.unit
    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValidationError):
            GitHubConfig(timeout=0)


class TestServerConfig:
    @pytest.mark.unit
    def test_defaults(self):
        cfg = ServerConfig()
        assert cfg.readiness_timeout == 300.0
        assert cfg.max_scan_bytes == 1_048_576
        assert cfg.chunk_size == 4096

    @pytest.mark.unit
    def test_timeout_may_be_disabled(self):
        assert ServerConfig(readiness_timeout=None).readiness_timeout is None

    @pytest.mark.unit
    def test_tiny_scan_ceiling_rejected(self):
        with pytest.raises(ValidationError):
            ServerConfig(max_scan_bytes=10)


class TestConfig:
    @pytest.mark.unit
    def test_defaults(self):
        cfg = Config()
        assert cfg.base_dir == Path(".")
        assert cfg.token_env == "GITHUB_TOKEN"
        assert cfg.default_framework is Framework.REACT
        assert cfg.default_css is CssFramework.TAILWIND

    @pytest.mark.unit
    def test_project_path(self, tmp_path: Path):
        cfg = Config(base_dir=tmp_path)
        assert cfg.project_path("my-app") == tmp_path / "my-app"

    @pytest.mark.unit
    def test_github_token_present(self):
        cfg = Config(token_env="BOOTSTRAP_TEST_TOKEN")
        with patch.dict(os.environ, {"BOOTSTRAP_TEST_TOKEN": " ghp_abc "}):
            assert cfg.github_token() == "ghp_abc"

    @pytest.mark.unit
    def test_github_token_missing(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("BOOTSTRAP_TEST_TOKEN", raising=False)
        cfg = Config(token_env="BOOTSTRAP_TEST_TOKEN")
        with pytest.raises(InputError, match="BOOTSTRAP_TEST_TOKEN"):
            cfg.github_token()

    @pytest.mark.unit
    def test_github_token_blank(self):
        cfg = Config(token_env="BOOTSTRAP_TEST_TOKEN")
        with patch.dict(os.environ, {"BOOTSTRAP_TEST_TOKEN": "   "}):
            with pytest.raises(InputError):
                cfg.github_token()


class TestConfigFromEnv:
    @pytest.mark.unit
    def test_no_variables(self):
        with patch.dict(os.environ, {}, clear=True):
            cfg = Config.from_env()
        assert cfg.base_dir == Path(".")
        assert cfg.token_env == "GITHUB_TOKEN"
        assert cfg.github.api_base == "https://api.github.com"
        assert cfg.server.readiness_timeout == 300.0

    @pytest.mark.unit
    def test_all_variables(self):
        env = {
            "BOOTSTRAP_BASE_DIR": "/tmp/projects",
            "BOOTSTRAP_TOKEN_ENV": "MY_TOKEN",
            "BOOTSTRAP_GITHUB_API": "https://ghe.example.com/api/v3/",
            "BOOTSTRAP_GITHUB_TIMEOUT": "12.5",
            "BOOTSTRAP_READINESS_TIMEOUT": "60",
            "BOOTSTRAP_MAX_SCAN_BYTES": "2048",
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = Config.from_env()
        assert cfg.base_dir == Path("/tmp/projects")
        assert cfg.token_env == "MY_TOKEN"
        assert cfg.github.api_base == "https://ghe.example.com/api/v3"
        assert cfg.github.timeout == 12.5
        assert cfg.server.readiness_timeout == 60.0
        assert cfg.server.max_scan_bytes == 2048

    @pytest.mark.unit
    def test_zero_readiness_timeout_disables_deadline(self):
        with patch.dict(os.environ, {"BOOTSTRAP_READINESS_TIMEOUT": "0"}, clear=True):
            cfg = Config.from_env()
        assert cfg.server.readiness_timeout is None

    @pytest.mark.unit
    def test_invalid_number_raises(self):
        with patch.dict(os.environ, {"BOOTSTRAP_MAX_SCAN_BYTES": "lots"}, clear=True):
            with pytest.raises(ValueError):
                Config.from_env()
