"""Unit tests for RepoProvisioner (bootstrapper.provisioner).

Tests cover:
- Directory collision detected before any HTTP call or process
- Local directory creation
- Remote creation followed by clone (command shape, cwd)
- Remote / clone failures
- Missing GitHub client for remote runs
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from bootstrapper.errors import ConflictError, InputError, ProcessError, RemoteError
from bootstrapper.models import LocalRepo, RemoteRepo
from bootstrapper.provisioner import RepoProvisioner


class TestConflict:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_existing_directory_aborts_before_remote(self, tmp_path, fake_runner, mock_github):
        (tmp_path / "my-app").mkdir()
        provisioner = RepoProvisioner(fake_runner, base_dir=tmp_path, github=mock_github)

        with pytest.raises(ConflictError) as exc_info:
            await provisioner.provision("my-app", remote=True)

        assert str(tmp_path / "my-app") == exc_info.value.path
        mock_github.create_repository.assert_not_awaited()
        assert fake_runner.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_injected_existence_check(self, tmp_path, fake_runner):
        seen: list[Path] = []

        def exists(path: Path) -> bool:
            seen.append(path)
            return True

        provisioner = RepoProvisioner(fake_runner, base_dir=tmp_path, exists=exists)
        with pytest.raises(ConflictError):
            await provisioner.provision("my-app")
        assert seen == [tmp_path / "my-app"]
        assert not (tmp_path / "my-app").exists()


class TestLocal:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_creates_directory(self, tmp_path, fake_runner):
        provisioner = RepoProvisioner(fake_runner, base_dir=tmp_path)
        source = await provisioner.provision("my-app", remote=False)

        assert isinstance(source, LocalRepo)
        assert source.path == tmp_path / "my-app"
        assert source.path.is_dir()
        assert list(source.path.iterdir()) == []
        assert fake_runner.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_base_dir_is_process_error(self, tmp_path, fake_runner):
        provisioner = RepoProvisioner(fake_runner, base_dir=tmp_path / "does-not-exist")
        with pytest.raises(ProcessError, match="Error creating directory"):
            await provisioner.provision("my-app")


class TestRemote:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_creates_and_clones(self, tmp_path, fake_runner, mock_github):
        provisioner = RepoProvisioner(fake_runner, base_dir=tmp_path, github=mock_github)
        source = await provisioner.provision("my-app", private=False, remote=True)

        mock_github.create_repository.assert_awaited_once_with("my-app", private=False)
        assert fake_runner.argvs == [
            ["git", "clone", "https://github.com/octocat/my-app.git", "my-app"]
        ]
        assert fake_runner.calls[0].cwd == tmp_path
        assert isinstance(source, RemoteRepo)
        assert source.html_url == "https://github.com/octocat/my-app"
        assert source.path == tmp_path / "my-app"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_remote_error_skips_clone(self, tmp_path, fake_runner, mock_github):
        mock_github.create_repository = AsyncMock(
            side_effect=RemoteError("HTTP 422", status_code=422, body="exists")
        )
        provisioner = RepoProvisioner(fake_runner, base_dir=tmp_path, github=mock_github)

        with pytest.raises(RemoteError):
            await provisioner.provision("my-app", remote=True)
        assert fake_runner.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_clone_failure(self, tmp_path, make_runner, mock_github):
        runner = make_runner(
            fail_when=lambda spec: spec.program == "git",
            stderr="fatal: repository not found",
        )
        provisioner = RepoProvisioner(runner, base_dir=tmp_path, github=mock_github)

        with pytest.raises(ProcessError) as exc_info:
            await provisioner.provision("my-app", remote=True)
        assert "Error cloning the repository" in str(exc_info.value)
        assert exc_info.value.stderr == "fatal: repository not found"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_requires_client(self, tmp_path, fake_runner):
        provisioner = RepoProvisioner(fake_runner, base_dir=tmp_path)
        with pytest.raises(InputError):
            await provisioner.provision("my-app", remote=True)
