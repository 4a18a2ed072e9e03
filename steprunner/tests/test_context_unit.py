from __future__ import annotations

from pathlib import Path

import pytest

from steprunner.core.context import RunContext, resolve_directory
from steprunner.core.errors import PreconditionFailed


class TestResolveDirectory:
    def test_expands_variables_and_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STEPRUNNER_TEST_ROOT", str(tmp_path))
        assert resolve_directory("$STEPRUNNER_TEST_ROOT/app") == tmp_path / "app"
        assert resolve_directory("~/gallery") == Path.home() / "gallery"

    def test_relative_path_rejected(self):
        with pytest.raises(ValueError, match="must be absolute"):
            resolve_directory("gallery")


class TestRunContext:
    def test_require_before_set(self):
        with pytest.raises(PreconditionFailed, match="Execute step 1 first"):
            RunContext().require_working_directory()

    def test_set_once(self, tmp_path):
        ctx = RunContext()
        assert ctx.set_working_directory(tmp_path) == tmp_path
        assert ctx.require_working_directory() == tmp_path

        with pytest.raises(RuntimeError):
            ctx.set_working_directory(tmp_path / "other")
        assert ctx.working_directory == tmp_path

    def test_relative_path_leaves_context_unset(self):
        ctx = RunContext()
        with pytest.raises(ValueError):
            ctx.set_working_directory("relative/dir")
        assert ctx.working_directory is None
