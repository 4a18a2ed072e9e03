#!/usr/bin/env python3
"""Unit tests for the step actions (steps/kinds.py)."""

from __future__ import annotations

import sys
from functools import partial

import pytest

from steprunner.core.config import RunnerSettings
from steprunner.core.context import RunContext
from steprunner.core.engine import StepEngine
from steprunner.core.errors import CommandFailed, PreconditionFailed, StepError
from steprunner.core.model import Step, StepStatus
from steprunner.core.patch import ensure_line_present, insert_after_marker, insert_before_marker
from steprunner.steps.kinds import (
    ChooseWorkingDirectory,
    CreateDirectory,
    CreateFile,
    ManualPause,
    PatchFile,
    RunCommand,
    RunInteractive,
    relative,
)


class TestChooseWorkingDirectory:
    def test_first_step_end_to_end(self, scripted_operator, tmp_path):
        target = tmp_path / "gallery"
        op = scripted_operator(answers=[str(target)])
        steps = [
            Step(1, "Select folder", ChooseWorkingDirectory()),
            Step(2, "Next", ManualPause()),
        ]
        engine = StepEngine(steps, op)

        engine.execute_current()

        assert target.is_dir()
        assert engine.context.working_directory == target
        assert steps[0].status == StepStatus.COMPLETED
        assert engine.cursor == 1
        assert op.messages("success") == [f"Using working directory: {target}"]

    def test_existing_directory_is_reused(self, scripted_operator, tmp_path):
        ctx = RunContext()
        msg = ChooseWorkingDirectory().execute(ctx, scripted_operator(answers=[str(tmp_path)]))
        assert ctx.working_directory == tmp_path
        assert msg == f"Using working directory: {tmp_path}"

    def test_rerun_keeps_chosen_directory_without_asking(self, scripted_operator, run_context):
        chosen = run_context.working_directory
        msg = ChooseWorkingDirectory().execute(run_context, scripted_operator())
        assert run_context.working_directory == chosen
        assert str(chosen) in msg

    def test_empty_path_fails(self, scripted_operator):
        with pytest.raises(StepError, match="Path cannot be empty"):
            ChooseWorkingDirectory().execute(RunContext(), scripted_operator(answers=["   "]))

    def test_relative_path_fails(self, scripted_operator):
        ctx = RunContext()
        with pytest.raises(StepError, match="absolute"):
            ChooseWorkingDirectory().execute(ctx, scripted_operator(answers=["relative/dir"]))
        assert ctx.working_directory is None

    def test_environment_variables_expand(self, scripted_operator, tmp_path, monkeypatch):
        monkeypatch.setenv("STEPRUNNER_TEST_ROOT", str(tmp_path))
        ctx = RunContext()
        ChooseWorkingDirectory().execute(ctx, scripted_operator(answers=["$STEPRUNNER_TEST_ROOT/app"]))
        assert ctx.working_directory == tmp_path / "app"
        assert (tmp_path / "app").is_dir()


@pytest.mark.parametrize(
    "action",
    [
        CreateFile(relative("a.txt"), "x"),
        CreateDirectory(relative("d")),
        PatchFile(relative("a.txt"), ()),
        RunCommand(["echo", "hi"]),
        RunInteractive("echo"),
        ManualPause(requires_working_directory=True),
    ],
)
def test_actions_need_working_directory(action, scripted_operator):
    with pytest.raises(PreconditionFailed, match="Working directory not set"):
        action.execute(RunContext(), scripted_operator())


class TestCreateFile:
    def test_creates_then_leaves_alone(self, scripted_operator, run_context):
        action = CreateFile(relative("Directory.Build.props"), "<Project />\n")
        op = scripted_operator()

        assert action.execute(run_context, op) == "Created Directory.Build.props"
        target = run_context.working_directory / "Directory.Build.props"
        target.write_text("edited", encoding="utf-8")

        assert action.execute(run_context, op) == "Directory.Build.props left unchanged."
        assert target.read_text(encoding="utf-8") == "edited"
        assert op.messages("warning") == ["Directory.Build.props already exists; skipping."]

    def test_unresolved_target_is_skipped(self, scripted_operator, run_context):
        op = scripted_operator()
        assert CreateFile(lambda root: None, "x").execute(run_context, op) == "Nothing to create."
        assert op.messages("warning")


def test_create_directory(scripted_operator, run_context):
    action = CreateDirectory(relative("Web", "Components"))
    op = scripted_operator()

    assert action.execute(run_context, op).startswith("Created ")
    assert (run_context.working_directory / "Web" / "Components").is_dir()
    assert action.execute(run_context, op).endswith("already exists.")


class TestPatchFile:
    def _action(self, **kwargs):
        patch = partial(insert_after_marker, marker="var builder", line="builder.AddProject();")
        return PatchFile(relative("AppHost.cs"), (patch,), **kwargs)

    def test_applies_once(self, scripted_operator, run_context):
        target = run_context.working_directory / "AppHost.cs"
        target.write_text("var builder = X;\nbuilder.Build().Run();\n", encoding="utf-8")
        op = scripted_operator()

        assert self._action().execute(run_context, op) == "Updated AppHost.cs"
        assert self._action().execute(run_context, op) == "AppHost.cs already up to date."
        assert target.read_text(encoding="utf-8") == "var builder = X;\nbuilder.AddProject();\nbuilder.Build().Run();\n"

    def test_missing_anchor_warns(self, scripted_operator, run_context):
        target = run_context.working_directory / "AppHost.cs"
        target.write_text("// empty\n", encoding="utf-8")
        op = scripted_operator()

        assert "anchor not found" in self._action().execute(run_context, op)
        assert target.read_text(encoding="utf-8") == "// empty\n"
        assert op.messages("warning")

    def test_missing_anchor_warns_even_when_other_edits_apply(self, scripted_operator, run_context):
        target = run_context.working_directory / "Program.cs"
        target.write_text("var builder = X;\n", encoding="utf-8")
        action = PatchFile(
            relative("Program.cs"),
            (
                partial(ensure_line_present, line="using A;"),
                partial(insert_before_marker, marker="app.Run()", line="app.UseStaticFiles();"),
            ),
        )
        op = scripted_operator()

        msg = action.execute(run_context, op)

        assert msg == "Updated Program.cs (1 edit(s) skipped: anchor not found)."
        assert op.messages("warning") == ["Expected anchor not found in Program.cs; 1 of 2 edit(s) not applied."]
        assert target.read_text(encoding="utf-8") == "using A;\nvar builder = X;\n"

    def test_missing_file_skips(self, scripted_operator, run_context):
        op = scripted_operator()
        assert self._action().execute(run_context, op) == "Nothing to patch."

    def test_missing_required_file_fails(self, scripted_operator, run_context):
        with pytest.raises(PreconditionFailed):
            self._action(required=True).execute(run_context, scripted_operator())


class TestRunCommand:
    def test_success_echoes_output(self, scripted_operator, run_context):
        op = scripted_operator()
        msg = RunCommand([sys.executable, "-c", "print('restored')"]).execute(run_context, op)

        assert msg.startswith("Command finished in ")
        assert "restored" in op.messages("info")

    def test_string_command_uses_configured_shell(self, scripted_operator, tmp_path):
        ctx = RunContext(settings=RunnerSettings(shell=(sys.executable, "-c")))
        ctx.set_working_directory(tmp_path)
        op = scripted_operator()

        RunCommand("print('via shell')").execute(ctx, op)
        assert "via shell" in op.messages("info")

    def test_failure_raises(self, scripted_operator, run_context):
        action = RunCommand([sys.executable, "-c", "import sys; sys.exit(5)"])
        with pytest.raises(CommandFailed) as excinfo:
            action.execute(run_context, scripted_operator())
        assert excinfo.value.exit_code == 5

    def test_builder_returning_none_skips(self, scripted_operator, run_context):
        op = scripted_operator()
        msg = RunCommand(lambda root: None, skip_message="Already there.").execute(run_context, op)
        assert msg == "Already there."
        assert op.messages("info") == ["Already there."]

    def test_builder_receives_working_directory(self, scripted_operator, run_context):
        seen = []

        def build(root):
            seen.append(root)
            return [sys.executable, "-c", "pass"]

        RunCommand(build).execute(run_context, scripted_operator())
        assert seen == [run_context.working_directory]

    def test_log_written_when_log_dir_set(self, scripted_operator, tmp_path):
        ctx = RunContext(settings=RunnerSettings(log_dir=tmp_path / "logs"))
        ctx.set_working_directory(tmp_path)

        RunCommand([sys.executable, "-c", "print(1)"], log_name="step-03-x.log").execute(ctx, scripted_operator())
        assert (tmp_path / "logs" / "step-03-x.log").is_file()


class TestRunInteractive:
    def test_nonzero_exit_is_advisory(self, scripted_operator, run_context):
        op = scripted_operator()
        action = RunInteractive(sys.executable, ["-c", "import sys; sys.exit(1)"], intro="go", outro="back")

        assert action.execute(run_context, op) == "Interactive command exited with code 1"
        assert op.messages("warning") == ["Process exited with code 1. Continue if acceptable."]
        assert op.messages("info") == ["go", "back"]

    def test_nonzero_exit_still_completes_step(self, scripted_operator, run_context):
        steps = [Step(1, "watch", RunInteractive(sys.executable, ["-c", "import sys; sys.exit(1)"]))]
        engine = StepEngine(steps, scripted_operator(), run_context)

        engine.execute_current()
        assert steps[0].status == StepStatus.COMPLETED
        assert engine.exit_code == 0


def test_manual_pause_waits_for_operator(scripted_operator):
    op = scripted_operator()
    msg = ManualPause("Open the dashboard.", checklist=("No resources",)).execute(RunContext(), op)

    assert msg == "Manual step acknowledged."
    assert op.pauses == 1
    assert op.messages("info") == ["Open the dashboard.", " - No resources"]
