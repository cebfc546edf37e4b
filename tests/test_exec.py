"""Tests for run_command and exec_action."""

import sys

import pytest

from buildrun.config import BuildConfig
from buildrun.core.exec import CommandFailedError, exec_action, run_command
from buildrun.core.project import Project
from buildrun.core.properties import Properties
from buildrun.core.task import TaskState

PY = sys.executable


class TestRunCommand:
    @pytest.mark.asyncio
    async def test_captures_output(self):
        result = await run_command([PY, "-c", "print('hello')"])
        assert result.passed
        assert result.stdout.strip() == "hello"
        assert result.returncode == 0

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises(self):
        with pytest.raises(CommandFailedError) as exc_info:
            await run_command([PY, "-c", "import sys; sys.exit(3)"])
        assert exc_info.value.result.returncode == 3

    @pytest.mark.asyncio
    async def test_ignore_exit_value(self):
        result = await run_command(
            [PY, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"], ignore_exit_value=True
        )
        assert not result.passed
        assert result.output == "bad"

    @pytest.mark.asyncio
    async def test_invalid_utf8_output_replaced(self):
        result = await run_command(
            [PY, "-c", "import sys; sys.stdout.buffer.write(b'ok\\xff\\xfe')"], ignore_exit_value=True
        )
        assert result.passed
        assert result.stdout.startswith("ok")
        assert "�" in result.stdout

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        with pytest.raises(TimeoutError, match="timed out"):
            await run_command([PY, "-c", "import time; time.sleep(10)"], timeout=0.2)

    @pytest.mark.asyncio
    async def test_cwd(self, tmp_path):
        result = await run_command([PY, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert result.stdout.strip() == str(tmp_path.resolve())


class TestExecAction:
    @pytest.mark.asyncio
    async def test_arguments_templated_from_properties(self, tmp_path):
        out = tmp_path / "out.txt"
        project = Project(BuildConfig(project_dir=tmp_path, properties=Properties({"greeting": "hi"})))
        task = project.tasks.register(
            "write",
            exec_action([PY, "-c", f"open({str(out)!r}, 'w').write('{{greeting}}')"]),
        )
        result = await task.execute()
        assert result.state == TaskState.SUCCEEDED
        assert out.read_text() == "hi"

    @pytest.mark.asyncio
    async def test_failing_command_fails_task(self, tmp_path):
        project = Project(BuildConfig(project_dir=tmp_path))
        task = project.tasks.register("bad", exec_action([PY, "-c", "raise SystemExit(1)"]))
        result = await task.execute()
        assert result.state == TaskState.FAILED
        assert isinstance(result.error.cause, CommandFailedError)
