"""run_command — execute external programs via asyncio subprocess."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120


class CommandFailedError(Exception):
    def __init__(self, result: "ExecResult") -> None:
        super().__init__(f"Command {result.args[0]!r} exited with code {result.returncode}")
        self.result = result


@dataclass
class ExecResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def passed(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return (self.stdout + "\n" + self.stderr).strip()


async def run_command(
    args: Sequence[str],
    *,
    cwd: str | Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    ignore_exit_value: bool = False,
) -> ExecResult:
    """Run *args* and capture its output.

    A non-zero exit raises ``CommandFailedError`` unless
    ``ignore_exit_value`` is set. A timeout kills the process and raises
    ``TimeoutError``.
    """
    argv = [str(a) for a in args]
    logger.debug("Running %s", " ".join(argv))
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        raise TimeoutError(f"Command {argv[0]!r} timed out after {timeout}s") from None

    result = ExecResult(
        args=argv,
        returncode=proc.returncode or 0,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )
    if not result.passed and not ignore_exit_value:
        raise CommandFailedError(result)
    return result


def exec_action(
    args: Sequence[str],
    *,
    cwd: str | Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    ignore_exit_value: bool = False,
):
    """Build a task action that runs a command.

    ``{name}`` placeholders in the arguments are filled from project properties
    when the action runs.
    """

    async def action(task) -> None:
        argv = list(args)
        project = getattr(task, "project", None)
        if project is not None:
            argv = [project.properties.format_template(str(a)) for a in argv]
        result = await run_command(argv, cwd=cwd, timeout=timeout, ignore_exit_value=ignore_exit_value)
        if result.stdout:
            logger.info("%s", result.stdout.rstrip())

    return action
