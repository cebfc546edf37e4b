"""SoundFeedbackPlugin — plays a sound at the end of the build."""

import logging
from pathlib import Path

from buildrun.core.build import BuildResult
from buildrun.core.exec import ExecResult, run_command
from buildrun.core.plugins import Plugin
from buildrun.core.project import Project

logger = logging.getLogger(__name__)

SUCCESS_SOUND = "sounds/tada.mp3"
FAILURE_SOUND = "sounds/sad-trombone.mp3"


async def play_media_file(media_file: Path) -> ExecResult:
    """Play *media_file* with ``ffplay``; its exit value is ignored."""
    return await run_command(
        ["ffplay", "-nodisp", "-autoexit", "-hide_banner", "-loglevel", "quiet", str(media_file.absolute())],
        ignore_exit_value=True,
    )


class SoundFeedbackPlugin(Plugin):
    def apply(self, project: Project) -> None:
        failure = project.file(FAILURE_SOUND)
        success = project.file(SUCCESS_SOUND)

        async def play(result: BuildResult) -> None:
            media_file = failure if result.failure else success
            logger.debug("Playing %s", media_file)
            await play_media_file(media_file)

        project.on_build_finished(play)
