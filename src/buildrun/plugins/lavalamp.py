"""LavaLampPlugin — shines a lava lamp green or red at the end of the build."""

from buildrun.core.build import BuildResult
from buildrun.core.plugins import Plugin
from buildrun.core.project import Project

SERVICE_NAME = "lamp"


class LavaLamp:
    """Controls an (imaginary) lava lamp connected to the system."""

    def __init__(self) -> None:
        self.color: str | None = None

    def set_color(self, color: str) -> None:
        self.color = color
        print(f"Lava lamp is shining {color}.")


class LavaLampPlugin(Plugin):
    def apply(self, project: Project) -> None:
        project.services.register_if_absent(SERVICE_NAME, LavaLamp)

        def set_lamp_color(result: BuildResult) -> None:
            lamp: LavaLamp = project.services.get(SERVICE_NAME)
            lamp.set_color("red" if result.failure else "green")

        project.on_build_finished(set_lamp_color)
