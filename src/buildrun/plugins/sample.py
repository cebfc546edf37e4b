"""SamplePlugin — a project with one passing and one failing task.

Setting the ``failConfig`` property aborts configuration instead.
"""

from buildrun.core.plugins import Plugin
from buildrun.core.project import Project, require
from buildrun.core.task import Task


def _fail(task: Task) -> None:
    require(False, "Simulated task failure.")


class SamplePlugin(Plugin):
    def apply(self, project: Project) -> None:
        require(not project.has_property("failConfig"), "Simulated configuration failure.")

        project.tasks.register("ok", description="Does nothing and succeeds.", group="sample")
        project.tasks.register("fail", _fail, description="Always fails.", group="sample")
