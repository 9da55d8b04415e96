"""Task model."""

from dataclasses import dataclass, field

from ecsman.utils.ids import revision_key

RUNNING = "RUNNING"


@dataclass
class TaskContainer:
    """A container within a running task."""

    name: str
    last_status: str = ""


@dataclass
class Task:
    """An ECS task."""

    arn: str
    task_definition_arn: str
    desired_status: str
    last_status: str
    containers: list[TaskContainer] = field(default_factory=list)

    @property
    def revision_key(self) -> str:
        return revision_key(self.task_definition_arn)

    @property
    def is_running(self) -> bool:
        return self.last_status == RUNNING

    @property
    def container_names(self) -> list[str]:
        return [c.name for c in self.containers]
