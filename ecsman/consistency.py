"""Drift checks between a service, its tasks and its load balancers."""

from dataclasses import dataclass, field

from ecsman.models import Task
from ecsman.utils.ids import revision_key

NO_RUNNING_TASKS_WARNING = "WARNING: No tasks in RUNNING state for the service"


@dataclass
class ConsistencyReport:
    """Output lines and running-task count from a service task check."""

    lines: list[str] = field(default_factory=list)
    running_count: int = 0

    @property
    def warnings(self) -> list[str]:
        return [line for line in self.lines if line.startswith("WARNING:")]


def task_detail_lines(task: Task) -> list[str]:
    """Describe a task the way service listings and verbose checks show it."""
    return [
        f"  - Task {task.arn}",
        f"    Task Def: {task.task_definition_arn}",
        f"    Desired status {task.desired_status} - Last status {task.last_status}",
    ]


def revision_mismatch_warning(task_revision: str, service_revision: str) -> str:
    return (
        f"WARNING: task uses {task_revision} but service definition is "
        f"{service_revision}"
    )


def check_service_tasks(
    service_task_definition: str, tasks: list[Task], verbose: bool = False
) -> ConsistencyReport:
    """Compare each task's revision against the service's and count running tasks.

    Args:
        service_task_definition: Task definition ARN declared by the service
        tasks: Tasks currently associated with the service
        verbose: Include per-task detail lines ahead of each task's warnings

    Returns:
        Report lines in encounter order and the number of RUNNING tasks
    """
    report = ConsistencyReport()
    service_revision = revision_key(service_task_definition)

    for task in tasks:
        if verbose:
            report.lines.extend(task_detail_lines(task))
        if task.is_running:
            report.running_count += 1
        task_revision = task.revision_key
        if task_revision != service_revision:
            report.lines.append(revision_mismatch_warning(task_revision, service_revision))

    if report.running_count == 0:
        report.lines.append(NO_RUNNING_TASKS_WARNING)
    return report


def check_instance_count(instance_count: int, running_count: int) -> str | None:
    """Cross-check load balancer registrations against running tasks.

    Registration and task state can be briefly out of step, so a mismatch is
    advisory.

    Returns:
        A warning line if the counts differ, otherwise None
    """
    if instance_count == running_count:
        return None
    return (
        f"WARNING: ELB instance count of {instance_count} is different from "
        f"number of running tasks {running_count}"
    )
