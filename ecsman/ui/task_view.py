"""Task and task definition output."""

from typing import Any

from rich.console import Console

from ecsman.consistency import task_detail_lines
from ecsman.models import Task, TaskDefinition
from ecsman.ui.console import print_line, print_warning, print_with_status


def print_service_task(console: Console, task: Task, service_revision: str) -> None:
    """Print a task belonging to a service, flagging a revision mismatch."""
    for line in task_detail_lines(task):
        print_line(console, line)
    if task.revision_key != service_revision:
        print_warning(
            console,
            "    *** WARNING: task does not have the same task/revision as the "
            "service definition ***",
        )


def print_task_definition(
    console: Console, task_definition: TaskDefinition, reference: str, verbose: bool
) -> None:
    """Print a task definition and its container definitions.

    Args:
        console: Output console
        task_definition: Definition to print
        reference: The reference it was looked up by
        verbose: Also print CPU, memory and environment
    """
    print_line(console, f"  - Task Definition: {reference}")
    print_line(console, f"    - Family: {task_definition.family}")
    for container in task_definition.container_definitions:
        print_line(console, "    - Container Definition:")
        print_line(console, f"      - Image: {container.image}")
        if verbose:
            print_line(console, f"      - CPU: {container.cpu}")
            print_line(console, f"      - Memory: {container.memory}")
        for mapping in container.port_mappings:
            print_line(
                console,
                f"      - Container Port {mapping.container_port} : "
                f"Host Port {mapping.host_port}",
            )
        if container.command:
            print_line(console, f"      - Command: {' '.join(container.command)}")
        if container.entry_point:
            print_line(console, f"      - Entry Point: {' '.join(container.entry_point)}")
        if container.environment and verbose:
            print_line(console, "      - Environment:")
            for variable in container.environment:
                print_line(console, f"        {variable.name} = {variable.value}")


def print_registered(console: Console, task_definition: TaskDefinition) -> None:
    print_line(console, "Registered new Task Definition:")
    print_line(console, f"  - Family: {task_definition.family}")
    print_line(console, f"  - Revision: {task_definition.revision}")
    print_with_status(console, "  - Status: ", task_definition.status)


def print_run_results(
    console: Console, tasks: list[Task], failures: list[dict[str, Any]]
) -> None:
    """Print the outcome of a RunTask request."""
    for failure in failures:
        print_line(console, f"  FAILED Task: {failure.get('arn', '')}", style="red")
        print_line(console, f"  - Error: {failure.get('reason', '')}", style="red")
    for task in tasks:
        print_line(console, f"  Running task definition: {task.task_definition_arn}")
        print_line(
            console, f"  - Task Running on container(s) {', '.join(task.container_names)}"
        )
        print_with_status(console, "  - Last known status: ", task.last_status)


def print_task_families(console: Console, families: dict[str, str]) -> None:
    print_line(console, "Task Definition families:")
    for family, revision in families.items():
        print_line(console, f"  {family} (latest revision: {revision})")
