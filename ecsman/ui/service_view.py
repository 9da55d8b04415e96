"""Service listing output."""

from rich.console import Console

from ecsman.models import Service, ServiceEvent, Task
from ecsman.ui.console import print_line, print_separator, print_with_status


def print_service_summary(console: Console, service: Service) -> None:
    """Print a service's counts, load balancers and deployments."""
    print_separator(console)
    print_line(console, f"  Service: {service.name}")
    print_line(console, f"  - Running Count: {service.running_count}")
    print_with_status(console, "  - Status: ", service.status)
    for balancer in service.load_balancers:
        name = balancer.name or balancer.target_group_arn
        print_line(console, f"  - Load Balancer: {name} Port: {balancer.container_port}")
        print_line(console, f"    Container Name: {balancer.container_name}")
    for deployment in service.deployments:
        print_with_status(
            console, f"  - Deployment: {deployment.id} Status: ", deployment.status
        )
        print_line(console, f"    Running instances: {deployment.running_count}")


def print_events_header(console: Console, count: int) -> None:
    print_line(console, f"  - Events (most recent {count}):")


def print_event(console: Console, event: ServiceEvent) -> None:
    print_line(console, f"    At {event.created_at}: {event.message}")


def print_event_task(console: Console, task: Task | None) -> None:
    """Print the task an event refers to, as a side note under the event."""
    if task is None:
        print_line(console, "      Request for task data returned no results.")
        return
    print_line(console, f"      Task: {task.task_definition_arn}")
    print_line(console, f"      Last known status: {task.last_status}")


def print_service_update(console: Console, service: Service) -> None:
    print_line(console, "  -> Service updated with new task definition:")
    print_line(console, f"     - Desired count: {service.desired_count}")
    print_line(console, f"     - Pending count: {service.pending_count}")
    print_line(console, f"     - Running count: {service.running_count}")
    print_with_status(console, "     - Service status: ", service.status)
