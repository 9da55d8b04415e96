"""Cluster listing output."""

from rich.console import Console

from ecsman.models import Cluster
from ecsman.ui.console import print_line, print_separator, print_with_status


def print_cluster(console: Console, cluster: Cluster) -> None:
    """Print a cluster summary followed by its services."""
    print_separator(console)
    print_with_status(console, f"Cluster: {cluster.name} (", cluster.status, ")")
    print_line(
        console,
        f"  {cluster.active_services_count} services active, "
        f"{cluster.registered_container_instances_count} containers",
    )
    print_line(
        console,
        f"  Tasks: {cluster.running_tasks_count} running, "
        f"{cluster.pending_tasks_count} pending",
    )
    for service in cluster.services:
        print_with_status(
            console,
            f"  - Service: {service.name} (",
            service.status,
            f"), running count: {service.running_count}",
        )
