"""Cluster model."""

from dataclasses import dataclass, field

from ecsman.models.service import Service


@dataclass
class Cluster:
    """An ECS cluster and, once fetched, its services."""

    name: str
    arn: str
    status: str
    active_services_count: int = 0
    registered_container_instances_count: int = 0
    running_tasks_count: int = 0
    pending_tasks_count: int = 0
    services: list[Service] = field(default_factory=list)
