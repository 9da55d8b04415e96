"""Service model."""

from dataclasses import dataclass, field
from datetime import datetime

from ecsman.utils.ids import revision_key


@dataclass
class LoadBalancerRef:
    """A load balancer attachment declared on a service."""

    container_name: str
    container_port: int | None
    name: str | None = None
    target_group_arn: str | None = None


@dataclass
class Deployment:
    """A service deployment."""

    id: str
    status: str
    running_count: int
    desired_count: int = 0
    pending_count: int = 0
    task_definition: str = ""


@dataclass
class ServiceEvent:
    """A service event, as returned most recent first by the API."""

    id: str
    created_at: datetime | None
    message: str


@dataclass
class Service:
    """An ECS service."""

    name: str
    arn: str
    status: str
    desired_count: int
    running_count: int
    pending_count: int
    task_definition: str
    load_balancers: list[LoadBalancerRef] = field(default_factory=list)
    deployments: list[Deployment] = field(default_factory=list)
    events: list[ServiceEvent] = field(default_factory=list)

    @property
    def revision_key(self) -> str:
        """family:revision of the service's task definition."""
        return revision_key(self.task_definition)

    @property
    def load_balancer_names(self) -> list[str]:
        """Names of the classic load balancers attached to this service."""
        return [lb.name for lb in self.load_balancers if lb.name]

    def recent_events(self, count: int) -> list[ServiceEvent]:
        """Return up to count events, keeping the API's newest-first order."""
        if count <= 0:
            return []
        return self.events[:count]
