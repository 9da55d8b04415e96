"""Classic load balancer model."""

from dataclasses import dataclass, field


@dataclass
class BackendServer:
    """A backend server description on a classic load balancer."""

    instance_port: int | None
    policy_names: list[str] = field(default_factory=list)


@dataclass
class LoadBalancer:
    """A classic load balancer."""

    name: str
    dns_name: str
    instance_ids: list[str] = field(default_factory=list)
    backend_servers: list[BackendServer] = field(default_factory=list)

    @property
    def instance_count(self) -> int:
        return len(self.instance_ids)
