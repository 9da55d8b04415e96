"""Task definition model."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PortMapping:
    """Container to host port mapping."""

    container_port: int | None
    host_port: int | None = None
    protocol: str | None = None


@dataclass
class KeyValuePair:
    """An environment variable."""

    name: str
    value: str


@dataclass
class ContainerDefinition:
    """A container definition within a task definition."""

    name: str
    image: str
    cpu: int | None = None
    memory: int | None = None
    essential: bool | None = None
    port_mappings: list[PortMapping] = field(default_factory=list)
    command: list[str] = field(default_factory=list)
    entry_point: list[str] = field(default_factory=list)
    environment: list[KeyValuePair] = field(default_factory=list)


@dataclass
class TaskDefinition:
    """A registered task definition revision.

    raw keeps the DescribeTaskDefinition payload so a revision can be
    re-registered with every field carried over.
    """

    arn: str
    family: str
    revision: int
    status: str
    container_definitions: list[ContainerDefinition] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)
