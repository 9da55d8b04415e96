"""Data models for ecsman."""

from ecsman.models.cluster import Cluster
from ecsman.models.service import Deployment, LoadBalancerRef, Service, ServiceEvent
from ecsman.models.task import Task, TaskContainer
from ecsman.models.task_definition import (
    ContainerDefinition,
    KeyValuePair,
    PortMapping,
    TaskDefinition,
)
from ecsman.models.load_balancer import BackendServer, LoadBalancer

__all__ = [
    "Cluster",
    "Service",
    "Deployment",
    "LoadBalancerRef",
    "ServiceEvent",
    "Task",
    "TaskContainer",
    "TaskDefinition",
    "ContainerDefinition",
    "KeyValuePair",
    "PortMapping",
    "LoadBalancer",
    "BackendServer",
]
