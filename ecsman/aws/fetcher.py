"""ECS data fetching and mutation."""

import logging
from collections.abc import Callable
from typing import Any

from ecsman.aws.client import AWSClients, remote_call
from ecsman.models import (
    Cluster,
    ContainerDefinition,
    Deployment,
    KeyValuePair,
    LoadBalancerRef,
    PortMapping,
    Service,
    ServiceEvent,
    Task,
    TaskContainer,
    TaskDefinition,
)

logger = logging.getLogger(__name__)

# Type alias for progress callback
ProgressCallback = Callable[[str], None]

# Value of startedBy on tasks launched by ecsman
STARTED_BY = "ecsman"

# Task-level fields RegisterTaskDefinition accepts besides family and
# containerDefinitions
REGISTER_TASK_DEFINITION_FIELDS = (
    "taskRoleArn",
    "executionRoleArn",
    "networkMode",
    "volumes",
    "placementConstraints",
    "requiresCompatibilities",
    "cpu",
    "memory",
    "pidMode",
    "ipcMode",
    "proxyConfiguration",
    "inferenceAccelerators",
    "ephemeralStorage",
    "runtimePlatform",
)


class ECSFetcher:
    """Fetches and updates ECS resources."""

    # API limits for describe calls
    MAX_CLUSTERS_PER_DESCRIBE = 100
    MAX_SERVICES_PER_DESCRIBE = 10
    MAX_TASKS_PER_DESCRIBE = 100

    def __init__(
        self,
        clients: AWSClients,
        progress_callback: ProgressCallback | None = None,
    ):
        """Initialize the fetcher.

        Args:
            clients: AWS clients container
            progress_callback: Optional callback for progress updates
        """
        self.clients = clients
        self._progress_callback = progress_callback

    def _report_progress(self, message: str) -> None:
        """Report progress if callback is set."""
        logger.info(message)
        if self._progress_callback:
            self._progress_callback(message)

    def _paginate(self, operation: str, result_key: str, **kwargs) -> list[str]:
        paginator = self.clients.ecs.get_paginator(operation)
        items: list[str] = []
        for page in paginator.paginate(**kwargs):
            items.extend(page.get(result_key, []))
        return items

    # Clusters

    def list_clusters(self) -> list[Cluster]:
        """List all clusters in the region with their counts.

        Returns:
            Clusters in the order the API returns them
        """
        self._report_progress("Listing clusters...")
        with remote_call("fetching clusters list"):
            cluster_arns = self._paginate("list_clusters", "clusterArns")

        if not cluster_arns:
            return []

        self._report_progress(f"Describing {len(cluster_arns)} clusters...")
        clusters = []
        for i in range(0, len(cluster_arns), self.MAX_CLUSTERS_PER_DESCRIBE):
            batch = cluster_arns[i : i + self.MAX_CLUSTERS_PER_DESCRIBE]
            with remote_call("fetching cluster data"):
                response = self.clients.ecs.describe_clusters(clusters=batch)
            clusters.extend(self._build_cluster(c) for c in response.get("clusters", []))
        return clusters

    def _build_cluster(self, data: dict[str, Any]) -> Cluster:
        return Cluster(
            name=data.get("clusterName", ""),
            arn=data.get("clusterArn", ""),
            status=data.get("status", "UNKNOWN"),
            active_services_count=data.get("activeServicesCount", 0),
            registered_container_instances_count=data.get(
                "registeredContainerInstancesCount", 0
            ),
            running_tasks_count=data.get("runningTasksCount", 0),
            pending_tasks_count=data.get("pendingTasksCount", 0),
        )

    # Services

    def list_services(self, cluster: str) -> list[Service]:
        """List and describe every service in a cluster.

        Args:
            cluster: Cluster name or ARN

        Returns:
            Services in the order the API returns them
        """
        self._report_progress(f"Listing services in {cluster}...")
        with remote_call(f"finding services for cluster {cluster}"):
            service_arns = self._paginate("list_services", "serviceArns", cluster=cluster)

        if not service_arns:
            return []

        return self._describe_services_batched(cluster, service_arns)

    def _describe_services_batched(
        self, cluster: str, service_arns: list[str]
    ) -> list[Service]:
        """Describe services in batches of MAX_SERVICES_PER_DESCRIBE."""
        services = []
        for i in range(0, len(service_arns), self.MAX_SERVICES_PER_DESCRIBE):
            batch = service_arns[i : i + self.MAX_SERVICES_PER_DESCRIBE]
            with remote_call(f"fetching service data for cluster {cluster}"):
                response = self.clients.ecs.describe_services(
                    cluster=cluster, services=batch
                )
            services.extend(self._build_service(s) for s in response.get("services", []))
        return services

    def describe_service(self, cluster: str, service_name: str) -> Service | None:
        """Describe a single service by name.

        Returns:
            The service, or None if the API returned no service for the name
        """
        with remote_call(f"fetching service data for service {service_name}"):
            response = self.clients.ecs.describe_services(
                cluster=cluster, services=[service_name]
            )
        services = response.get("services", [])
        if not services:
            for failure in response.get("failures", []):
                logger.debug(
                    "describe_services failure for %s: %s",
                    failure.get("arn"),
                    failure.get("reason"),
                )
            return None
        return self._build_service(services[0])

    def update_service(
        self, cluster: str, service_name: str, task_definition_arn: str
    ) -> Service:
        """Point a service at a task definition revision."""
        self._report_progress(f"Updating service {service_name}...")
        with remote_call("updating service with new task definition"):
            response = self.clients.ecs.update_service(
                cluster=cluster,
                service=service_name,
                taskDefinition=task_definition_arn,
            )
        return self._build_service(response["service"])

    def _build_service(self, data: dict[str, Any]) -> Service:
        load_balancers = [
            LoadBalancerRef(
                container_name=lb.get("containerName", ""),
                container_port=lb.get("containerPort"),
                name=lb.get("loadBalancerName"),
                target_group_arn=lb.get("targetGroupArn"),
            )
            for lb in data.get("loadBalancers", [])
        ]
        deployments = [
            Deployment(
                id=d.get("id", ""),
                status=d.get("status", ""),
                running_count=d.get("runningCount", 0),
                desired_count=d.get("desiredCount", 0),
                pending_count=d.get("pendingCount", 0),
                task_definition=d.get("taskDefinition", ""),
            )
            for d in data.get("deployments", [])
        ]
        events = [
            ServiceEvent(
                id=e.get("id", ""),
                created_at=e.get("createdAt"),
                message=e.get("message", ""),
            )
            for e in data.get("events", [])
        ]
        return Service(
            name=data.get("serviceName", ""),
            arn=data.get("serviceArn", ""),
            status=data.get("status", "UNKNOWN"),
            desired_count=data.get("desiredCount", 0),
            running_count=data.get("runningCount", 0),
            pending_count=data.get("pendingCount", 0),
            task_definition=data.get("taskDefinition", ""),
            load_balancers=load_balancers,
            deployments=deployments,
            events=events,
        )

    # Tasks

    def list_service_tasks(self, cluster: str, service_name: str) -> list[Task]:
        """Fetch the tasks associated with a service."""
        with remote_call("fetching task list for service"):
            task_arns = self._paginate(
                "list_tasks", "taskArns", cluster=cluster, serviceName=service_name
            )
        if not task_arns:
            return []
        return self.describe_tasks(cluster, task_arns)

    def describe_tasks(self, cluster: str, task_ids: list[str]) -> list[Task]:
        """Describe tasks by ID or ARN, in batches of MAX_TASKS_PER_DESCRIBE."""
        tasks = []
        for i in range(0, len(task_ids), self.MAX_TASKS_PER_DESCRIBE):
            batch = task_ids[i : i + self.MAX_TASKS_PER_DESCRIBE]
            with remote_call("fetching task data for service"):
                response = self.clients.ecs.describe_tasks(cluster=cluster, tasks=batch)
            tasks.extend(self._build_task(t) for t in response.get("tasks", []))
        return tasks

    def describe_task(self, cluster: str, task_id: str) -> Task | None:
        """Describe one task, returning None if the API knows nothing about it."""
        with remote_call(f"getting task data for {task_id}"):
            response = self.clients.ecs.describe_tasks(cluster=cluster, tasks=[task_id])
        tasks = response.get("tasks", [])
        if not tasks:
            return None
        return self._build_task(tasks[0])

    def run_task(
        self, cluster: str, task_definition: str
    ) -> tuple[list[Task], list[dict[str, Any]]]:
        """Run one instance of a task definition.

        Returns:
            Tuple of (started tasks, failures); each failure has arn and reason
        """
        self._report_progress(f"Running task {task_definition} in {cluster}...")
        with remote_call("running task"):
            response = self.clients.ecs.run_task(
                cluster=cluster,
                taskDefinition=task_definition,
                count=1,
                startedBy=STARTED_BY,
            )
        tasks = [self._build_task(t) for t in response.get("tasks", [])]
        return tasks, response.get("failures", [])

    def _build_task(self, data: dict[str, Any]) -> Task:
        return Task(
            arn=data.get("taskArn", ""),
            task_definition_arn=data.get("taskDefinitionArn", ""),
            desired_status=data.get("desiredStatus", ""),
            last_status=data.get("lastStatus", ""),
            containers=[
                TaskContainer(name=c.get("name", ""), last_status=c.get("lastStatus", ""))
                for c in data.get("containers", [])
            ],
        )

    # Task definitions

    def list_task_definition_arns(self, family_prefix: str = "") -> list[str]:
        """List task definition ARNs, optionally limited to a family prefix."""
        kwargs = {}
        if family_prefix:
            kwargs["familyPrefix"] = family_prefix
        with remote_call("fetching task definitions list"):
            return self._paginate("list_task_definitions", "taskDefinitionArns", **kwargs)

    def describe_task_definition(self, task_definition: str) -> TaskDefinition:
        """Fetch a task definition by family, family:revision or ARN."""
        with remote_call(f"fetching Task Definition for {task_definition}"):
            response = self.clients.ecs.describe_task_definition(
                taskDefinition=task_definition
            )
        return self._build_task_definition(response["taskDefinition"])

    def register_task_definition(self, **request: Any) -> TaskDefinition:
        """Register a task definition revision.

        Args:
            **request: RegisterTaskDefinition parameters

        Returns:
            The registered revision
        """
        self._report_progress(f"Registering task definition {request.get('family')}...")
        with remote_call("registering task definition"):
            response = self.clients.ecs.register_task_definition(**request)
        return self._build_task_definition(response["taskDefinition"])

    def register_revision_with_image(
        self, task_definition: TaskDefinition, image: str
    ) -> TaskDefinition:
        """Register a copy of a single-container task definition with a new image.

        Every other container field and task-level setting is carried over.
        """
        container_definitions = [dict(c) for c in task_definition.raw["containerDefinitions"]]
        container_definitions[0]["image"] = image

        request: dict[str, Any] = {
            "family": task_definition.family,
            "containerDefinitions": container_definitions,
        }
        for key in REGISTER_TASK_DEFINITION_FIELDS:
            value = task_definition.raw.get(key)
            if value:
                request[key] = value
        return self.register_task_definition(**request)

    def _build_task_definition(self, data: dict[str, Any]) -> TaskDefinition:
        return TaskDefinition(
            arn=data.get("taskDefinitionArn", ""),
            family=data.get("family", ""),
            revision=data.get("revision", 0),
            status=data.get("status", ""),
            container_definitions=[
                self._build_container_definition(c)
                for c in data.get("containerDefinitions", [])
            ],
            raw=data,
        )

    def _build_container_definition(self, data: dict[str, Any]) -> ContainerDefinition:
        return ContainerDefinition(
            name=data.get("name", ""),
            image=data.get("image", ""),
            cpu=data.get("cpu"),
            memory=data.get("memory"),
            essential=data.get("essential"),
            port_mappings=[
                PortMapping(
                    container_port=p.get("containerPort"),
                    host_port=p.get("hostPort"),
                    protocol=p.get("protocol"),
                )
                for p in data.get("portMappings", [])
            ],
            command=list(data.get("command", [])),
            entry_point=list(data.get("entryPoint", [])),
            environment=[
                KeyValuePair(name=e.get("name", ""), value=e.get("value", ""))
                for e in data.get("environment", [])
            ],
        )
