"""ecsman operations: fetch from AWS and print results."""

import logging
from pathlib import Path

from rich.console import Console

from ecsman.aws.client import AWSClients
from ecsman.aws.elb import LoadBalancerFetcher
from ecsman.aws.fetcher import ECSFetcher, ProgressCallback
from ecsman.config import RunContext
from ecsman.consistency import check_instance_count, check_service_tasks
from ecsman.descriptor import load_task_descriptor
from ecsman.errors import (
    DataShapeError,
    MultipleContainersError,
    ServiceNotFoundError,
    UsageError,
)
from ecsman.models import Service
from ecsman.ui.cluster_view import print_cluster
from ecsman.ui.console import (
    create_console,
    print_line,
    print_separator,
    print_warning,
)
from ecsman.ui.load_balancer_view import print_load_balancer
from ecsman.ui.service_view import (
    print_event,
    print_event_task,
    print_events_header,
    print_service_summary,
    print_service_update,
)
from ecsman.ui.task_view import (
    print_registered,
    print_run_results,
    print_service_task,
    print_task_definition,
    print_task_families,
)
from ecsman.utils.ids import revision_key, split_revision_key, task_id_from_event
from ecsman.utils.images import apply_image_tag

logger = logging.getLogger(__name__)

LATEST_REVISION = "latest"


class ECSManApp:
    """Runs one ecsman operation against a region with a set of credentials."""

    def __init__(
        self,
        context: RunContext,
        console: Console | None = None,
        clients: AWSClients | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        """Initialize the application.

        Args:
            context: Region and credentials for this run
            console: Output console (defaults to stdout)
            clients: AWS clients; created from the context when omitted
            progress_callback: Optional callback for fetcher progress
        """
        self.context = context
        self.console = console or create_console()
        self.aws_clients = clients or AWSClients(context)
        self.ecs_fetcher = ECSFetcher(self.aws_clients, progress_callback=progress_callback)
        self.elb_fetcher = LoadBalancerFetcher(self.aws_clients)

    def _require_service(self, cluster_name: str, service_name: str) -> Service:
        service = self.ecs_fetcher.describe_service(cluster_name, service_name)
        if service is None:
            raise ServiceNotFoundError(cluster_name, service_name)
        return service

    # ls

    def list_clusters(self) -> None:
        """Print every cluster in the region with its services."""
        for cluster in self.ecs_fetcher.list_clusters():
            cluster.services = self.ecs_fetcher.list_services(cluster.arn)
            print_cluster(self.console, cluster)

    def print_services(
        self,
        cluster_name: str,
        service_name: str = "",
        verbose: bool = False,
        events: int = 0,
    ) -> list[str]:
        """Print services in a cluster, optionally only the one named.

        Args:
            cluster_name: Cluster to list
            service_name: Only print this service if given
            verbose: Print task definition CPU, memory and environment
            events: Number of recent events to print per service

        Returns:
            Load balancer names of the printed services, in encounter order
        """
        services = self.ecs_fetcher.list_services(cluster_name)
        print_line(self.console, f"{len(services)} Services in cluster {cluster_name}")

        load_balancers: list[str] = []
        if not services:
            print_line(self.console, "  No services to describe.")

        found_service = False
        for service in services:
            if service_name and service.name != service_name:
                continue
            found_service = True

            print_service_summary(self.console, service)
            load_balancers.extend(service.load_balancer_names)
            self._print_service_tasks(cluster_name, service)
            self._print_service_events(cluster_name, service, events)
            task_definition = self.ecs_fetcher.describe_task_definition(
                service.task_definition
            )
            print_task_definition(
                self.console, task_definition, service.task_definition, verbose
            )

        if service_name and not found_service:
            print_line(self.console, f"  Service {service_name} not found.", style="red")
        return load_balancers

    def _print_service_tasks(self, cluster_name: str, service: Service) -> None:
        tasks = self.ecs_fetcher.list_service_tasks(cluster_name, service.name)
        for task in tasks:
            print_service_task(self.console, task, service.revision_key)

    def _print_service_events(self, cluster_name: str, service: Service, count: int) -> None:
        recent = service.recent_events(count)
        if not recent:
            return
        print_events_header(self.console, len(recent))
        for event in recent:
            print_event(self.console, event)
            task_id = task_id_from_event(event.message)
            if task_id is not None:
                print_event_task(
                    self.console, self.ecs_fetcher.describe_task(cluster_name, task_id)
                )

    def print_load_balancers(self, names: list[str]) -> None:
        """Print details for the named classic load balancers."""
        if not names:
            return
        print_line(self.console)
        print_separator(self.console)
        for balancer in self.elb_fetcher.describe_load_balancers(names):
            print_load_balancer(self.console, balancer)

    # check

    def check_service(self, cluster_name: str, service_name: str, verbose: bool = False) -> list[str]:
        """Check a service for revision drift and load balancer registration drift.

        Returns:
            The warning lines that were printed
        """
        service = self._require_service(cluster_name, service_name)
        logger.debug(
            "Checking %s/%s against %s", cluster_name, service_name, service.task_definition
        )

        tasks = self.ecs_fetcher.list_service_tasks(cluster_name, service_name)
        report = check_service_tasks(service.task_definition, tasks, verbose=verbose)
        for line in report.lines:
            if line.startswith("WARNING:"):
                print_warning(self.console, line)
            else:
                print_line(self.console, line)

        warnings = report.warnings
        instance_count = self.elb_fetcher.registered_instance_count(
            service.load_balancer_names
        )
        elb_warning = check_instance_count(instance_count, report.running_count)
        if elb_warning:
            print_warning(self.console, elb_warning)
            warnings.append(elb_warning)
        return warnings

    # update

    def update_service(self, cluster_name: str, service_name: str, new_image: str) -> Service:
        """Register a revision with a new image and point the service at it.

        A new_image starting with ":" keeps the current repository and only
        replaces the tag.

        Returns:
            The updated service
        """
        if not new_image:
            raise UsageError("You must specify a new image URL to update the image")

        print_line(self.console, f"Updating service {service_name}")
        service = self._require_service(cluster_name, service_name)
        task_definition = self.ecs_fetcher.describe_task_definition(service.task_definition)

        containers = task_definition.container_definitions
        if len(containers) > 1:
            raise MultipleContainersError(
                f"Service {service_name} has {len(containers)} containers; "
                "only single-container task definitions are supported"
            )
        if not containers:
            raise DataShapeError(
                f"Task definition {task_definition.arn} has no container definitions"
            )

        current_image = containers[0].image
        image = apply_image_tag(current_image, new_image)

        print_line(self.console, f"  - Task Definition: {task_definition.family}")
        print_line(self.console, f"  - Current image: {current_image}")
        print_line(self.console, f"  - Updating to: {image}")

        registered = self.ecs_fetcher.register_revision_with_image(task_definition, image)
        print_line(
            self.console,
            f"  -> Task definition updated, registered as revision {registered.revision}",
        )

        updated = self.ecs_fetcher.update_service(cluster_name, service_name, registered.arn)
        print_service_update(self.console, updated)
        return updated

    # register / run

    def register_task_definition(self, task_file: str | Path) -> None:
        """Register a task definition from a JSON descriptor file."""
        print_line(self.console, "Registering Task Definition...")
        print_line(self.console)
        descriptor = load_task_descriptor(Path(task_file))
        registered = self.ecs_fetcher.register_task_definition(
            **descriptor.to_register_kwargs()
        )
        print_registered(self.console, registered)

    def run_task(self, cluster_name: str, task_definition: str) -> None:
        """Run one instance of a task definition."""
        print_line(self.console, f"Running one instance of task {task_definition}")
        tasks, failures = self.ecs_fetcher.run_task(cluster_name, task_definition)
        print_run_results(self.console, tasks, failures)

    # taskdefs

    def print_task_definitions(self, family: str = "", revision: str = "") -> None:
        """List task definition families, or describe definitions in a family.

        Without a family, each family is shown with the revision of the last
        ARN the API listed for it. With a family, revision may be empty (all),
        "latest" (the last listed) or a revision number.
        """
        arns = self.ecs_fetcher.list_task_definition_arns(family)

        if not family:
            families: dict[str, str] = {}
            for arn in arns:
                name, rev = split_revision_key(revision_key(arn))
                families[name] = rev
            print_task_families(self.console, families)
            return

        if revision == LATEST_REVISION:
            selected = arns[-1:]
        elif not revision:
            selected = arns
        else:
            wanted = f"{family}:{revision}"
            selected = [arn for arn in arns if revision_key(arn) == wanted]

        for arn in selected:
            task_definition = self.ecs_fetcher.describe_task_definition(arn)
            print_task_definition(self.console, task_definition, arn, verbose=True)
