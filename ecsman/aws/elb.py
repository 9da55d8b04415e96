"""Classic load balancer lookups."""

import logging
from typing import Any

from ecsman.aws.client import AWSClients, remote_call
from ecsman.models import BackendServer, LoadBalancer

logger = logging.getLogger(__name__)


class LoadBalancerFetcher:
    """Fetches classic load balancer descriptions."""

    def __init__(self, clients: AWSClients):
        self.clients = clients

    def describe_load_balancers(self, names: list[str]) -> list[LoadBalancer]:
        """Describe the named load balancers.

        An empty name list returns an empty result without calling the API,
        which would otherwise describe every load balancer in the region.

        Args:
            names: Load balancer names

        Returns:
            Load balancers in the order the API returns them
        """
        if not names:
            logger.debug("No load balancer names given, skipping describe")
            return []

        with remote_call("fetching load balancer data"):
            response = self.clients.elb.describe_load_balancers(
                LoadBalancerNames=list(names)
            )
        return [
            self._build_load_balancer(lb)
            for lb in response.get("LoadBalancerDescriptions", [])
        ]

    def registered_instance_count(self, names: list[str]) -> int:
        """Sum the registered instances across the named load balancers."""
        return sum(lb.instance_count for lb in self.describe_load_balancers(names))

    def _build_load_balancer(self, data: dict[str, Any]) -> LoadBalancer:
        return LoadBalancer(
            name=data.get("LoadBalancerName", ""),
            dns_name=data.get("DNSName", ""),
            instance_ids=[i.get("InstanceId", "") for i in data.get("Instances", [])],
            backend_servers=[
                BackendServer(
                    instance_port=b.get("InstancePort"),
                    policy_names=list(b.get("PolicyNames", [])),
                )
                for b in data.get("BackendServerDescriptions", [])
            ],
        )
