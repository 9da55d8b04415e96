"""Classic load balancer output."""

from rich.console import Console

from ecsman.models import LoadBalancer
from ecsman.ui.console import print_line


def print_load_balancer(console: Console, balancer: LoadBalancer) -> None:
    print_line(console, f"  Load Balancer: {balancer.name}")
    print_line(console, f"  - DNSName: {balancer.dns_name}")
    for instance_id in balancer.instance_ids:
        print_line(console, f"  - Instance: {instance_id}")
    for backend in balancer.backend_servers:
        print_line(console, f"  - Backend server port: {backend.instance_port}")
        policies = ", ".join(backend.policy_names) or "none"
        print_line(console, f"  - Backend server policies: {policies}")
