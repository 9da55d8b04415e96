"""Tests for the ecsman application operations."""

import io
import json

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from ecsman.app import ECSManApp
from ecsman.config import RunContext
from ecsman.errors import (
    DescriptorError,
    ImageTagError,
    MultipleContainersError,
    ServiceNotFoundError,
    UsageError,
)
from ecsman.ui.console import create_console

TASK_DEF_ARN = "arn:aws:ecs:us-west-2:123:task-definition/"


def service_data(name="web", revision="web:5", load_balancers=None, events=None):
    return {
        "serviceName": name,
        "serviceArn": f"arn:aws:ecs:us-west-2:123:service/prod/{name}",
        "status": "ACTIVE",
        "desiredCount": 2,
        "runningCount": 2,
        "pendingCount": 0,
        "taskDefinition": TASK_DEF_ARN + revision,
        "loadBalancers": load_balancers or [],
        "deployments": [{"id": "ecs-svc/1", "status": "PRIMARY", "runningCount": 2}],
        "events": events or [],
    }


def task_data(task_id, revision="web:5", last_status="RUNNING"):
    return {
        "taskArn": f"arn:aws:ecs:us-west-2:123:task/prod/{task_id}",
        "taskDefinitionArn": TASK_DEF_ARN + revision,
        "desiredStatus": "RUNNING",
        "lastStatus": last_status,
        "containers": [{"name": "web", "lastStatus": last_status}],
    }


def task_definition_data(revision=5, containers=None):
    return {
        "taskDefinitionArn": f"{TASK_DEF_ARN}web:{revision}",
        "family": "web",
        "revision": revision,
        "status": "ACTIVE",
        "containerDefinitions": containers
        or [
            {
                "name": "web",
                "image": "repo/web:old",
                "cpu": 256,
                "memory": 512,
                "portMappings": [{"containerPort": 80, "hostPort": 8080}],
                "environment": [{"name": "MODE", "value": "prod"}],
            }
        ],
    }


class FakeECS:
    """Builds a MagicMock ECS client whose paginators return fixed pages."""

    def __init__(self):
        self.client = MagicMock()
        self.pages = {}
        self.client.get_paginator.side_effect = self._get_paginator

    def _get_paginator(self, operation):
        paginator = MagicMock()
        paginator.paginate.return_value = self.pages.get(operation, [{}])
        return paginator


@pytest.fixture
def ecs():
    return FakeECS()


@pytest.fixture
def clients(ecs):
    clients = MagicMock()
    clients.ecs = ecs.client
    clients.elb = MagicMock()
    clients.elb.describe_load_balancers.return_value = {"LoadBalancerDescriptions": []}
    return clients


@pytest.fixture
def app(clients):
    console = create_console(file=io.StringIO(), color_system=None, width=200)
    return ECSManApp(
        RunContext(region="us-west-2", profile="default"),
        console=console,
        clients=clients,
    )


def output(app) -> str:
    return app.console.file.getvalue()


class TestListClusters:
    """Tests for ECSManApp.list_clusters."""

    def test_lists_clusters_and_services(self, app, ecs):
        cluster_arn = "arn:aws:ecs:us-west-2:123:cluster/prod"
        ecs.pages["list_clusters"] = [{"clusterArns": [cluster_arn]}]
        ecs.pages["list_services"] = [{"serviceArns": ["arn:service/prod/web"]}]
        ecs.client.describe_clusters.return_value = {
            "clusters": [
                {
                    "clusterName": "prod",
                    "clusterArn": cluster_arn,
                    "status": "ACTIVE",
                    "activeServicesCount": 1,
                    "registeredContainerInstancesCount": 3,
                    "runningTasksCount": 2,
                    "pendingTasksCount": 0,
                }
            ]
        }
        ecs.client.describe_services.return_value = {"services": [service_data()]}

        app.list_clusters()

        text = output(app)
        assert "Cluster: prod (ACTIVE)" in text
        assert "  1 services active, 3 containers" in text
        assert "  Tasks: 2 running, 0 pending" in text
        assert "  - Service: web (ACTIVE), running count: 2" in text
        ecs.client.describe_services.assert_called_once_with(
            cluster=cluster_arn, services=["arn:service/prod/web"]
        )


class TestPrintServices:
    """Tests for ECSManApp.print_services."""

    @pytest.fixture
    def cluster(self, ecs):
        ecs.pages["list_services"] = [
            {"serviceArns": ["arn:service/prod/web", "arn:service/prod/api"]}
        ]
        ecs.pages["list_tasks"] = [{"taskArns": ["arn:task/prod/t1", "arn:task/prod/t2"]}]
        ecs.client.describe_tasks.return_value = {
            "tasks": [task_data("t1"), task_data("t2", revision="web:4")]
        }
        ecs.client.describe_task_definition.return_value = {
            "taskDefinition": task_definition_data()
        }
        return ecs

    def test_lists_all_services(self, app, cluster):
        cluster.client.describe_services.return_value = {
            "services": [
                service_data(
                    "web",
                    load_balancers=[
                        {"loadBalancerName": "web-elb", "containerName": "web", "containerPort": 80}
                    ],
                ),
                service_data(
                    "api",
                    load_balancers=[
                        {"loadBalancerName": "web-elb", "containerName": "api", "containerPort": 81}
                    ],
                ),
            ]
        }

        load_balancers = app.print_services("prod")

        text = output(app)
        assert text.startswith("2 Services in cluster prod")
        assert "  Service: web" in text
        assert "  Service: api" in text
        assert "  - Load Balancer: web-elb Port: 80" in text
        assert "  - Deployment: ecs-svc/1 Status: PRIMARY" in text
        assert "*** WARNING: task does not have the same task/revision" in text
        assert "      - Image: repo/web:old" in text
        assert "      - Container Port 80 : Host Port 8080" in text
        # Not deduplicated
        assert load_balancers == ["web-elb", "web-elb"]

    def test_verbose_shows_resources(self, app, cluster):
        cluster.client.describe_services.return_value = {"services": [service_data()]}

        app.print_services("prod", verbose=True)

        text = output(app)
        assert "      - CPU: 256" in text
        assert "        MODE = prod" in text

    def test_filter_by_name(self, app, cluster):
        cluster.client.describe_services.return_value = {
            "services": [service_data("web"), service_data("api")]
        }

        app.print_services("prod", "api")

        text = output(app)
        assert "  Service: api" in text
        assert "  Service: web" not in text
        assert "not found" not in text

    def test_service_not_found(self, app, cluster):
        cluster.client.describe_services.return_value = {"services": [service_data("web")]}

        load_balancers = app.print_services("prod", "missing")

        assert "  Service missing not found." in output(app)
        assert load_balancers == []
        cluster.client.describe_task_definition.assert_not_called()

    def test_no_services(self, app, ecs):
        ecs.pages["list_services"] = [{"serviceArns": []}]

        assert app.print_services("empty") == []
        text = output(app)
        assert "0 Services in cluster empty" in text
        assert "  No services to describe." in text

    def test_events_with_task_side_note(self, app, cluster):
        created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        events = [
            {"id": "e3", "createdAt": created, "message": "(service web) has started 1 tasks: (task t9)."},
            {"id": "e2", "createdAt": created, "message": "(service web) has reached a steady state."},
            {"id": "e1", "createdAt": created, "message": "(service web) was updated."},
        ]
        cluster.client.describe_services.return_value = {
            "services": [service_data(events=events)]
        }

        def describe_tasks(cluster, tasks):
            if tasks == ["t9"]:
                return {"tasks": [task_data("t9", last_status="STOPPED")]}
            return {"tasks": [task_data("t1")]}

        cluster.client.describe_tasks.side_effect = describe_tasks

        app.print_services("prod", "web", events=2)

        text = output(app)
        assert "  - Events (most recent 2):" in text
        assert "has started 1 tasks" in text
        assert "steady state" in text
        assert "was updated" not in text
        assert f"      Task: {TASK_DEF_ARN}web:5" in text
        assert "      Last known status: STOPPED" in text
        assert text.index("has started") < text.index("steady state")

    def test_event_count_capped_at_available(self, app, cluster):
        events = [{"id": "e1", "message": "(service web) has reached a steady state."}]
        cluster.client.describe_services.return_value = {
            "services": [service_data(events=events)]
        }

        app.print_services("prod", "web", events=10)

        assert "  - Events (most recent 1):" in output(app)

    def test_event_task_without_data(self, app, cluster):
        events = [{"id": "e1", "message": "(service web) has stopped 1 running tasks: (task gone)."}]
        cluster.client.describe_services.return_value = {
            "services": [service_data(events=events)]
        }

        def describe_tasks(cluster, tasks):
            if tasks == ["gone"]:
                return {"tasks": [], "failures": [{"arn": "gone", "reason": "MISSING"}]}
            return {"tasks": []}

        cluster.client.describe_tasks.side_effect = describe_tasks

        app.print_services("prod", "web", events=1)

        assert "      Request for task data returned no results." in output(app)


class TestPrintLoadBalancers:
    """Tests for ECSManApp.print_load_balancers."""

    def test_prints_details(self, app, clients):
        clients.elb.describe_load_balancers.return_value = {
            "LoadBalancerDescriptions": [
                {
                    "LoadBalancerName": "web-elb",
                    "DNSName": "web-elb.example.com",
                    "Instances": [{"InstanceId": "i-1"}],
                    "BackendServerDescriptions": [{"InstancePort": 80, "PolicyNames": []}],
                }
            ]
        }

        app.print_load_balancers(["web-elb"])

        text = output(app)
        assert "  Load Balancer: web-elb" in text
        assert "  - DNSName: web-elb.example.com" in text
        assert "  - Instance: i-1" in text
        assert "  - Backend server port: 80" in text

    def test_no_names(self, app, clients):
        app.print_load_balancers([])

        assert output(app) == ""
        clients.elb.describe_load_balancers.assert_not_called()


class TestCheckService:
    """Tests for ECSManApp.check_service."""

    def test_revision_and_elb_mismatch(self, app, ecs, clients):
        ecs.client.describe_services.return_value = {
            "services": [
                service_data(
                    load_balancers=[
                        {"loadBalancerName": "web-elb", "containerName": "web", "containerPort": 80}
                    ]
                )
            ]
        }
        ecs.pages["list_tasks"] = [{"taskArns": ["t1", "t2", "t3"]}]
        ecs.client.describe_tasks.return_value = {
            "tasks": [
                task_data("t1"),
                task_data("t2"),
                task_data("t3", revision="web:4", last_status="PENDING"),
            ]
        }
        clients.elb.describe_load_balancers.return_value = {
            "LoadBalancerDescriptions": [
                {
                    "LoadBalancerName": "web-elb",
                    "DNSName": "d",
                    "Instances": [{"InstanceId": f"i-{n}"} for n in range(3)],
                }
            ]
        }

        warnings = app.check_service("prod", "web")

        assert warnings == [
            "WARNING: task uses web:4 but service definition is web:5",
            "WARNING: ELB instance count of 3 is different from number of running tasks 2",
        ]
        text = output(app)
        assert "WARNING: task uses web:4 but service definition is web:5" in text
        assert "ELB instance count of 3" in text
        clients.elb.describe_load_balancers.assert_called_once_with(
            LoadBalancerNames=["web-elb"]
        )

    def test_healthy_service(self, app, ecs, clients):
        ecs.client.describe_services.return_value = {
            "services": [
                service_data(
                    load_balancers=[
                        {"loadBalancerName": "web-elb", "containerName": "web", "containerPort": 80}
                    ]
                )
            ]
        }
        ecs.pages["list_tasks"] = [{"taskArns": ["t1", "t2"]}]
        ecs.client.describe_tasks.return_value = {"tasks": [task_data("t1"), task_data("t2")]}
        clients.elb.describe_load_balancers.return_value = {
            "LoadBalancerDescriptions": [
                {"LoadBalancerName": "web-elb", "Instances": [{"InstanceId": "i-1"}, {"InstanceId": "i-2"}]}
            ]
        }

        assert app.check_service("prod", "web") == []
        assert output(app) == ""

    def test_no_running_tasks(self, app, ecs, clients):
        ecs.client.describe_services.return_value = {"services": [service_data()]}
        ecs.pages["list_tasks"] = [{"taskArns": []}]

        warnings = app.check_service("prod", "web")

        assert warnings == ["WARNING: No tasks in RUNNING state for the service"]
        clients.elb.describe_load_balancers.assert_not_called()

    def test_verbose_prints_tasks(self, app, ecs):
        ecs.client.describe_services.return_value = {"services": [service_data()]}
        ecs.pages["list_tasks"] = [{"taskArns": ["t1"]}]
        ecs.client.describe_tasks.return_value = {"tasks": [task_data("t1")]}

        app.check_service("prod", "web", verbose=True)

        text = output(app)
        assert "  - Task arn:aws:ecs:us-west-2:123:task/prod/t1" in text
        assert "    Desired status RUNNING - Last status RUNNING" in text

    def test_service_not_found(self, app, ecs):
        ecs.client.describe_services.return_value = {"services": [], "failures": []}

        with pytest.raises(ServiceNotFoundError) as exc_info:
            app.check_service("prod", "missing")

        assert "not found" in str(exc_info.value)
        ecs.client.get_paginator.assert_not_called()
        ecs.client.describe_tasks.assert_not_called()


class TestUpdateService:
    """Tests for ECSManApp.update_service."""

    @pytest.fixture
    def registered(self, ecs):
        ecs.client.describe_services.return_value = {"services": [service_data()]}
        ecs.client.describe_task_definition.return_value = {
            "taskDefinition": task_definition_data()
        }
        ecs.client.register_task_definition.return_value = {
            "taskDefinition": task_definition_data(revision=6)
        }
        ecs.client.update_service.return_value = {
            "service": dict(service_data(revision="web:6"), pendingCount=2)
        }
        return ecs

    def test_tag_shorthand(self, app, registered):
        app.update_service("prod", "web", ":new")

        kwargs = registered.client.register_task_definition.call_args.kwargs
        assert kwargs["family"] == "web"
        assert kwargs["containerDefinitions"][0]["image"] == "repo/web:new"
        assert kwargs["containerDefinitions"][0]["cpu"] == 256
        registered.client.update_service.assert_called_once_with(
            cluster="prod", service="web", taskDefinition=f"{TASK_DEF_ARN}web:6"
        )
        text = output(app)
        assert "  - Current image: repo/web:old" in text
        assert "  - Updating to: repo/web:new" in text
        assert "registered as revision 6" in text
        assert "     - Pending count: 2" in text

    def test_full_image(self, app, registered):
        app.update_service("prod", "web", "other/web:9")

        kwargs = registered.client.register_task_definition.call_args.kwargs
        assert kwargs["containerDefinitions"][0]["image"] == "other/web:9"

    def test_empty_image(self, app, registered):
        with pytest.raises(UsageError):
            app.update_service("prod", "web", "")
        registered.client.describe_services.assert_not_called()

    def test_service_not_found(self, app, registered):
        registered.client.describe_services.return_value = {"services": []}

        with pytest.raises(ServiceNotFoundError):
            app.update_service("prod", "missing", ":new")
        registered.client.register_task_definition.assert_not_called()
        registered.client.update_service.assert_not_called()

    def test_multiple_containers(self, app, registered):
        registered.client.describe_task_definition.return_value = {
            "taskDefinition": task_definition_data(
                containers=[
                    {"name": "web", "image": "repo/web:old"},
                    {"name": "sidecar", "image": "envoy:1"},
                ]
            )
        }

        with pytest.raises(MultipleContainersError):
            app.update_service("prod", "web", ":new")
        registered.client.register_task_definition.assert_not_called()

    def test_ambiguous_tag(self, app, registered):
        registered.client.describe_task_definition.return_value = {
            "taskDefinition": task_definition_data(
                containers=[{"name": "web", "image": "registry:5000/web:old"}]
            )
        }

        with pytest.raises(ImageTagError):
            app.update_service("prod", "web", ":new")
        registered.client.register_task_definition.assert_not_called()


class TestRegisterTaskDefinition:
    """Tests for ECSManApp.register_task_definition."""

    def test_register(self, app, ecs, tmp_path):
        path = tmp_path / "task.json"
        path.write_text(
            json.dumps(
                {
                    "family": "web",
                    "containerDefinitions": [
                        {"name": "web", "image": "nginx", "memory": 128, "essential": True}
                    ],
                }
            )
        )
        ecs.client.register_task_definition.return_value = {
            "taskDefinition": task_definition_data(revision=7)
        }

        app.register_task_definition(path)

        kwargs = ecs.client.register_task_definition.call_args.kwargs
        assert kwargs["family"] == "web"
        assert kwargs["containerDefinitions"][0]["memory"] == 128
        text = output(app)
        assert "Registered new Task Definition:" in text
        assert "  - Revision: 7" in text
        assert "  - Status: ACTIVE" in text

    def test_two_containers_not_submitted(self, app, ecs, tmp_path):
        path = tmp_path / "task.json"
        path.write_text(
            json.dumps(
                {
                    "family": "web",
                    "containerDefinitions": [
                        {"name": "a", "image": "a"},
                        {"name": "b", "image": "b"},
                    ],
                }
            )
        )

        with pytest.raises(DescriptorError):
            app.register_task_definition(path)
        ecs.client.register_task_definition.assert_not_called()

    def test_undecodable_file_not_submitted(self, app, ecs, tmp_path):
        path = tmp_path / "task.json"
        path.write_bytes(b'{"family": "\xff\xfe"}')

        with pytest.raises(DescriptorError):
            app.register_task_definition(path)
        ecs.client.register_task_definition.assert_not_called()


class TestRunTask:
    """Tests for ECSManApp.run_task."""

    def test_reports_tasks_and_failures(self, app, ecs):
        ecs.client.run_task.return_value = {
            "tasks": [task_data("t1", last_status="PENDING")],
            "failures": [{"arn": "arn:container-instance/1", "reason": "RESOURCE:CPU"}],
        }

        app.run_task("prod", "web:5")

        text = output(app)
        assert "Running one instance of task web:5" in text
        assert "  FAILED Task: arn:container-instance/1" in text
        assert "  - Error: RESOURCE:CPU" in text
        assert f"  Running task definition: {TASK_DEF_ARN}web:5" in text
        assert "  - Task Running on container(s) web" in text
        assert "  - Last known status: PENDING" in text


class TestPrintTaskDefinitions:
    """Tests for ECSManApp.print_task_definitions."""

    ARNS = [
        f"{TASK_DEF_ARN}web:1",
        f"{TASK_DEF_ARN}api:3",
        f"{TASK_DEF_ARN}web:3",
        f"{TASK_DEF_ARN}web:2",
    ]

    def test_families_use_last_listed_revision(self, app, ecs):
        ecs.pages["list_task_definitions"] = [{"taskDefinitionArns": self.ARNS}]

        app.print_task_definitions()

        assert output(app) == (
            "Task Definition families:\n"
            "  web (latest revision: 2)\n"
            "  api (latest revision: 3)\n"
        )
        ecs.client.describe_task_definition.assert_not_called()

    def test_latest(self, app, ecs):
        ecs.pages["list_task_definitions"] = [
            {"taskDefinitionArns": [f"{TASK_DEF_ARN}web:1", f"{TASK_DEF_ARN}web:2"]}
        ]
        ecs.client.describe_task_definition.return_value = {
            "taskDefinition": task_definition_data(revision=2)
        }

        app.print_task_definitions("web", "latest")

        ecs.client.describe_task_definition.assert_called_once_with(
            taskDefinition=f"{TASK_DEF_ARN}web:2"
        )
        text = output(app)
        assert f"  - Task Definition: {TASK_DEF_ARN}web:2" in text
        assert "      - Memory: 512" in text

    def test_specific_revision(self, app, ecs):
        ecs.pages["list_task_definitions"] = [
            {"taskDefinitionArns": [f"{TASK_DEF_ARN}web:1", f"{TASK_DEF_ARN}web:12"]}
        ]
        ecs.client.describe_task_definition.return_value = {
            "taskDefinition": task_definition_data(revision=1)
        }

        app.print_task_definitions("web", "1")

        ecs.client.describe_task_definition.assert_called_once_with(
            taskDefinition=f"{TASK_DEF_ARN}web:1"
        )

    def test_all_revisions(self, app, ecs):
        ecs.pages["list_task_definitions"] = [
            {"taskDefinitionArns": [f"{TASK_DEF_ARN}web:1", f"{TASK_DEF_ARN}web:2"]}
        ]
        ecs.client.describe_task_definition.return_value = {
            "taskDefinition": task_definition_data()
        }

        app.print_task_definitions("web")

        assert ecs.client.describe_task_definition.call_count == 2

    def test_no_match(self, app, ecs):
        ecs.pages["list_task_definitions"] = [{"taskDefinitionArns": [f"{TASK_DEF_ARN}web:1"]}]

        app.print_task_definitions("web", "9")

        assert output(app) == ""
