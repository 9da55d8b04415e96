"""Task definition descriptor files.

A descriptor is a JSON document naming a task family and exactly one
container definition:

    {
      "family": "web",
      "containerDefinitions": [
        {
          "name": "web",
          "image": "nginx:1.25",
          "cpu": 256,
          "memory": 512,
          "essential": true,
          "portMappings": [{"containerPort": 80, "hostPort": 8080}],
          "command": ["nginx", "-g", "daemon off;"],
          "entryPoint": [],
          "environment": [{"name": "MODE", "value": "prod"}]
        }
      ]
    }

Keys are matched case-insensitively, so "ContainerDefinitions" and
"containerDefinitions" are equivalent.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ecsman.errors import DescriptorError
from ecsman.models import ContainerDefinition, KeyValuePair, PortMapping

logger = logging.getLogger(__name__)


@dataclass
class TaskDescriptor:
    """A parsed descriptor: a family and its single container definition."""

    family: str
    container: ContainerDefinition

    def to_register_kwargs(self) -> dict[str, Any]:
        """Build the RegisterTaskDefinition request for this descriptor."""
        c = self.container
        container: dict[str, Any] = {
            "name": c.name,
            "image": c.image,
            "essential": bool(c.essential),
            "command": list(c.command),
            "entryPoint": list(c.entry_point),
            "environment": [{"name": e.name, "value": e.value} for e in c.environment],
            "portMappings": [],
        }
        if c.cpu is not None:
            container["cpu"] = c.cpu
        if c.memory is not None:
            container["memory"] = c.memory
        for p in c.port_mappings:
            mapping: dict[str, Any] = {"containerPort": p.container_port}
            if p.host_port is not None:
                mapping["hostPort"] = p.host_port
            if p.protocol:
                mapping["protocol"] = p.protocol
            container["portMappings"].append(mapping)
        return {"family": self.family, "containerDefinitions": [container]}


def _lower_keys(data: dict[str, Any], where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DescriptorError(f"{where} must be a JSON object")
    return {str(k).lower(): v for k, v in data.items()}


def _string(data: dict[str, Any], key: str, where: str, default: str = "") -> str:
    value = data.get(key.lower())
    if value is None:
        return default
    if not isinstance(value, str):
        raise DescriptorError(f"{where}.{key} must be a string")
    return value


def _int(data: dict[str, Any], key: str, where: str) -> int | None:
    value = data.get(key.lower())
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise DescriptorError(f"{where}.{key} must be an integer")
    return value


def _string_list(data: dict[str, Any], key: str, where: str) -> list[str]:
    value = data.get(key.lower()) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DescriptorError(f"{where}.{key} must be a list of strings")
    return value


def _list(data: dict[str, Any], key: str, where: str) -> list[Any]:
    value = data.get(key.lower()) or []
    if not isinstance(value, list):
        raise DescriptorError(f"{where}.{key} must be a list")
    return value


def _parse_container(data: Any) -> ContainerDefinition:
    where = "containerDefinitions[0]"
    fields = _lower_keys(data, where)

    essential = fields.get("essential", False)
    if not isinstance(essential, bool):
        raise DescriptorError(f"{where}.essential must be true or false")

    environment = []
    for i, item in enumerate(_list(fields, "environment", where)):
        pair = _lower_keys(item, f"{where}.environment[{i}]")
        environment.append(
            KeyValuePair(
                name=_string(pair, "name", f"{where}.environment[{i}]"),
                value=_string(pair, "value", f"{where}.environment[{i}]"),
            )
        )

    port_mappings = []
    for i, item in enumerate(_list(fields, "portMappings", where)):
        mapping = _lower_keys(item, f"{where}.portMappings[{i}]")
        protocol = _string(mapping, "protocol", f"{where}.portMappings[{i}]")
        port_mappings.append(
            PortMapping(
                container_port=_int(mapping, "containerPort", f"{where}.portMappings[{i}]"),
                host_port=_int(mapping, "hostPort", f"{where}.portMappings[{i}]"),
                protocol=protocol or None,
            )
        )

    return ContainerDefinition(
        name=_string(fields, "name", where),
        image=_string(fields, "image", where),
        cpu=_int(fields, "cpu", where),
        memory=_int(fields, "memory", where),
        essential=essential,
        port_mappings=port_mappings,
        command=_string_list(fields, "command", where),
        entry_point=_string_list(fields, "entryPoint", where),
        environment=environment,
    )


def parse_task_descriptor(data: Any) -> TaskDescriptor:
    """Validate decoded descriptor JSON.

    Raises:
        DescriptorError: If the structure is not a single-container task
            definition
    """
    fields = _lower_keys(data, "descriptor")

    family = _string(fields, "family", "descriptor")
    if not family:
        raise DescriptorError("descriptor.family is required")

    containers = _list(fields, "containerDefinitions", "descriptor")
    if len(containers) > 1:
        raise DescriptorError(
            f"Only a single container definition is supported, found "
            f"{len(containers)}. Please edit and try again."
        )
    if not containers:
        raise DescriptorError("descriptor.containerDefinitions must contain one entry")

    return TaskDescriptor(family=family, container=_parse_container(containers[0]))


def load_task_descriptor(path: Path) -> TaskDescriptor:
    """Read and validate a task definition descriptor file.

    Args:
        path: Path to the JSON descriptor

    Returns:
        The parsed descriptor

    Raises:
        DescriptorError: If the file cannot be read or parsed
    """
    logger.debug("Reading task descriptor %s", path)
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DescriptorError(f"Error reading task file {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DescriptorError(f"Error parsing task file {path}: {e}") from e

    return parse_task_descriptor(data)
