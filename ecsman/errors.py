"""Exception types raised by ecsman operations."""


class ECSManError(Exception):
    """Base class for errors that end an ecsman command."""


class UsageError(ECSManError):
    """Missing or invalid command-line arguments."""


class RemoteCallError(ECSManError):
    """An AWS API call failed.

    Args:
        action: Description of what was being attempted
        error: The underlying botocore exception
    """

    def __init__(self, action: str, error: Exception):
        self.action = action
        self.error = error
        super().__init__(f"Error {action} ==> {error}")


class ServiceNotFoundError(ECSManError):
    """A named service does not exist in the cluster."""

    def __init__(self, cluster_name: str, service_name: str):
        self.cluster_name = cluster_name
        self.service_name = service_name
        super().__init__(
            f"Service {service_name} not found in cluster {cluster_name}"
        )


class DataShapeError(ECSManError):
    """Remote or user-supplied data has a shape ecsman cannot handle."""


class MultipleContainersError(DataShapeError):
    """A task definition declares more than one container definition."""


class ImageTagError(DataShapeError):
    """An image URL cannot be split safely into repository and tag."""


class DescriptorError(DataShapeError):
    """A task definition descriptor file is unreadable or malformed."""
