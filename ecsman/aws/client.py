"""AWS client initialization and configuration."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ecsman.config import RunContext
from ecsman.errors import RemoteCallError

logger = logging.getLogger(__name__)


@contextmanager
def remote_call(action: str) -> Iterator[None]:
    """Turn botocore failures into RemoteCallError carrying the action."""
    try:
        yield
    except (ClientError, BotoCoreError) as e:
        raise RemoteCallError(action, e) from e


def create_session(context: RunContext) -> boto3.Session:
    """Create a boto3 session for the run context.

    Args:
        context: Run context with region and optional profile

    Returns:
        boto3 session using the named profile, or the environment
        credential chain when no profile is set
    """
    session_kwargs = {}
    if not context.uses_env_credentials:
        session_kwargs["profile_name"] = context.profile
    logger.debug(
        "Creating session (profile=%s, region=%s)",
        context.profile or "<environment>",
        context.region,
    )
    return boto3.Session(**session_kwargs)


def _client(session: boto3.Session, service_name: str, region: str):
    boto_config = BotoConfig(
        retries={
            "mode": "standard",
        },
    )
    return session.client(
        service_name,
        region_name=region,
        config=boto_config,
    )


class AWSClients:
    """Container for AWS clients."""

    def __init__(self, context: RunContext):
        """Initialize AWS clients.

        Args:
            context: Run context
        """
        with remote_call("creating AWS clients"):
            session = create_session(context)
            self.ecs = _client(session, "ecs", context.region)
            # Classic load balancers live behind their own API
            self.elb = _client(session, "elb", context.region)
