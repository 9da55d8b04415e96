"""Utility functions for handling ECS resource IDs and ARNs."""

UNKNOWN_REVISION = "unknown"

# Service event messages mention tasks as "... (task 0123abcd)."
TASK_EVENT_MARKER = "(task "


def revision_key(task_def_arn: str) -> str:
    """Extract the family:revision key from a task definition reference.

    Args:
        task_def_arn: Task definition ARN

    Returns:
        Everything after the last "/", or "unknown" if there is no "/"

    Example:
        >>> revision_key("arn:aws:ecs:us-west-2:123:task-definition/demo:8")
        'demo:8'
    """
    if "/" not in task_def_arn:
        return UNKNOWN_REVISION
    return task_def_arn.rsplit("/", 1)[1]


def split_revision_key(key: str) -> tuple[str, str]:
    """Split a family:revision key into its family and revision parts.

    A key without a revision yields "unknown" as the revision.
    """
    family, sep, revision = key.rpartition(":")
    if not sep:
        return key, UNKNOWN_REVISION
    return family, revision


def task_id_from_event(message: str) -> str | None:
    """Pull the task ID out of a service event message.

    The ID is the text between "(task " and the final two characters of the
    message, which close the parenthesis and end the sentence.

    Args:
        message: Service event message

    Returns:
        The task ID, or None if the message does not reference a task
    """
    pos = message.find(TASK_EVENT_MARKER)
    if pos == -1:
        return None
    task_id = message[pos + len(TASK_EVENT_MARKER) : len(message) - 2]
    return task_id or None
