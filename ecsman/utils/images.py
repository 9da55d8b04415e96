"""Container image reference handling."""

from ecsman.errors import ImageTagError, UsageError

TAG_PREFIX = ":"


def is_tag_shorthand(new_image: str) -> bool:
    """Check whether an image argument only names a new tag (":tag")."""
    return new_image.startswith(TAG_PREFIX)


def apply_image_tag(current_image: str, new_image: str) -> str:
    """Resolve the image a service should be updated to.

    A full image URL is returned as given. A value starting with ":" keeps
    the repository of the current image and replaces its tag.

    Args:
        current_image: Image currently used by the container definition
        new_image: Image URL or ":tag" shorthand

    Returns:
        The image URL to register

    Raises:
        UsageError: If new_image is empty
        ImageTagError: If the current image has more than one ":"

    Example:
        >>> apply_image_tag("repo/img:old", ":new")
        'repo/img:new'
    """
    if not new_image:
        raise UsageError("You must specify a new image URL to update the image")

    if not is_tag_shorthand(new_image):
        return new_image

    parts = current_image.split(":")
    if len(parts) > 2:
        raise ImageTagError(
            f"Split on colon found more than two elements in current image URL "
            f"{current_image}"
        )
    return f"{parts[0]}{new_image}"
