"""ecsman - command-line utility for inspecting and updating AWS ECS services."""

__version__ = "1.0.2"
