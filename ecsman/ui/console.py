"""Terminal output helpers for ecsman."""

from rich.console import Console
from rich.text import Text

SEPARATOR = "-" * 95

# Status values shown in green; anything else is shown in yellow
GOOD_STATUSES = {"ACTIVE", "RUNNING", "PRIMARY"}


def create_console(**kwargs) -> Console:
    """Create the console all views print to.

    Highlighting is off and lines are never wrapped, so output can be piped
    and grepped.
    """
    kwargs.setdefault("highlight", False)
    kwargs.setdefault("soft_wrap", True)
    return Console(**kwargs)


def print_line(console: Console, text: str = "", style: str = "") -> None:
    """Print one line of plain text, never interpreting markup."""
    console.print(Text(text, style=style))


def print_separator(console: Console) -> None:
    print_line(console, SEPARATOR, style="dim")


def print_warning(console: Console, text: str) -> None:
    print_line(console, text, style="yellow")


def status_text(status: str) -> Text:
    """Colour a resource status."""
    return Text(status, style="green" if status in GOOD_STATUSES else "yellow")


def print_with_status(console: Console, prefix: str, status: str, suffix: str = "") -> None:
    """Print prefix, a coloured status and an optional suffix on one line."""
    console.print(Text.assemble(prefix, status_text(status), suffix))
