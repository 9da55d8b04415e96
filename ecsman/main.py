"""Main entry point for ecsman."""

import argparse
import logging
import sys
from pathlib import Path

from ecsman import __version__
from ecsman.config import (
    Config,
    ConfigError,
    RunContext,
    get_default_config_path,
    load_config,
    resolve_credential_profile,
)
from ecsman.errors import ECSManError, UsageError

OPERATIONS = ("ls", "check", "update", "register", "run", "taskdefs")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Set up logging configuration.

    Args:
        verbose: If True, enable info logging
        debug: If True, enable debug logging
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="ecsman",
        description="ecsman - inspect and update AWS ECS clusters, services and tasks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Operations:
  ls                                 list clusters and their services
  ls <cluster> [service]             list services in a cluster, or one service
  check <cluster> <service>          check a service's tasks and ELB registrations
  update <cluster> <service> <image> update a service's image (":tag" keeps the repository)
  register <taskFile>                register a task definition from a JSON file
  run <cluster> <taskDefinition>     run one instance of a task
  taskdefs [family [revision]]       list task definitions ("latest" or a revision number)

Credentials:
  --cred <profile> beats the ECSCREDENTIAL environment variable, which beats
  the configured profile ("default" unless set). --cred env uses the
  AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY environment variables.
        """,
    )

    parser.add_argument("operation", nargs="?", help="Operation to run")
    parser.add_argument("args", nargs="*", help="Operation arguments")

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose printing with details",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Version {__version__}",
        help="Display version and exit",
    )
    parser.add_argument(
        "--region",
        type=str,
        default=None,
        help="AWS region (default: us-west-2)",
    )
    parser.add_argument(
        "--elb",
        action="store_true",
        help="Print ELB information with a service listing",
    )
    parser.add_argument(
        "--cred",
        type=str,
        default=None,
        help="AWS credential profile name, or 'env' (or use ECSCREDENTIAL env var)",
    )
    parser.add_argument(
        "--events",
        type=int,
        default=None,
        help="Number of recent events to list for each service (default: 0)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (default: ./ecsman.toml)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging and progress messages",
    )
    return parser


def print_status(message: str) -> None:
    """Print a status message to stderr."""
    print(f"[ecsman] {message}", file=sys.stderr)


def read_config(config_arg: str | None) -> Config:
    """Load the configuration file, if there is one.

    An explicitly named file must exist; the default location is optional.
    """
    if config_arg:
        return load_config(Path(config_arg))
    config_path = get_default_config_path()
    if not config_path.exists():
        return Config()
    return load_config(config_path)


# Minimum argument count and the message shown when it is not met
REQUIRED_ARGUMENTS = {
    "register": (1, "Must specify JSON file describing the task to register."),
    "update": (3, "Must specify cluster name, service name, and image URL to update."),
    "check": (2, "Must specify cluster name and service name to check."),
    "run": (2, "Must specify a cluster name and the task name to run."),
}


def validate_arguments(operation: str, args: list[str]) -> None:
    """Check the operation and its argument count before touching AWS.

    Raises:
        UsageError: If the operation is unknown or arguments are missing
    """
    if operation not in OPERATIONS:
        raise UsageError(f"Unknown operation: {operation}")
    count, message = REQUIRED_ARGUMENTS.get(operation, (0, ""))
    if len(args) < count:
        raise UsageError(message)


def dispatch(app, operation: str, args: list[str], verbose: bool, events: int, elb: bool) -> None:
    """Run the requested operation on the app."""
    if operation == "ls":
        if not args:
            app.list_clusters()
            return
        service_name = args[1] if len(args) > 1 else ""
        load_balancers = app.print_services(
            args[0], service_name, verbose=verbose, events=events
        )
        if elb:
            app.print_load_balancers(load_balancers)
    elif operation == "register":
        app.register_task_definition(args[0])
    elif operation == "update":
        app.update_service(args[0], args[1], args[2])
    elif operation == "check":
        app.check_service(args[0], args[1], verbose=verbose)
    elif operation == "run":
        app.run_task(args[0], args[1])
    elif operation == "taskdefs":
        family = args[0] if args else ""
        revision = args[1] if len(args) > 1 else ""
        app.print_task_definitions(family, revision)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    setup_logging(args.verbose, args.debug)

    if not args.operation:
        parser.print_help()
        return 0

    try:
        config = read_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.events is not None and args.events < 0:
        print("--events must not be negative", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 1

    verbose = args.verbose or config.output.verbose
    events = args.events if args.events is not None else config.output.events
    context = RunContext(
        region=args.region or config.aws.region,
        profile=resolve_credential_profile(args.cred, default_profile=config.aws.profile),
    )

    if verbose:
        if context.uses_env_credentials:
            print("--> Running with credentials from environment variables\n")
        else:
            print(f"--> Running with credential profile {context.profile}\n")

    try:
        validate_arguments(args.operation, args.args)

        # Import here to avoid loading boto3 for --help
        from ecsman.app import ECSManApp

        app = ECSManApp(
            context, progress_callback=print_status if args.debug else None
        )
        dispatch(app, args.operation, args.args, verbose, events, args.elb)
        return 0
    except UsageError as e:
        print(e, file=sys.stderr)
        parser.print_help(sys.stderr)
        return 1
    except ECSManError as e:
        logging.debug("Command failed", exc_info=True)
        print(e, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
