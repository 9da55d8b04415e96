"""Configuration loading and run context for ecsman."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_REGION = "us-west-2"
DEFAULT_PROFILE = "default"

# Environment variable naming the credential profile to use
CREDENTIAL_ENV_VAR = "ECSCREDENTIAL"

# --cred value meaning "use credentials from the environment"
ENV_CREDENTIALS = "env"


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


@dataclass
class AWSConfig:
    """AWS connection settings."""

    region: str = DEFAULT_REGION
    profile: str = DEFAULT_PROFILE


@dataclass
class OutputConfig:
    """Output defaults."""

    events: int = 0
    verbose: bool = False


@dataclass
class Config:
    """Application configuration."""

    aws: AWSConfig = field(default_factory=AWSConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


@dataclass
class RunContext:
    """Region and credentials for a single command invocation.

    A profile of None means credentials come from the environment
    (AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY and the rest of boto3's chain).
    """

    region: str
    profile: str | None

    @property
    def uses_env_credentials(self) -> bool:
        return self.profile is None


def get_default_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        ./ecsman.toml if it exists, otherwise ~/.config/ecsman/config.toml
    """
    local_config = Path("./ecsman.toml")
    if local_config.exists():
        return local_config
    return Path.home() / ".config" / "ecsman" / "config.toml"


def load_config(config_path: Path) -> Config:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Parsed configuration

    Raises:
        ConfigError: If the file is missing or contains invalid values
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    aws_data = data.get("aws", {})
    output_data = data.get("output", {})
    if not isinstance(aws_data, dict):
        raise ConfigError("[aws] must be a table")
    if not isinstance(output_data, dict):
        raise ConfigError("[output] must be a table")

    region = aws_data.get("region", DEFAULT_REGION)
    if not isinstance(region, str) or not region:
        raise ConfigError("aws.region must be a non-empty string")

    profile = aws_data.get("profile", DEFAULT_PROFILE)
    if not isinstance(profile, str) or not profile:
        raise ConfigError("aws.profile must be a non-empty string")

    events = output_data.get("events", 0)
    # bool is a subclass of int
    if isinstance(events, bool) or not isinstance(events, int) or events < 0:
        raise ConfigError("output.events must be a non-negative integer")

    verbose = output_data.get("verbose", False)
    if not isinstance(verbose, bool):
        raise ConfigError("output.verbose must be true or false")

    return Config(
        aws=AWSConfig(region=region, profile=profile),
        output=OutputConfig(events=events, verbose=verbose),
    )


def resolve_credential_profile(
    cred_flag: str | None,
    environ: dict[str, str] | None = None,
    default_profile: str = DEFAULT_PROFILE,
) -> str | None:
    """Pick the credential profile to use.

    Precedence: --cred flag, then the ECSCREDENTIAL environment variable,
    then the configured default. A --cred value of "env" selects environment
    credentials and returns None.

    Args:
        cred_flag: Value of --cred, or None/empty if not given
        environ: Environment mapping (defaults to os.environ)
        default_profile: Profile used when nothing else is specified

    Returns:
        Profile name, or None for environment credentials
    """
    if environ is None:
        environ = dict(os.environ)

    if cred_flag:
        if cred_flag == ENV_CREDENTIALS:
            return None
        return cred_flag

    env_profile = environ.get(CREDENTIAL_ENV_VAR, "")
    if env_profile:
        return env_profile
    return default_profile
