# ABOUTME: Resolves stack settings from CLI options and saved profiles
# ABOUTME: Parses KEY=VALUE parameters and YAML/JSON parameter files

"""Helpers that turn command options into stack settings."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from cfn_runner.cli.utils.aws import get_current_region
from cfn_runner.config import Config, Profile


class SettingsError(Exception):
    """Invalid or missing command settings."""


@dataclass
class StackSettings:
    """Effective settings for one command invocation."""

    stack_name: str
    region: str
    aws_profile: str | None = None
    template: str | None = None
    parameters: dict[str, str] = field(default_factory=dict)
    profile: Profile | None = None


def parse_parameters(params: list[str]) -> dict[str, str]:
    """Convert ["Key1=Value1", "Key2=Value2"] into a dict.

    Raises:
        SettingsError: If an entry has no '=' or an empty key.
    """
    result = {}
    for param in params or []:
        key, sep, value = param.partition("=")
        if not sep or not key.strip():
            raise SettingsError(f"Invalid parameter '{param}'. Expected KEY=VALUE.")
        result[key.strip()] = value
    return result


def load_parameters_file(path: str) -> dict[str, str]:
    """Load parameters from a YAML or JSON file.

    Accepts a plain mapping or the CloudFormation CLI list format
    (``[{"ParameterKey": ..., "ParameterValue": ...}]``).
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SettingsError(f"Parameters file not found: {path}")

    with open(file_path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if isinstance(data, dict):
        return {str(k): str(v) for k, v in data.items()}
    if isinstance(data, list):
        try:
            return {str(item["ParameterKey"]): str(item["ParameterValue"]) for item in data}
        except (KeyError, TypeError) as e:
            raise SettingsError(f"Invalid parameter entry in {path}: {e}") from e
    raise SettingsError(f"Parameters file {path} must contain a mapping or a list")


def resolve_settings(
    config: Config,
    stack_name: str | None,
    profile_name: str | None = None,
    region: str | None = None,
    aws_profile: str | None = None,
    template: str | None = None,
) -> StackSettings:
    """Merge explicit options over a saved profile.

    The named profile is used when given. Otherwise the active profile is used
    only when no stack name was passed on the command line.
    """
    profile = None
    if profile_name:
        profile = config.get_profile(profile_name)
        if not profile:
            raise SettingsError(f"Profile '{profile_name}' not found.")
    elif not stack_name and config.active_profile:
        profile = config.get_profile()

    stack_name = stack_name or (profile.stack_name if profile else None)
    if not stack_name:
        raise SettingsError("No stack name given and no active profile set.")

    aws_profile = aws_profile or (profile.aws_profile if profile else None)
    region = region or (profile.aws_region if profile else None) or get_current_region(aws_profile)

    return StackSettings(
        stack_name=stack_name,
        region=region,
        aws_profile=aws_profile,
        template=template or (profile.template if profile else None),
        parameters=dict(profile.parameters) if profile else {},
        profile=profile,
    )
