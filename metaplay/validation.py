"""Validation of project and environment IDs and of the project config."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

from metaplay.project_config import ENVIRONMENT_TYPE_TO_FAMILY, ProjectConfig
from metaplay.versioning import InvalidVersionError, Version

_PROJECT_SEGMENT = re.compile(r"[a-z]+")
_ENVIRONMENT_SEGMENT = re.compile(r"[a-z0-9]+")
_TOKEN_CHARS = re.compile(r"[a-zA-Z0-9_.-]+")


class ValidationError(ValueError):
    """A value or configuration failed validation."""


def validate_project_id(project_id: str) -> None:
    """Check a project ID: 2-3 dash-separated segments of lower-case letters."""
    if not project_id:
        raise ValidationError("project ID is empty")
    parts = project_id.split("-")
    if not 2 <= len(parts) <= 3:
        raise ValidationError(
            f"project ID must have 2-3 dash-separated segments, '{project_id}' has {len(parts)} segments"
        )
    for index, part in enumerate(parts, start=1):
        if not _PROJECT_SEGMENT.fullmatch(part):
            raise ValidationError(
                f"segment {index} ('{part}') in project ID contains invalid characters - "
                "only lower-case ASCII characters (a-z) are allowed"
            )


def validate_environment_id(environment_id: str) -> None:
    """Check an environment ID: 2-4 dash-separated segments of lower-case letters and digits."""
    if not environment_id:
        raise ValidationError("environment ID is empty")
    parts = environment_id.split("-")
    if not 2 <= len(parts) <= 4:
        raise ValidationError(
            f"environment ID must have 2-4 dash-separated segments, got {len(parts)} segments in '{environment_id}'"
        )
    for index, part in enumerate(parts, start=1):
        if not _ENVIRONMENT_SEGMENT.fullmatch(part):
            raise ValidationError(
                f"segment {index} ('{part}') in environment ID contains invalid characters - "
                "only lower-case ASCII alphanumeric characters (a-z, 0-9) are allowed"
            )


def is_valid_environment_type(env_type: Any) -> bool:
    """Whether ``env_type`` is one of the known environment types."""
    try:
        return env_type in ENVIRONMENT_TYPE_TO_FAMILY
    except TypeError:
        return False


def _host(netloc: str) -> str:
    return netloc.rpartition("@")[2]


def _validate_project_dir(project_dir: str, field_name: str, dir_value: str) -> None:
    if not dir_value:
        raise ValidationError(f"required field '{field_name}' is missing")
    if os.path.isabs(dir_value):
        raise ValidationError(
            f"field '{field_name}' ('{dir_value}') specifies an absolute path: all paths must be relative"
        )
    if not os.path.isdir(os.path.join(project_dir, dir_value)):
        raise ValidationError(
            f"field '{field_name}' ('{dir_value}') does not point to a valid directory "
            "(relative from metaplay-project.yaml)"
        )


def _validate_helm_chart_repository_url(chart_repo: str) -> None:
    if not chart_repo:
        return
    try:
        parsed = urlsplit(chart_repo)
    except ValueError as exc:
        raise ValidationError(f"invalid helmChartRepository URL: {exc}") from exc
    if parsed.scheme not in ("http", "https"):
        raise ValidationError(
            f"invalid helmChartRepository URL scheme: {parsed.scheme} (must be 'http' or 'https')"
        )
    if not _host(parsed.netloc):
        raise ValidationError("invalid helmChartRepository URL: host is empty")


def _validate_helm_chart_version(field_name: str, chart_version: str) -> None:
    if chart_version == "latest-prerelease":
        return
    try:
        Version.parse(chart_version)
    except InvalidVersionError as exc:
        raise ValidationError(f"invalid version string: {exc}") from exc


def _validate_helm_values_file(file_path: str) -> None:
    ext = os.path.splitext(file_path)[1]
    if ext not in (".yaml", ".yml"):
        raise ValidationError(f"file must have .yaml or .yml extension, got: {ext}")
    try:
        content = Path(file_path).read_bytes()
    except OSError as exc:
        raise ValidationError(f"unable to open file: {exc}") from exc
    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ValidationError(f"invalid YAML: {exc}") from exc
    if parsed is not None and not isinstance(parsed, dict):
        raise ValidationError(f"invalid YAML: expected a mapping, got {type(parsed).__name__}")


def _validate_auth_providers(config: ProjectConfig) -> None:
    for name, provider in config.auth_providers.items():
        if not provider.name:
            raise ValidationError(f"authProviders[{name}].name is required")
        if not provider.client_id:
            raise ValidationError(f"authProviders[{name}].clientId is required")

        endpoints = {
            "authEndpoint": provider.auth_endpoint,
            "tokenEndpoint": provider.token_endpoint,
            "userInfoEndpoint": provider.user_info_endpoint,
        }
        for endpoint_name, endpoint in endpoints.items():
            if not endpoint:
                raise ValidationError(f"authProviders[{name}].{endpoint_name} is required")
            try:
                parsed = urlsplit(endpoint)
            except ValueError as exc:
                raise ValidationError(
                    f"authProviders[{name}].{endpoint_name} is not a valid URL: {exc}"
                ) from exc
            if parsed.scheme not in ("http", "https"):
                raise ValidationError(f"authProviders[{name}].{endpoint_name} must use http or https scheme")
            if not _host(parsed.netloc):
                raise ValidationError(f"authProviders[{name}].{endpoint_name} must include a host")

        if not provider.scopes:
            raise ValidationError(f"authProviders[{name}].scopes are required")
        scopes = provider.scopes.split()
        if not scopes:
            raise ValidationError(f"authProviders[{name}].must specify at least one scope")
        for scope in scopes:
            if not _TOKEN_CHARS.fullmatch(scope):
                raise ValidationError(
                    f"invalid authProviders[{name}].scopes '{scope}': must contain only alphanumeric "
                    "characters, underscores, dots, and hyphens"
                )

        if not provider.audience:
            raise ValidationError(f"authProviders[{name}].audience is required")
        if not _TOKEN_CHARS.fullmatch(provider.audience):
            raise ValidationError(
                f"invalid authProviders[{name}].audience: must contain only alphanumeric characters, "
                "underscores, dots, and hyphens"
            )


def _validate_environments(project_dir: str, config: ProjectConfig) -> None:
    for index, env in enumerate(config.environments):
        env_name = env.name
        if not env.name:
            raise ValidationError(f"environment at index {index} did not specify required field 'name'")
        if not env.human_id:
            raise ValidationError(f"environment '{env_name}' did not specify required field 'humanId'")
        try:
            validate_environment_id(env.human_id)
        except ValidationError as exc:
            raise ValidationError(f"environment '{env_name}' specified invalid 'humanId': {exc}") from exc
        if not env.stack_domain:
            raise ValidationError(f"environment '{env_name}' did not specify required field 'stackDomain'")
        if not env.type:
            raise ValidationError(f"environment '{env_name}' did not specify required field 'type'")
        for field_name, values_file in (
            ("serverValuesFile", env.server_values_file),
            ("botclientValuesFile", env.bot_client_values_file),
        ):
            if not values_file:
                continue
            try:
                _validate_helm_values_file(os.path.join(project_dir, values_file))
            except ValidationError as exc:
                raise ValidationError(
                    f"environment '{env_name}' failed to validate '{field_name}': {exc}"
                ) from exc
        if env.auth_provider and env.auth_provider not in config.auth_providers:
            raise ValidationError(
                f"environment '{env_name}' specifies auth provider '{env.auth_provider}' "
                "which is not defined in authProviders"
            )


def validate_project_config(project_dir: str, config: ProjectConfig) -> None:
    """Check a loaded project config against the files under ``project_dir``."""
    project_dir = str(project_dir)
    if not config.project_human_id:
        raise ValidationError("missing required field 'projectID'")
    _validate_project_dir(project_dir, "buildRootDir", config.build_root_dir)
    _validate_project_dir(project_dir, "sdkRootDir", config.sdk_root_dir)
    _validate_project_dir(project_dir, "backendDir", config.backend_dir)
    _validate_project_dir(project_dir, "sharedCodeDir", config.shared_code_dir)
    _validate_project_dir(project_dir, "unityProjectDir", config.unity_project_dir)

    dotnet = config.dotnet_runtime_version
    if dotnet is None:
        raise ValidationError(
            "missing dotnetRuntimeVersion. Must specify the 'major.minor' for the .NET runtime "
            "framework to use, e.g., '9.0'."
        )
    segments = dotnet.segments()
    if segments[0] < 8:
        raise ValidationError(
            f"invalid dotnetRuntimeVersion ('{dotnet}'). Only versions 8.x or later are supported."
        )
    if segments[2] != 0:
        raise ValidationError(
            f"invalid dotnetRuntimeVersion ('{dotnet}'). Only specify 'major.minor' version, eg, '9.0'."
        )

    _validate_helm_chart_repository_url(config.helm_chart_repository)
    _validate_helm_chart_version("serverChartVersion", config.server_chart_version)
    _validate_helm_chart_version("botClientChartVersion", config.bot_client_chart_version)

    if config.auth_providers is None:
        config.auth_providers = {}
    _validate_auth_providers(config)

    dashboard = config.features.dashboard
    if dashboard.use_custom:
        if not dashboard.root_dir:
            raise ValidationError("when custom dashboard is used, rootDir must be specified")
        _validate_project_dir(project_dir, "features.dashboard.rootDir", dashboard.root_dir)

    _validate_environments(project_dir, config)