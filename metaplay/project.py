"""A resolved Metaplay project and the files that describe it."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml

from metaplay.portal_types import EnvironmentInfo, ProjectInfo
from metaplay.project_config import CONFIG_FILE_NAME, ProjectConfig, ProjectEnvironmentConfig
from metaplay.validation import ValidationError, validate_project_config
from metaplay.versioning import MetaplayVersionMetadata, Version

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

_SDK_VERSION_LABEL = re.compile(r"LABEL\s+io\.metaplay\.sdk_version\s*=\s*([^\s\\]+)")

# Prerelease SDK versions of release 32 are accepted too.
_MIN_SUPPORTED_SDK_VERSION = Version.parse("32.0.0-aaaaa")

_REQUIRED_METADATA_FIELDS = (
    ("sdk_version", "sdkVersion is nil"),
    ("default_dotnet_runtime_version", "defaultDotnetRuntimeVersion is missing"),
    ("default_server_chart_version", "defaultServerChartVersion is nil"),
    ("default_bot_client_chart_version", "defaultBotClientChartVersion is nil"),
    ("min_infra_version", "minInfraVersion is nil"),
    ("min_server_chart_version", "minServerChartVersion is nil"),
    ("min_bot_client_chart_version", "minBotClientChartVersion is nil"),
    ("min_dotnet_sdk_version", "minDotnetSdkVersion is nil"),
    ("recommended_node_version", "nodeVersion is nil"),
    ("recommended_pnpm_version", "pnpmVersion is nil"),
)


def _join(*parts: str) -> str:
    joined = os.path.join(*(str(part) for part in parts))
    return os.path.normpath(joined) if joined else ""


def _to_slash(path: str) -> str:
    return str(path).replace(os.sep, "/")


class MetaplayProject:
    """A project: its config, its directory relative to the caller and its SDK metadata."""

    def __init__(
        self,
        relative_dir: PathLike,
        config: ProjectConfig,
        version_metadata: MetaplayVersionMetadata,
    ) -> None:
        relative_dir = os.fspath(relative_dir)
        if os.path.isabs(relative_dir):
            raise ValueError(f"projectDir must be relative, got '{relative_dir}'")
        self.relative_dir = relative_dir
        self.config = config
        self.version_metadata = version_metadata

    def uses_custom_dashboard(self) -> bool:
        return self.config.features.dashboard.use_custom

    def build_root_dir(self) -> str:
        return _join(self.relative_dir, self.config.build_root_dir)

    def sdk_root_dir(self) -> str:
        return _join(self.relative_dir, self.config.sdk_root_dir)

    def backend_dir(self) -> str:
        return _join(self.relative_dir, self.config.backend_dir)

    def shared_code_dir(self) -> str:
        return _join(self.relative_dir, self.config.shared_code_dir)

    def unity_project_dir(self) -> str:
        return _join(self.relative_dir, self.config.unity_project_dir)

    def server_dir(self) -> str:
        """The Backend/Server directory."""
        return _join(self.relative_dir, self.config.backend_dir, "Server")

    def bot_client_dir(self) -> str:
        return _join(self.relative_dir, self.config.backend_dir, "BotClient")

    def dashboard_dir(self) -> str:
        """The custom dashboard directory; only valid when a custom dashboard is used."""
        dashboard = self.config.features.dashboard
        if not dashboard.use_custom:
            raise RuntimeError(
                "Trying to access custom dashboard dir for a project that has no customized dashboard"
            )
        return _join(self.relative_dir, dashboard.root_dir)

    def server_values_files(self, env_config: ProjectEnvironmentConfig) -> list[str]:
        if env_config.server_values_file:
            return [_join(self.relative_dir, env_config.server_values_file)]
        return []

    def bot_client_values_files(self, env_config: ProjectEnvironmentConfig) -> list[str]:
        if env_config.bot_client_values_file:
            return [_join(self.relative_dir, env_config.bot_client_values_file)]
        return []


def load_project_config_file(project_dir: PathLike) -> ProjectConfig:
    """Load and validate metaplay-project.yaml from ``project_dir``."""
    project_dir = os.fspath(project_dir)
    os.stat(project_dir)
    if not os.path.isdir(project_dir):
        raise NotADirectoryError(f"the provided project path '{project_dir}' is not a directory")

    content = Path(project_dir, CONFIG_FILE_NAME).read_bytes()
    data = yaml.safe_load(content)
    if data is not None and not isinstance(data, dict):
        raise ValidationError(f"{CONFIG_FILE_NAME} must contain a mapping")
    config = ProjectConfig.from_dict(data or {})

    try:
        validate_project_config(project_dir, config)
    except ValidationError as exc:
        raise ValidationError(f"failed to validate metaplay-project.yaml: {exc}") from exc
    return config


def _extract_sdk_version_from_dockerfile(dockerfile_path: str) -> Version:
    try:
        content = Path(dockerfile_path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        raise ValidationError(
            "the sdkRootDir in your project's metaplay-project.yaml does not point to a valid MetaplaySDK directory"
        ) from None
    match = _SDK_VERSION_LABEL.search(content)
    if match is None:
        raise ValidationError("failed to extract SDK version from Dockerfile.server")
    return Version.parse(match.group(1).strip('"'))


def parse_version_metadata(content: Union[bytes, str]) -> MetaplayVersionMetadata:
    """Parse the contents of MetaplaySDK/version.yaml and check that every version is present."""
    data = yaml.safe_load(content)
    if data is not None and not isinstance(data, dict):
        raise ValidationError("MetaplaySDK/version.yaml must contain a mapping")
    metadata = MetaplayVersionMetadata.from_dict(data or {})
    for attribute, problem in _REQUIRED_METADATA_FIELDS:
        if not getattr(metadata, attribute):
            raise ValidationError(f"MetaplaySDK/version.yaml {problem}")
    return metadata


def load_sdk_version_metadata(sdk_root_dir: PathLike) -> MetaplayVersionMetadata:
    """Load MetaplaySDK/version.yaml, explaining the failure for SDKs that predate it."""
    sdk_root_dir = os.fspath(sdk_root_dir)
    version_file = os.path.join(sdk_root_dir, "version.yaml")
    log.debug("Read SDK version metadata from %s", version_file)
    try:
        content = Path(version_file).read_bytes()
    except OSError as read_error:
        sdk_version = _extract_sdk_version_from_dockerfile(os.path.join(sdk_root_dir, "Dockerfile.server"))
        if sdk_version < _MIN_SUPPORTED_SDK_VERSION:
            raise ValidationError(
                "minimum Metaplay SDK version supported by this CLI is Release 32, "
                f"your project is using {sdk_version}"
            ) from read_error
        raise ValidationError(f"failed to read Metaplay SDK version metadata: {read_error}") from read_error
    return parse_version_metadata(content)


def _render_environments(environments: Iterable[EnvironmentInfo]) -> str:
    return "".join(
        f"  - name: {env.name}\n"
        f"    humanId: {env.human_id}\n"
        f"    type: {str(env.type)}\n"
        f"    stackDomain: {env.stack_domain}\n"
        for env in environments
    )


def _render_project_file(
    project_id: str,
    sdk_root_dir: str,
    backend_dir: str,
    shared_code_dir: str,
    unity_project_dir: str,
    dotnet_runtime_version: str,
    server_chart_version: str,
    bot_client_chart_version: str,
    use_custom_dashboard: bool,
    custom_dashboard_path: str,
    environments: Iterable[EnvironmentInfo],
) -> str:
    return (
        "# Configure schema to use.\n"
        f"# yaml-language-server: $schema={sdk_root_dir}/projectConfigSchema.json\n"
        f'$schema: "{sdk_root_dir}/projectConfigSchema.json"\n'
        "\n"
        "# Configure project.\n"
        f"projectID: {project_id}\n"
        "buildRootDir: .\n"
        f"sdkRootDir: {sdk_root_dir}\n"
        f"backendDir: {backend_dir}\n"
        f"sharedCodeDir: {shared_code_dir}\n"
        f"unityProjectDir: {unity_project_dir}\n"
        "\n"
        "# Specify .NET runtime version to build project for, only '<major>.<minor>'.\n"
        f'dotnetRuntimeVersion: "{dotnet_runtime_version}"\n'
        "\n"
        "# Specify Helm chart versions to use for server and bot deployments.\n"
        f"serverChartVersion: {server_chart_version}\n"
        f"botClientChartVersion: {bot_client_chart_version}\n"
        "\n"
        "# Customize Metaplay features used in the game.\n"
        "features:\n"
        "  # Configure LiveOps Dashboard.\n"
        "  dashboard:\n"
        f"    useCustom: {'true' if use_custom_dashboard else 'false'}\n"
        f"    rootDir: {custom_dashboard_path}\n"
        "\n"
        "# Project environments.\n"
        "environments:\n"
        f"{_render_environments(environments)}"
    )


def generate_project_config_file(
    sdk_metadata: MetaplayVersionMetadata,
    root_path: PathLike,
    unity_project_path: str,
    sdk_path: str,
    shared_code_path: str,
    backend_path: str,
    custom_dashboard_path: str,
    project: ProjectInfo,
    environments: Iterable[EnvironmentInfo],
) -> ProjectConfig:
    """Write metaplay-project.yaml into ``root_path`` and return the config it describes."""
    text = _render_project_file(
        project_id=project.human_id,
        sdk_root_dir=_to_slash(sdk_path),
        backend_dir=_to_slash(backend_path),
        shared_code_dir=_to_slash(shared_code_path),
        unity_project_dir=_to_slash(unity_project_path),
        dotnet_runtime_version=sdk_metadata.default_dotnet_runtime_version,
        server_chart_version=str(sdk_metadata.default_server_chart_version),
        bot_client_chart_version=str(sdk_metadata.default_bot_client_chart_version),
        use_custom_dashboard=bool(custom_dashboard_path),
        custom_dashboard_path=_to_slash(custom_dashboard_path or ""),
        environments=list(environments),
    )

    try:
        data: Optional[Any] = yaml.safe_load(text)
        config = ProjectConfig.from_dict(data or {})
    except (yaml.YAMLError, ValueError) as exc:
        raise RuntimeError(
            f"Failed to parse generated Metaplay project file: {exc}\nFull YAML:\n{text}"
        ) from exc

    config_path = os.path.join(os.fspath(root_path), CONFIG_FILE_NAME)
    log.debug("Write project configuration to: %s", config_path)
    try:
        Path(config_path).write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OSError(f"failed to write project configuration file: {exc}") from exc
    return config