"""The project configuration file (metaplay-project.yaml) and its environments."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from metaplay.portal_types import EnvironmentType
from metaplay.versioning import Version

CONFIG_FILE_NAME = "metaplay-project.yaml"


class EnvironmentFamily(str, enum.Enum):
    """Environment family as given to Helm and the game server."""

    DEVELOPMENT = "Development"
    STAGING = "Staging"
    PRODUCTION = "Production"

    def __str__(self) -> str:
        return str(self.value)


ENVIRONMENT_TYPE_TO_FAMILY = {
    EnvironmentType.DEVELOPMENT: EnvironmentFamily.DEVELOPMENT,
    EnvironmentType.STAGING: EnvironmentFamily.STAGING,
    EnvironmentType.PRODUCTION: EnvironmentFamily.PRODUCTION,
}

# Runtime options file included in addition to Options.base.yaml.
ENVIRONMENT_TYPE_TO_RUNTIME_OPTIONS_FILE = {
    EnvironmentType.DEVELOPMENT: "./Config/Options.dev.yaml",
    EnvironmentType.STAGING: "./Config/Options.staging.yaml",
    EnvironmentType.PRODUCTION: "./Config/Options.production.yaml",
}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _environment_type(value: Any) -> Union[EnvironmentType, str]:
    try:
        return EnvironmentType(value)
    except ValueError:
        return _text(value)


def _optional_version(value: Any) -> Optional[Version]:
    if value is None:
        return None
    if isinstance(value, Version):
        return value
    return Version.parse(str(value))


@dataclass
class DashboardFeatureConfig:
    """The ``features.dashboard`` section."""

    use_custom: bool = False
    root_dir: str = ""


@dataclass
class ProjectFeaturesConfig:
    """The ``features`` section."""

    dashboard: DashboardFeatureConfig = field(default_factory=DashboardFeatureConfig)


@dataclass
class AuthProviderConfig:
    """A custom authentication provider declared in the project config."""

    name: str = ""
    client_id: str = ""
    auth_endpoint: str = ""
    token_endpoint: str = ""
    user_info_endpoint: str = ""
    scopes: str = ""
    audience: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuthProviderConfig":
        data = data or {}
        return cls(
            name=_text(data.get("name")),
            client_id=_text(data.get("clientId")),
            auth_endpoint=_text(data.get("authEndpoint")),
            token_endpoint=_text(data.get("tokenEndpoint")),
            user_info_endpoint=_text(data.get("userInfoEndpoint")),
            scopes=_text(data.get("scopes")),
            audience=_text(data.get("audience")),
        )


@dataclass
class ProjectEnvironmentConfig:
    """Per-environment settings from the project config."""

    name: str = ""
    human_id: str = ""
    type: Union[EnvironmentType, str] = ""
    stack_domain: str = ""
    server_values_file: str = ""
    bot_client_values_file: str = ""
    auth_provider: str = ""

    def kubernetes_namespace(self) -> str:
        """The Kubernetes namespace of the environment, which is its human ID."""
        return self.human_id

    def environment_family(self) -> EnvironmentFamily:
        """The environment family matching the environment type."""
        try:
            return ENVIRONMENT_TYPE_TO_FAMILY[self.type]
        except KeyError:
            raise ValueError(f"Invalid EnvironmentType: {self.type}") from None

    def runtime_options_file(self) -> str:
        """The type-specific runtime options file to include in the Helm values."""
        try:
            return ENVIRONMENT_TYPE_TO_RUNTIME_OPTIONS_FILE[self.type]
        except KeyError:
            raise ValueError(f"Invalid EnvironmentType: {self.type}") from None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectEnvironmentConfig":
        data = data or {}
        return cls(
            name=_text(data.get("name")),
            human_id=_text(data.get("humanId")),
            type=_environment_type(data.get("type")),
            stack_domain=_text(data.get("stackDomain")),
            server_values_file=_text(data.get("serverValuesFile")),
            bot_client_values_file=_text(data.get("botclientValuesFile")),
            auth_provider=_text(data.get("authProvider")),
        )


@dataclass
class ProjectConfig:
    """Contents of metaplay-project.yaml."""

    project_human_id: str = ""
    build_root_dir: str = ""
    sdk_root_dir: str = ""
    backend_dir: str = ""
    shared_code_dir: str = ""
    unity_project_dir: str = ""
    dotnet_runtime_version: Optional[Version] = None
    helm_chart_repository: str = ""
    server_chart_version: str = ""
    bot_client_chart_version: str = ""
    auth_providers: dict[str, AuthProviderConfig] = field(default_factory=dict)
    features: ProjectFeaturesConfig = field(default_factory=ProjectFeaturesConfig)
    environments: list[ProjectEnvironmentConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectConfig":
        """Build from the parsed YAML mapping; a malformed .NET version raises."""
        data = data or {}
        features = data.get("features") or {}
        dashboard = features.get("dashboard") or {}
        providers = data.get("authProviders") or {}
        return cls(
            project_human_id=_text(data.get("projectID")),
            build_root_dir=_text(data.get("buildRootDir")),
            sdk_root_dir=_text(data.get("sdkRootDir")),
            backend_dir=_text(data.get("backendDir")),
            shared_code_dir=_text(data.get("sharedCodeDir")),
            unity_project_dir=_text(data.get("unityProjectDir")),
            dotnet_runtime_version=_optional_version(data.get("dotnetRuntimeVersion")),
            helm_chart_repository=_text(data.get("helmChartRepository")),
            server_chart_version=_text(data.get("serverChartVersion")),
            bot_client_chart_version=_text(data.get("botClientChartVersion")),
            auth_providers={
                str(key): AuthProviderConfig.from_dict(value) for key, value in providers.items()
            },
            features=ProjectFeaturesConfig(
                dashboard=DashboardFeatureConfig(
                    use_custom=bool(dashboard.get("useCustom", False)),
                    root_dir=_text(dashboard.get("rootDir")),
                )
            ),
            environments=[
                ProjectEnvironmentConfig.from_dict(item) for item in data.get("environments") or []
            ],
        )

    def find_environment_config(self, environment: str) -> ProjectEnvironmentConfig:
        """Find the first environment matching by human ID, project-suffixed ID or name."""
        suffixed = f"{self.project_human_id}-{environment}"
        for env_config in self.environments:
            if environment in (env_config.human_id, env_config.name) or env_config.human_id == suffixed:
                return env_config
        raise LookupError(
            f"no environment matching '{environment}' found in project config. "
            f"The valid environments are: {', '.join(self.environment_ids())}"
        )

    def get_environment_by_human_id(self, human_id: str) -> ProjectEnvironmentConfig:
        """Return the environment with exactly this human ID."""
        for env_config in self.environments:
            if env_config.human_id == human_id:
                return env_config
        raise LookupError(f"no environment with humanID '{human_id}' found")

    def environment_ids(self) -> list[str]:
        """Human IDs of all environments, in file order."""
        return [env_config.human_id for env_config in self.environments]