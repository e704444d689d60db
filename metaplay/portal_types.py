"""Data types exchanged with the Metaplay portal."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, TypeVar, Union

_E = TypeVar("_E", bound=enum.Enum)


class _StrEnum(str, enum.Enum):
    def __str__(self) -> str:
        return str(self.value)


class ProjectTier(_StrEnum):
    FREE = "free"
    PRE_LAUNCH = "pre-launch"
    PRODUCTION = "production"
    PRIVATE_CLOUD = "private-cloud"


class SupportTier(_StrEnum):
    COMMUNITY = "community"
    NEXT_BUSINESS_DAY = "next-business-day"
    TWENTY_FOUR_SEVEN = "24-7"
    TAILORED = "tailored"
    INTERNAL_TESTING = "testing-internal-only"


class EnvironmentType(_StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def _coerce(enum_cls: type[_E], value: Any) -> Union[_E, str]:
    """Return the enum member for ``value``, or the raw string if it is unknown."""
    try:
        return enum_cls(value)
    except ValueError:
        return "" if value is None else str(value)


@dataclass
class ProjectInfo:
    """A project as described by the portal."""

    uuid: str = ""
    organization_uuid: str = ""
    human_id: str = ""
    name: str = ""
    created_at: str = ""
    max_dev_envs: int = 0
    max_prod_envs: int = 0
    max_staging_envs: int = 0
    support_tier: Union[SupportTier, str] = ""
    type: Union[ProjectTier, str] = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectInfo":
        return cls(
            uuid=data.get("id", ""),
            organization_uuid=data.get("organization_id", ""),
            human_id=data.get("human_id", ""),
            name=data.get("name", ""),
            created_at=data.get("created_at", ""),
            max_dev_envs=int(data.get("max_dev_envs") or 0),
            max_prod_envs=int(data.get("max_prod_envs") or 0),
            max_staging_envs=int(data.get("max_staging_envs") or 0),
            support_tier=_coerce(SupportTier, data.get("support_tier", "")),
            type=_coerce(ProjectTier, data.get("type", "")),
        )


@dataclass
class OrganizationWithProjects:
    """An organization together with the projects the user can access in it."""

    uuid: str = ""
    name: str = ""
    created_at: str = ""
    role: str = ""
    projects: list[ProjectInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrganizationWithProjects":
        return cls(
            uuid=data.get("id", ""),
            name=data.get("name", ""),
            created_at=data.get("created_at", ""),
            role=data.get("role", ""),
            projects=[ProjectInfo.from_dict(item) for item in data.get("projects") or []],
        )


@dataclass
class EnvironmentInfo:
    """An environment as described by the portal."""

    uid: str = ""
    project_uid: str = ""
    name: str = ""
    url: str = ""
    created_at: str = ""
    type: Union[EnvironmentType, str] = ""
    human_id: str = ""
    env_domain: str = ""
    stack_domain: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnvironmentInfo":
        return cls(
            uid=data.get("id", ""),
            project_uid=data.get("project_id", ""),
            name=data.get("name", ""),
            url=data.get("url", ""),
            created_at=data.get("created_at", ""),
            type=_coerce(EnvironmentType, data.get("type", "")),
            human_id=data.get("human_id", ""),
            env_domain=data.get("env_domain", ""),
            stack_domain=data.get("stack_domain", ""),
        )


@dataclass
class SdkVersionInfo:
    """A downloadable SDK release."""

    id: str = ""
    version: str = ""
    name: str = ""
    description: Optional[str] = None
    is_public: bool = False
    is_test_asset: bool = False
    release_date: Optional[str] = None
    release_notes_url: Optional[str] = None
    storage_path: Optional[str] = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SdkVersionInfo":
        return cls(
            id=data.get("id", ""),
            version=data.get("version", ""),
            name=data.get("name", ""),
            description=data.get("description"),
            is_public=bool(data.get("is_public", False)),
            is_test_asset=bool(data.get("is_test_asset", False)),
            release_date=data.get("release_date"),
            release_notes_url=data.get("release_notes_url"),
            storage_path=data.get("storage_path"),
            created_at=data.get("created_at", ""),
        )


@dataclass
class UserProfile:
    """The user's portal profile."""

    user_id: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProfile":
        return cls(user_id=data.get("id", ""))


@dataclass
class ContractSignature:
    """The user's signature on a contract."""

    id: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContractSignature":
        return cls(id=data.get("id", ""), created_at=data.get("created_at", ""))


@dataclass
class UserCoreContract:
    """A contract and whether the user has signed it."""

    changes: Optional[str] = None
    created_at: str = ""
    description: str = ""
    id: str = ""
    name: str = ""
    organization_id: Optional[str] = None
    type: str = ""
    uri: str = ""
    uri_type: str = ""
    user_id: Optional[str] = None
    version: str = ""
    contract_signature: Optional[ContractSignature] = None

    @property
    def is_signed(self) -> bool:
        return self.contract_signature is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserCoreContract":
        signature = data.get("contract_signature")
        return cls(
            changes=data.get("changes"),
            created_at=data.get("created_at", ""),
            description=data.get("description", ""),
            id=data.get("id", ""),
            name=data.get("name", ""),
            organization_id=data.get("organization_id"),
            type=data.get("type", ""),
            uri=data.get("uri", ""),
            uri_type=data.get("uri_type", ""),
            user_id=data.get("user_id"),
            version=data.get("version", ""),
            contract_signature=ContractSignature.from_dict(signature) if signature is not None else None,
        )


@dataclass
class UserState:
    """The user's profile and the status of their contracts."""

    user: UserProfile = field(default_factory=UserProfile)
    privacy_policy: UserCoreContract = field(default_factory=UserCoreContract)
    terms_and_conditions: UserCoreContract = field(default_factory=UserCoreContract)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserState":
        contracts = data.get("contracts") or {}
        return cls(
            user=UserProfile.from_dict(data.get("user") or {}),
            privacy_policy=UserCoreContract.from_dict(contracts.get("privacyPolicy") or {}),
            terms_and_conditions=UserCoreContract.from_dict(contracts.get("termsAndConditions") or {}),
        )