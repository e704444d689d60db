"""Client for the Metaplay portal API."""

from __future__ import annotations

import logging
import os
import secrets
from typing import Any, Callable, Optional, TypeVar

from metaplay.http_client import HttpClient, RequestError
from metaplay.portal_types import (
    EnvironmentInfo,
    OrganizationWithProjects,
    ProjectInfo,
    SdkVersionInfo,
    UserState,
)

log = logging.getLogger(__name__)

_T = TypeVar("_T")


class PortalError(Exception):
    """A portal request failed or returned something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _list_of(payload: Any, factory: Callable[[Any], _T], what: str) -> list[_T]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise PortalError(f"unexpected response for {what}: expected a list")
    return [factory(item) for item in payload]


def _object(payload: Any, what: str) -> dict:
    if not isinstance(payload, dict):
        raise PortalError(f"unexpected response for {what}: expected an object")
    return payload


class PortalClient:
    """Access to the portal's user, project, environment and SDK endpoints."""

    def __init__(self, http_client: HttpClient) -> None:
        self.http_client = http_client

    def get_user_state(self) -> UserState:
        """Fetch the user's profile and contract signature status."""
        payload = self.http_client.get("/api/v1/users/me")
        return UserState.from_dict(_object(payload, "user state"))

    def agree_to_contract(self, contract_id: str) -> None:
        """Record that the user agreed to the given contract."""
        try:
            self.http_client.put("/api/v1/contract_signatures", {"contract_id": contract_id})
        except RequestError as exc:
            raise PortalError(
                f"failed to agree to general terms and conditions: {exc}", exc.status_code
            ) from exc

    def download_sdk_by_version_id(self, target_dir: str, version_id: str) -> str:
        """Download the SDK release into a temporary zip in ``target_dir`` and return its path."""
        if not version_id:
            raise PortalError("version ID is required")

        path = f"/api/v1/sdk/{version_id}/download"
        tmp_name = f"metaplay-sdk-{secrets.randbits(32):08x}.zip"
        tmp_zip_path = os.path.join(os.fspath(target_dir), tmp_name)
        try:
            response = self.http_client.download(path, tmp_zip_path)
        except RequestError as exc:
            raise PortalError(f"failed to download SDK: {exc}") from exc

        status = response.status_code
        if status >= 400:
            if status == 403:
                raise PortalError(
                    "you must agree to the SDK terms and conditions in the Metaplay portal first",
                    status,
                )
            raise PortalError(
                f"failed to download the Metaplay SDK from the portal with status code {status}",
                status,
            )

        log.debug("Downloaded SDK to %s", tmp_zip_path)
        return tmp_zip_path

    def fetch_user_orgs_and_projects(self) -> list[OrganizationWithProjects]:
        """Fetch the organizations the user belongs to, with their accessible projects."""
        try:
            payload = self.http_client.get("/api/v1/organizations/user-organizations")
        except RequestError as exc:
            raise PortalError(
                f"failed to list user's organizations and projects: {exc}", exc.status_code
            ) from exc
        return _list_of(payload, OrganizationWithProjects.from_dict, "organizations")

    def fetch_all_user_projects(self) -> list[ProjectInfo]:
        """All projects the user can access, across organizations."""
        return [
            project
            for org in self.fetch_user_orgs_and_projects()
            for project in org.projects
        ]

    def fetch_project_info(self, project_human_id: str) -> ProjectInfo:
        """Fetch a project by its human ID."""
        try:
            payload = self.http_client.get(f"/api/v1/projects?human_id={project_human_id}")
        except RequestError as exc:
            raise PortalError(f"failed to fetch environment details: {exc}", exc.status_code) from exc

        projects = _list_of(payload, ProjectInfo.from_dict, "projects")
        log.debug("Project info response from portal: %r", projects)
        if not projects:
            raise PortalError(
                f"no project with ID {project_human_id} found in the Metaplay portal. "
                "Are you sure it's correct and you have access?"
            )
        if len(projects) > 2:
            raise PortalError(
                f"portal returned {len(projects)} matching projects, expecting only one"
            )
        return projects[0]

    def fetch_project_environments(self, project_uuid: str) -> list[EnvironmentInfo]:
        """Fetch all environments of the project with the given UUID."""
        url = f"/api/v1/environments?projectId={project_uuid}"
        log.debug("Fetch project environments by UUID from %s%s", self.http_client.base_url, url)
        try:
            payload = self.http_client.get(url)
        except RequestError as exc:
            raise PortalError(f"failed to fetch environment details: {exc}", exc.status_code) from exc
        environments = _list_of(payload, EnvironmentInfo.from_dict, "environments")
        log.debug("Environments info response from portal: %r", environments)
        return environments

    def fetch_environment_info_by_human_id(self, human_id: str) -> EnvironmentInfo:
        """Fetch a single environment by its human ID."""
        url = f"/api/v1/environments?human_id={human_id}"
        log.debug("Fetch environment by human ID from %s%s", self.http_client.base_url, url)
        try:
            payload = self.http_client.get(url)
        except RequestError as exc:
            raise PortalError(
                f"failed to fetch environment details from portal: {exc}", exc.status_code
            ) from exc

        environments = _list_of(payload, EnvironmentInfo.from_dict, "environments")
        if not environments:
            raise PortalError("failed to fetch environment details from portal: no such environment")
        if len(environments) > 1:
            raise PortalError(
                "failed to fetch environment details from portal: multiple results returned"
            )
        return environments[0]

    def get_latest_sdk_version_info(self) -> SdkVersionInfo:
        """Information about the latest SDK release."""
        try:
            payload = self.http_client.get("/api/v1/sdk/latest")
        except RequestError as exc:
            raise PortalError(
                f"failed to get latest SDK version info: {exc}", exc.status_code
            ) from exc
        return SdkVersionInfo.from_dict(_object(payload, "latest SDK version"))

    def get_sdk_versions(self) -> list[SdkVersionInfo]:
        """All available SDK releases."""
        try:
            payload = self.http_client.get("/api/v1/sdk")
        except RequestError as exc:
            raise PortalError(f"failed to get SDK versions: {exc}", exc.status_code) from exc
        return _list_of(payload, SdkVersionInfo.from_dict, "SDK versions")

    def find_sdk_version_by_version_or_name(self, version_or_name: str) -> Optional[SdkVersionInfo]:
        """Find a release by exact version, then by name; None when nothing matches."""
        versions = self.get_sdk_versions()

        for info in versions:
            if info.version == version_or_name:
                if info.storage_path is None:
                    raise PortalError(
                        f"SDK version '{version_or_name}' found but it has no downloadable file"
                    )
                return info

        for info in versions:
            if info.name == version_or_name:
                if info.storage_path is None:
                    raise PortalError(
                        f"SDK version with name '{version_or_name}' found but it has no downloadable file"
                    )
                return info

        return None

    def download_latest_sdk(self, target_dir: str) -> str:
        """Download the latest SDK release into ``target_dir`` and return the zip path."""
        latest = self.get_latest_sdk_version_info()
        if latest.storage_path is None:
            raise PortalError("latest SDK version does not have a downloadable file")
        return self.download_sdk_by_version_id(target_dir, latest.id)