"""Version numbers and the SDK version metadata file."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

_VERSION_RE = re.compile(
    r"^v?(?P<core>[0-9]+(?:\.[0-9]+)*?)"
    r"(?:-(?P<pre1>[0-9]+[0-9A-Za-z\-~]*(?:\.[0-9A-Za-z\-~]+)*)"
    r"|(?:-?(?P<pre2>[A-Za-z\-~]+[0-9A-Za-z\-~]*(?:\.[0-9A-Za-z\-~]+)*)))?"
    r"(?:\+(?P<meta>[0-9A-Za-z\-~]+(?:\.[0-9A-Za-z\-~]+)*))?$"
)


class InvalidVersionError(ValueError):
    """A string could not be parsed as a version."""


def _compare_part(left: str, right: str) -> int:
    if left == right:
        return 0
    left_numeric = left.isdigit()
    right_numeric = right.isdigit()
    if left == "":
        return -1 if right_numeric else 1
    if right == "":
        return 1 if left_numeric else -1
    if left_numeric and not right_numeric:
        return -1
    if not left_numeric and right_numeric:
        return 1
    if not left_numeric and not right_numeric:
        return 1 if left > right else -1
    return 1 if int(left) > int(right) else -1


def _compare_prereleases(left: str, right: str) -> int:
    if left == right:
        return 0
    left_parts = left.split(".")
    right_parts = right.split(".")
    for index in range(max(len(left_parts), len(right_parts))):
        lhs = left_parts[index] if index < len(left_parts) else ""
        rhs = right_parts[index] if index < len(right_parts) else ""
        result = _compare_part(lhs, rhs)
        if result:
            return result
    return 0


@functools.total_ordering
class Version:
    """A dotted version number with optional prerelease and build metadata."""

    __slots__ = ("_segments", "prerelease", "metadata", "original")

    def __init__(self, segments: tuple[int, ...], prerelease: str = "", metadata: str = "", original: str = ""):
        padded = tuple(segments) + (0,) * max(0, 3 - len(segments))
        self._segments = padded
        self.prerelease = prerelease
        self.metadata = metadata
        self.original = original or self._format()

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse ``text`` such as "9.0", "v1.2.3" or "32.0.0-rc.1+build"."""
        if not isinstance(text, str):
            raise InvalidVersionError(f"malformed version: {text!r}")
        match = _VERSION_RE.match(text)
        if match is None:
            raise InvalidVersionError(f"malformed version: {text}")
        segments = tuple(int(part) for part in match["core"].split("."))
        prerelease = match["pre1"] or match["pre2"] or ""
        return cls(segments, prerelease, match["meta"] or "", text)

    def segments(self) -> list[int]:
        """Return the numeric segments, padded to at least three."""
        return list(self._segments)

    def _compare(self, other: "Version") -> int:
        length = max(len(self._segments), len(other._segments))
        lhs = self._segments + (0,) * (length - len(self._segments))
        rhs = other._segments + (0,) * (length - len(other._segments))
        if lhs != rhs:
            return -1 if lhs < rhs else 1
        if self.prerelease == other.prerelease:
            return 0
        if not self.prerelease:
            return 1
        if not other.prerelease:
            return -1
        return _compare_prereleases(self.prerelease, other.prerelease)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __hash__(self) -> int:
        trimmed = list(self._segments)
        while trimmed and trimmed[-1] == 0:
            trimmed.pop()
        return hash((tuple(trimmed), self.prerelease))

    def _format(self) -> str:
        text = ".".join(str(segment) for segment in self._segments)
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.metadata:
            text += f"+{self.metadata}"
        return text

    def __str__(self) -> str:
        return self._format()

    def __repr__(self) -> str:
        return f"Version({self._format()!r})"


def _version_or_none(value: Any) -> Optional[Version]:
    if value is None:
        return None
    if isinstance(value, Version):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    return Version.parse(value)


@dataclass
class MetaplayVersionMetadata:
    """Contents of the SDK's version.yaml."""

    sdk_version: Optional[Version] = None
    default_dotnet_runtime_version: str = ""
    default_server_chart_version: Optional[Version] = None
    default_bot_client_chart_version: Optional[Version] = None
    min_infra_version: Optional[Version] = None
    min_server_chart_version: Optional[Version] = None
    min_bot_client_chart_version: Optional[Version] = None
    min_dotnet_sdk_version: Optional[Version] = None
    recommended_node_version: Optional[Version] = None
    recommended_pnpm_version: Optional[Version] = None

    _KEYS = {
        "sdk_version": "sdkVersion",
        "default_dotnet_runtime_version": "defaultDotnetRuntimeVersion",
        "default_server_chart_version": "defaultServerChartVersion",
        "default_bot_client_chart_version": "defaultBotClientChartVersion",
        "min_infra_version": "minInfraVersion",
        "min_server_chart_version": "minServerChartVersion",
        "min_bot_client_chart_version": "minBotClientChartVersion",
        "min_dotnet_sdk_version": "minDotnetSdkVersion",
        "recommended_node_version": "nodeVersion",
        "recommended_pnpm_version": "pnpmVersion",
    }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MetaplayVersionMetadata":
        """Build from the parsed YAML mapping; version fields are parsed, missing ones stay None."""
        values: dict[str, Any] = {}
        for item in fields(cls):
            raw = data.get(cls._KEYS[item.name])
            if item.name == "default_dotnet_runtime_version":
                values[item.name] = "" if raw is None else str(raw)
            else:
                values[item.name] = _version_or_none(raw)
        return cls(**values)