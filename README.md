# metaplay

A library for working with Metaplay game projects. It can:

- load and validate `metaplay-project.yaml` project configuration files,
- read and check the SDK version metadata (`MetaplaySDK/version.yaml`),
- write a fresh `metaplay-project.yaml` from portal project and environment data,
- call the Metaplay portal API: user state, contracts, organizations, projects,
  environments and SDK downloads,
- render terminal text in colour styles matched to the terminal.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `metaplay.project_config` | `ProjectConfig`, `ProjectEnvironmentConfig`, `AuthProviderConfig`, `DashboardFeatureConfig`, `ProjectFeaturesConfig`, `EnvironmentFamily` |
| `metaplay.validation` | `validate_project_id`, `validate_environment_id`, `validate_project_config`, `is_valid_environment_type`, `ValidationError` |
| `metaplay.project` | `MetaplayProject`, `load_project_config_file`, `parse_version_metadata`, `load_sdk_version_metadata`, `generate_project_config_file` |
| `metaplay.versioning` | `Version`, `InvalidVersionError`, `MetaplayVersionMetadata` |
| `metaplay.http_client` | `HttpClient`, `RequestError` |
| `metaplay.portal` | `PortalClient`, `PortalError` |
| `metaplay.portal_types` | `ProjectInfo`, `OrganizationWithProjects`, `EnvironmentInfo`, `SdkVersionInfo`, `UserState`, `UserProfile`, `UserCoreContract`, `ContractSignature`, `ProjectTier`, `SupportTier`, `EnvironmentType` |
| `metaplay.styles` | `Style`, `Palette`, `ColorLevel`, `detect_color_level`, `palette_for`, `render_*` helpers |

## Loading a project

```python
import os

from metaplay.project import MetaplayProject, load_project_config_file, load_sdk_version_metadata

project_dir = "."
config = load_project_config_file(project_dir)
metadata = load_sdk_version_metadata(os.path.join(project_dir, config.sdk_root_dir))
project = MetaplayProject(project_dir, config, metadata)

print(project.server_dir())
env = config.find_environment_config("develop")
print(env.kubernetes_namespace(), env.environment_family())
print(project.server_values_files(env))
```

`load_project_config_file` raises `metaplay.validation.ValidationError` when the
file breaks a rule, such as a missing directory, a .NET runtime version older
than 8 or with a patch number, a bad Helm chart version, an incomplete auth
provider or an invalid environment ID. `find_environment_config` matches an
environment by human ID, by human ID with the project ID prefixed, or by name,
and raises `LookupError` when nothing matches.

`load_sdk_version_metadata` reads `version.yaml` in the SDK directory. When that
file is missing it looks at the SDK version label in `Dockerfile.server` to tell
SDKs older than Release 32 apart, and raises `ValidationError` either way.

`MetaplayProject` requires a relative project directory and raises `ValueError`
for an absolute one.

## Validating identifiers

```python
from metaplay.validation import ValidationError, validate_environment_id, validate_project_id

validate_project_id("lovely-wombats")           # 2-3 segments of a-z
validate_environment_id("lovely-wombats-dev5")  # 2-4 segments of a-z and 0-9

try:
    validate_project_id("Lovely-Wombats")
except ValidationError as err:
    print(err)
```

## Versions

```python
from metaplay.versioning import Version

v = Version.parse("32.0.0-rc.1")
print(v.segments(), v < Version.parse("32.0.0"))  # [32, 0, 0] True
```

## Using the portal API

```python
from metaplay.http_client import HttpClient
from metaplay.portal import PortalClient

http = HttpClient("token", "https://portal.example.com", "1.0.0")
portal = PortalClient(http)

for project in portal.fetch_all_user_projects():
    print(project.human_id, project.name)

sdk_zip = portal.download_latest_sdk(".")
```

`HttpClient` sends the access token as a bearer token and an
`X-Application-Name: MetaplayCLI/<version>` header. Failed requests and
non-2xx responses raise `metaplay.http_client.RequestError`; portal-level
problems raise `metaplay.portal.PortalError`, which carries the HTTP status
code when there is one. SDK downloads are written to a randomly named
`metaplay-sdk-XXXXXXXX.zip` in the target directory.

## Styled output

```python
from metaplay.styles import render_error, render_success

print(render_success("Deployment finished"))
print(render_error("Something went wrong"))
```

The colour level is detected once, on import, from standard output and the
`FORCE_COLOR`, `NO_COLOR`, `TERM` and `COLORTERM` environment variables: true
colour, 256 colours, basic 16 colours, or none (text is then left unstyled).

## What this package does not do

It is a library only: it has no command-line tool. It does not log in to the
portal or obtain access tokens — you pass a token to `HttpClient` yourself — and
it does not build, push or deploy game servers.