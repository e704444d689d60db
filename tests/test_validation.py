import pytest

from metaplay.project_config import ProjectConfig
from metaplay.validation import (
    ValidationError,
    is_valid_environment_type,
    validate_environment_id,
    validate_project_config,
    validate_project_id,
)

PROJECT_ID_CASES = [
    ("env-abc", True),
    ("abc-def-ghi", True),
    ("a-b", True),
    ("a-b-c", True),
    ("abc-def", True),
    ("foo-bar", True),
    ("xyz-abc-def", True),
    ("env-123", False),
    ("env-abc-123", False),
    ("123-abc", False),
    ("abc-123-def", False),
    ("", False),
    ("env", False),
    ("env-123-456-789", False),
    ("-", False),
    ("env-", False),
    ("-123", False),
    ("env-123-", False),
    ("--", False),
    ("env--123", False),
    ("env@123", False),
    ("env-123@abc", False),
    ("env-123$", False),
    ("env-!23", False),
    ("env-123#abc", False),
    ("env-abc_def", False),
    ("env-123.456", False),
    ("env-123+456", False),
    ("-a-b", False),
    ("a-b-", False),
    ("-a-b-c-", False),
    ("a--b-c", False),
    ("env--123--abc", False),
    ("a1-b2-c3", False),
    ("abc-123", False),
    ("123-456-789", False),
    ("abc-DEF", False),
    ("Abc-def", False),
    ("abc-Def", False),
    ("ABC-123", False),
]

ENVIRONMENT_ID_CASES = [
    ("env-abc", True),
    ("abc-def-ghi", True),
    ("foo-bar-baz-qux", True),
    ("a-b", True),
    ("a-b-c", True),
    ("a-b-c-d", True),
    ("abc-def", True),
    ("xyz-abc-def", True),
    ("test-env-prod-dev", True),
    ("env-123", True),
    ("env-abc-123", True),
    ("123-456", True),
    ("abc-123-def", True),
    ("foo-bar-baz-123", True),
    ("", False),
    ("e", False),
    ("e-a-b-c-d", False),
    ("-", False),
    ("env-", False),
    ("-123", False),
    ("env-123-", False),
    ("--", False),
    ("env--123", False),
    ("env-abc@", False),
    ("env-123@abc", False),
    ("env-123$", False),
    ("env-!23", False),
    ("env-123#abc", False),
    ("env-abc_def", False),
    ("env-123.456", False),
    ("env-123+456", False),
    ("-a-b", False),
    ("a-b-", False),
    ("-a-b-c-", False),
    ("a--b-c", False),
    ("env--123--abc", False),
    ("a1-b2-c3", True),
    ("abc-123", True),
    ("123-456-789", True),
    ("a1-b2-c3-d4", True),
    ("test-env-prod-001", True),
    ("abc-DEF", False),
    ("Abc-def", False),
    ("abc-Def", False),
    ("ABC-123", False),
    ("test-ENV-prod-001", False),
]

VALID_PROJECT_IDS = [value for value, ok in PROJECT_ID_CASES if ok]
INVALID_PROJECT_IDS = [value for value, ok in PROJECT_ID_CASES if not ok]
VALID_ENVIRONMENT_IDS = [value for value, ok in ENVIRONMENT_ID_CASES if ok]
INVALID_ENVIRONMENT_IDS = [value for value, ok in ENVIRONMENT_ID_CASES if not ok]


@pytest.mark.parametrize("value", VALID_PROJECT_IDS)
def test_validate_project_id_accepts(value):
    assert validate_project_id(value) is None


@pytest.mark.parametrize("value", INVALID_PROJECT_IDS)
def test_validate_project_id_rejects(value):
    with pytest.raises(ValidationError) as excinfo:
        validate_project_id(value)
    assert "project ID" in str(excinfo.value)


@pytest.mark.parametrize("value", VALID_ENVIRONMENT_IDS)
def test_validate_environment_id_accepts(value):
    assert validate_environment_id(value) is None


@pytest.mark.parametrize("value", INVALID_ENVIRONMENT_IDS)
def test_validate_environment_id_rejects(value):
    with pytest.raises(ValidationError) as excinfo:
        validate_environment_id(value)
    assert "environment ID" in str(excinfo.value)


def test_project_id_error_messages():
    with pytest.raises(ValidationError, match="project ID is empty"):
        validate_project_id("")
    with pytest.raises(ValidationError, match="has 1 segments"):
        validate_project_id("env")


def test_environment_id_error_messages():
    with pytest.raises(ValidationError, match="environment ID is empty"):
        validate_environment_id("")
    with pytest.raises(ValidationError, match="segment 2"):
        validate_environment_id("abc-DEF")


@pytest.mark.parametrize(
    "env_type, expected",
    [("development", True), ("staging", True), ("production", True), ("prod", False), ("", False)],
)
def test_is_valid_environment_type(env_type, expected):
    assert is_valid_environment_type(env_type) is expected


@pytest.fixture
def project_dir(tmp_path):
    for name in ("sdk", "backend", "shared", "unity", "dashboard"):
        (tmp_path / name).mkdir()
    (tmp_path / "server-values.yaml").write_text("key: value\n")
    return tmp_path


def _base_data():
    return {
        "projectID": "tiny-squids",
        "buildRootDir": ".",
        "sdkRootDir": "sdk",
        "backendDir": "backend",
        "sharedCodeDir": "shared",
        "unityProjectDir": "unity",
        "dotnetRuntimeVersion": "9.0",
        "serverChartVersion": "0.7.0",
        "botClientChartVersion": "latest-prerelease",
        "environments": [
            {
                "name": "Develop",
                "humanId": "tiny-squids-develop",
                "type": "development",
                "stackDomain": "p1.example.com",
                "serverValuesFile": "server-values.yaml",
            }
        ],
    }


def _provider():
    return {
        "name": "Custom",
        "clientId": "client",
        "authEndpoint": "https://auth.example.com/authorize",
        "tokenEndpoint": "https://auth.example.com/token",
        "userInfoEndpoint": "https://auth.example.com/userinfo",
        "scopes": "openid profile",
        "audience": "api",
    }


def _validate(project_dir, data):
    config = ProjectConfig.from_dict(data)
    validate_project_config(str(project_dir), config)
    return config


def test_valid_config_passes(project_dir):
    data = _base_data()
    data["authProviders"] = {"custom": _provider()}
    data["environments"][0]["authProvider"] = "custom"
    data["features"] = {"dashboard": {"useCustom": True, "rootDir": "dashboard"}}
    config = _validate(project_dir, data)
    assert config.environments[0].auth_provider == "custom"


def test_missing_project_id(project_dir):
    data = _base_data()
    del data["projectID"]
    with pytest.raises(ValidationError, match="missing required field 'projectID'"):
        _validate(project_dir, data)


def test_missing_directory_field(project_dir):
    data = _base_data()
    del data["sdkRootDir"]
    with pytest.raises(ValidationError, match="required field 'sdkRootDir' is missing"):
        _validate(project_dir, data)


def test_absolute_directory_rejected(project_dir):
    data = _base_data()
    data["backendDir"] = str(project_dir / "backend")
    with pytest.raises(ValidationError, match="absolute path"):
        _validate(project_dir, data)


def test_nonexistent_directory_rejected(project_dir):
    data = _base_data()
    data["unityProjectDir"] = "missing"
    with pytest.raises(ValidationError, match="does not point to a valid directory"):
        _validate(project_dir, data)


def test_missing_dotnet_version(project_dir):
    data = _base_data()
    del data["dotnetRuntimeVersion"]
    with pytest.raises(ValidationError, match="missing dotnetRuntimeVersion"):
        _validate(project_dir, data)


def test_old_dotnet_version(project_dir):
    data = _base_data()
    data["dotnetRuntimeVersion"] = "7.0"
    with pytest.raises(ValidationError, match="Only versions 8.x or later"):
        _validate(project_dir, data)


def test_dotnet_patch_version_rejected(project_dir):
    data = _base_data()
    data["dotnetRuntimeVersion"] = "9.0.1"
    with pytest.raises(ValidationError, match="Only specify 'major.minor'"):
        _validate(project_dir, data)


def test_helm_repository_bad_scheme(project_dir):
    data = _base_data()
    data["helmChartRepository"] = "ftp://charts.example.com"
    with pytest.raises(ValidationError, match="URL scheme: ftp"):
        _validate(project_dir, data)


def test_helm_repository_empty_host(project_dir):
    data = _base_data()
    data["helmChartRepository"] = "https://"
    with pytest.raises(ValidationError, match="host is empty"):
        _validate(project_dir, data)


def test_invalid_chart_version(project_dir):
    data = _base_data()
    data["serverChartVersion"] = "not-a-version"
    with pytest.raises(ValidationError, match="invalid version string"):
        _validate(project_dir, data)


def test_empty_chart_version_rejected(project_dir):
    data = _base_data()
    del data["botClientChartVersion"]
    with pytest.raises(ValidationError, match="invalid version string"):
        _validate(project_dir, data)


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("name", "", "authProviders\\[custom\\].name is required"),
        ("clientId", "", "authProviders\\[custom\\].clientId is required"),
        ("tokenEndpoint", "", "authProviders\\[custom\\].tokenEndpoint is required"),
        ("authEndpoint", "ftp://auth.example.com", "must use http or https scheme"),
        ("userInfoEndpoint", "https://", "must include a host"),
        ("scopes", "", "scopes are required"),
        ("scopes", "   ", "must specify at least one scope"),
        ("scopes", "openid pro$file", "invalid authProviders\\[custom\\].scopes 'pro\\$file'"),
        ("audience", "", "audience is required"),
        ("audience", "bad audience", "invalid authProviders\\[custom\\].audience"),
    ],
)
def test_auth_provider_errors(project_dir, key, value, message):
    data = _base_data()
    provider = _provider()
    provider[key] = value
    data["authProviders"] = {"custom": provider}
    with pytest.raises(ValidationError, match=message):
        _validate(project_dir, data)


def test_custom_dashboard_requires_root_dir(project_dir):
    data = _base_data()
    data["features"] = {"dashboard": {"useCustom": True}}
    with pytest.raises(ValidationError, match="rootDir must be specified"):
        _validate(project_dir, data)


def test_custom_dashboard_root_dir_must_exist(project_dir):
    data = _base_data()
    data["features"] = {"dashboard": {"useCustom": True, "rootDir": "nope"}}
    with pytest.raises(ValidationError, match="features.dashboard.rootDir"):
        _validate(project_dir, data)


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("name", "", "environment at index 0 did not specify required field 'name'"),
        ("humanId", "", "did not specify required field 'humanId'"),
        ("humanId", "Bad_ID", "specified invalid 'humanId'"),
        ("stackDomain", "", "did not specify required field 'stackDomain'"),
        ("type", "", "did not specify required field 'type'"),
        ("authProvider", "ghost", "auth provider 'ghost' which is not defined"),
    ],
)
def test_environment_errors(project_dir, key, value, message):
    data = _base_data()
    data["environments"][0][key] = value
    with pytest.raises(ValidationError, match=message):
        _validate(project_dir, data)


def test_values_file_wrong_extension(project_dir):
    (project_dir / "values.txt").write_text("key: value\n")
    data = _base_data()
    data["environments"][0]["serverValuesFile"] = "values.txt"
    with pytest.raises(ValidationError, match="failed to validate 'serverValuesFile'.*yaml or .yml extension"):
        _validate(project_dir, data)


def test_values_file_missing(project_dir):
    data = _base_data()
    data["environments"][0]["botclientValuesFile"] = "absent.yml"
    with pytest.raises(ValidationError, match="failed to validate 'botclientValuesFile'.*unable to open file"):
        _validate(project_dir, data)


def test_values_file_not_a_mapping(project_dir):
    (project_dir / "list.yaml").write_text("- a\n- b\n")
    data = _base_data()
    data["environments"][0]["serverValuesFile"] = "list.yaml"
    with pytest.raises(ValidationError, match="invalid YAML"):
        _validate(project_dir, data)


def test_values_file_broken_yaml(project_dir):
    (project_dir / "broken.yaml").write_text("key: [unclosed\n")
    data = _base_data()
    data["environments"][0]["serverValuesFile"] = "broken.yaml"
    with pytest.raises(ValidationError, match="invalid YAML"):
        _validate(project_dir, data)


def test_empty_values_file_accepted(project_dir):
    (project_dir / "empty.yml").write_text("")
    data = _base_data()
    data["environments"][0]["serverValuesFile"] = "empty.yml"
    config = _validate(project_dir, data)
    assert config.environments[0].server_values_file == "empty.yml"