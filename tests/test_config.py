import pytest

from shared.config import ProcessorSettings, parse_api_list, parse_bool

ENV_VARS = (
    "ACCEPTED_BLOB_APIS",
    "ADMISSION_FILTER_ENABLED",
    "FILE_STORAGE_ACCOUNT_ENDPOINT",
    "DESTINATION_STORAGE_ACCOUNT_ENDPOINT",
    "EVENT_HUB_NAMESPACE",
    "EVENT_HUB_NAME",
    "DESTINATION_CONTAINER_NAME",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_parse_api_list_trims_and_drops_empty():
    assert parse_api_list(" SftpCommit , PutBlob,, ") == frozenset({"SftpCommit", "PutBlob"})
    assert parse_api_list("") == frozenset()
    assert parse_api_list(None) == frozenset()


def test_parse_api_list_preserves_case():
    assert parse_api_list("SftpCommit,sftpcommit") == frozenset({"SftpCommit", "sftpcommit"})


@pytest.mark.parametrize(
    "value,expected",
    [("true", True), ("TRUE", True), ("1", True), ("yes", True), ("false", False), ("0", False), ("off", False)],
)
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


def test_parse_bool_default_when_unset():
    assert parse_bool(None) is True
    assert parse_bool("  ", default=False) is False


def test_settings_defaults(clean_env):
    settings = ProcessorSettings.from_env()
    assert settings.accepted_apis == frozenset({"SftpCommit"})
    assert settings.admission_filter_enabled is True
    assert settings.destination_container == "filtered-csv"


def test_settings_from_env(clean_env):
    clean_env.setenv("ACCEPTED_BLOB_APIS", "SftpCreate,SftpCommit")
    clean_env.setenv("ADMISSION_FILTER_ENABLED", "false")
    clean_env.setenv("DESTINATION_CONTAINER_NAME", "derived")
    clean_env.setenv("EVENT_HUB_NAME", "hub")
    settings = ProcessorSettings.from_env()
    assert settings.accepted_apis == frozenset({"SftpCreate", "SftpCommit"})
    assert settings.admission_filter_enabled is False
    assert settings.destination_container == "derived"
    assert settings.event_hub_name == "hub"


def test_empty_accepted_list_setting_gives_empty_set(clean_env):
    clean_env.setenv("ACCEPTED_BLOB_APIS", "")
    assert ProcessorSettings.from_env().accepted_apis == frozenset()


def test_require_endpoints_lists_missing(clean_env):
    clean_env.setenv("EVENT_HUB_NAME", "hub")
    with pytest.raises(ValueError) as exc:
        ProcessorSettings.from_env().require_endpoints()
    assert "FILE_STORAGE_ACCOUNT_ENDPOINT" in str(exc.value)
    assert "EVENT_HUB_NAME" not in str(exc.value)
