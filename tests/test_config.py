"""Tests for configuration loading."""

from pathlib import Path

import pytest

from branchweb.core.config import (
    Config,
    check_unexpanded_vars,
    expand_env_vars,
    find_unexpanded_vars,
    load_config,
    merge_configs,
)


class TestCheckUnexpandedVars:
    """Tests for unresolved ${VAR} pattern detection."""

    def test_no_vars_passes(self):
        check_unexpanded_vars({"key": "value", "nested": {"inner": "resolved"}}, source="test.yaml")

    def test_unresolved_var_raises(self):
        with pytest.raises(ValueError, match="MISSING_KEY"):
            check_unexpanded_vars({"app_id": "${MISSING_KEY}"}, source="test.yaml")

    def test_source_label_in_error(self):
        with pytest.raises(ValueError, match="config.yaml"):
            check_unexpanded_vars({"key": "${MISSING}"}, source="config.yaml")

    def test_list_detection(self):
        with pytest.raises(ValueError, match="MISSING_ITEM"):
            check_unexpanded_vars({"items": ["ok", "${MISSING_ITEM}"]}, source="test.yaml")

    def test_error_names_config_key(self):
        with pytest.raises(ValueError, match=r"api\.api_endpoint: \$\{BRANCH_HOST\}"):
            check_unexpanded_vars({"api": {"api_endpoint": "https://${BRANCH_HOST}"}}, source="test.yaml")


def test_find_unexpanded_vars_paths():
    data = {"app_id": "${APP}", "api": {"timeout": 5}, "tags": ["ok", "${TAG}"]}

    assert find_unexpanded_vars(data) == ["app_id: ${APP}", "tags[1]: ${TAG}"]


def test_expand_env_vars(monkeypatch):
    monkeypatch.setenv("BRANCH_APP_ID", "123")

    assert expand_env_vars("app ${BRANCH_APP_ID}") == "app 123"
    assert expand_env_vars("${NOT_SET_ANYWHERE}") == "${NOT_SET_ANYWHERE}"
    assert expand_env_vars({"app_id": "${BRANCH_APP_ID}", "api": {"timeout": 5}}) == {
        "app_id": "123",
        "api": {"timeout": 5},
    }


def test_merge_configs_is_deep():
    base = {"api": {"timeout": 10, "sdk_source": "web-sdk"}, "app_id": "1"}

    merged = merge_configs(base, {"api": {"timeout": 3}})

    assert merged == {"api": {"timeout": 3, "sdk_source": "web-sdk"}, "app_id": "1"}
    assert base["api"]["timeout"] == 10


def test_merge_configs_skips_unset_overrides():
    base = {"app_id": "1", "logging": {"level": "INFO"}}

    merged = merge_configs(base, {"app_id": None, "logging": {"level": None}, "storage": {"backend": "file", "path": None}})

    assert merged == {"app_id": "1", "logging": {"level": "INFO"}, "storage": {"backend": "file"}}


def test_defaults():
    config = load_config()

    assert config.app_id is None
    assert config.api.api_endpoint == "https://api.branch.io"
    assert config.api.link_service_endpoint == "https://bnc.lt"
    assert config.api.link_domain == "https://bnc.lt/"
    assert config.storage.backend == "memory"
    assert config.logging.level == "INFO"


def test_load_yaml_with_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("BRANCH_APP_ID", "5680621892404085")
    path = tmp_path / "branch.yaml"
    path.write_text(
        "app_id: ${BRANCH_APP_ID}\n"
        "api:\n"
        "  api_endpoint: https://api.example.test/\n"
        "  timeout: 2.5\n"
        "storage:\n"
        "  backend: file\n"
        "  path: /tmp/branch-session.json\n"
    )

    config = load_config(path)

    assert config.app_id == "5680621892404085"
    assert config.api.api_endpoint == "https://api.example.test"
    assert config.api.timeout == 2.5
    assert config.storage.backend == "file"
    assert config.storage.path == Path("/tmp/branch-session.json")


def test_numeric_app_id_coerced(tmp_path: Path):
    path = tmp_path / "branch.yaml"
    path.write_text("app_id: 5680621892404085\n")

    assert load_config(path).app_id == "5680621892404085"


def test_overrides_applied(tmp_path: Path):
    path = tmp_path / "branch.yaml"
    path.write_text("app_id: '1'\nstorage:\n  record_name: custom\n")

    config = load_config(path, overrides={"app_id": "2", "storage": {"backend": "file"}})

    assert config.app_id == "2"
    assert config.storage.backend == "file"
    assert config.storage.record_name == "custom"


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/branch.yaml")


def test_invalid_backend_rejected():
    with pytest.raises(ValueError):
        Config(storage={"backend": "cookies"})
