"""Tests for configuration loading."""

import pytest

from finledger.config import (
    ConfigValidationError,
    find_config_path,
    load_config,
    parse_config,
)
from finledger.domain.account import AccountRegistry, parent_account_id
from finledger.domain.errors import ConfigurationError, NotFoundError

MONZO = "Assets:Personal:Monzo"


def test_load_config(config_file):
    config = load_config(config_file)

    assert config.source_path == config_file
    assert config.get_asset_account_ids() == [
        "Assets:Personal:Monzo",
        "Assets:Personal:Wise",
        "Assets:Personal:Vanguard",
    ]


def test_accessors(config):
    assert config.get_account_by_id(MONZO).provider == "monzo"
    assert config.get_account_by_id("Assets:Nope") is None
    assert [a.id for a in config.get_accounts_by_provider("WISE")] == ["Assets:Personal:Wise"]
    assert len(config.get_accounts_by_group("personal")) == 3
    assert config.get_inbox_folder_to_chart_id()["vanguard"] == "Assets:Personal:Vanguard"
    assert config.get_provider_for_account(MONZO) == "monzo"
    assert config.get_bank_preset("monzo") is None


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Config file not found"):
        load_config(tmp_path / "missing.toml")


def test_invalid_toml(tmp_path):
    path = tmp_path / "fin.config.toml"
    path.write_text("[[accounts]\n")

    with pytest.raises(ConfigValidationError, match="Invalid TOML"):
        load_config(path)


def test_validation_errors_list_fields():
    with pytest.raises(ConfigValidationError) as exc_info:
        parse_config({"accounts": [{"id": "Assets::Bad", "group": "g", "type": "cash", "provider": "x"}]})

    message = str(exc_info.value)
    assert "accounts.0.id" in message
    assert "accounts.0.type" in message


def test_duplicate_inbox_folder_rejected():
    account = {"group": "g", "type": "asset", "provider": "monzo", "inbox_folder": "same"}
    with pytest.raises(ConfigValidationError, match="duplicate inbox_folder"):
        parse_config({"accounts": [{"id": "Assets:A", **account}, {"id": "Assets:B", **account}]})


def test_unknown_tables_ignored():
    config = parse_config({"financial": {"currency": "GBP"}, "accounts": []})

    assert config.accounts == []


def test_find_config_path_order(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FIN_CONFIG_PATH", raising=False)
    monkeypatch.delenv("FIN_HOME", raising=False)

    assert find_config_path() == tmp_path / "data" / "fin.config.toml"

    monkeypatch.setenv("FIN_HOME", str(tmp_path / "home"))
    assert find_config_path() == tmp_path / "home" / "data" / "fin.config.toml"

    monkeypatch.setenv("FIN_CONFIG_PATH", "custom.toml")
    assert find_config_path() == tmp_path / "custom.toml"

    assert find_config_path("explicit.toml") == tmp_path / "explicit.toml"


def test_find_config_path_uses_project_root(tmp_path, monkeypatch):
    (tmp_path / "fin.config.template.toml").write_text("")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    monkeypatch.delenv("FIN_CONFIG_PATH", raising=False)
    monkeypatch.delenv("FIN_HOME", raising=False)

    assert find_config_path() == tmp_path / "data" / "fin.config.toml"


class TestAccountRegistry:
    def test_parse(self, registry):
        assert registry.parse(MONZO) == MONZO
        with pytest.raises(NotFoundError):
            registry.parse("Assets:Personal:Barclays")

    def test_folders(self, registry):
        assert registry.account_for_folder("wise") == "Assets:Personal:Wise"
        assert registry.account_for_folder("unknown") is None

    def test_asset_accounts(self, registry):
        assert len(registry.asset_accounts()) == 3

    def test_parent_account_id(self):
        assert parent_account_id("Assets:Personal:Monzo") == "Assets:Personal"
        assert parent_account_id("Assets") is None


def test_registry_ignores_accounts_without_folder():
    config = parse_config(
        {"accounts": [{"id": "Assets:Cash", "group": "g", "type": "asset", "provider": "manual"}]}
    )

    registry = AccountRegistry(config)

    assert "Assets:Cash" in registry
    assert registry.account_for_folder("Cash") is None
