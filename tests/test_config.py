from pathlib import Path

import pytest

from dkb_import import AccountConfig, AppConfig, ConfigError, load_config

BASE_ENV = {
    "ACCOUNT_0_NAME": "Girokonto",
    "ACCOUNT_0_IBAN": "DE02120300000000202051",
    "ACCOUNT_0_SYNC_ID": "budget-a",
}


def test_loads_accounts_in_index_order():
    env = {
        **BASE_ENV,
        "ACCOUNT_1_NAME": " Tagesgeld ",
        "ACCOUNT_1_IBAN": "DE89370400440532013000",
        "ACCOUNT_1_SYNC_ID": "budget-a",
    }

    config = load_config(env)

    assert [a.name for a in config.accounts] == ["Girokonto", "Tagesgeld"]
    assert config.accounts[1] == AccountConfig(
        name="Tagesgeld", iban="DE89370400440532013000", sync_id="budget-a"
    )


def test_scanning_stops_at_first_gap():
    env = {
        **BASE_ENV,
        "ACCOUNT_2_NAME": "Ignored",
        "ACCOUNT_2_IBAN": "DE12500105170648489890",
        "ACCOUNT_2_SYNC_ID": "budget-b",
    }

    assert len(load_config(env).accounts) == 1


def test_incomplete_account_block_names_missing_keys():
    env = {**BASE_ENV, "ACCOUNT_1_NAME": "Tagesgeld"}

    with pytest.raises(ConfigError, match="ACCOUNT_1_IBAN, ACCOUNT_1_SYNC_ID"):
        load_config(env)


def test_blank_values_count_as_missing():
    env = {**BASE_ENV, "ACCOUNT_0_SYNC_ID": "   "}

    with pytest.raises(ConfigError, match="ACCOUNT_0_SYNC_ID"):
        load_config(env)


def test_no_accounts_is_config_error():
    with pytest.raises(ConfigError, match="No accounts configured"):
        load_config({})


def test_own_ibans_include_accounts_and_extras_normalized():
    env = {**BASE_ENV, "OWN_IBANS": "de89 3704 0044 0532 0130 00, ,DE12500105170648489890"}

    config = load_config(env)

    assert config.extra_own_ibans == ("de89 3704 0044 0532 0130 00", "DE12500105170648489890")
    assert config.own_ibans == frozenset(
        {"DE02120300000000202051", "DE89370400440532013000", "DE12500105170648489890"}
    )


def test_database_url_prefers_ledger_specific_variable():
    env = {**BASE_ENV, "DATABASE_URL": "sqlite:///a.db", "LEDGER_DATABASE_URL": "sqlite:///b.db"}

    assert load_config(env).database_url == "sqlite:///b.db"
    assert load_config({**BASE_ENV, "DATABASE_URL": "sqlite:///a.db"}).database_url == (
        "sqlite:///a.db"
    )
    assert load_config(BASE_ENV).database_url is None


def test_downloads_dir_default_and_override(tmp_path: Path):
    assert load_config(BASE_ENV).downloads_dir == Path.home() / "Downloads"
    assert load_config({**BASE_ENV, "DKB_DOWNLOADS_DIR": str(tmp_path)}).downloads_dir == tmp_path


def test_reads_os_environ_by_default(monkeypatch: pytest.MonkeyPatch):
    for key, value in BASE_ENV.items():
        monkeypatch.setenv(key, value)

    assert load_config().accounts[0].name == "Girokonto"


def test_app_config_requires_an_account():
    with pytest.raises(ValueError):
        AppConfig(accounts=())


def test_account_config_is_immutable():
    account = AccountConfig(name="Girokonto", iban="DE02", sync_id="b")

    with pytest.raises(ValueError):
        account.name = "Other"
