import pytest
from uvicorn.config import LOG_LEVELS as UVICORN_LOG_LEVELS

import cli
import config
from utils.errors import ConfigError

CREDENTIAL_VARS = config.CLIENT_ID_VARS + config.CLIENT_SECRET_VARS


@pytest.fixture
def clean_env(monkeypatch):
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_load_credentials_reads_primary_names(clean_env):
    clean_env.setenv("42_CLIENT_ID", "u-abc")
    clean_env.setenv("42_CLIENT_SECRET", "s-xyz")
    assert config.load_credentials() == ("u-abc", "s-xyz")


def test_load_credentials_accepts_shell_friendly_aliases(clean_env):
    clean_env.setenv("FT_CLIENT_ID", "u-abc")
    clean_env.setenv("FT_CLIENT_SECRET", "s-xyz")
    assert config.load_credentials() == ("u-abc", "s-xyz")


def test_primary_name_wins_over_alias(clean_env):
    clean_env.setenv("42_CLIENT_ID", "primary")
    clean_env.setenv("FT_CLIENT_ID", "alias")
    clean_env.setenv("FT_CLIENT_SECRET", "s")
    assert config.load_credentials()[0] == "primary"


@pytest.mark.parametrize("present", [(), ("42_CLIENT_ID",), ("42_CLIENT_SECRET",)])
def test_missing_credentials_raise_config_error(clean_env, present):
    for name in present:
        clean_env.setenv(name, "value")
    with pytest.raises(ConfigError):
        config.load_credentials()


def test_blank_credentials_count_as_missing(clean_env):
    clean_env.setenv("42_CLIENT_ID", "   ")
    clean_env.setenv("42_CLIENT_SECRET", "s")
    with pytest.raises(ConfigError):
        config.load_credentials()


def test_cli_exits_nonzero_without_credentials(clean_env, capsys):
    assert cli.main(["--stdio"]) == 1
    assert "42_CLIENT_ID" in capsys.readouterr().err


def test_cli_defaults_to_stdio():
    args = cli.build_parser().parse_args([])
    assert args.transport == "stdio"
    assert args.port == config.PORT


def test_cli_http_flags():
    args = cli.build_parser().parse_args(["--http", "--port", "9000", "--host", "0.0.0.0"])
    assert (args.transport, args.port, args.host) == ("http", 9000, "0.0.0.0")


def test_cli_transports_are_exclusive():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["--http", "--stdio"])


@pytest.mark.parametrize("value,expected", [
    ("info", "INFO"),
    (" debug ", "DEBUG"),
    ("WARN", "WARNING"),
    ("warning", "WARNING"),
    ("fatal", "CRITICAL"),
    ("verbose", "INFO"),
    ("", "INFO"),
])
def test_normalize_log_level(value, expected):
    level = config.normalize_log_level(value)
    assert level == expected
    assert level.lower() in UVICORN_LOG_LEVELS
