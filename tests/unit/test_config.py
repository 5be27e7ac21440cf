"""Tests for the config module."""

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from dex_scanner.config import ConfigError, ScannerConfig, load_config
from dex_scanner.exceptions import ConfigurationError

MINIMAL = {"base_tokens": ["USDC"], "intermediate_tokens": ["WETH", "WBTC"]}


def test_defaults():
    config = ScannerConfig(dict(MINIMAL))
    assert config.default_amount == Decimal("10000")
    assert config.min_profit_bps == 50
    assert config.scan_interval_ms == 5000
    assert config.scan_interval_sec == 5.0
    assert config.validation_enabled is True
    assert config.filter_enabled is True
    assert config.filter_max_size == 20000
    assert config.oracle_probe_amount == Decimal("1")
    assert config.metrics_port is None
    assert config.rpc_url is None
    assert config.once is False
    assert config.venues == []


def test_config_error_is_configuration_error():
    assert issubclass(ConfigError, ConfigurationError)


@pytest.mark.parametrize("field", ["base_tokens", "intermediate_tokens"])
def test_missing_token_list(field):
    data = dict(MINIMAL)
    del data[field]
    with pytest.raises(ConfigError, match=f"Missing required config field: {field}"):
        ScannerConfig(data)


@pytest.mark.parametrize("value", [[], "USDC", [1, 2]])
def test_invalid_token_list(value):
    with pytest.raises(ConfigError):
        ScannerConfig(dict(MINIMAL, base_tokens=value))


def test_float_amount_parsed_exactly():
    config = ScannerConfig(dict(MINIMAL, default_amount=1.1))
    assert config.default_amount == Decimal("1.1")


@pytest.mark.parametrize("amount", [0, "-5", "abc"])
def test_invalid_default_amount(amount):
    with pytest.raises(ConfigError):
        ScannerConfig(dict(MINIMAL, default_amount=amount))


def test_bool_is_not_int():
    with pytest.raises(ConfigError, match="got bool"):
        ScannerConfig(dict(MINIMAL, min_profit_bps=True))


def test_negative_interval_rejected():
    with pytest.raises(ConfigError, match="non-negative"):
        ScannerConfig(dict(MINIMAL, scan_interval_ms=-1))


def test_sections():
    config = ScannerConfig(
        dict(
            MINIMAL,
            validation={"enabled": False},
            filter={"enabled": False, "max_size": 100},
            oracle={"probe_amount": "0.5"},
            metrics={"port": 9100},
        )
    )
    assert config.validation_enabled is False
    assert config.filter_enabled is False
    assert config.filter_max_size == 100
    assert config.oracle_probe_amount == Decimal("0.5")
    assert config.metrics_port == 9100


def test_venues_parsed():
    config = ScannerConfig(
        dict(
            MINIMAL,
            venues=[
                {
                    "name": "uni",
                    "pools": [
                        {"token_a": "USDC", "token_b": "WETH", "reserve_a": 2000, "reserve_b": "1"}
                    ],
                }
            ],
        )
    )
    assert config.venues == [
        {
            "name": "uni",
            "fee_bps": 30,
            "pools": [
                {
                    "token_a": "USDC",
                    "token_b": "WETH",
                    "reserve_a": Decimal("2000"),
                    "reserve_b": Decimal("1"),
                }
            ],
        }
    ]


@pytest.mark.parametrize(
    "venues, message",
    [
        ("uni", "venues must be a list"),
        ([{"fee_bps": 30}], "missing 'name'"),
        ([{"name": "a"}, {"name": "a"}], "Duplicate venue name"),
        ([{"name": "a", "pools": [{"token_a": "X"}]}], "pool 0 invalid"),
        (
            [
                {
                    "name": "a",
                    "pools": [
                        {"token_a": "X", "token_b": "Y", "reserve_a": 0, "reserve_b": 1}
                    ],
                }
            ],
            "must be positive",
        ),
    ],
)
def test_invalid_venues(venues, message):
    with pytest.raises(ConfigError, match=message):
        ScannerConfig(dict(MINIMAL, venues=venues))


def test_env_overrides():
    config = ScannerConfig(dict(MINIMAL))
    config.apply_env_overrides(
        {"MIN_PROFIT_BPS": "75", "SCAN_INTERVAL_MS": "250", "RPC_URL": "http://node"}
    )
    assert config.min_profit_bps == 75
    assert config.scan_interval_ms == 250
    assert config.rpc_url == "http://node"


def test_empty_env_values_ignored():
    config = ScannerConfig(dict(MINIMAL, min_profit_bps=60))
    config.apply_env_overrides({"MIN_PROFIT_BPS": ""})
    assert config.min_profit_bps == 60


def test_invalid_env_override():
    config = ScannerConfig(dict(MINIMAL))
    with pytest.raises(ConfigError, match="MIN_PROFIT_BPS"):
        config.apply_env_overrides({"MIN_PROFIT_BPS": "lots"})


def test_load_config(tmp_path):
    path = tmp_path / "scanner.yaml"
    path.write_text(yaml.dump(dict(MINIMAL, min_profit_bps=80)))

    config = load_config(str(path))

    assert config.min_profit_bps == 80
    assert config.intermediate_tokens == ["WETH", "WBTC"]


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(str(tmp_path / "nope.yaml"))


def test_load_config_bad_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("base_tokens: [USDC\n")
    with pytest.raises(ConfigError, match="Failed to parse YAML"):
        load_config(str(path))


def test_load_config_not_a_dict(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="YAML dictionary"):
        load_config(str(path))


def test_sample_config_loads():
    sample = Path(__file__).resolve().parents[2] / "configs" / "scanner.yaml"
    config = load_config(str(sample))
    assert [v["name"] for v in config.venues] == ["uniswap_v2", "sushiswap"]
