"""
Configuration loading and validation for the opportunity scanner.
"""

import os
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigurationError


class ConfigError(ConfigurationError):
    """Raised when config is invalid or missing required fields."""

    pass


DEFAULT_SCAN_INTERVAL_MS = 5000
DEFAULT_MIN_PROFIT_BPS = 50
DEFAULT_AMOUNT = Decimal("10000")


class ScannerConfig:
    """
    Parsed and validated scanner configuration.

    Attributes:
        base_tokens: Tokens each round trip starts and ends in
        intermediate_tokens: Tokens routed through
        default_amount: Trade size per round trip (exact Decimal)
        min_profit_bps: Opportunities below this never reach the handler
        scan_interval_ms: Sleep between scan iterations
        once: If True, the CLI runs a single scan and exits
        rpc_url: Optional RPC endpoint for congestion queries
        validation_enabled: Run the validation pipeline before the handler
        filter_enabled: Pass scan results through the dedup filter
        filter_max_size: Dedup cache size
        oracle_probe_amount: Probe size for the discrepancy oracle
        metrics_port: Port for the Prometheus endpoint (None = disabled)
        venues: Reserve venue definitions for paper runs
    """

    def __init__(self, config_dict: Dict[str, Any]):
        """
        Parse and validate config from dictionary.

        Args:
            config_dict: Loaded YAML config

        Raises:
            ConfigError: If required fields missing or invalid
        """
        self.base_tokens: List[str] = self._get_token_list(config_dict, "base_tokens")
        self.intermediate_tokens: List[str] = self._get_token_list(
            config_dict, "intermediate_tokens"
        )

        self.default_amount: Decimal = self._parse_decimal(
            config_dict.get("default_amount", DEFAULT_AMOUNT), "default_amount"
        )
        if self.default_amount <= 0:
            raise ConfigError(f"default_amount must be positive: {self.default_amount}")

        self.min_profit_bps: int = self._parse_int(
            config_dict.get("min_profit_bps", DEFAULT_MIN_PROFIT_BPS), "min_profit_bps"
        )
        self.scan_interval_ms: int = self._parse_int(
            config_dict.get("scan_interval_ms", DEFAULT_SCAN_INTERVAL_MS),
            "scan_interval_ms",
        )
        if self.scan_interval_ms < 0:
            raise ConfigError(
                f"scan_interval_ms must be non-negative: {self.scan_interval_ms}"
            )

        self.once: bool = bool(config_dict.get("once", False))
        self.rpc_url: Optional[str] = config_dict.get("rpc_url")

        validation = config_dict.get("validation", {}) or {}
        self.validation_enabled: bool = bool(validation.get("enabled", True))

        filter_cfg = config_dict.get("filter", {}) or {}
        self.filter_enabled: bool = bool(filter_cfg.get("enabled", True))
        self.filter_max_size: int = self._parse_int(
            filter_cfg.get("max_size", 20000), "filter.max_size"
        )

        oracle_cfg = config_dict.get("oracle", {}) or {}
        self.oracle_probe_amount: Decimal = self._parse_decimal(
            oracle_cfg.get("probe_amount", "1"), "oracle.probe_amount"
        )

        metrics_cfg = config_dict.get("metrics", {}) or {}
        self.metrics_port: Optional[int] = (
            self._parse_int(metrics_cfg["port"], "metrics.port")
            if metrics_cfg.get("port") is not None
            else None
        )

        self.venues: List[Dict[str, Any]] = self._parse_venues(
            config_dict.get("venues", [])
        )

    @property
    def scan_interval_sec(self) -> float:
        return self.scan_interval_ms / 1000.0

    @staticmethod
    def _get_token_list(d: Dict, key: str) -> List[str]:
        """Get required non-empty list of token identifiers."""
        if key not in d:
            raise ConfigError(f"Missing required config field: {key}")
        val = d[key]
        if not isinstance(val, list) or not val:
            raise ConfigError(f"Config field '{key}' must be a non-empty list")
        for token in val:
            if not isinstance(token, str):
                raise ConfigError(
                    f"Config field '{key}' must contain strings, got {type(token).__name__}"
                )
        return list(val)

    @staticmethod
    def _parse_decimal(value: Any, key: str) -> Decimal:
        # Floats go through str() so YAML 1.5 becomes Decimal("1.5")
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ConfigError(f"Config field '{key}' must be a decimal: {value}") from e

    @staticmethod
    def _parse_int(value: Any, key: str) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Config field '{key}' must be int, got bool")
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Config field '{key}' must be int: {value}") from e

    @staticmethod
    def _parse_venues(venues_raw: Any) -> List[Dict[str, Any]]:
        """Parse and validate reserve venue definitions."""
        if not isinstance(venues_raw, list):
            raise ConfigError("venues must be a list")

        venues = []
        seen = set()
        for i, venue in enumerate(venues_raw):
            if not isinstance(venue, dict):
                raise ConfigError(f"Venue config {i} must be a dict")

            name = venue.get("name")
            if not name:
                raise ConfigError(f"Venue config {i} missing 'name'")
            if name in seen:
                raise ConfigError(f"Duplicate venue name: {name}")
            seen.add(name)

            pools = []
            for j, pool in enumerate(venue.get("pools", [])):
                try:
                    token_a = pool["token_a"]
                    token_b = pool["token_b"]
                    reserve_a = Decimal(str(pool["reserve_a"]))
                    reserve_b = Decimal(str(pool["reserve_b"]))
                except (KeyError, TypeError, InvalidOperation) as e:
                    raise ConfigError(
                        f"Venue '{name}' pool {j} invalid "
                        "(need token_a, token_b, reserve_a, reserve_b)"
                    ) from e
                if reserve_a <= 0 or reserve_b <= 0:
                    raise ConfigError(f"Venue '{name}' pool {j} reserves must be positive")
                pools.append(
                    {
                        "token_a": token_a,
                        "token_b": token_b,
                        "reserve_a": reserve_a,
                        "reserve_b": reserve_b,
                    }
                )

            venues.append(
                {
                    "name": name,
                    "fee_bps": int(venue.get("fee_bps", 30)),
                    "pools": pools,
                }
            )

        return venues

    def apply_env_overrides(self, environ: Optional[Dict[str, str]] = None) -> None:
        """
        Override thresholds from MIN_PROFIT_BPS / SCAN_INTERVAL_MS.

        Args:
            environ: Mapping to read (defaults to os.environ)
        """
        environ = os.environ if environ is None else environ
        if environ.get("MIN_PROFIT_BPS"):
            self.min_profit_bps = self._parse_int(
                environ["MIN_PROFIT_BPS"], "MIN_PROFIT_BPS"
            )
        if environ.get("SCAN_INTERVAL_MS"):
            self.scan_interval_ms = self._parse_int(
                environ["SCAN_INTERVAL_MS"], "SCAN_INTERVAL_MS"
            )
        if environ.get("RPC_URL"):
            self.rpc_url = environ["RPC_URL"]


def load_config(config_path: str) -> ScannerConfig:
    """
    Load and validate config from YAML file.

    Args:
        config_path: Path to config YAML file

    Returns:
        Validated ScannerConfig instance

    Raises:
        ConfigError: If config invalid or file not found
    """
    if not os.path.exists(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigError("Config file must contain a YAML dictionary")

    return ScannerConfig(config_dict)
