"""Configuration module for loading project settings and environment variables."""

import copy
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

from sentiment_index.models.datatypes import HISTORY_FIELDS

# Load environment variables from .env file
load_dotenv()

# headline and summary text covers three indices
MAX_INDICES = 3

DEFAULT_CONFIG: Dict[str, Any] = {
    "output_dir": "data",
    "history": {
        "start": "2022-01-03",
        "end": None,
    },
    "indices": [
        {"key": "sp500", "ticker": "^GSPC", "name": "S&P 500", "weight": 0.40},
        {"key": "nasdaq", "ticker": "^IXIC", "name": "NASDAQ", "weight": 0.35},
        {"key": "dow", "ticker": "^DJI", "name": "Dow Jones", "weight": 0.25},
    ],
    "providers": ["yfinance", "yahoo_chart"],
    "fetch": {
        "max_workers": 3,
        "timeout_seconds": 60,
        "max_retries": 3,
    },
    "artifacts": {
        "snapshot": "market-data.json",
        "history": "historical-data.json",
        "audit_csv": False,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``base`` with ``override`` merged in; nested dicts merge, lists replace."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _check_indices(indices: Any) -> None:
    if not isinstance(indices, list) or not indices:
        raise ValueError("Configuration 'indices' must be a non-empty list.")
    if len(indices) > MAX_INDICES:
        raise ValueError(f"Configuration 'indices' lists {len(indices)} entries; at most {MAX_INDICES} are supported.")
    seen = set()
    for entry in indices:
        if not isinstance(entry, dict) or not entry.get("key") or not entry.get("ticker"):
            raise ValueError(f"Index entry {entry!r} needs at least 'key' and 'ticker'.")
        if entry["key"] in HISTORY_FIELDS:
            raise ValueError(f"Index key '{entry['key']}' clashes with a history field {HISTORY_FIELDS}.")
        if entry["key"] in seen:
            raise ValueError(f"Duplicate index key '{entry['key']}' in configuration.")
        seen.add(entry["key"])
        if float(entry.get("weight", 0)) <= 0:
            raise ValueError(f"Index '{entry['key']}' must have a positive weight.")


def load_config(config_path: str | Path = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from the specified YAML file, layered over the defaults.

    Args:
        config_path (str | Path): Path to the configuration file. Defaults to "config.yaml".

    Returns:
        Dict[str, Any]: A dictionary containing the configuration settings.
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    with open(config_file, "r", encoding="utf-8") as file:
        config_data = yaml.safe_load(file)

    if not config_data or not isinstance(config_data, dict):
        raise ValueError(f"Configuration file {config_path} is empty or invalid.")

    config = _deep_merge(DEFAULT_CONFIG, config_data)
    _check_indices(config["indices"])

    env_output = os.getenv("SENTIMENT_OUTPUT_DIR")
    if env_output:
        config["output_dir"] = env_output

    return config
