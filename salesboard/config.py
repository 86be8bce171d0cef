"""
Configuration Module - Centralized Configuration Hub

Contains all tunable parameters for the sales sheet ingestion pipeline:
- Column-name synonyms per semantic field
- Header detection constants (scan window, fallback sampling, score bonuses)
- Aggregate row labels excluded from the output
- File decoding and URL fetch settings
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any


# ============================================================================
# DIRECTORY PATHS
# ============================================================================

# Project root directory (parent of salesboard/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Configuration file directory (JSON overrides)
CONFIG_DIR = Path(os.environ.get("SALESBOARD_CONFIG_DIR", PROJECT_ROOT / "config"))


# ============================================================================
# COLUMN SYNONYMS
# ============================================================================
# Field order is significant: the first field with a matching synonym wins.
# Keys must stay in this order: product, lastYear, target, actual.
#
# Note: Synonyms are loaded from config/column_synonyms.json if available
# (see bottom of file). Default values are defined in _COLUMN_SYNONYMS_DEFAULT.

_COLUMN_SYNONYMS_DEFAULT: dict[str, list[str]] = {
    "product": [
        "商品名", "主力商品名", "商品", "product", "name",
        "品名", "アイテム", "item", "製品名", "製品",
    ],
    "lastYear": [
        "前年", "前年売上", "昨年", "last_year", "previous",
        "前年度", "昨年度", "去年",
    ],
    "target": [
        "予定", "目標", "予算", "target", "plan",
        "計画", "目標値", "予定値", "budget",
    ],
    "actual": [
        "実績", "売上", "実売", "actual", "sales",
        "実績値", "売上実績", "成果", "結果",
    ],
}


# ============================================================================
# HEADER DETECTION
# ============================================================================
# confidence = matches / valid_header_cells
#              + product_bonus (product column found)
#              + fields_bonus (>= fields_bonus_min non-product fields)
# clamped to 1.0

_HEADER_DETECTION_DEFAULT: dict[str, Any] = {
    "scan_rows": 15,
    "min_valid_cells": 2,
    "product_sample_rows": 5,
    "product_text_ratio": 0.7,
    "product_bonus": 0.3,
    "fields_bonus": 0.2,
    "fields_bonus_min": 2,
    "numeric_header_max_length": 10,
}


# ============================================================================
# ROW EXTRACTION
# ============================================================================

# Product labels of total/subtotal rows; never emitted as records
AGGREGATE_LABELS = frozenset({"合計", "総計", "計"})


# ============================================================================
# SOURCES
# ============================================================================

# Encodings tried in order when decoding uploaded CSV bytes
CSV_ENCODINGS = ["utf-8-sig", "utf-8", "cp932", "shift_jis", "latin-1"]

# Candidate URL templates for fetching remote CSV text, tried in order.
# "{url}" is the raw URL, "{quoted_url}" the percent-encoded one.
FETCH_PROXY_TEMPLATES = ["{url}"]
FETCH_TIMEOUT_SECONDS = 15.0

# Characters of the raw input echoed back in an InsufficientData message
ERROR_PREVIEW_CHARS = 200


# ============================================================================
# CONFIG LOADING AND VALIDATION
# ============================================================================

def _load_synonyms_from_json(defaults: dict[str, list[str]]) -> dict[str, list[str]]:
    """Load column synonyms from JSON file, merge with defaults."""
    synonyms_file = CONFIG_DIR / "column_synonyms.json"
    if synonyms_file.exists():
        try:
            with open(synonyms_file, "r", encoding="utf-8") as f:
                data = json.load(f)
                if "synonyms" in data:
                    # Keep the default field order; JSON only replaces lists
                    merged = {field: list(values) for field, values in defaults.items()}
                    for field, values in data["synonyms"].items():
                        if field in merged and isinstance(values, list):
                            merged[field] = [str(v) for v in values]
                    return merged
        except Exception as e:
            import warnings
            warnings.warn(f"Failed to load column synonyms from JSON: {e}. Using defaults.")
    return defaults


def _load_header_detection_from_json(defaults: dict[str, Any]) -> dict[str, Any]:
    """Load header detection constants from JSON file, merge with defaults."""
    ingestion_file = CONFIG_DIR / "ingestion.json"
    if ingestion_file.exists():
        try:
            with open(ingestion_file, "r", encoding="utf-8") as f:
                data = json.load(f)
                if "header_detection" in data:
                    merged = defaults.copy()
                    for key, value in data["header_detection"].items():
                        if key in merged:
                            merged[key] = value
                    return merged
        except Exception as e:
            import warnings
            warnings.warn(f"Failed to load header detection settings from JSON: {e}. Using defaults.")
    return defaults


# Load configuration from JSON files if available, otherwise use hardcoded defaults
# This happens at module import time
COLUMN_SYNONYMS = _load_synonyms_from_json(_COLUMN_SYNONYMS_DEFAULT)
HEADER_DETECTION = _load_header_detection_from_json(_HEADER_DETECTION_DEFAULT)

HEADER_SCAN_ROWS: int = HEADER_DETECTION["scan_rows"]
MIN_VALID_HEADER_CELLS: int = HEADER_DETECTION["min_valid_cells"]
PRODUCT_SAMPLE_ROWS: int = HEADER_DETECTION["product_sample_rows"]
PRODUCT_TEXT_RATIO: float = HEADER_DETECTION["product_text_ratio"]
PRODUCT_BONUS: float = HEADER_DETECTION["product_bonus"]
FIELDS_BONUS: float = HEADER_DETECTION["fields_bonus"]
FIELDS_BONUS_MIN: int = HEADER_DETECTION["fields_bonus_min"]
NUMERIC_HEADER_MAX_LENGTH: int = HEADER_DETECTION["numeric_header_max_length"]


def load_config() -> dict[str, Any]:
    """
    Load and return all configuration as a dictionary.

    Returns:
        Dictionary with all configuration values.
    """
    return {
        "project_root": PROJECT_ROOT,
        "config_dir": CONFIG_DIR,
        "column_synonyms": COLUMN_SYNONYMS,
        "header_detection": HEADER_DETECTION,
        "aggregate_labels": sorted(AGGREGATE_LABELS),
        "csv_encodings": CSV_ENCODINGS,
        "fetch_proxy_templates": FETCH_PROXY_TEMPLATES,
        "fetch_timeout_seconds": FETCH_TIMEOUT_SECONDS,
    }


def validate_config() -> tuple[bool, list[str]]:
    """
    Validate configuration settings.

    Returns:
        Tuple of (is_valid, list_of_errors).
    """
    errors = []

    for field in _COLUMN_SYNONYMS_DEFAULT:
        values = COLUMN_SYNONYMS.get(field)
        if not values:
            errors.append(f"No synonyms configured for field '{field}'")
        elif any(not str(v).strip() for v in values):
            errors.append(f"Blank synonym configured for field '{field}'")

    if list(COLUMN_SYNONYMS) != list(_COLUMN_SYNONYMS_DEFAULT):
        errors.append("Synonym fields must be exactly: product, lastYear, target, actual")

    if HEADER_SCAN_ROWS < 1:
        errors.append(f"Invalid scan_rows: {HEADER_SCAN_ROWS}")
    if MIN_VALID_HEADER_CELLS < 1:
        errors.append(f"Invalid min_valid_cells: {MIN_VALID_HEADER_CELLS}")
    if PRODUCT_SAMPLE_ROWS < 1:
        errors.append(f"Invalid product_sample_rows: {PRODUCT_SAMPLE_ROWS}")
    if not 0.0 < PRODUCT_TEXT_RATIO <= 1.0:
        errors.append(f"Invalid product_text_ratio: {PRODUCT_TEXT_RATIO}")
    for name, bonus in (("product_bonus", PRODUCT_BONUS), ("fields_bonus", FIELDS_BONUS)):
        if not isinstance(bonus, (int, float)) or bonus < 0:
            errors.append(f"Invalid {name}: {bonus}")

    if not FETCH_PROXY_TEMPLATES:
        errors.append("At least one fetch URL template is required")
    for template in FETCH_PROXY_TEMPLATES:
        if "{url}" not in template and "{quoted_url}" not in template:
            errors.append(f"Fetch template lacks a URL placeholder: {template}")

    return len(errors) == 0, errors


if __name__ == "__main__":
    # Validate configuration on direct execution
    print("=" * 60)
    print("Configuration Validation")
    print("=" * 60)

    is_valid, errors = validate_config()

    if is_valid:
        print("[OK] Configuration is valid")
    else:
        print("[ERROR] Configuration has errors:")
        for error in errors:
            print(f"  - {error}")

    print(f"\nConfig dir: {CONFIG_DIR}")
    for field, values in COLUMN_SYNONYMS.items():
        print(f"  {field}: {len(values)} synonyms")
    print(f"Header scan rows: {HEADER_SCAN_ROWS}")
