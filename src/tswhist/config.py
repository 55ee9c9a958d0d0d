"""Run configuration loading and validation."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError, field_validator, model_validator

from .strategies import DEFAULT_STRATEGY, STRATEGIES


class HistogramConfig(BaseModel):
    """Parameters of one sliding histogram run plus its surrounding I/O choices."""

    model_config = ConfigDict(extra="ignore")

    n_bins: StrictInt
    win_len: StrictInt
    stride: StrictInt = 1
    strategy: str = DEFAULT_STRATEGY
    normalization: Literal["none", "minmax", "self"] = "none"
    one_based: bool = False
    value_column: Optional[str] = None
    write_pdf: bool = False
    report_title: str = "Sliding Window Histogram Report"

    @field_validator("n_bins")
    @classmethod
    def _more_than_two_bins(cls, value: int) -> int:
        if value <= 2:
            raise ValueError("n_bins must be an integer larger than 2")
        return value

    @field_validator("win_len", "stride")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("strategy")
    @classmethod
    def _known_strategy(cls, value: str) -> str:
        key = value.lower()
        if key not in STRATEGIES:
            raise ValueError(f"unknown strategy '{value}', expected one of {sorted(STRATEGIES)}")
        return key

    @model_validator(mode="after")
    def _stride_below_window(self) -> "HistogramConfig":
        if self.stride >= self.win_len:
            raise ValueError(f"stride ({self.stride}) must be less than win_len ({self.win_len})")
        return self

    @property
    def self_normalize(self) -> bool:
        return self.normalization == "self"

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "HistogramConfig":
        return cls.model_validate(dict(cfg))

    @classmethod
    def from_file(cls, path: str | Path) -> "HistogramConfig":
        return cls.from_mapping(load_run_config(path))


@dataclass
class ValidationResult:
    errors: list[str]
    warnings: list[str]
    normalized: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return not self.errors

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": self.errors,
            "warnings": self.warnings,
            "normalized": self.normalized,
        }


def _format_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "config"
    return f"{location}: {error.get('msg', 'invalid value')}"


def validate_config(config: Mapping[str, Any]) -> ValidationResult:
    """Validate a configuration mapping without raising.

    Errors mirror the checks the histogram driver performs; warnings flag
    unknown keys and strides large enough that the differential update does
    more work than rebinning each window.
    """

    errors: list[str] = []
    warnings: list[str] = []
    normalized: Dict[str, Any] = {}

    unknown = sorted(str(k) for k in config if k not in HistogramConfig.model_fields)
    if unknown:
        warnings.append(f"Ignoring unknown keys: {', '.join(unknown)}")

    try:
        parsed = HistogramConfig.from_mapping(config)
    except ValidationError as exc:
        errors.extend(_format_error(err) for err in exc.errors())
    else:
        normalized = parsed.model_dump()
        if 2 * parsed.stride > parsed.win_len:
            warnings.append(
                f"stride {parsed.stride} is more than half of win_len {parsed.win_len}; "
                "each update touches more samples than a full rebin"
            )

    return ValidationResult(errors=errors, warnings=warnings, normalized=normalized)


def validate_config_file(path: str | Path) -> ValidationResult:
    """Load and validate a configuration file."""
    return validate_config(load_run_config(path))


def load_run_config(path: str | Path) -> Dict[str, Any]:
    """Load a run configuration from YAML or JSON.

    ``.json`` files are parsed as JSON; anything else goes through
    ``yaml.safe_load``, which also accepts JSON documents.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    loaded = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError("Config file must contain a mapping/object at the top level")
    return loaded
