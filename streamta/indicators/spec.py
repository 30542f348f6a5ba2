"""
IndicatorSpec: declarative indicator definitions.

A spec names an indicator type, the parameters to build it with, and the
output key under which its values are published (a column name in
apply_indicators, a key in audit reports). Multi-output indicators publish
one key per field, `{output_key}_{field}` unless `outputs` maps the field to
a custom key.

Specs can be loaded from YAML:

    indicators:
      - indicator_type: ema
        output_key: ema_20
        params: {length: 20}
      - indicator_type: bbands
        output_key: bb
        params: {length: 20, std: 2.0}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from streamta.utils.logger import get_logger

from .base import Indicator
from .factory import create_indicator, output_fields, parse_kind, requires_candles

logger = get_logger(__name__)


@dataclass(frozen=True)
class IndicatorSpec:
    """
    Specification for a single indicator.

    Attributes:
        indicator_type: Catalogue type string (e.g. "ema", "macd"); normalized to lowercase.
        output_key: Name of the output (single-output) or prefix (multi-output).
        params: Constructor parameters (e.g. {"length": 20}); missing keys take defaults.
        outputs: For multi-output indicators, mapping of field name -> custom key,
            e.g. {"macd": "macd_line", "signal": "macd_signal"}.

    Validation is eager: an unknown type, an unknown parameter key or an
    out-of-range value raises ConfigurationError here, not on first use.
    """
    indicator_type: str
    output_key: str
    params: dict[str, Any] = field(default_factory=dict)
    outputs: dict[str, str] | None = None

    # dict fields: equality is by value, hashing is not supported
    __hash__ = None

    def __post_init__(self):
        if not self.output_key:
            raise ValueError(
                f"output_key is required for '{self.indicator_type}'\n"
                f"\n"
                f"Fix: IndicatorSpec(indicator_type='ema', output_key='ema_20', params={{'length': 20}})"
            )

        kind = parse_kind(self.indicator_type)
        object.__setattr__(self, "indicator_type", kind.value)

        # Build once so bad params fail at definition time
        create_indicator(kind, self.params)

        if self.outputs is not None:
            valid_outputs = set(output_fields(kind))
            for name in self.outputs:
                if name not in valid_outputs:
                    raise ValueError(
                        f"Invalid output '{name}' for {kind.value}. "
                        f"Valid outputs: {sorted(valid_outputs)}"
                    )

    @property
    def is_multi_output(self) -> bool:
        return bool(output_fields(self.indicator_type))

    @property
    def requires_candles(self) -> bool:
        return requires_candles(self.indicator_type)

    @property
    def fields(self) -> tuple[str, ...]:
        """Record field names, () for single-output indicators."""
        return output_fields(self.indicator_type)

    def get_output_key(self, output_name: str) -> str:
        """Published key for one record field."""
        if not self.is_multi_output:
            return self.output_key
        if self.outputs and output_name in self.outputs:
            return self.outputs[output_name]
        return f"{self.output_key}_{output_name}"

    @property
    def output_keys_list(self) -> list[str]:
        """All keys this spec publishes, in field order."""
        if not self.is_multi_output:
            return [self.output_key]
        return [self.get_output_key(name) for name in self.fields]

    def build(self) -> Indicator:
        """Fresh indicator instance in the EMPTY phase."""
        return create_indicator(self.indicator_type, self.params)

    def to_dict(self) -> dict[str, Any]:
        return {
            "indicator_type": self.indicator_type,
            "output_key": self.output_key,
            "params": dict(self.params),
            "outputs": dict(self.outputs) if self.outputs else None,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> IndicatorSpec:
        """
        Create from dict.

        output_key defaults to the type followed by the parameter values,
        e.g. {"indicator_type": "ema", "params": {"length": 20}} -> "ema_20".
        """
        if "indicator_type" not in d:
            raise ValueError(
                f"Indicator entry is missing 'indicator_type': {d}\n"
                f"\n"
                f"Fix: - indicator_type: ema\n"
                f"       output_key: ema_20\n"
                f"       params: {{length: 20}}"
            )
        params = d.get("params") or {}
        output_key = d.get("output_key") or default_output_key(d["indicator_type"], params)
        return cls(
            indicator_type=d["indicator_type"],
            output_key=output_key,
            params=dict(params),
            outputs=d.get("outputs"),
        )


def default_output_key(indicator_type: str, params: dict[str, Any]) -> str:
    """Type plus parameter values, e.g. ("macd", {12, 26, 9}) -> "macd_12_26_9"."""
    parts = [str(indicator_type).strip().lower()]
    parts.extend(str(value) for value in params.values())
    return "_".join(parts)


def validate_unique_keys(specs: list[IndicatorSpec]) -> None:
    """Ensure all published keys are unique (including multi-output expansion)."""
    all_keys: list[str] = []
    for spec in specs:
        all_keys.extend(spec.output_keys_list)

    if len(all_keys) != len(set(all_keys)):
        duplicates = sorted({k for k in all_keys if all_keys.count(k) > 1})
        raise ValueError(
            f"Duplicate output keys: {duplicates}\n"
            f"\n"
            f"Fix: give each indicator a distinct output_key"
        )


def parse_indicator_specs(data: dict[str, Any]) -> list[IndicatorSpec]:
    """
    Build specs from a parsed document with an `indicators:` list.

    Raises:
        ValueError: If the document shape is wrong or keys collide.
        ConfigurationError: If an entry has an invalid type or params.
    """
    if not isinstance(data, dict) or not isinstance(data.get("indicators"), list):
        raise ValueError(
            "Indicator document must contain an 'indicators' list\n"
            "\n"
            "Fix:\n"
            "indicators:\n"
            "  - indicator_type: rsi\n"
            "    output_key: rsi_14\n"
            "    params: {length: 14}"
        )

    specs = []
    for entry in data["indicators"]:
        if not isinstance(entry, dict):
            raise ValueError(f"Indicator entry must be a mapping, got {entry!r}")
        specs.append(IndicatorSpec.from_dict(entry))

    validate_unique_keys(specs)
    return specs


def load_indicator_specs(path: Path | str) -> list[IndicatorSpec]:
    """
    Load indicator specs from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is empty or malformed.
    """
    yaml_path = Path(path)
    if not yaml_path.exists():
        raise FileNotFoundError(f"Indicator spec file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        raise ValueError(f"Indicator spec file is empty: {yaml_path}")

    specs = parse_indicator_specs(data)
    logger.info("Loaded %d indicator specs from %s", len(specs), yaml_path)
    return specs
