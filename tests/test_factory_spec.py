"""
Tests for the indicator factory and declarative IndicatorSpec / YAML loading.
"""

import pytest

from streamta.errors import ConfigurationError
from streamta.indicators import (
    EMA,
    MACD,
    BollingerBands,
    IndicatorKind,
    IndicatorSpec,
    KeltnerChannels,
    StochasticOscillator,
    create_indicator,
    list_indicators,
    load_indicator_specs,
    output_fields,
    parse_indicator_specs,
    requires_candles,
)
from streamta.indicators.spec import default_output_key


class TestCreateIndicator:

    def test_builds_with_params(self):
        ema = create_indicator("ema", {"length": 5})
        assert isinstance(ema, EMA)
        assert ema.length == 5

    def test_type_is_case_insensitive(self):
        assert isinstance(create_indicator("  MACD "), MACD)

    def test_accepts_enum(self):
        assert isinstance(create_indicator(IndicatorKind.BBANDS), BollingerBands)

    def test_defaults(self):
        macd = create_indicator("macd")
        assert (macd.fast, macd.slow, macd.signal) == (12, 26, 9)

    def test_param_names_map_to_fields(self):
        stoch = create_indicator("stoch", {"k": 5, "d": 2})
        assert isinstance(stoch, StochasticOscillator)
        assert (stoch.k_period, stoch.d_period) == (5, 2)

        kc = create_indicator("kc", {"ema_length": 10, "atr_length": 5, "scalar": 1.5})
        assert isinstance(kc, KeltnerChannels)
        assert (kc.ema_period, kc.atr_period, kc.multiplier) == (10, 5, 1.5)

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError, match="Unknown indicator type 'vwap'") as exc_info:
            create_indicator("vwap")
        assert exc_info.value.parameter == "indicator_type"

    def test_unknown_param(self):
        with pytest.raises(ConfigurationError, match="Unknown params for 'rsi'") as exc_info:
            create_indicator("rsi", {"period": 14})
        assert exc_info.value.parameter == "period"

    def test_invalid_param_value(self):
        with pytest.raises(ConfigurationError):
            create_indicator("sma", {"length": 0})

    def test_params_not_mutated(self):
        params = {"length": 9}
        create_indicator("ema", params)
        assert params == {"length": 9}


class TestCatalogue:

    def test_list_indicators(self):
        assert list_indicators() == [
            "sma", "ema", "macd", "rsi", "stoch", "willr", "bbands",
            "stddev", "atr", "kc", "obv", "adl", "cmf", "vroc",
        ]

    @pytest.mark.parametrize("indicator_type", ["stoch", "willr", "atr", "kc", "obv", "adl", "cmf", "vroc"])
    def test_candle_only(self, indicator_type):
        assert requires_candles(indicator_type)

    @pytest.mark.parametrize("indicator_type", ["sma", "ema", "macd", "rsi", "bbands", "stddev"])
    def test_close_based(self, indicator_type):
        assert not requires_candles(indicator_type)

    def test_output_fields(self):
        assert output_fields("macd") == ("macd", "signal", "histogram")
        assert output_fields("stoch") == ("k", "d")
        assert output_fields("bbands") == ("middle", "upper", "lower", "bandwidth")
        assert output_fields("ema") == ()


class TestIndicatorSpec:

    def test_normalizes_type(self):
        spec = IndicatorSpec(indicator_type="EMA", output_key="ema_5", params={"length": 5})
        assert spec.indicator_type == "ema"

    def test_build_returns_fresh_instances(self):
        spec = IndicatorSpec(indicator_type="sma", output_key="sma_3", params={"length": 3})
        a, b = spec.build(), spec.build()
        assert a is not b
        a.update(1.0)
        assert b.observations == 0

    def test_invalid_params_fail_at_definition(self):
        with pytest.raises(ConfigurationError):
            IndicatorSpec(indicator_type="bbands", output_key="bb", params={"std": -1.0})

    def test_equal_by_value_but_unhashable(self):
        a = IndicatorSpec(indicator_type="sma", output_key="sma_3", params={"length": 3})
        b = IndicatorSpec(indicator_type="SMA", output_key="sma_3", params={"length": 3})
        assert a == b
        with pytest.raises(TypeError):
            hash(a)

    def test_output_key_required(self):
        with pytest.raises(ValueError, match="output_key is required"):
            IndicatorSpec(indicator_type="ema", output_key="")

    def test_single_output_keys(self):
        spec = IndicatorSpec(indicator_type="rsi", output_key="rsi_14")
        assert not spec.is_multi_output
        assert spec.output_keys_list == ["rsi_14"]

    def test_multi_output_keys(self):
        spec = IndicatorSpec(indicator_type="bbands", output_key="bb")
        assert spec.output_keys_list == ["bb_middle", "bb_upper", "bb_lower", "bb_bandwidth"]

    def test_custom_output_mapping(self):
        spec = IndicatorSpec(
            indicator_type="macd",
            output_key="macd",
            outputs={"macd": "macd_line", "signal": "macd_signal"},
        )
        assert spec.output_keys_list == ["macd_line", "macd_signal", "macd_histogram"]

    def test_invalid_output_mapping(self):
        with pytest.raises(ValueError, match="Invalid output 'upper' for macd"):
            IndicatorSpec(indicator_type="macd", output_key="m", outputs={"upper": "x"})

    def test_dict_roundtrip(self):
        spec = IndicatorSpec(indicator_type="kc", output_key="kc", params={"scalar": 1.5})
        assert IndicatorSpec.from_dict(spec.to_dict()) == spec

    def test_default_output_key(self):
        assert default_output_key("MACD", {"fast": 12, "slow": 26, "signal": 9}) == "macd_12_26_9"
        spec = IndicatorSpec.from_dict({"indicator_type": "ema", "params": {"length": 20}})
        assert spec.output_key == "ema_20"
        assert IndicatorSpec.from_dict({"indicator_type": "obv"}).output_key == "obv"

    def test_from_dict_requires_type(self):
        with pytest.raises(ValueError, match="missing 'indicator_type'"):
            IndicatorSpec.from_dict({"output_key": "x"})


class TestParseIndicatorSpecs:

    def test_parses_list(self):
        specs = parse_indicator_specs({
            "indicators": [
                {"indicator_type": "ema", "output_key": "ema_20", "params": {"length": 20}},
                {"indicator_type": "atr"},
            ]
        })
        assert [s.output_key for s in specs] == ["ema_20", "atr"]

    @pytest.mark.parametrize("data", [{}, {"indicators": "ema"}, ["ema"]])
    def test_wrong_shape(self, data):
        with pytest.raises(ValueError, match="'indicators' list"):
            parse_indicator_specs(data)

    def test_entry_must_be_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            parse_indicator_specs({"indicators": ["ema"]})

    def test_duplicate_keys(self):
        with pytest.raises(ValueError, match="Duplicate output keys"):
            parse_indicator_specs({
                "indicators": [
                    {"indicator_type": "ema", "output_key": "x"},
                    {"indicator_type": "sma", "output_key": "x"},
                ]
            })

    def test_expanded_keys_collide(self):
        """A scalar key can clash with a multi-output field key."""
        with pytest.raises(ValueError, match="bb_middle"):
            parse_indicator_specs({
                "indicators": [
                    {"indicator_type": "bbands", "output_key": "bb"},
                    {"indicator_type": "sma", "output_key": "bb_middle"},
                ]
            })


class TestLoadIndicatorSpecs:

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "indicators.yml"
        path.write_text(
            "indicators:\n"
            "  - indicator_type: rsi\n"
            "    output_key: rsi_14\n"
            "    params: {length: 14}\n"
            "  - indicator_type: bbands\n"
            "    output_key: bb\n"
            "    params:\n"
            "      length: 20\n"
            "      std: 2.5\n",
            encoding="utf-8",
        )
        specs = load_indicator_specs(path)
        assert len(specs) == 2
        assert specs[0] == IndicatorSpec(indicator_type="rsi", output_key="rsi_14", params={"length": 14})
        assert specs[1].build().std_dev == 2.5

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_indicator_specs(tmp_path / "nope.yml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="empty"):
            load_indicator_specs(str(path))

    def test_invalid_type_in_file(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("indicators:\n  - indicator_type: ichimoku\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_indicator_specs(path)
