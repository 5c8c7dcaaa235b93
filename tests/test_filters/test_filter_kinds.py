"""
Tests for every filter kind evaluated against a real IndicatorEngine.
"""
import pytest

from signalcore.filters import (
    ADXFilter, ADXFilterType, ATRFilter, ATRFilterType, BollingerFilter, BollingerFilterType,
    CandlePatternFilterType, CopysFilterType, FILTER_SPECS, FilterEvaluator, FilterKind,
    IchimokuFilter, IchimokuFilterType, MACDFilter, MACDFilterType, MAFilterType, MomentumFilter,
    MomentumFilterType, MovingAverageFilter, RSIFilterType, SuperTrendFilter, SuperTrendFilterType,
    SupportResistanceFilterType, ThreeRSIFilter, ThreeRSIFilterType, VolumeFilter, VolumeFilterType,
    VWAPFilter, VWAPFilterType,
)
from signalcore.data import Bar, CandleSeries
from signalcore.indicators import IndicatorEngine
from signalcore.shared.errors import ConfigurationError


class TestFilterTables:
    @pytest.mark.parametrize("kind", list(FilterKind))
    def test_every_kind_is_registered(self, kind):
        assert FILTER_SPECS[kind].kind is kind

    @pytest.mark.parametrize("spec_cls", list(FILTER_SPECS.values()))
    def test_every_filter_type_has_a_condition(self, spec_cls):
        assert set(spec_cls.conditions) == set(spec_cls.filter_types)

    @pytest.mark.parametrize("spec_cls", list(FILTER_SPECS.values()))
    def test_codes_are_contiguous(self, spec_cls):
        assert [int(t) for t in spec_cls.filter_types] == list(range(len(spec_cls.filter_types)))

    @pytest.mark.parametrize("spec_cls", list(FILTER_SPECS.values()))
    def test_out_of_range_code_rejected(self, spec_cls):
        with pytest.raises(ConfigurationError, match="Invalid filter_type"):
            spec_cls(filter_type=len(spec_cls.filter_types))

    @pytest.mark.parametrize("spec_cls", list(FILTER_SPECS.values()))
    def test_every_filter_type_evaluates_to_bool(self, spec_cls, sample_series):
        engine = IndicatorEngine(sample_series)
        evaluator = FilterEvaluator(engine)
        for filter_type in spec_cls.filter_types:
            spec = spec_cls(filter_type=filter_type)
            for index in (0, 1, 30, 120, len(sample_series) - 1):
                assert isinstance(evaluator.evaluate(spec, index), bool)

    @pytest.mark.parametrize("member,code", [
        (BollingerFilterType.SQUEEZE_BREAKOUT, 8),
        (BollingerFilterType.ENHANCED_SQUEEZE_BREAKOUT, 9),
        (BollingerFilterType.SQUEEZE, 10),
        (BollingerFilterType.NARROWING, 11),
        (BollingerFilterType.EXPANSION_START, 12),
        (RSIFilterType.CROSS_ABOVE_40, 9),
        (RSIFilterType.CROSS_BELOW_60, 10),
        (RSIFilterType.OVERSOLD_RECOVERY, 24),
        (MACDFilterType.HISTOGRAM_EXPANDING, 14),
        (MACDFilterType.SIDEWAYS, 20),
        (ADXFilterType.PLUS_DI_CROSS_UP, 13),
        (MomentumFilterType.STRONG_POSITIVE, 0),
        (MomentumFilterType.REVERSAL, 11),
        (ThreeRSIFilterType.EXTREME_OVERSOLD, 31),
        (VWAPFilterType.TREND_WEAKENING, 11),
        (CandlePatternFilterType.HAMMER, 11),
        (CandlePatternFilterType.PENNANT, 40),
        (SupportResistanceFilterType.NEAR_RESISTANCE, 9),
        (CopysFilterType.MA_REVERSED, 15),
    ])
    def test_stored_codes_keep_their_meaning(self, member, code):
        """Integer codes saved in strategy files resolve to the same filter type."""
        assert type(member)(code) is member


class TestFilterKindParsing:
    @pytest.mark.parametrize("name,kind", [
        ("rsi", FilterKind.RSI),
        ("BB", FilterKind.BOLLINGER_BAND),
        ("BollingerBand", FilterKind.BOLLINGER_BAND),
        ("bollinger_band", FilterKind.BOLLINGER_BAND),
        ("MA", FilterKind.MOVING_AVERAGE),
        ("MovingAverage", FilterKind.MOVING_AVERAGE),
        ("ThreeRSI", FilterKind.THREE_RSI),
        ("supertrend", FilterKind.SUPERTREND),
        ("CandlePattern", FilterKind.CANDLE_PATTERN),
        ("SupportResistance", FilterKind.SUPPORT_RESISTANCE),
        ("copys", FilterKind.COPYS),
    ])
    def test_aliases(self, name, kind):
        assert FilterKind.parse(name) is kind

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match="Unknown filter kind"):
            FilterKind.parse("FIBONACCI")


class TestConsecutiveMonotonicity:
    @pytest.mark.parametrize("spec_cls,filter_type", [
        (MACDFilter, MACDFilterType.MACD_ABOVE_SIGNAL),
        (BollingerFilter, BollingerFilterType.ABOVE_MIDDLE),
        (ADXFilter, ADXFilterType.PLUS_DI_ABOVE),
        (VWAPFilter, VWAPFilterType.PRICE_ABOVE),
        (MomentumFilter, MomentumFilterType.ROC_POSITIVE),
    ])
    def test_raising_n_never_grows_true_set(self, sample_series, spec_cls, filter_type):
        evaluator = FilterEvaluator(IndicatorEngine(sample_series))
        previous = None
        for n in range(1, 6):
            spec = spec_cls(filter_type=filter_type, consecutive_n=n)
            true_set = {i for i in range(len(sample_series)) if evaluator.evaluate(spec, i)}
            if previous is not None:
                assert true_set <= previous
            previous = true_set


class TestEvaluateAll:
    def test_conjunction(self, sample_series):
        evaluator = FilterEvaluator(IndicatorEngine(sample_series))
        above = MACDFilter(filter_type=MACDFilterType.MACD_ABOVE_SIGNAL)
        below = MACDFilter(filter_type=MACDFilterType.MACD_BELOW_SIGNAL)
        for i in range(len(sample_series)):
            assert evaluator.evaluate_all([above], i) == evaluator.evaluate(above, i)
            assert not evaluator.evaluate_all([above, below], i)
        assert evaluator.evaluate_all([], 0)

    def test_stops_at_first_failure(self, sample_series):
        evaluator = FilterEvaluator(IndicatorEngine(sample_series))
        warming = MACDFilter(filter_type=MACDFilterType.MACD_ABOVE_SIGNAL)

        class Exploding(MACDFilter):
            def raw(self, ctx, index):
                raise AssertionError("evaluated after a failing filter")

        assert not evaluator.evaluate_all([warming, Exploding()], 0)


class TestMovingAverageFilter:
    def test_fewer_bars_than_longest_period_is_false(self, make_series):
        """periods [5, 20] with 19 bars: no filter type can pass."""
        engine = IndicatorEngine(make_series([100.0 + i for i in range(19)]))
        evaluator = FilterEvaluator(engine)
        for filter_type in MAFilterType:
            spec = MovingAverageFilter(filter_type=filter_type, periods=[5, 20])
            assert not any(evaluator.evaluate(spec, i) for i in range(19))

    def test_uptrend(self, make_series):
        engine = IndicatorEngine(make_series([100.0 + i for i in range(40)]))
        evaluator = FilterEvaluator(engine)
        for filter_type in (MAFilterType.PRICE_ABOVE_LAST, MAFilterType.REGULAR_ARRANGEMENT,
                            MAFilterType.FIRST_ABOVE_LAST, MAFilterType.ABOVE_ALL):
            spec = MovingAverageFilter(filter_type=filter_type, periods=[5, 10, 20])
            assert evaluator.evaluate(spec, 39)
            assert not evaluator.evaluate(spec, 18)

    def test_golden_and_dead_cross(self, make_series):
        closes = [100.0 - i for i in range(30)] + [71.0 + 3 * i for i in range(1, 21)]
        engine = IndicatorEngine(make_series(closes))
        evaluator = FilterEvaluator(engine)
        golden = MovingAverageFilter(filter_type=MAFilterType.GOLDEN_CROSS, periods=[5, 20])
        dead = MovingAverageFilter(filter_type=MAFilterType.DEAD_CROSS, periods=[5, 20])
        golden_bars = [i for i in range(len(closes)) if evaluator.evaluate(golden, i)]
        assert len(golden_bars) == 1
        assert golden_bars[0] > 30
        assert not any(evaluator.evaluate(dead, i) for i in range(len(closes)))

    @pytest.mark.parametrize("periods", [[], [20, 5], [5, 5], [0, 5]])
    def test_invalid_periods(self, periods):
        with pytest.raises(ConfigurationError):
            MovingAverageFilter(periods=periods)

    def test_normalizes_parameters(self):
        spec = MovingAverageFilter(periods=[5, 20, 60], ma_type='ema')
        assert spec.periods == (5, 20, 60)
        assert spec.ma_type == 'EMA'
        with pytest.raises(ConfigurationError, match="ma_type"):
            MovingAverageFilter(ma_type='KAMA')


class TestBollingerFilter:
    def test_spike_above_upper_band(self, make_series):
        engine = IndicatorEngine(make_series([100.0] * 19 + [120.0]))
        evaluator = FilterEvaluator(engine)
        assert evaluator.evaluate(BollingerFilter(filter_type=BollingerFilterType.ABOVE_UPPER), 19)
        assert evaluator.evaluate(BollingerFilter(filter_type=BollingerFilterType.OUTSIDE_BANDS), 19)
        assert not evaluator.evaluate(BollingerFilter(filter_type=BollingerFilterType.INSIDE_BANDS), 19)

    def test_narrowing_and_squeeze(self, squeeze_series):
        evaluator = FilterEvaluator(IndicatorEngine(squeeze_series))
        narrowing = BollingerFilter(filter_type=BollingerFilterType.NARROWING, period=10, consecutive_n=3)
        squeeze = BollingerFilter(filter_type=BollingerFilterType.SQUEEZE, period=10, threshold=0.02)
        assert evaluator.evaluate(narrowing, 12)
        assert not evaluator.evaluate(narrowing, 11)
        assert evaluator.evaluate(squeeze, 29)
        assert not evaluator.evaluate(squeeze, 10)

    def test_squeeze_breakout(self, squeeze_series):
        spec = BollingerFilter(
            filter_type=BollingerFilterType.ENHANCED_SQUEEZE_BREAKOUT,
            period=10, threshold=0.02, narrowing_period=3, squeeze_period=2,
        )
        evaluator = FilterEvaluator(IndicatorEngine(squeeze_series))
        assert [i for i in range(len(squeeze_series)) if evaluator.evaluate(spec, i)] == [30]

    def test_simple_squeeze_breakout(self, squeeze_series):
        """Close above the upper band after five bars of narrowing."""
        spec = BollingerFilter(filter_type=BollingerFilterType.SQUEEZE_BREAKOUT, period=10)
        evaluator = FilterEvaluator(IndicatorEngine(squeeze_series))
        assert [i for i in range(len(squeeze_series)) if evaluator.evaluate(spec, i)] == [30]

    def test_expansion_start_and_width_turns(self, squeeze_series):
        evaluator = FilterEvaluator(IndicatorEngine(squeeze_series))
        start = BollingerFilter(filter_type=BollingerFilterType.EXPANSION_START, period=10, threshold=0.02)
        turn = BollingerFilter(filter_type=BollingerFilterType.CONVERGE_THEN_DIVERGE, period=10)
        expanding = BollingerFilter(filter_type=BollingerFilterType.EXPANDING, period=10)
        for spec in (start, turn, expanding):
            assert [i for i in range(len(squeeze_series)) if evaluator.evaluate(spec, i)] == [30]

    def test_band_rejection_and_support(self, make_series):
        engine = IndicatorEngine(make_series([100.0] * 19 + [120.0, 110.0]))
        evaluator = FilterEvaluator(engine)
        rejection = BollingerFilter(filter_type=BollingerFilterType.UPPER_BAND_REJECTION)
        support = BollingerFilter(filter_type=BollingerFilterType.LOWER_BAND_SUPPORT)
        assert evaluator.evaluate(rejection, 20)
        assert not evaluator.evaluate(support, 20)

    def test_volatility_ratio(self, make_series):
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0] * 25)))
        assert evaluator.evaluate(BollingerFilter(filter_type=BollingerFilterType.LOW_VOLATILITY), 24)
        assert not evaluator.evaluate(BollingerFilter(filter_type=BollingerFilterType.HIGH_VOLATILITY), 24)

    def test_invalid_squeeze_parameters(self):
        with pytest.raises(ConfigurationError, match="narrowing_period"):
            BollingerFilter(narrowing_period=0)
        with pytest.raises(ConfigurationError, match="squeeze_threshold"):
            BollingerFilter(threshold=0.0)


class TestTrendFilters:
    def test_adx_uptrend(self, make_series):
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(60)])))
        assert evaluator.evaluate(ADXFilter(filter_type=ADXFilterType.STRONG_UPTREND), 59)
        assert not evaluator.evaluate(ADXFilter(filter_type=ADXFilterType.MINUS_DI_ABOVE), 59)
        # Not enough history for ADX(14)
        assert not evaluator.evaluate(ADXFilter(filter_type=ADXFilterType.PLUS_DI_ABOVE), 26)

    def test_supertrend_uptrend(self, make_series):
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(40)])))
        assert evaluator.evaluate(SuperTrendFilter(filter_type=SuperTrendFilterType.UPTREND, consecutive_n=5), 39)
        assert evaluator.evaluate(SuperTrendFilter(filter_type=SuperTrendFilterType.PRICE_ABOVE), 39)
        assert not evaluator.evaluate(SuperTrendFilter(filter_type=SuperTrendFilterType.TREND_CHANGED), 39)

    def test_ichimoku_above_cloud(self, make_series):
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(80)])))
        spec = IchimokuFilter(filter_type=IchimokuFilterType.BUY_SIGNAL)
        assert evaluator.evaluate(spec, 79)
        assert not evaluator.evaluate(spec, 50)

    def test_ichimoku_periods_validated(self):
        with pytest.raises(ConfigurationError, match="strictly ascending"):
            IchimokuFilter(tenkan=30, kijun=26)


class TestVolumeAndVolatilityFilters:
    def test_volume_surge(self, make_series):
        series = make_series([100.0 + i for i in range(21)])
        # Replace the last bar with a high-volume one
        bars = list(series)
        last = bars[-1]
        bars[-1] = type(last)(last.timestamp, last.open, last.high, last.low, last.close, 5000.0)
        evaluator = FilterEvaluator(IndicatorEngine(CandleSeries(bars)))
        assert evaluator.evaluate(VolumeFilter(filter_type=VolumeFilterType.SURGE), 20)
        assert evaluator.evaluate(VolumeFilter(filter_type=VolumeFilterType.BULLISH_WITH_VOLUME), 20)
        assert not evaluator.evaluate(VolumeFilter(filter_type=VolumeFilterType.SURGE), 19)

    def test_atr_threshold_relative_to_close(self, make_series):
        # Bar range is 3 on a price near 100-140: ATR/close is about 2-3%
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(40)])))
        assert evaluator.evaluate(ATRFilter(filter_type=ATRFilterType.ABOVE_THRESHOLD, threshold=0.01), 39)
        assert evaluator.evaluate(ATRFilter(filter_type=ATRFilterType.LOW_VOLATILITY, threshold=0.05), 39)

    def test_vwap_near(self, make_series):
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0] * 25)))
        assert evaluator.evaluate(VWAPFilter(filter_type=VWAPFilterType.PRICE_NEAR), 24)
        assert not evaluator.evaluate(VWAPFilter(filter_type=VWAPFilterType.PRICE_ABOVE), 24)


class TestThreeRSIFilter:
    def test_all_above_on_uptrend(self, make_series):
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(40)])))
        assert evaluator.evaluate(ThreeRSIFilter(filter_type=ThreeRSIFilterType.ALL_ABOVE_70), 39)
        assert evaluator.evaluate(ThreeRSIFilter(filter_type=ThreeRSIFilterType.HIGH_ABOVE_MA), 39)
        assert not evaluator.evaluate(ThreeRSIFilter(filter_type=ThreeRSIFilterType.ALL_BELOW_50), 39)

    def test_needs_two_ascending_periods(self):
        with pytest.raises(ConfigurationError, match="at least 2"):
            ThreeRSIFilter(rsi_periods=[14])
        with pytest.raises(ConfigurationError, match="strictly ascending"):
            ThreeRSIFilter(rsi_periods=[21, 14, 7])

    def test_three_rsi_extremes_on_uptrend(self, make_series):
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(40)])))
        assert evaluator.evaluate(ThreeRSIFilter(filter_type=ThreeRSIFilterType.EXTREME_OVERBOUGHT), 39)
        assert evaluator.evaluate(ThreeRSIFilter(filter_type=ThreeRSIFilterType.SIDEWAYS), 39)
        assert not evaluator.evaluate(ThreeRSIFilter(filter_type=ThreeRSIFilterType.OVERBOUGHT_RANGE), 39)
        assert not evaluator.evaluate(ThreeRSIFilter(filter_type=ThreeRSIFilterType.CROSS_ABOVE_50), 39)


class TestMomentumFilter:
    def test_uptrend_composites(self, make_series):
        """%K sits at 15/16 and ROC(10) stays above 7% on a steady climb."""
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(40)])))
        for filter_type in (MomentumFilterType.STRONG_POSITIVE, MomentumFilterType.OVERBOUGHT,
                            MomentumFilterType.PERSISTENT, MomentumFilterType.STABLE):
            assert evaluator.evaluate(MomentumFilter(filter_type=filter_type), 39), filter_type.name
        for filter_type in (MomentumFilterType.OVERSOLD, MomentumFilterType.REVERSAL,
                            MomentumFilterType.STRONG_NEGATIVE):
            assert not evaluator.evaluate(MomentumFilter(filter_type=filter_type), 39), filter_type.name


class TestExtendedCodes:
    def test_adx_levels_on_pure_uptrend(self, make_series):
        """Every bar adds +DM 1 on a true range of 3, so +DI is 33.3, -DI 0 and ADX 100."""
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(60)])))
        assert evaluator.evaluate(ADXFilter(filter_type=ADXFilterType.ADX_EXTREME_HIGH), 59)
        assert evaluator.evaluate(ADXFilter(filter_type=ADXFilterType.ADX_ABOVE_PLUS_DI), 59)
        assert evaluator.evaluate(ADXFilter(filter_type=ADXFilterType.ADX_STABLE), 59)
        assert not evaluator.evaluate(ADXFilter(filter_type=ADXFilterType.PLUS_DI_EXTREME), 59)
        assert not evaluator.evaluate(ADXFilter(filter_type=ADXFilterType.MINUS_DI_ABOVE_ADX), 59)

    def test_vwap_whole_bar_above(self, make_series):
        evaluator = FilterEvaluator(IndicatorEngine(make_series([100.0 + i for i in range(40)])))
        assert evaluator.evaluate(VWAPFilter(filter_type=VWAPFilterType.STRONG_ABOVE), 39)
        assert not evaluator.evaluate(VWAPFilter(filter_type=VWAPFilterType.STRONG_BELOW), 39)

    def test_volume_rising_with_price(self, make_series):
        bars = [
            Bar(b.timestamp, b.open, b.high, b.low, b.close, 1000.0 + 10 * k)
            for k, b in enumerate(make_series([100.0 + i for i in range(10)]))
        ]
        evaluator = FilterEvaluator(IndicatorEngine(CandleSeries(bars)))
        rising = VolumeFilter(filter_type=VolumeFilterType.INCREASING_IN_UPTREND)
        falling = VolumeFilter(filter_type=VolumeFilterType.DECREASING_IN_DOWNTREND)
        assert evaluator.evaluate(rising, 5)
        assert not evaluator.evaluate(rising, 0)
        assert not evaluator.evaluate(falling, 5)
