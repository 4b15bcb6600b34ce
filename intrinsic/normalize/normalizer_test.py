from unittest import mock

import pytest

from intrinsic.domain.errors import MissingPriceError
from intrinsic.domain.types import RawFundamentals
from intrinsic.normalize.normalizer import average_historical_pe
from intrinsic.normalize.normalizer import compute_fcf_cagr
from intrinsic.normalize.normalizer import FundamentalsNormalizer
from intrinsic.normalize.normalizer import normalize_fundamentals


class TestAverageHistoricalPE:
  """Tests for average_historical_pe."""

  def test_five_most_recent_positive(self):
    """Negative years are skipped, then the last five are averaged.

    Positive, chronological: 10, 12, 20, 22, 24, 26
    Last five: 12, 20, 22, 24, 26 -> mean 20.8
    """
    series = {
        '2024-12-31': 26.0,
        '2018-12-31': 10.0,
        '2019-12-31': 12.0,
        '2020-12-31': -5.0,
        '2021-12-31': 20.0,
        '2022-12-31': 22.0,
        '2023-12-31': 24.0,
    }
    result = average_historical_pe(series, trailing_pe=30.0)

    assert result.value == pytest.approx(20.8)
    assert result.diag['source'] == 'annual_series'
    assert result.diag['observations'] == 5

  def test_fewer_than_five(self):
    """Mean of what is available."""
    result = average_historical_pe({'2022': 10.0, '2023': 20.0}, None)

    assert result.value == pytest.approx(15.0)

  def test_missing_series_uses_trailing(self):
    """Absent series falls back to trailing P/E."""
    result = average_historical_pe(None, trailing_pe=18.0)

    assert result.value == 18.0
    assert result.diag['source'] == 'trailing_pe'

  def test_no_positive_observation_uses_trailing(self):
    """A series of losses behaves like an absent series."""
    assert average_historical_pe({'2023': -4.0}, 18.0).value == 18.0

  def test_nothing_available(self):
    """Neither source gives 0.0."""
    assert average_historical_pe(None, None).value == 0.0


class TestComputeFcfCagr:
  """Tests for compute_fcf_cagr."""

  def test_short_history(self):
    """3 points -> 2-year lookback: (121/100)^(1/2) - 1 = 10%."""
    result = compute_fcf_cagr({'2021': 100.0, '2022': 110.0, '2023': 121.0})

    assert result.value == pytest.approx(10.0)
    assert result.diag['num_years'] == 2

  def test_lookback_capped_at_five_years(self):
    """7 points: start 5 years before the latest.

    Chronological: 50, 100, 110, 121, 133.1, 146.41, 161.051
    (161.051 / 100)^(1/5) - 1 = 10%
    """
    series = {
        '2023': 161.051,
        '2017': 50.0,
        '2018': 100.0,
        '2019': 110.0,
        '2020': 121.0,
        '2021': 133.1,
        '2022': 146.41,
    }
    result = compute_fcf_cagr(series)

    assert result.value == pytest.approx(10.0)
    assert result.diag['num_years'] == 5
    assert result.diag['first_period'] == '2018'

  def test_declining(self):
    """(81/100)^(1/2) - 1 = -10%."""
    result = compute_fcf_cagr({'2021': 100.0, '2022': 90.0, '2023': 81.0})

    assert result.value == pytest.approx(-10.0)

  def test_negative_to_positive_undefined(self):
    """Sign change has no geometric CAGR."""
    result = compute_fcf_cagr({'2022': -50.0, '2023': 80.0})

    assert result.value is None
    assert result.diag['error'] == 'non_positive_endpoint'

  def test_positive_to_negative_undefined(self):
    """Sign change the other way is undefined too."""
    assert compute_fcf_cagr({'2022': 50.0, '2023': -10.0}).value is None

  def test_single_observation(self):
    """Fewer than two points."""
    result = compute_fcf_cagr({'2023': 50.0})

    assert result.value is None
    assert result.diag['error'] == 'insufficient_data'

  def test_missing_series(self):
    """No series at all."""
    assert compute_fcf_cagr(None).value is None


class TestFundamentalsNormalizer:
  """Tests for FundamentalsNormalizer."""

  def test_usd_full_record(self, usd_raw):
    """Fully populated USD data passes through unconverted."""
    result = FundamentalsNormalizer().normalize(usd_raw)
    data = result.value

    assert data.fcf_per_share == pytest.approx(6.0)
    assert data.shares_outstanding_b == 2.0
    assert data.cash_b == 30.0
    assert data.debt_b == 10.0
    assert data.current_pe == 28.0
    assert data.historical_pe == pytest.approx(24.0)
    assert data.year_high == 120.0
    assert data.beta == 1.1
    assert data.fcf_cagr_percent == pytest.approx(25.0)
    assert result.diag['fx_rate'] == 1.0
    assert result.diag['fcf_source'] == 'total_fcf'

  def test_usd_skips_lookup(self, usd_raw):
    """USD never calls the FX collaborator."""
    lookup = mock.Mock(return_value=0.5)
    FundamentalsNormalizer(lookup).normalize(usd_raw)

    lookup.assert_not_called()

  def test_eur_conversion(self):
    """EUR at 0.92: cash 100 -> 92."""
    raw = RawFundamentals(price_usd=50.0, currency='EUR', total_cash_b=100.0)
    lookup = mock.Mock(return_value=0.92)

    data = FundamentalsNormalizer(lookup).normalize(raw).value

    lookup.assert_called_once_with('EUR')
    assert data.cash_b == pytest.approx(92.0)

  def test_ratios_not_converted(self):
    """P/E and beta are currency-neutral."""
    raw = RawFundamentals(price_usd=50.0,
                          currency='JPY',
                          trailing_pe=15.0,
                          beta=0.9,
                          pe_series={'2023': 12.0})
    data = normalize_fundamentals(raw, lambda code: 0.0067)

    assert data.current_pe == 15.0
    assert data.historical_pe == 12.0
    assert data.beta == 0.9

  def test_lowercase_currency(self):
    """Currency codes are case-insensitive."""
    raw = RawFundamentals(price_usd=50.0, currency='usd', total_cash_b=10.0)
    lookup = mock.Mock(return_value=0.5)

    assert normalize_fundamentals(raw, lookup).cash_b == 10.0
    lookup.assert_not_called()

  def test_invalid_rate_treated_as_usd(self):
    """A zero rate from the collaborator is ignored."""
    raw = RawFundamentals(price_usd=50.0, currency='EUR', total_cash_b=10.0)
    result = FundamentalsNormalizer(lambda code: 0.0).normalize(raw)

    assert result.value.cash_b == 10.0
    assert result.diag['fx_error'] == 'invalid_rate'

  def test_no_lookup_treated_as_usd(self):
    """Without an FX collaborator every currency is assumed USD."""
    raw = RawFundamentals(price_usd=50.0, currency='GBP', total_debt_b=7.0)

    assert normalize_fundamentals(raw).debt_b == 7.0

  def test_year_high_clamped_to_price(self):
    """A 52-week high below the live price is corrected."""
    raw = RawFundamentals(price_usd=100.0, year_high=90.0)
    result = FundamentalsNormalizer().normalize(raw)

    assert result.value.year_high == 100.0
    assert result.diag['year_high_clamped']

  def test_year_high_converted_then_clamped(self):
    """120 EUR at 0.5 is 60 USD, below the 100 USD price."""
    raw = RawFundamentals(price_usd=100.0, currency='EUR', year_high=120.0)

    assert normalize_fundamentals(raw, lambda c: 0.5).year_high == 100.0

  def test_sparse_record_defaults(self):
    """Only a price: every numeric field resolves to 0.0."""
    data = normalize_fundamentals(RawFundamentals(price_usd=42.0))

    assert data.fcf_per_share == 0.0
    assert data.shares_outstanding_b == 0.0
    assert data.cash_b == 0.0
    assert data.debt_b == 0.0
    assert data.current_pe == 0.0
    assert data.historical_pe == 0.0
    assert data.year_high == 42.0
    assert data.beta is None
    assert data.fcf_cagr_percent is None

  @pytest.mark.parametrize('price', [None, 0.0, -1.0, float('nan')])
  def test_missing_price_raises(self, price):
    """The live price is mandatory."""
    with pytest.raises(MissingPriceError):
      normalize_fundamentals(RawFundamentals(price_usd=price))

  def test_idempotent(self, usd_raw):
    """Normalizing normalized USD data returns the same record."""
    first = normalize_fundamentals(usd_raw)
    raw_again = RawFundamentals.from_fundamentals(first, usd_raw.price_usd)
    second = normalize_fundamentals(raw_again)

    assert second.fcf_per_share == pytest.approx(first.fcf_per_share)
    assert second.shares_outstanding_b == first.shares_outstanding_b
    assert second.cash_b == first.cash_b
    assert second.debt_b == first.debt_b
    assert second.current_pe == first.current_pe
    assert second.historical_pe == pytest.approx(first.historical_pe)
    assert second.year_high == first.year_high
    assert second.beta == first.beta
    assert second.fcf_cagr_percent == pytest.approx(first.fcf_cagr_percent)

  def test_idempotent_negative_pe(self):
    """A negative trailing P/E survives a second pass."""
    raw = RawFundamentals(price_usd=50.0,
                          trailing_pe=-12.0,
                          total_fcf_b=1.0,
                          shares_outstanding_b=1.0)
    first = normalize_fundamentals(raw)
    second = normalize_fundamentals(
        RawFundamentals.from_fundamentals(first, raw.price_usd))

    assert first.current_pe == -12.0
    assert second == first
