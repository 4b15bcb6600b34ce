'''
Fundamentals normalizer.

Turns sparse, possibly foreign-currency provider data (RawFundamentals)
into a fully populated USD Fundamentals record. The normalizer is the only
component that performs currency conversion. Missing optional data never
raises; only a missing live price does.

Usage:
  normalizer = FundamentalsNormalizer(rate_lookup=fx_client.get_rate)
  fundamentals = normalizer.normalize(raw).value
'''

import logging
from math import isfinite
from typing import Callable, Dict, Mapping, Optional

import pandas as pd

from intrinsic.domain.errors import MissingPriceError
from intrinsic.domain.types import Fundamentals
from intrinsic.domain.types import PolicyOutput
from intrinsic.domain.types import RawFundamentals
from intrinsic.normalize import derivations

logger = logging.getLogger(__name__)

BASE_CURRENCY = 'USD'
PE_LOOKBACK = 5
CAGR_MAX_YEARS = 5

RateLookup = Callable[[str], float]


def _to_series(observations: Mapping[str, float]) -> pd.Series:
  '''Chronologically sorted float series, non-finite values dropped.'''
  series = pd.Series(dict(observations), dtype=float).sort_index()
  return series[series.map(isfinite)]


def average_historical_pe(
    pe_series: Optional[Mapping[str, float]],
    trailing_pe: Optional[float],
) -> PolicyOutput[float]:
  '''
  Mean of up to the 5 most recent positive annual P/E observations.

  Falls back to the trailing P/E when the series is absent or has no
  positive observation, and to 0.0 when neither exists.
  '''
  if pe_series:
    series = _to_series(pe_series)
    recent = series[series > 0].tail(PE_LOOKBACK)
    if not recent.empty:
      return PolicyOutput(value=float(recent.mean()),
                          diag={
                              'source': 'annual_series',
                              'observations': len(recent),
                          })

  if trailing_pe is not None and isfinite(trailing_pe) and trailing_pe > 0:
    return PolicyOutput(value=float(trailing_pe),
                        diag={'source': 'trailing_pe'})
  return PolicyOutput(value=0.0, diag={'source': 'default'})


def compute_fcf_cagr(
    fcf_series: Optional[Mapping[str, float]]
) -> PolicyOutput[Optional[float]]:
  '''
  Trailing compound annual growth rate of FCF, in percent.

  The lookback is min(5, observations - 1) years, ending at the latest
  observation. Both endpoints must be strictly positive; sign changes make
  a geometric CAGR undefined and the result is None.
  '''
  if not fcf_series:
    return PolicyOutput(value=None, diag={'error': 'missing_series'})

  series = _to_series(fcf_series)
  if len(series) < 2:
    return PolicyOutput(value=None,
                        diag={
                            'error': 'insufficient_data',
                            'observations': len(series),
                        })

  years = min(CAGR_MAX_YEARS, len(series) - 1)
  last_fcf = float(series.iloc[-1])
  first_fcf = float(series.iloc[-1 - years])

  if first_fcf <= 0 or last_fcf <= 0:
    return PolicyOutput(value=None,
                        diag={
                            'error': 'non_positive_endpoint',
                            'first_fcf': first_fcf,
                            'last_fcf': last_fcf,
                        })

  cagr = ((last_fcf / first_fcf)**(1.0 / years) - 1.0) * 100.0
  return PolicyOutput(value=cagr,
                      diag={
                          'first_period': str(series.index[-1 - years]),
                          'last_period': str(series.index[-1]),
                          'first_fcf': first_fcf,
                          'last_fcf': last_fcf,
                          'num_years': years,
                      })


class FundamentalsNormalizer:
  '''
  Normalize raw provider data into USD Fundamentals.

  Currency conversion goes through `rate_lookup`, which maps a reporting
  currency to its USD rate and is expected to return 1.0 on any failure.
  Without a lookup every currency is treated as USD.
  '''

  def __init__(self, rate_lookup: Optional[RateLookup] = None):
    self.rate_lookup = rate_lookup

  def resolve_rate(self, currency: Optional[str]) -> PolicyOutput[float]:
    '''Conversion rate from `currency` to USD.'''
    code = (currency or BASE_CURRENCY).strip().upper() or BASE_CURRENCY
    if code == BASE_CURRENCY:
      return PolicyOutput(value=1.0, diag={'currency': code})

    if self.rate_lookup is None:
      logger.warning('No FX lookup configured, treating %s as USD', code)
      return PolicyOutput(value=1.0,
                          diag={
                              'currency': code,
                              'error': 'no_lookup',
                          })

    rate = self.rate_lookup(code)
    if rate is None or not isfinite(rate) or rate <= 0:
      logger.warning('Invalid FX rate for %s (%r), treating as USD', code,
                     rate)
      return PolicyOutput(value=1.0,
                          diag={
                              'currency': code,
                              'error': 'invalid_rate',
                          })
    return PolicyOutput(value=float(rate), diag={'currency': code})

  def normalize(self, raw: RawFundamentals) -> PolicyOutput[Fundamentals]:
    '''
    Build a fully populated Fundamentals record.

    Args:
      raw: Provider data with absent fields set to None

    Returns:
      PolicyOutput with Fundamentals and the source of each derived field

    Raises:
      MissingPriceError: If raw.price_usd is absent or not positive
    '''
    price = raw.price_usd
    if price is None or not isfinite(price) or price <= 0:
      raise MissingPriceError(f'Live USD price unavailable: {price!r}')

    rate_result = self.resolve_rate(raw.currency)
    rate = rate_result.value

    fcf = derivations.derive(derivations.FCF_PER_SHARE, raw, rate)
    cash = derivations.derive(derivations.CASH, raw, rate)
    debt = derivations.derive(derivations.DEBT, raw, rate)
    high = derivations.derive(derivations.YEAR_HIGH, raw, rate)
    hist_pe = average_historical_pe(raw.pe_series, raw.trailing_pe)
    cagr = compute_fcf_cagr(raw.fcf_series)

    shares = raw.shares_outstanding_b
    if shares is None or not isfinite(shares) or shares < 0:
      shares = 0.0

    trailing_pe = raw.trailing_pe
    if trailing_pe is None or not isfinite(trailing_pe):
      trailing_pe = 0.0

    beta = raw.beta
    if beta is not None and not isfinite(beta):
      beta = None

    fundamentals = Fundamentals(
        fcf_per_share=fcf.value,
        shares_outstanding_b=float(shares),
        cash_b=cash.value,
        debt_b=debt.value,
        current_pe=float(trailing_pe),
        historical_pe=hist_pe.value,
        year_high=max(high.value, price),
        beta=beta,
        fcf_cagr_percent=cagr.value,
    )

    diag: Dict[str, object] = {
        'fx_rate': rate,
        **{f'fx_{k}': v for k, v in rate_result.diag.items()},
        'fcf_source': fcf.diag['source'],
        'cash_source': cash.diag['source'],
        'debt_source': debt.diag['source'],
        'year_high_source': high.diag['source'],
        'year_high_clamped': high.value < price,
        'historical_pe_source': hist_pe.diag['source'],
        **{f'cagr_{k}': v for k, v in cagr.diag.items()},
    }
    logger.debug('Normalized fundamentals (rate=%.4f): %s', rate, fundamentals)
    return PolicyOutput(value=fundamentals, diag=diag)


def normalize_fundamentals(
    raw: RawFundamentals,
    rate_lookup: Optional[RateLookup] = None,
) -> Fundamentals:
  '''Normalize `raw` and return only the Fundamentals record.'''
  return FundamentalsNormalizer(rate_lookup).normalize(raw).value
