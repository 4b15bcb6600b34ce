'''
Fundamental metrics client (Finnhub).

Maps the `stock/metric` and `stock/profile2` endpoints onto RawFundamentals.
Every field the provider omits stays None so the normalizer's fallback
chain can run; the share count in millions is converted to billions.

The metric endpoint reports per-share values and ratios only, so
`total_fcf_b`, `total_cash_b` and `total_debt_b` are always None here and
FCF, cash and debt come from the price/FCF, cash-per-share and book
leverage derivations. The totals are filled when a record is rebuilt from
Fundamentals (RawFundamentals.from_fundamentals).
'''

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from intrinsic.domain.types import RawFundamentals
from intrinsic.fetch.http import fetch_json
from intrinsic.fetch.http import FetchError
from intrinsic.fetch.http import RateLimiter
from intrinsic.fetch.quotes import clean_ticker

logger = logging.getLogger(__name__)

FINNHUB_BASE_URL = 'https://finnhub.io/api/v1'
FINNHUB_MIN_INTERVAL_SEC = 1.0
MILLIONS_PER_BILLION = 1000.0

# First key present wins.
METRIC_KEYS: Dict[str, List[str]] = {
    'price_to_fcf': ['pfcfShareTTM', 'pfcfShareAnnual'],
    'cash_per_share': ['cashPerSharePerShareAnnual',
                       'cashPerSharePerShareQuarterly'],
    'debt_to_equity': ['totalDebt/totalEquityAnnual',
                       'totalDebt/totalEquityQuarterly'],
    'book_value_per_share': ['bookValuePerShareAnnual',
                             'bookValuePerShareQuarterly'],
    'year_high': ['52WeekHigh'],
    'trailing_pe': ['peTTM', 'peBasicExclExtraTTM', 'peExclExtraTTM'],
    'beta': ['beta'],
}
PE_SERIES_KEY = 'pe'
FCF_SERIES_KEYS = ['fcfPerShareTTM', 'freeCashFlowPerShare']


def _pick(values: Mapping[str, Any], keys: List[str]) -> Optional[float]:
  for key in keys:
    value = values.get(key)
    if isinstance(value, (int, float)):
      return float(value)
  return None


def _series(annual: Mapping[str, Any],
            key: str) -> Optional[Dict[str, float]]:
  '''Provider series [{'period': ..., 'v': ...}] as {period: value}.'''
  points = annual.get(key) or []
  out = {
      str(p['period']): float(p['v'])
      for p in points
      if p.get('period') and isinstance(p.get('v'), (int, float))
  }
  return out or None


def parse_metrics(
    metric_payload: Mapping[str, Any],
    profile_payload: Mapping[str, Any],
    price_usd: Optional[float],
) -> RawFundamentals:
  '''Build RawFundamentals from metric and profile responses.'''
  metric = metric_payload.get('metric') or {}
  annual = (metric_payload.get('series') or {}).get('annual') or {}

  shares_m = profile_payload.get('shareOutstanding')
  shares_b = (float(shares_m) / MILLIONS_PER_BILLION
              if isinstance(shares_m, (int, float)) else None)

  fcf_series = None
  for key in FCF_SERIES_KEYS:
    fcf_series = _series(annual, key)
    if fcf_series:
      break

  return RawFundamentals(
      price_usd=price_usd,
      currency=profile_payload.get('currency') or None,
      shares_outstanding_b=shares_b,
      pe_series=_series(annual, PE_SERIES_KEY),
      fcf_series=fcf_series,
      **{field: _pick(metric, keys) for field, keys in METRIC_KEYS.items()},
  )


class FinnhubClient:
  '''Fetch raw fundamentals for a ticker.'''

  def __init__(
      self,
      api_key: Optional[str],
      session: Optional[requests.Session] = None,
      min_interval_sec: float = FINNHUB_MIN_INTERVAL_SEC,
  ):
    self.api_key = api_key
    self.session = session or requests.Session()
    self.limiter = RateLimiter(min_interval_sec)

  def _get(self, path: str, **params: str) -> Dict[str, Any]:
    payload = fetch_json(self.session,
                         f'{FINNHUB_BASE_URL}/{path}',
                         params={**params, 'token': self.api_key or ''},
                         limiter=self.limiter)
    if not isinstance(payload, dict):
      raise FetchError(f'Unexpected response from {path}')
    return payload

  def fetch_raw_fundamentals(
      self,
      ticker: str,
      price_usd: Optional[float] = None,
  ) -> RawFundamentals:
    '''
    Fetch metrics and profile for `ticker`.

    Raises:
      FetchError: If no API key is configured or a request fails
    '''
    if not self.api_key:
      raise FetchError('Finnhub API key is not configured')

    symbol = clean_ticker(ticker)
    metric_payload = self._get('stock/metric', symbol=symbol, metric='all')
    profile_payload = self._get('stock/profile2', symbol=symbol)
    if not metric_payload.get('metric'):
      logger.warning('%s: no metrics returned', symbol)

    return parse_metrics(metric_payload, profile_payload, price_usd)
