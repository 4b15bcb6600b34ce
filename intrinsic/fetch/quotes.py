'''
Live quote client (Yahoo Finance chart endpoint).

The chart metadata is sparse: the price falls back from the regular market
price to the chart previous close to the previous close, and the reference
close used for the day change falls back from the chart previous close to
the previous close to the price itself.
'''

from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional

import requests

from intrinsic.fetch.http import fetch_json
from intrinsic.fetch.http import FetchError

logger = logging.getLogger(__name__)

YAHOO_CHART_URL_TMPL = 'https://query1.finance.yahoo.com/v8/finance/chart/{ticker}'


def clean_ticker(raw: str) -> str:
  '''Trim, drop quote characters and upper-case a user-typed ticker.'''
  ticker = raw.strip().replace('"', '').upper()
  if not ticker:
    raise ValueError('Ticker is empty')
  return ticker


@dataclass(frozen=True)
class Quote:
  '''
  Latest price for a symbol in its trading currency.

  Attributes:
    symbol: Ticker symbol
    price: Current (or last close) price
    reference_price: Previous close used for the day change
    currency: Trading currency code
  '''
  symbol: str
  price: float
  reference_price: float
  currency: str = 'USD'

  @property
  def change(self) -> float:
    return self.price - self.reference_price

  @property
  def change_percent(self) -> float:
    if self.reference_price == 0:
      return 0.0
    return self.change / self.reference_price * 100.0


def _first_number(meta: Dict[str, Any], *keys: str) -> Optional[float]:
  for key in keys:
    value = meta.get(key)
    if value is not None:
      return float(value)
  return None


def parse_chart(payload: Dict[str, Any], ticker: str) -> Quote:
  '''
  Extract a Quote from a chart response.

  Raises:
    FetchError: If the provider reports an error, returns no result or
      reports no usable price
  '''
  chart = payload.get('chart') or {}
  error = chart.get('error')
  if error:
    description = error.get('description') or 'unknown ticker'
    raise FetchError(f'{ticker}: {description}')

  results = chart.get('result') or []
  if not results:
    raise FetchError(f'{ticker}: ticker not found')

  meta = results[0].get('meta') or {}
  price = _first_number(meta, 'regularMarketPrice', 'chartPreviousClose',
                        'previousClose') or 0.0
  if price == 0.0:
    raise FetchError(f'{ticker}: empty price data')

  reference = _first_number(meta, 'chartPreviousClose', 'previousClose')
  return Quote(
      symbol=str(meta.get('symbol') or ticker),
      price=price,
      reference_price=price if reference is None else reference,
      currency=str(meta.get('currency') or 'USD').upper(),
  )


class YahooQuoteClient:
  '''Fetch live quotes; the client keeps no state between calls.'''

  def __init__(self, session: Optional[requests.Session] = None):
    self.session = session or requests.Session()

  def fetch_quote(self, ticker: str) -> Quote:
    '''
    Fetch the latest daily quote for `ticker`.

    Raises:
      ValueError: If the ticker is empty after cleaning
      FetchError: If the quote cannot be retrieved
    '''
    symbol = clean_ticker(ticker)
    payload = fetch_json(self.session,
                         YAHOO_CHART_URL_TMPL.format(ticker=symbol),
                         params={'interval': '1d'})
    quote = parse_chart(payload, symbol)
    logger.info('%s: %.2f %s (%+.2f%%)', quote.symbol, quote.price,
                quote.currency, quote.change_percent)
    return quote
