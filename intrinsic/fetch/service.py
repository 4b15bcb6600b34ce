'''
Market data snapshot for one ticker.

Fetches the live quote and the raw fundamentals concurrently, converts the
quote into USD and attaches the USD price to the raw fundamentals. Each
call is independent and returns immutable records.
'''

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from dataclasses import replace
import logging

from intrinsic.domain.types import RawFundamentals
from intrinsic.fetch.fx import ExchangeRateClient
from intrinsic.fetch.metrics import FinnhubClient
from intrinsic.fetch.quotes import clean_ticker
from intrinsic.fetch.quotes import Quote
from intrinsic.fetch.quotes import YahooQuoteClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketSnapshot:
  '''Quote, its USD price and the raw fundamentals for one ticker.'''
  ticker: str
  quote: Quote
  price_usd: float
  raw: RawFundamentals


class MarketDataService:
  '''Combine the quote, metrics and FX clients.'''

  def __init__(
      self,
      quotes: YahooQuoteClient,
      metrics: FinnhubClient,
      fx: ExchangeRateClient,
  ):
    self.quotes = quotes
    self.metrics = metrics
    self.fx = fx

  def fetch_snapshot(self, ticker: str) -> MarketSnapshot:
    '''
    Fetch everything needed to normalize `ticker`.

    Raises:
      FetchError: If the quote or the metrics cannot be retrieved
    '''
    symbol = clean_ticker(ticker)
    with ThreadPoolExecutor(max_workers=2) as executor:
      quote_future = executor.submit(self.quotes.fetch_quote, symbol)
      raw_future = executor.submit(self.metrics.fetch_raw_fundamentals, symbol)
      quote = quote_future.result()
      raw = raw_future.result()

    price_usd = self.fx.convert(quote.price, quote.currency)
    logger.info('%s: price %.2f %s -> %.2f USD', symbol, quote.price,
                quote.currency, price_usd)
    return MarketSnapshot(ticker=symbol,
                          quote=quote,
                          price_usd=price_usd,
                          raw=replace(raw, price_usd=price_usd))
