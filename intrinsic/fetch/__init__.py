'''Market data clients: quotes, fundamentals metrics and FX rates.'''

from intrinsic.fetch.fx import ExchangeRateClient
from intrinsic.fetch.http import FetchError
from intrinsic.fetch.metrics import FinnhubClient
from intrinsic.fetch.quotes import Quote
from intrinsic.fetch.quotes import YahooQuoteClient
from intrinsic.fetch.service import MarketDataService
from intrinsic.fetch.service import MarketSnapshot

__all__ = [
    'ExchangeRateClient',
    'FetchError',
    'FinnhubClient',
    'MarketDataService',
    'MarketSnapshot',
    'Quote',
    'YahooQuoteClient',
]
