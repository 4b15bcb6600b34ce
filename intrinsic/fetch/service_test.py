from unittest import mock

import pytest

from intrinsic.domain.types import RawFundamentals
from intrinsic.fetch.http import FetchError
from intrinsic.fetch.quotes import Quote
from intrinsic.fetch.service import MarketDataService


def _service(quote, raw, rate=1.0):
  quotes = mock.Mock()
  quotes.fetch_quote.return_value = quote
  metrics = mock.Mock()
  metrics.fetch_raw_fundamentals.return_value = raw
  fx = mock.Mock()
  fx.convert.side_effect = lambda amount, currency: amount * rate
  return MarketDataService(quotes=quotes, metrics=metrics, fx=fx)


class TestMarketDataService:

  def test_usd_snapshot(self):
    """USD price is attached to the raw fundamentals."""
    service = _service(Quote('AAPL', 180.0, 175.0, 'USD'),
                       RawFundamentals(beta=1.2))

    snapshot = service.fetch_snapshot('aapl')

    assert snapshot.ticker == 'AAPL'
    assert snapshot.price_usd == 180.0
    assert snapshot.raw.price_usd == 180.0
    assert snapshot.raw.beta == 1.2
    service.quotes.fetch_quote.assert_called_once_with('AAPL')

  def test_foreign_quote_converted(self):
    """A EUR quote is converted before normalization."""
    service = _service(Quote('SAP.DE', 200.0, 198.0, 'EUR'),
                       RawFundamentals(currency='EUR'),
                       rate=1.1)

    snapshot = service.fetch_snapshot('SAP.DE')

    assert snapshot.price_usd == pytest.approx(220.0)
    assert snapshot.quote.price == 200.0
    service.fx.convert.assert_called_once_with(200.0, 'EUR')

  def test_quote_failure_propagates(self):
    """Fetch failures surface to the caller."""
    service = _service(None, RawFundamentals())
    service.quotes.fetch_quote.side_effect = FetchError('down')

    with pytest.raises(FetchError):
      service.fetch_snapshot('AAPL')
