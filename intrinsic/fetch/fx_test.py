from unittest import mock

import pytest

from intrinsic.fetch.fx import ExchangeRateClient


def _session(payload=None, status_code=200):
  session = mock.Mock()
  resp = mock.Mock(status_code=status_code, text='')
  resp.json.return_value = payload
  session.get.return_value = resp
  return session


class TestExchangeRateClient:

  def test_rate(self):
    """Successful pair lookup."""
    session = _session({'result': 'success', 'conversion_rate': 1.08})
    client = ExchangeRateClient('key', session)

    assert client.get_rate('eur') == 1.08
    assert '/pair/EUR/USD' in session.get.call_args[0][0]

  def test_usd_short_circuit(self):
    """USD needs no request."""
    session = _session()

    assert ExchangeRateClient('key', session).get_rate('USD') == 1.0
    session.get.assert_not_called()

  def test_missing_key(self):
    """No key: same as USD."""
    session = _session()

    assert ExchangeRateClient(None, session).get_rate('EUR') == 1.0
    session.get.assert_not_called()

  def test_unsupported_currency(self):
    """Provider error result falls back to 1.0."""
    session = _session({'result': 'error', 'error-type': 'unsupported-code'})

    assert ExchangeRateClient('key', session).get_rate('XYZ') == 1.0

  def test_network_failure(self):
    """HTTP failure falls back to 1.0."""
    session = _session(status_code=503)

    with mock.patch('intrinsic.fetch.http.time.sleep'):
      assert ExchangeRateClient('key', session).get_rate('EUR') == 1.0

  def test_convert(self):
    """Amount times rate."""
    session = _session({'result': 'success', 'conversion_rate': 0.5})

    assert ExchangeRateClient('k', session).convert(10.0, 'GBP') == \
        pytest.approx(5.0)
