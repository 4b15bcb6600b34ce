'''
Currency conversion client (ExchangeRate-API pair endpoint).

Conversion never fails from the caller's point of view: any problem
(missing key, network error, unsupported currency) yields a rate of 1.0,
i.e. the amount is assumed to already be USD.
'''

import logging
from typing import Optional

import requests

from intrinsic.fetch.http import fetch_json
from intrinsic.fetch.http import FetchError

logger = logging.getLogger(__name__)

EXCHANGE_RATE_PAIR_URL_TMPL = (
    'https://v6.exchangerate-api.com/v6/{key}/pair/{source}/{target}')
TARGET_CURRENCY = 'USD'


class ExchangeRateClient:
  '''Rates from a source currency into USD.'''

  def __init__(
      self,
      api_key: Optional[str],
      session: Optional[requests.Session] = None,
  ):
    self.api_key = api_key
    self.session = session or requests.Session()

  def get_rate(self, source_currency: str) -> float:
    '''USD per one unit of `source_currency`; 1.0 on any failure.'''
    source = source_currency.strip().upper()
    if source == TARGET_CURRENCY:
      return 1.0
    if not self.api_key:
      logger.warning('No ExchangeRate API key, treating %s as USD', source)
      return 1.0

    url = EXCHANGE_RATE_PAIR_URL_TMPL.format(key=self.api_key,
                                             source=source,
                                             target=TARGET_CURRENCY)
    try:
      payload = fetch_json(self.session, url, retries=2)
    except FetchError as e:
      logger.warning('FX lookup %s->USD failed, using 1.0: %s', source, e)
      return 1.0

    if not isinstance(payload, dict) or payload.get('result') != 'success':
      error = payload.get('error-type') if isinstance(payload, dict) else None
      logger.warning('FX lookup %s->USD was rejected, using 1.0: %s', source,
                     error)
      return 1.0

    rate = payload.get('conversion_rate')
    if not isinstance(rate, (int, float)) or rate <= 0:
      logger.warning('FX lookup %s->USD returned no rate, using 1.0', source)
      return 1.0

    logger.debug('FX %s->USD = %.6f', source, rate)
    return float(rate)

  def convert(self, amount: float, source_currency: str) -> float:
    '''`amount` in `source_currency` expressed in USD.'''
    return amount * self.get_rate(source_currency)
