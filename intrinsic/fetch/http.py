'''
HTTP helpers shared by the market-data clients.

JSON GET with retries and exponential backoff, plus a min-interval rate
limiter for providers with per-minute quotas.
'''

import logging
import time
from typing import Any, Dict, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (intrinsic valuation client)',
    'Accept': 'application/json',
}


class FetchError(RuntimeError):
  '''Market data could not be retrieved or understood.'''


class RateLimiter:
  '''Simple min-interval rate limiter.'''

  def __init__(self, min_interval_sec: float) -> None:
    self._min_interval = float(min_interval_sec)
    self._last = 0.0

  def wait(self) -> None:
    now = time.time()
    sleep_for = self._min_interval - (now - self._last)
    if sleep_for > 0:
      time.sleep(sleep_for)
    self._last = time.time()


def fetch_json(
    session: requests.Session,
    url: str,
    *,
    params: Optional[Mapping[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout_sec: int = 15,
    retries: int = 3,
    backoff_sec: float = 1.0,
    limiter: Optional[RateLimiter] = None,
) -> Any:
  '''
  GET `url` and decode the JSON body.

  Raises:
    FetchError: After the last failed attempt (network error, HTTP status
      >= 400 or a body that is not JSON)
  '''
  last_err: Optional[Exception] = None
  for attempt in range(retries):
    try:
      if limiter:
        limiter.wait()

      resp = session.get(url,
                         params=params,
                         headers=headers or DEFAULT_HEADERS,
                         timeout=timeout_sec)
      status = int(resp.status_code)
      if status >= 400:
        raise requests.HTTPError(f'HTTP {status} for {url}: {resp.text[:200]}')
      return resp.json()
    except (requests.RequestException, ValueError) as e:
      last_err = e
      logger.debug('Attempt %d/%d for %s failed: %s', attempt + 1, retries,
                   url, e)
      if attempt < retries - 1:
        time.sleep(backoff_sec * (2**attempt))
  raise FetchError(f'Request to {url} failed: {last_err}') from last_err
