'''
Priority-ordered derivation tables for normalized fundamentals.

Each field that can be obtained several ways is described by an ordered
list of Derivation strategies. derive() evaluates them first-match-wins;
a strategy returns None when its inputs are absent. When nothing matches
the field resolves to 0.0.

`rate` is the reporting-currency -> USD conversion rate. Only absolutes in
the reporting currency are multiplied by it; ratios and the USD price are
used as they are.
'''

from dataclasses import dataclass
import logging
from math import isfinite
from typing import Callable, List, Optional, Sequence

from intrinsic.domain.types import PolicyOutput
from intrinsic.domain.types import RawFundamentals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Derivation:
  '''A named way of computing one field from raw provider data.'''
  name: str
  compute: Callable[[RawFundamentals, float], Optional[float]]


def _known(*values: Optional[float]) -> bool:
  return all(v is not None and isfinite(v) for v in values)


def _positive(value: Optional[float]) -> bool:
  return value is not None and isfinite(value) and value > 0


def _fcf_from_total(raw: RawFundamentals, rate: float) -> Optional[float]:
  if _known(raw.total_fcf_b) and _positive(raw.shares_outstanding_b):
    return raw.total_fcf_b / raw.shares_outstanding_b * rate
  return None


def _fcf_from_price_ratio(raw: RawFundamentals,
                          rate: float) -> Optional[float]:
  # pylint: disable=unused-argument
  if _positive(raw.price_usd) and _positive(raw.price_to_fcf):
    return raw.price_usd / raw.price_to_fcf
  return None


def _cash_from_total(raw: RawFundamentals, rate: float) -> Optional[float]:
  if _known(raw.total_cash_b):
    return raw.total_cash_b * rate
  return None


def _cash_from_per_share(raw: RawFundamentals,
                         rate: float) -> Optional[float]:
  if _known(raw.cash_per_share) and _positive(raw.shares_outstanding_b):
    return raw.cash_per_share * raw.shares_outstanding_b * rate
  return None


def _debt_from_total(raw: RawFundamentals, rate: float) -> Optional[float]:
  if _known(raw.total_debt_b):
    return raw.total_debt_b * rate
  return None


def _debt_from_book_leverage(raw: RawFundamentals,
                             rate: float) -> Optional[float]:
  if _known(raw.book_value_per_share, raw.debt_to_equity) and _positive(
      raw.shares_outstanding_b):
    equity = raw.shares_outstanding_b * raw.book_value_per_share
    return equity * raw.debt_to_equity * rate
  return None


def _high_from_report(raw: RawFundamentals, rate: float) -> Optional[float]:
  if _positive(raw.year_high):
    return raw.year_high * rate
  return None


def _high_from_price(raw: RawFundamentals, rate: float) -> Optional[float]:
  # pylint: disable=unused-argument
  if _positive(raw.price_usd):
    return raw.price_usd
  return None


FCF_PER_SHARE: List[Derivation] = [
    Derivation('total_fcf', _fcf_from_total),
    Derivation('price_to_fcf', _fcf_from_price_ratio),
]

CASH: List[Derivation] = [
    Derivation('total_cash', _cash_from_total),
    Derivation('cash_per_share', _cash_from_per_share),
]

DEBT: List[Derivation] = [
    Derivation('total_debt', _debt_from_total),
    Derivation('book_leverage', _debt_from_book_leverage),
]

YEAR_HIGH: List[Derivation] = [
    Derivation('reported_high', _high_from_report),
    Derivation('live_price', _high_from_price),
]


def derive(
    table: Sequence[Derivation],
    raw: RawFundamentals,
    rate: float,
    default: float = 0.0,
) -> PolicyOutput[float]:
  '''
  Evaluate derivations in order and return the first available value.

  Args:
    table: Ordered strategies, highest priority first
    raw: Raw provider fields
    rate: Reporting-currency -> USD rate
    default: Value used when no strategy applies

  Returns:
    PolicyOutput with the value and the name of the strategy that won
  '''
  for derivation in table:
    value = derivation.compute(raw, rate)
    if value is not None:
      logger.debug('Derived via %s: %.4f', derivation.name, value)
      return PolicyOutput(value=value, diag={'source': derivation.name})
  return PolicyOutput(value=default, diag={'source': 'default'})
