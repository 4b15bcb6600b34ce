'''
Derived ratio calculators.

Signals computed from fundamentals and user assumptions, independent of
the DCF output except for the buy target. Prices of 0 mean "unknown" and
disable price-relative ratios.
'''

from typing import Optional

from intrinsic.policies.discount import CAPMRate
from intrinsic.policies.discount import EQUITY_RISK_PREMIUM
from intrinsic.policies.discount import RISK_FREE_RATE

PEG_UNDERVALUED = 1.0
PEG_OVERVALUED = 1.5

FCF_YIELD_EXPENSIVE = 3.0
FCF_YIELD_ATTRACTIVE = 7.0


def peg_ratio(current_pe: float, growth_rate_percent: float) -> float:
  '''P/E divided by growth (in percent); 0 when growth is not positive.'''
  if growth_rate_percent > 0:
    return current_pe / growth_rate_percent
  return 0.0


def classify_peg(peg: float) -> Optional[str]:
  '''
  Undervalued below 1.0, fair in [1.0, 1.5), overvalued from 1.5.

  Returns None for a non-positive PEG (unknown P/E or growth).
  '''
  if peg <= 0:
    return None
  if peg < PEG_UNDERVALUED:
    return 'undervalued'
  if peg < PEG_OVERVALUED:
    return 'fair'
  return 'overvalued'


def fcf_yield(fcf_per_share: float, current_price: float) -> float:
  '''FCF per share / price, in percent; 0 when the price is unknown.'''
  if current_price > 0:
    return fcf_per_share / current_price * 100.0
  return 0.0


def classify_fcf_yield(yield_percent: float) -> str:
  '''Expensive below 3%, fair in [3%, 7%), attractive from 7%.'''
  if yield_percent < FCF_YIELD_EXPENSIVE:
    return 'expensive'
  if yield_percent < FCF_YIELD_ATTRACTIVE:
    return 'fair'
  return 'attractive'


def capm_discount_rate(
    beta: Optional[float],
    risk_free_rate: float = RISK_FREE_RATE,
    equity_risk_premium: float = EQUITY_RISK_PREMIUM,
) -> Optional[float]:
  '''Suggested discount rate in percent, or None without a beta.'''
  return CAPMRate(beta, risk_free_rate, equity_risk_premium).compute().value


def buy_target(intrinsic_value: float, margin_of_safety_percent: float) -> float:
  '''Intrinsic value reduced by the margin of safety.'''
  return intrinsic_value * (1.0 - margin_of_safety_percent / 100.0)


def is_buyable(current_price: float, target_price: float) -> bool:
  '''A known price at or below the buy target.'''
  return 0 < current_price <= target_price
