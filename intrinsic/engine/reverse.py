'''
Reverse DCF: the growth rate implied by a market price.

Bisection over the growth rate (decimal) in [-50%, 100%], holding every
other assumption fixed. DCF value is non-decreasing in growth for positive
FCF, which is the solver's precondition.
'''

import logging

from intrinsic.domain.types import Assumptions
from intrinsic.domain.types import Fundamentals
from intrinsic.domain.types import ReverseDCFResult
from intrinsic.engine.dcf import compute_intrinsic_value
from intrinsic.policies.terminal import create_terminal_policy

logger = logging.getLogger(__name__)

GROWTH_LOW = -0.50
GROWTH_HIGH = 1.00
MAX_ITERATIONS = 100
TOLERANCE = 0.1


def solve_implied_growth(
    fundamentals: Fundamentals,
    assumptions: Assumptions,
    target_price: float,
    low: float = GROWTH_LOW,
    high: float = GROWTH_HIGH,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
) -> ReverseDCFResult:
  '''
  Find the growth rate at which DCF value equals target_price.

  Args:
    fundamentals: Normalized USD fundamentals
    assumptions: Assumptions whose growth rate is replaced by the solver
    target_price: Market price to reconcile (must be a known, positive price)
    low: Lower growth bound (decimal)
    high: Upper growth bound (decimal)
    max_iterations: Bisection budget
    tolerance: Absolute price tolerance for early exit

  Returns:
    ReverseDCFResult; when the budget is exhausted the midpoint of the final
    interval is returned with converged=False

  Raises:
    ConfigurationError: If the fixed assumptions are invalid (Gordon r <= g)
  '''
  create_terminal_policy(assumptions).check(
      assumptions.discount_rate_percent / 100.0)

  def value_at(growth: float) -> float:
    trial = assumptions.with_rates(growth_rate_percent=growth * 100.0)
    return compute_intrinsic_value(fundamentals, trial)

  for iteration in range(1, max_iterations + 1):
    mid = (low + high) / 2.0
    value = value_at(mid)

    if abs(value - target_price) < tolerance:
      return ReverseDCFResult(
          growth_rate_percent=mid * 100.0,
          target_price=target_price,
          achieved_value=value,
          error=abs(value - target_price),
          iterations=iteration,
          converged=True,
      )

    if value < target_price:
      low = mid
    else:
      high = mid

  mid = (low + high) / 2.0
  value = value_at(mid)
  error = abs(value - target_price)
  logger.debug('Reverse DCF did not converge: target=%.2f value=%.2f '
               'growth=%.2f%%', target_price, value, mid * 100.0)
  return ReverseDCFResult(
      growth_rate_percent=mid * 100.0,
      target_price=target_price,
      achieved_value=value,
      error=error,
      iterations=max_iterations,
      converged=error < tolerance,
  )
