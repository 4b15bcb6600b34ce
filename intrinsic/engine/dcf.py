"""
Pure DCF math engine.

This module contains pure functions for DCF calculations. No pandas, no I/O,
just numeric computations over normalized fundamentals and user assumptions.

Key functions:
  compute_dcf: Main entry point, returns the full DCFResult
  compute_intrinsic_value: IV per share only
  compute_pv_explicit: PV of the explicit 5-year forecast
  project_values: Year 0..5 projection of intrinsic value
"""

from typing import List, Tuple

from intrinsic.domain.types import Assumptions
from intrinsic.domain.types import DCFResult
from intrinsic.domain.types import Fundamentals
from intrinsic.domain.types import ProjectionPoint
from intrinsic.policies.terminal import create_terminal_policy

N_YEARS = 5


def compute_pv_explicit(
    fcf0: float,
    growth_rate: float,
    discount_rate: float,
    n_years: int = N_YEARS,
) -> Tuple[float, float]:
  """
  Compute present value of explicit forecast period.

  Args:
    fcf0: Current FCF per share
    growth_rate: Annual FCF growth (g, decimal)
    discount_rate: Required return (r, decimal)
    n_years: Number of explicit years

  Returns:
    Tuple of (pv_total, final_fcf):
    - pv_total: Sum of discounted FCF per share over the horizon
    - final_fcf: FCF per share in the final year
  """
  pv = 0.0
  fcf = fcf0

  for t in range(1, n_years + 1):
    fcf *= (1.0 + growth_rate)
    pv += fcf / ((1.0 + discount_rate)**t)

  return pv, fcf


def compute_dcf(fundamentals: Fundamentals,
                assumptions: Assumptions) -> DCFResult:
  """
  Compute intrinsic value per share with a 5-year explicit horizon.

  Stage 1: FCF per share compounds at g and is discounted at r
  Stage 2: Terminal value from the selected policy, discounted by (1+r)^5
  Plus net cash per share, added undiscounted.

  Args:
    fundamentals: Normalized USD fundamentals
    assumptions: Growth/discount percentages and terminal method

  Returns:
    DCFResult with total value and its components

  Raises:
    ConfigurationError: If the Gordon method is used with r <= g_terminal
  """
  g = assumptions.growth_rate_percent / 100.0
  r = assumptions.discount_rate_percent / 100.0

  terminal = create_terminal_policy(assumptions)
  terminal.check(r)

  pv_explicit, final_fcf = compute_pv_explicit(fundamentals.fcf_per_share, g,
                                               r)
  tv_component = terminal.compute(final_fcf, r, N_YEARS).value
  net_cash = fundamentals.net_cash_per_share

  return DCFResult(
      iv_per_share=pv_explicit + tv_component + net_cash,
      pv_explicit=pv_explicit,
      tv_component=tv_component,
      net_cash_per_share=net_cash,
      final_fcf=final_fcf,
  )


def compute_intrinsic_value(fundamentals: Fundamentals,
                            assumptions: Assumptions) -> float:
  """Intrinsic value per share (see compute_dcf)."""
  return compute_dcf(fundamentals, assumptions).iv_per_share


def project_values(
    intrinsic_value: float,
    growth_rate_percent: float,
    n_years: int = N_YEARS,
) -> List[ProjectionPoint]:
  """
  Project intrinsic value forward at the assumed growth rate.

  Year 0 is the undiscounted anchor (today's estimate); year t is
  intrinsic_value * (1 + g)^t.
  """
  g = growth_rate_percent / 100.0
  return [
      ProjectionPoint(year=t, value=intrinsic_value * (1.0 + g)**t)
      for t in range(n_years + 1)
  ]
