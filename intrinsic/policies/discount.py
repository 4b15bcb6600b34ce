"""
Discount rate policies.

These policies determine the required rate of return (discount rate)
used in DCF valuation. Values are percentages, matching
Assumptions.discount_rate_percent.
"""

from abc import ABC
from abc import abstractmethod
from typing import Optional

from intrinsic.domain.types import PolicyOutput

RISK_FREE_RATE = 4.2
EQUITY_RISK_PREMIUM = 5.0


class DiscountPolicy(ABC):
  """
  Base class for discount rate policies.

  Subclasses implement compute() to return a discount rate.
  """

  @abstractmethod
  def compute(self) -> PolicyOutput[Optional[float]]:
    """
    Compute discount rate.

    Returns:
      PolicyOutput with discount rate (percent) and diagnostics
    """


class CAPMRate(DiscountPolicy):
  """
  CAPM cost of equity: risk-free rate + beta * equity risk premium.

  Only offered when beta is known; the value is None otherwise. The result
  is a suggestion and is never written into the assumptions automatically.
  """

  def __init__(
      self,
      beta: Optional[float],
      risk_free_rate: float = RISK_FREE_RATE,
      equity_risk_premium: float = EQUITY_RISK_PREMIUM,
  ):
    """
    Initialize CAPM policy.

    Args:
      beta: Market beta, None when unavailable
      risk_free_rate: Risk-free rate in percent (default: 4.2%)
      equity_risk_premium: Equity risk premium in percent (default: 5.0%)
    """
    self.beta = beta
    self.risk_free_rate = risk_free_rate
    self.equity_risk_premium = equity_risk_premium

  def compute(self) -> PolicyOutput[Optional[float]]:
    """Return CAPM discount rate, or None without a beta."""
    diag = {
        'discount_method': 'capm',
        'beta': self.beta,
        'risk_free_rate': self.risk_free_rate,
        'equity_risk_premium': self.equity_risk_premium,
    }
    if self.beta is None:
      return PolicyOutput(value=None, diag={**diag, 'error': 'missing_beta'})

    rate = self.risk_free_rate + self.beta * self.equity_risk_premium
    return PolicyOutput(value=rate, diag={**diag, 'discount_rate': rate})
