"""
Terminal value policies.

These policies value all cash flows beyond the explicit forecast horizon
and discount that value back to today. Rates are decimals here; the
engine converts user percentages before building a policy.
"""

from abc import ABC
from abc import abstractmethod

from intrinsic.domain.errors import ConfigurationError
from intrinsic.domain.types import Assumptions
from intrinsic.domain.types import PolicyOutput
from intrinsic.domain.types import TerminalMethod


class TerminalPolicy(ABC):
  """
  Base class for terminal value policies.

  Subclasses implement compute() to return the discounted terminal value.
  """

  def check(self, discount_rate: float) -> None:
    """Validate the discount rate before any value is computed."""

  @abstractmethod
  def compute(
      self,
      final_fcf: float,
      discount_rate: float,
      final_year: int,
  ) -> PolicyOutput[float]:
    """
    Compute discounted terminal value.

    Args:
      final_fcf: FCF per share in the final explicit year
      discount_rate: Required return (r)
      final_year: Number of years to discount back

    Returns:
      PolicyOutput with present value of terminal value and diagnostics
    """


class GordonTerminal(TerminalPolicy):
  """
  Gordon Growth (perpetual growth) terminal value.

  TV = FCF_N * (1 + g) / (r - g), discounted by (1 + r)^N.
  """

  def __init__(self, g_terminal: float = 0.025):
    """
    Initialize Gordon terminal policy.

    Args:
      g_terminal: Terminal growth rate (default: 2.5%)
    """
    self.g_terminal = g_terminal

  def check(self, discount_rate: float) -> None:
    """
    Raises:
      ConfigurationError: If discount_rate <= g_terminal (model undefined)
    """
    if discount_rate <= self.g_terminal:
      raise ConfigurationError(
          f'Discount rate ({discount_rate:.2%}) must exceed terminal growth '
          f'({self.g_terminal:.2%}) for the Gordon Growth method')

  def compute(
      self,
      final_fcf: float,
      discount_rate: float,
      final_year: int,
  ) -> PolicyOutput[float]:
    """Return discounted Gordon Growth terminal value."""
    self.check(discount_rate)

    tv = (final_fcf * (1.0 + self.g_terminal)) / (discount_rate -
                                                   self.g_terminal)
    discounted_tv = tv / ((1.0 + discount_rate)**final_year)
    return PolicyOutput(value=discounted_tv,
                        diag={
                            'terminal_method': 'gordon',
                            'g_terminal': self.g_terminal,
                            'tv_undiscounted': tv,
                        })


class MultipleTerminal(TerminalPolicy):
  """
  Exit multiple terminal value.

  Assumes the business is sold at `exit_multiple` times final-year FCF.
  """

  def __init__(self, exit_multiple: float = 15.0):
    self.exit_multiple = exit_multiple

  def compute(
      self,
      final_fcf: float,
      discount_rate: float,
      final_year: int,
  ) -> PolicyOutput[float]:
    """Return discounted exit-multiple terminal value."""
    tv = final_fcf * self.exit_multiple
    discounted_tv = tv / ((1.0 + discount_rate)**final_year)
    return PolicyOutput(value=discounted_tv,
                        diag={
                            'terminal_method': 'multiple',
                            'exit_multiple': self.exit_multiple,
                            'tv_undiscounted': tv,
                        })


def create_terminal_policy(assumptions: Assumptions) -> TerminalPolicy:
  """
  Build the terminal policy selected by the assumptions.

  Raises:
    ConfigurationError: If the terminal method is not recognised
  """
  method = assumptions.method
  if method == TerminalMethod.GORDON_GROWTH:
    return GordonTerminal(g_terminal=assumptions.terminal_growth_percent / 100.0)
  if method == TerminalMethod.MARKET_MULTIPLE:
    return MultipleTerminal(exit_multiple=assumptions.exit_multiple)
  raise ConfigurationError(f'Unknown terminal method: {method!r}')
