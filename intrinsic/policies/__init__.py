"""
Valuation policies.

Each policy computes one component of the valuation model (terminal value,
discount rate) and returns both a value and diagnostic information.

Example:
  policy = create_terminal_policy(assumptions)
  tv = policy.compute(final_fcf=9.66, discount_rate=0.09, final_year=5)
"""

from intrinsic.policies.discount import CAPMRate
from intrinsic.policies.discount import DiscountPolicy
from intrinsic.policies.terminal import create_terminal_policy
from intrinsic.policies.terminal import GordonTerminal
from intrinsic.policies.terminal import MultipleTerminal
from intrinsic.policies.terminal import TerminalPolicy

__all__ = [
  'DiscountPolicy', 'CAPMRate',
  'TerminalPolicy', 'GordonTerminal', 'MultipleTerminal',
  'create_terminal_policy',
]
