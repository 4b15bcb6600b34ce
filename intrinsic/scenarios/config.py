"""
Scenario configuration for valuation runs.

ScenarioConfig is a serializable (JSON-friendly) preset of user
assumptions. All rates are percentages.
"""

from dataclasses import asdict
from dataclasses import dataclass
import json
from typing import Any

from intrinsic.domain.errors import ConfigurationError
from intrinsic.domain.types import Assumptions
from intrinsic.domain.types import TerminalMethod


@dataclass
class ScenarioConfig:
  """
  Configuration for a valuation scenario.

  Attributes:
    name: Human-readable scenario name
    growth_rate: Annual FCF growth over the explicit horizon (%)
    discount_rate: Required return (%)
    terminal_growth: Perpetual growth for the Gordon method (%)
    exit_multiple: Terminal FCF multiple for the market-multiple method
    method: Terminal method name ('gordon' or 'multiple')
    margin_of_safety: Discount applied for the buy target (%)
  """
  name: str = 'default'
  growth_rate: float = 10.0
  discount_rate: float = 9.0
  terminal_growth: float = 2.5
  exit_multiple: float = 15.0
  method: str = 'gordon'
  margin_of_safety: float = 10.0

  @classmethod
  def default(cls) -> 'ScenarioConfig':
    """
    Create default scenario configuration.

    Uses:
      - 10% growth for 5 years
      - 9% discount rate
      - Gordon terminal at 2.5%
      - 10% margin of safety
    """
    return cls()

  @classmethod
  def conservative(cls) -> 'ScenarioConfig':
    """Lower growth, higher discount rate and a wide margin of safety."""
    return cls(
        name='conservative',
        growth_rate=5.0,
        discount_rate=10.0,
        terminal_growth=2.0,
        exit_multiple=12.0,
        method='gordon',
        margin_of_safety=25.0,
    )

  @classmethod
  def market_multiple(cls) -> 'ScenarioConfig':
    """Default rates with a 15x exit multiple terminal value."""
    return cls(name='market_multiple', method='multiple')

  def to_assumptions(self) -> Assumptions:
    """
    Convert to validated Assumptions.

    Raises:
      ConfigurationError: If the method is unknown or the margin of
        safety is out of range
    """
    try:
      method = TerminalMethod(self.method)
    except ValueError as e:
      raise ConfigurationError(f"Unknown terminal method: '{self.method}'") from e

    return Assumptions(
        growth_rate_percent=self.growth_rate,
        discount_rate_percent=self.discount_rate,
        terminal_growth_percent=self.terminal_growth,
        exit_multiple=self.exit_multiple,
        method=method,
        margin_of_safety_percent=self.margin_of_safety,
    ).validate()

  def to_dict(self) -> dict[str, Any]:
    """Convert to dictionary."""
    return asdict(self)

  def to_json(self) -> str:
    """Serialize to JSON string."""
    return json.dumps(self.to_dict(), indent=2)

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> 'ScenarioConfig':
    """Create from dictionary."""
    return cls(**data)

  @classmethod
  def from_json(cls, json_str: str) -> 'ScenarioConfig':
    """Create from JSON string."""
    return cls.from_dict(json.loads(json_str))
