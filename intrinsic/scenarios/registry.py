"""
Scenario registry mapping preset names to ScenarioConfig factories.

To add a preset, write a classmethod on ScenarioConfig and register it in
SCENARIOS.
"""

from collections.abc import Callable

from intrinsic.scenarios.config import ScenarioConfig

SCENARIOS: dict[str, Callable[[], ScenarioConfig]] = {
    'default': ScenarioConfig.default,
    'conservative': ScenarioConfig.conservative,
    'market_multiple': ScenarioConfig.market_multiple,
}


def create_scenario(name: str) -> ScenarioConfig:
  """
  Create a scenario preset by name.

  Raises:
    KeyError: If the name is not found in the registry
  """
  try:
    factory = SCENARIOS[name]
  except KeyError as e:
    raise KeyError(f"Unknown scenario: '{name}'. "
                   f'Available: {list(SCENARIOS.keys())}') from e
  return factory()


def list_scenarios() -> list[str]:
  """Names of all registered presets."""
  return list(SCENARIOS.keys())
