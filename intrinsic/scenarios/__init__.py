"""Scenario presets for user assumptions."""

from intrinsic.scenarios.config import ScenarioConfig
from intrinsic.scenarios.registry import create_scenario
from intrinsic.scenarios.registry import list_scenarios

__all__ = ['ScenarioConfig', 'create_scenario', 'list_scenarios']
