'''
Local settings: provider API keys and valuation defaults.

Settings are read from a JSON file and then overridden by environment
variables, so keys never have to be written to disk.

  {
    "finnhub_api_key": "...",
    "exchange_rate_api_key": "...",
    "default_margin_of_safety": 10.0
  }
'''

from dataclasses import asdict
from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from intrinsic.policies.discount import EQUITY_RISK_PREMIUM
from intrinsic.policies.discount import RISK_FREE_RATE

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / '.intrinsic' / 'settings.json'
MAX_DEFAULT_MARGIN = 50.0

ENV_KEYS = {
    'finnhub_api_key': 'FINNHUB_API_KEY',
    'exchange_rate_api_key': 'EXCHANGE_RATE_API_KEY',
}


@dataclass
class Settings:
  '''
  User settings.

  Attributes:
    finnhub_api_key: Key for fundamentals metrics
    exchange_rate_api_key: Key for FX conversion
    default_margin_of_safety: Margin used when none is given, [0, 50] (%)
    risk_free_rate: CAPM risk-free rate (%)
    equity_risk_premium: CAPM equity risk premium (%)
  '''
  finnhub_api_key: Optional[str] = None
  exchange_rate_api_key: Optional[str] = None
  default_margin_of_safety: float = 10.0
  risk_free_rate: float = RISK_FREE_RATE
  equity_risk_premium: float = EQUITY_RISK_PREMIUM

  def __post_init__(self) -> None:
    self.default_margin_of_safety = min(
        MAX_DEFAULT_MARGIN, max(0.0, float(self.default_margin_of_safety)))

  def to_dict(self) -> Dict[str, Any]:
    return asdict(self)

  @classmethod
  def from_dict(cls, data: Mapping[str, Any]) -> 'Settings':
    '''Create from dictionary, ignoring unknown keys.'''
    known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
    return cls(**known)

  @classmethod
  def load(
      cls,
      path: Optional[Path] = None,
      environ: Optional[Mapping[str, str]] = None,
  ) -> 'Settings':
    '''
    Load settings from `path` (if it exists) and the environment.

    Args:
      path: JSON settings file (default: ~/.intrinsic/settings.json)
      environ: Environment mapping (default: os.environ)
    '''
    path = path or DEFAULT_SETTINGS_PATH
    environ = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if path.exists():
      with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
      logger.debug('Loaded settings from %s', path)

    for field_name, env_name in ENV_KEYS.items():
      if environ.get(env_name):
        data[field_name] = environ[env_name]

    return cls.from_dict(data)

  def save(self, path: Optional[Path] = None) -> Path:
    '''Write settings as JSON and return the path.'''
    path = path or DEFAULT_SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
      json.dump(self.to_dict(), f, indent=2)
    return path
