"""Domain types for the valuation engine."""

from intrinsic.domain.errors import ConfigurationError
from intrinsic.domain.errors import MissingPriceError
from intrinsic.domain.types import Assumptions
from intrinsic.domain.types import DCFResult
from intrinsic.domain.types import Fundamentals
from intrinsic.domain.types import PolicyOutput
from intrinsic.domain.types import ProjectionPoint
from intrinsic.domain.types import RawFundamentals
from intrinsic.domain.types import ReverseDCFResult
from intrinsic.domain.types import SensitivityCell
from intrinsic.domain.types import TerminalMethod
from intrinsic.domain.types import ValuationReport

__all__ = [
    'Assumptions',
    'ConfigurationError',
    'DCFResult',
    'Fundamentals',
    'MissingPriceError',
    'PolicyOutput',
    'ProjectionPoint',
    'RawFundamentals',
    'ReverseDCFResult',
    'SensitivityCell',
    'TerminalMethod',
    'ValuationReport',
]
