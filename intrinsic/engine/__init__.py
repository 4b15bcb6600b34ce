'''DCF calculation engine with pure math functions.'''

from intrinsic.engine.dcf import compute_dcf
from intrinsic.engine.dcf import compute_intrinsic_value
from intrinsic.engine.dcf import compute_pv_explicit
from intrinsic.engine.dcf import project_values
from intrinsic.engine.reverse import solve_implied_growth

__all__ = [
    'compute_dcf',
    'compute_intrinsic_value',
    'compute_pv_explicit',
    'project_values',
    'solve_implied_growth',
]
