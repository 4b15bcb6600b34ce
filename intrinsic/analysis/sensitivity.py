"""
Sensitivity analysis for DCF valuation.

Builds the 7x7 grid of intrinsic values obtained by moving the growth and
discount rates one percentage point at a time around the current
assumptions. Terminal parameters and fundamentals stay fixed.

Usage:
  builder = SensitivityGridBuilder(fundamentals, assumptions)
  grid = builder.build()
  table = to_frame(grid)
"""

from concurrent.futures import as_completed
from concurrent.futures import ThreadPoolExecutor
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from intrinsic.domain.errors import ConfigurationError
from intrinsic.domain.types import Assumptions
from intrinsic.domain.types import Fundamentals
from intrinsic.domain.types import SensitivityCell
from intrinsic.engine.dcf import compute_intrinsic_value

logger = logging.getLogger(__name__)

GRID_OFFSETS = (-3, -2, -1, 0, 1, 2, 3)
STEP_SIZE = 1.0

Grid = List[List[SensitivityCell]]


def grid_axis(
    base: float,
    offsets: Sequence[int] = GRID_OFFSETS,
    step: float = STEP_SIZE,
) -> List[float]:
  """Axis values centered on `base`, in percentage points."""
  return [base + k * step for k in offsets]


class SensitivityGridBuilder:
  """
  Build the growth x discount sensitivity grid.

  grid[i][j] holds growth_axis[i] and discount_axis[j]; the center cell
  reproduces the current assumptions exactly.
  """

  def __init__(
      self,
      fundamentals: Fundamentals,
      assumptions: Assumptions,
  ):
    """
    Initialize sensitivity grid builder.

    Args:
        fundamentals: Normalized USD fundamentals
        assumptions: Current assumptions (grid center)
    """
    self.fundamentals = fundamentals
    self.assumptions = assumptions
    self.growth_axis = grid_axis(assumptions.growth_rate_percent)
    self.discount_axis = grid_axis(assumptions.discount_rate_percent)

  def evaluate(self, growth_rate: float,
               discount_rate: float) -> SensitivityCell:
    """Value a single cell; invalid assumptions give value=None."""
    trial = self.assumptions.with_rates(growth_rate_percent=growth_rate,
                                        discount_rate_percent=discount_rate)
    try:
      value: Optional[float] = compute_intrinsic_value(self.fundamentals,
                                                       trial)
    except ConfigurationError as e:
      logger.debug('Cell g=%.2f%% r=%.2f%% invalid: %s', growth_rate,
                   discount_rate, e)
      value = None
    return SensitivityCell(growth_rate=growth_rate,
                           discount_rate=discount_rate,
                           value=value)

  def build(self, max_workers: Optional[int] = None) -> Grid:
    """
    Build the sensitivity grid.

    Args:
        max_workers: Evaluate cells on a thread pool of this size;
                     sequential when None or 1

    Returns:
        Row-per-growth-rate matrix of SensitivityCell
    """
    keys = [(i, j)
            for i in range(len(self.growth_axis))
            for j in range(len(self.discount_axis))]
    cells: Dict[Tuple[int, int], SensitivityCell] = {}

    if max_workers is None or max_workers <= 1:
      for i, j in keys:
        cells[(i, j)] = self.evaluate(self.growth_axis[i],
                                      self.discount_axis[j])
    else:
      with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(self.evaluate, self.growth_axis[i],
                            self.discount_axis[j]): (i, j)
            for i, j in keys
        }
        for future in as_completed(futures):
          cells[futures[future]] = future.result()

    logger.debug('Sensitivity grid built: %d x %d', len(self.growth_axis),
                 len(self.discount_axis))
    return [[cells[(i, j)]
             for j in range(len(self.discount_axis))]
            for i in range(len(self.growth_axis))]


def favorable_cells(grid: Grid, current_price: float) -> List[SensitivityCell]:
  """Cells valued strictly above a known market price."""
  return [
      cell for row in grid for cell in row if cell.is_favorable(current_price)
  ]


def to_frame(grid: Grid) -> pd.DataFrame:
  """
  Sensitivity table with discount rates as index and growth rates as
  columns; invalid cells are NaN.
  """
  growth_labels = [f'{row[0].growth_rate:.1f}%' for row in grid]
  discount_labels = [f'{cell.discount_rate:.1f}%' for cell in grid[0]]
  data = []
  for j in range(len(discount_labels)):
    data.append([
        float('nan') if row[j].value is None else row[j].value for row in grid
    ])

  df = pd.DataFrame(data, index=discount_labels, columns=growth_labels)
  df.index.name = 'Discount Rate'
  df.columns.name = 'Growth'
  return df
