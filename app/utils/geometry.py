"""
Coordinate helpers shared by the table engines.
"""
import math
from typing import List, Sequence


def flip_y(y: float, page_height: float) -> float:
    """Convert a y coordinate between bottom-left (PDF) and top-left (page) origin."""
    return page_height - y


def round_up(value: float, decimals: int = 0) -> float:
    """Round toward positive infinity at the given number of decimals."""
    factor = 10 ** decimals
    return math.ceil(value * factor) / factor


def group_consecutive_numbers(values: Sequence[int]) -> List[List[int]]:
    """
    Split a sorted sequence of integers into runs of consecutive values.

    Example: [0, 1, 3, 4, 5, 7] -> [[0, 1], [3, 4, 5], [7]]
    """
    groups: List[List[int]] = []
    for value in values:
        if groups and value == groups[-1][-1] + 1:
            groups[-1].append(value)
        else:
            groups.append([value])
    return groups
