"""
Content-reconciliation merge for stream tables.

Stream geometry is inferred from text density and often splits one logical
cell into several. The detector also reports the text it expects in every
cell; comparing the two lets us find the split cells and join them back
without touching cells that are already right.

Example:
    reconstructed:  | this is only one      | cell  |
                    | foo                   | bar   |

    expected:       | this is only one cell |       |
                    | foo                   | bar   |

gives the merge candidates {0: [[0, 1]]}, and cells 0 and 1 of the first row
are joined into one cell reading "this is only one cell".
"""
import logging
from typing import Dict, List, Sequence

from app.models import TableRow
from app.utils import group_consecutive_numbers

logger = logging.getLogger("dla.content_merge")


def _cell_text(row: TableRow, col: int) -> str:
    if col >= len(row.content):
        return ""
    return str(row.content[col])


def _expected_text(expected_row: Sequence[str], col: int) -> str:
    if col >= len(expected_row):
        return ""
    return expected_row[col]


def get_merge_candidates(rows: List[TableRow], expected: List[List[str]]) -> Dict[int, List[List[int]]]:
    """
    Runs of consecutive cells whose text differs from the expected text, per row.

    Runs of a single cell are dropped: a lone mismatch is more likely a
    vertical split or an encoding difference than cells to join.
    """
    candidates: Dict[int, List[List[int]]] = {}
    for n_row, expected_row in enumerate(expected):
        if n_row >= len(rows):
            break
        row = rows[n_row]
        mismatched = [
            n_col for n_col, text in enumerate(expected_row)
            if _cell_text(row, n_col) != text
        ]
        groups = [group for group in group_consecutive_numbers(mismatched) if len(group) > 1]
        if groups:
            candidates[n_row] = groups
    return candidates


def find_merge_groups(row: TableRow, expected_row: Sequence[str], candidate: Sequence[int]) -> List[List[int]]:
    """
    Split one run of candidate cells into the groups that should be joined.

    A subgroup grows from the start of the run until its text equals the
    expected text (kept as a merge group) or gets longer than it (dropped);
    either way the next subgroup starts at the following cell.
    """
    groups: List[List[int]] = []
    subgroup = [candidate[0]]
    for i in range(len(candidate)):
        expected_text = " ".join(_expected_text(expected_row, col).strip() for col in subgroup).strip()
        actual_text = " ".join(_cell_text(row, col).strip() for col in subgroup).strip()

        if expected_text == actual_text:
            groups.append(subgroup)

        if len(actual_text) > len(expected_text) or expected_text == actual_text:
            subgroup = []

        if i + 1 < len(candidate):
            subgroup.append(candidate[i + 1])
    return groups


def join_cells_by_content(rows: List[TableRow], expected: List[List[str]]) -> List[TableRow]:
    """Join under-segmented cells of `rows` using the expected text grid. Rows are modified in place."""
    candidates = get_merge_candidates(rows, expected)
    for n_row, runs in candidates.items():
        row = rows[n_row]
        to_merge = []
        for run in runs:
            to_merge.extend(group for group in find_merge_groups(row, expected[n_row], run) if len(group) > 1)
        if to_merge:
            logger.debug(f"Row {n_row}: joining cell groups {to_merge}")
            row.mergeCells(to_merge)
    return rows
