"""
Camelot table detector, meant to be run in its own process.

Usage:
    python -m app.extractors.camelot_runner document.pdf --flavor lattice --pages 1,2

Prints the detected tables as JSON on stdout, grouped per page, in the wire
format parsed by app.extractors.schema. Exits with a non-zero status when
Camelot fails.
"""
import argparse
import json
import sys
from typing import Dict, List, Optional

from config.settings import LATTICE_LINE_SCALE


def _cell_spans(cells, r: int, c: int):
    """Columns and rows covered by the cell at (r, c), read from its missing edges."""
    n_rows = len(cells)
    n_cols = len(cells[r])

    col_span = 1
    while c + col_span < n_cols and not cells[r][c + col_span - 1].right:
        col_span += 1

    row_span = 1
    while r + row_span < n_rows and not cells[r + row_span - 1][c].bottom:
        row_span += 1

    return col_span, row_span


def convert_cells(cells) -> List[List[Optional[Dict]]]:
    """
    Row-major grid of cell descriptors for a Camelot cell matrix.

    Positions covered by another cell's span are emitted as None.
    """
    covered = set()
    grid = []
    for r, row in enumerate(cells):
        out_row = []
        for c, cell in enumerate(row):
            if (r, c) in covered:
                out_row.append(None)
                continue

            col_span, row_span = _cell_spans(cells, r, c)
            for dy in range(row_span):
                for dx in range(col_span):
                    if dx or dy:
                        covered.add((r + dy, c + dx))

            right = cells[r][c + col_span - 1].x2
            bottom = cells[r + row_span - 1][c].y1
            out_row.append({
                "location": {"x": cell.x1, "y": cell.y2},
                "size": {"width": right - cell.x1, "height": cell.y2 - bottom},
                "colSpan": col_span,
                "rowSpan": row_span,
            })
        grid.append(out_row)
    return grid


def convert_table(table) -> Dict:
    """Wire descriptor for one Camelot table."""
    x1, y1, x2, y2 = table._bbox
    descriptor = {
        "location": {"x": x1, "y": y2},
        "size": {"width": x2 - x1, "height": y2 - y1},
        "cols": [list(col) for col in table.cols],
        "rows": [list(row) for row in table.rows],
        "cells": convert_cells(table.cells),
        "flavor": table.flavor,
    }
    if table.flavor == "stream":
        descriptor["content"] = table.data
    return descriptor


def group_by_page(tables) -> List[Dict]:
    pages: Dict[int, List[Dict]] = {}
    for table in tables:
        pages.setdefault(int(table.page), []).append(convert_table(table))
    return [{"page": page, "tables": pages[page]} for page in sorted(pages)]


def read_tables(input_file: str, flavor: str, pages: str, line_scale: int, table_areas: List[str]):
    import camelot

    kwargs = {}
    if flavor == "lattice":
        kwargs["line_scale"] = line_scale
    if table_areas:
        kwargs["table_areas"] = table_areas
    return camelot.read_pdf(input_file, pages=pages, flavor=flavor, **kwargs)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Detect tables in a PDF with Camelot and print them as JSON")
    parser.add_argument("input", help="Path to the PDF file")
    parser.add_argument("--flavor", default="lattice", choices=["lattice", "stream"])
    parser.add_argument("--pages", default="all", help="Comma separated 1-based pages, or 'all'")
    parser.add_argument("--line-scale", type=int, default=LATTICE_LINE_SCALE)
    parser.add_argument("--table-area", action="append", default=[], dest="table_areas",
                        help="Table area as x1,y1,x2,y2 in PDF space (repeatable)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        tables = read_tables(args.input, args.flavor, args.pages, args.line_scale, args.table_areas)
        payload = group_by_page(tables)
    except Exception as e:
        print(f"Table detection failed: {e}", file=sys.stderr)
        return 1
    json.dump(payload, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
