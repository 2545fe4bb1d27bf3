"""
Centralized configuration settings for the table detection stage.
"""

# Detector settings
SUPPORTED_FLAVORS = ("lattice", "stream")
DEFAULT_FLAVOR = "lattice"
LATTICE_LINE_SCALE = 45
DETECTOR_MODULE = "app.extractors.camelot_runner"

# One lattice pass over every page
DEFAULT_RUN_CONFIG = [{"pages": [], "flavor": DEFAULT_FLAVOR}]

# Reconstruction settings
CELL_WORD_OVERLAP_THRESHOLD = 0.75  # share of a word's area inside a cell

# Validity heuristic: row boundaries are rounded up to this many decimals
# before looking for a vertically adjacent row
ROW_ADJACENCY_DECIMALS = 0

# Span direction tags
SPAN_LEFT = "left"
SPAN_TOP = "top"
SPAN_RIGHT = "right"
SPAN_DIRECTIONS = (SPAN_LEFT, SPAN_TOP, SPAN_RIGHT)

PDF_MAGIC = b"%PDF-"
