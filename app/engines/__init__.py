# Engines package - Table reconstruction and detection stage
from .detection import TableDetectionEngine, PassReport, remove_words_used_in_cells
from .table_recognition import TableRecognitionEngine
from .content_merge import join_cells_by_content, get_merge_candidates
from .validation import is_false_table

__all__ = [
    'TableDetectionEngine', 'PassReport', 'remove_words_used_in_cells',
    'TableRecognitionEngine',
    'join_cells_by_content', 'get_merge_candidates',
    'is_false_table'
]
