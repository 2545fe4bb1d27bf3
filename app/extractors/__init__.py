# Extractors package - Boundary to the external table detector
from .base import RunConfig, TableDetectionOptions, TableExtractor, TableExtractorResult, resolve_flavor
from .camelot_extractor import CamelotExtractor
from .schema import MalformedPayloadError, RawCell, RawPageTables, RawTableDescriptor, parse_payload

__all__ = [
    'RunConfig', 'TableDetectionOptions', 'TableExtractor', 'TableExtractorResult', 'resolve_flavor',
    'CamelotExtractor',
    'MalformedPayloadError', 'RawCell', 'RawPageTables', 'RawTableDescriptor', 'parse_payload'
]
