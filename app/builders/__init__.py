# Builders package - Document serialization
from .json_builder import JsonBuilder, document_to_dict, document_from_dict

__all__ = ['JsonBuilder', 'document_to_dict', 'document_from_dict']
