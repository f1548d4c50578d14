# ============================================================================
# src/clins_engine/core/__init__.py
# ============================================================================
"""
Core components for the document engine.
"""

from .transformer import DocumentTransformer, TransformResult, transform_document

__all__ = [
    'DocumentTransformer',
    'TransformResult',
    'transform_document',
]
