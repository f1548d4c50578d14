# ============================================================================
# src/clins_engine/fhir_utils/__init__.py
# ============================================================================
"""
FHIR Utilities Package

Builds, assembles, validates and serializes JP-CLINS document bundles:
- Resource factories per resource family
- Resource graph builder
- Document assembler (Composition + Bundle)
- Bundle compliance validator
- JSON serializer
"""

from .builder import ResourceGraphBuilder, build_resource_graph
from .assembler import DocumentAssembler, assemble_document
from .validator import BundleComplianceValidator, validate_bundle, get_validation_errors
from .serializer import bundle_to_dict, serialize_bundle, parse_bundle

__all__ = [
    'ResourceGraphBuilder',
    'build_resource_graph',
    'DocumentAssembler',
    'assemble_document',
    'BundleComplianceValidator',
    'validate_bundle',
    'get_validation_errors',
    'bundle_to_dict',
    'serialize_bundle',
    'parse_bundle',
]
