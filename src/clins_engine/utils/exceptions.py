# ============================================================================
# src/clins_engine/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the JP-CLINS document engine.

Expected domain violations never raise; they accumulate in a
ValidationResult. The classes below cover the cases where the
pipeline cannot proceed at all.
"""


class ClinsEngineError(Exception):
    """Base exception for all document engine errors."""
    pass


class ConfigurationError(ClinsEngineError):
    """Invalid configuration."""
    pass


class EraConversionError(ClinsEngineError, ValueError):
    """Date cannot be converted between era and Gregorian notation."""
    def __init__(self, message: str, value: str = None):
        super().__init__(message)
        self.value = value


class TransformAbortedError(ClinsEngineError):
    """Transformation cannot proceed; no partial output is produced."""
    pass


class InputShapeError(TransformAbortedError):
    """Input record is malformed (unknown fields, wrong types, unknown kind)."""
    def __init__(self, message: str, details: list = None):
        super().__init__(message)
        self.details = details or []


class ReferenceResolutionError(TransformAbortedError):
    """A correlation id needed to build a reference is missing or unknown."""
    def __init__(self, message: str, reference_id: str = None):
        super().__init__(message)
        self.reference_id = reference_id


class DocumentAssemblyError(TransformAbortedError):
    """Assembled document breaks an internal consistency invariant."""
    pass


class DocumentValidationError(ClinsEngineError):
    """Document failed business-rule or compliance validation."""
    def __init__(self, message: str, result):
        super().__init__(message)
        self.result = result

    @property
    def errors(self):
        return list(self.result.errors)
