# ============================================================================
# src/clins_engine/utils/__init__.py
# ============================================================================
"""
Utility modules for the document engine.
"""

from .exceptions import (
    ClinsEngineError,
    ConfigurationError,
    EraConversionError,
    TransformAbortedError,
    InputShapeError,
    ReferenceResolutionError,
    DocumentAssemblyError,
    DocumentValidationError,
)

from .logging import (
    setup_logging,
    setup_logging_from_settings,
    log_performance,
    LogAdapter,
)

from .japanese_calendar import (
    ERAS,
    Era,
    EraDate,
    find_era,
    era_to_gregorian,
    gregorian_to_era,
    parse_era_date,
    parse_japanese_date,
    format_japanese_date,
)

__all__ = [
    # Exceptions
    'ClinsEngineError',
    'ConfigurationError',
    'EraConversionError',
    'TransformAbortedError',
    'InputShapeError',
    'ReferenceResolutionError',
    'DocumentAssemblyError',
    'DocumentValidationError',

    # Logging
    'setup_logging',
    'setup_logging_from_settings',
    'log_performance',
    'LogAdapter',

    # Era calendar
    'ERAS',
    'Era',
    'EraDate',
    'find_era',
    'era_to_gregorian',
    'gregorian_to_era',
    'parse_era_date',
    'parse_japanese_date',
    'format_japanese_date',
]
