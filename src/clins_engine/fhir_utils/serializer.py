# ============================================================================
# src/clins_engine/fhir_utils/serializer.py
# ============================================================================
"""
FHIR JSON serialization (application/fhir+json).

Japanese text is written as UTF-8, never \\u-escaped.
"""

from typing import Any, Dict, Mapping, Optional, Union
import json

from fhir.resources.R4B.bundle import Bundle
from pydantic import ValidationError

from ..config import fhir_settings
from ..utils.exceptions import InputShapeError

FHIR_JSON_MEDIA_TYPE = "application/fhir+json"


def bundle_to_dict(bundle: Bundle) -> Dict[str, Any]:
    """FHIR JSON object for a bundle."""
    return json.loads(bundle.model_dump_json())


def serialize_bundle(bundle: Bundle, pretty: Optional[bool] = None) -> str:
    """
    Serialize a bundle to FHIR JSON.

    Args:
        bundle: Bundle to serialize
        pretty: Indent the output; defaults to FHIR_PRETTY_JSON

    Returns:
        JSON text
    """
    if pretty is None:
        pretty = fhir_settings.FHIR_PRETTY_JSON
    return json.dumps(
        bundle_to_dict(bundle),
        indent=2 if pretty else None,
        ensure_ascii=False
    )


def parse_bundle(data: Union[str, bytes, Mapping[str, Any]]) -> Bundle:
    """
    Parse FHIR JSON into an R4B Bundle.

    Raises:
        InputShapeError: the data is not a structurally valid Bundle
    """
    try:
        if isinstance(data, (str, bytes)):
            return Bundle.model_validate_json(data)
        return Bundle.model_validate(dict(data))
    except ValidationError as e:
        details = [
            f"{'.'.join(str(part) for part in item['loc']) or '<bundle>'}: {item['msg']}"
            for item in e.errors()
        ]
        raise InputShapeError(
            f"Invalid Bundle: {len(details)} problem(s)",
            details=details
        ) from e
