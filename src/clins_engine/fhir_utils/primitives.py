# ============================================================================
# src/clins_engine/fhir_utils/primitives.py
# ============================================================================
"""
FHIR R4B datatype helpers shared by every resource factory.

Coded values are copied from the input as given: a concept without a
coding becomes a text-only CodeableConcept, never a placeholder code.
"""

from datetime import date, datetime
from html import escape
from typing import Iterable, List, Optional
from uuid import uuid4

from fhir.resources.R4B.annotation import Annotation
from fhir.resources.R4B.codeableconcept import CodeableConcept
from fhir.resources.R4B.coding import Coding
from fhir.resources.R4B.identifier import Identifier
from fhir.resources.R4B.meta import Meta
from fhir.resources.R4B.narrative import Narrative
from fhir.resources.R4B.quantity import Quantity
from fhir.resources.R4B.reference import Reference

from ..constants import code_systems as cs
from ..constants.profiles import RESOURCE_PROFILES
from ..models.inputs import CodedConcept
from ..utils.clock import fhir_instant

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"


def new_resource_id() -> str:
    """Fresh resource id; generated once per resource, never reassigned."""
    return str(uuid4())


def full_url(resource_id: str) -> str:
    return f"urn:uuid:{resource_id}"


def create_meta(resource_type: str, profile: Optional[str] = None) -> Optional[Meta]:
    """Meta declaring the JP-CLINS profile of a resource type."""
    profile = profile or RESOURCE_PROFILES.get(resource_type)
    return Meta(profile=[profile]) if profile else None


def create_coding(system: str, code: str, display: Optional[str] = None) -> Coding:
    return Coding(system=system, code=code, display=display)


def create_coded(
    system: str,
    code: str,
    display: Optional[str] = None,
    text: Optional[str] = None
) -> CodeableConcept:
    """CodeableConcept with a single coding."""
    return CodeableConcept(coding=[create_coding(system, code, display)], text=text)


def create_codeable_concept(concept: Optional[CodedConcept]) -> Optional[CodeableConcept]:
    """
    Copy an input concept into a CodeableConcept.

    Args:
        concept: Input concept (codings plus optional text)

    Returns:
        CodeableConcept, text-only when the input has no coding, or None
        when the input is absent or empty
    """
    if concept is None or concept.is_empty:
        return None

    codings = [create_coding(c.system, c.code, c.display) for c in concept.coding]
    return CodeableConcept(
        coding=codings if codings else None,
        text=concept.text
    )


def create_text_concept(text: Optional[str]) -> Optional[CodeableConcept]:
    return CodeableConcept(text=text) if text else None


def create_reference(node) -> Reference:
    """urn:uuid Reference to a graph node, typed and labelled."""
    return Reference(
        reference=node.full_url,
        type=node.kind.value,
        display=node.display
    )


def create_quantity(value: float, unit: Optional[str] = None) -> Quantity:
    """Quantity with the unit also given as a UCUM code when present."""
    if not unit:
        return Quantity(value=value)
    return Quantity(value=value, unit=unit, system=cs.UCUM, code=unit)


def create_identifier(system: str, value: str) -> Identifier:
    return Identifier(system=system, value=value)


def create_annotations(text: Optional[str]) -> Optional[List[Annotation]]:
    return [Annotation(text=text)] if text else None


def create_narrative(text: str) -> Narrative:
    """Generated narrative holding one escaped paragraph per line of text."""
    paragraphs = "".join(
        f"<p>{escape(line)}</p>" for line in text.splitlines() if line.strip()
    )
    return Narrative(
        status="generated",
        div=f'<div xmlns="{XHTML_NAMESPACE}">{paragraphs or escape(text)}</div>'
    )


def create_list_narrative(items: Iterable[str]) -> Optional[Narrative]:
    """Generated narrative rendering entry labels as an unordered list."""
    items = [item for item in items if item]
    if not items:
        return None
    rows = "".join(f"<li>{escape(item)}</li>" for item in items)
    return Narrative(
        status="generated",
        div=f'<div xmlns="{XHTML_NAMESPACE}"><ul>{rows}</ul></div>'
    )


def to_fhir_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return fhir_instant(value)
    return value.isoformat()
