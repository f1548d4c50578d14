# ============================================================================
# src/clins_engine/fhir_utils/service_request.py
# ============================================================================
"""
FHIR ServiceRequest resource builder for services requested by a referral.
"""

from datetime import datetime
from typing import List, Optional

from fhir.resources.R4B.reference import Reference
from fhir.resources.R4B.servicerequest import ServiceRequest

from ..models.inputs import CodedConcept
from .primitives import (
    create_annotations,
    create_codeable_concept,
    create_meta,
    create_text_concept,
    new_resource_id,
    to_fhir_date,
)


def create_service_request(
    service: CodedConcept,
    subject: Reference,
    priority: str,
    authored_on: datetime,
    reason: Optional[str] = None,
    requester: Optional[Reference] = None,
    performers: Optional[List[Reference]] = None,
    notes: Optional[str] = None
) -> ServiceRequest:
    """
    Create an active ServiceRequest order for one requested service.

    Args:
        service: Requested service concept
        subject: Patient reference
        priority: Referral urgency (routine, urgent, asap, stat)
        authored_on: Referral creation time
        reason: Referral reason text
        requester: Referring practitioner reference
        performers: Receiving organization/practitioner references
        notes: Clinical notes passed to the receiver

    Returns:
        FHIR ServiceRequest resource
    """
    reason_concept = create_text_concept(reason)

    return ServiceRequest(
        id=new_resource_id(),
        meta=create_meta("ServiceRequest"),
        status="active",
        intent="order",
        priority=priority.strip().lower(),
        code=create_codeable_concept(service),
        subject=subject,
        authoredOn=to_fhir_date(authored_on),
        requester=requester,
        performer=performers or None,
        reasonCode=[reason_concept] if reason_concept is not None else None,
        note=create_annotations(notes)
    )
