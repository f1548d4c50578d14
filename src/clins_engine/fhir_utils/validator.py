# ============================================================================
# src/clins_engine/fhir_utils/validator.py
# ============================================================================
"""
Bundle Compliance Validator

Validates an assembled FHIR document Bundle against:
1. Document envelope rules (type, id, timestamp, JP-CLINS profile)
2. Composition placement (entry 0, exactly one)
3. Referential integrity (every same-document reference resolves)
4. Required participants (patient, practitioner, organization)
5. Per-resource rules (Observation, MedicationRequest, Practitioner)

Structural defects are errors; missing participants and coding
preferences are warnings. Strict mode promotes warnings to errors.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple
import json
import logging

from fhir.resources.R4B.bundle import Bundle
from fhir.resources.R4B.medicationrequest import MedicationRequest
from fhir.resources.R4B.observation import Observation

from ..config import fhir_settings
from ..constants import code_systems as cs
from ..constants.profiles import RECOGNIZED_DOCUMENT_PROFILES
from ..constants.value_sets import OBSERVATION_STATUSES
from ..models.validation import ValidationResult
from ..validators.format_validators import is_external_reference, is_same_document_reference


logger = logging.getLogger(__name__)

VALUE_FIELDS = (
    'valueQuantity', 'valueCodeableConcept', 'valueString', 'valueBoolean',
    'valueInteger', 'valueRange', 'valueRatio', 'valueSampledData',
    'valueTime', 'valueDateTime', 'valuePeriod',
)

REQUIRED_PARTICIPANTS = (
    ("Patient", ("Patient",)),
    ("practitioner", ("Practitioner", "PractitionerRole")),
    ("organization", ("Organization",)),
)


def resource_type_of(resource: Any) -> str:
    return resource.__class__.__name__


def iter_references(node: Any, path: str = "") -> Iterator[Tuple[str, str]]:
    """Yield (path, reference) for every Reference.reference in a JSON tree."""
    if isinstance(node, dict):
        reference = node.get("reference")
        if isinstance(reference, str):
            yield path, reference
        for key, value in node.items():
            if key == "reference":
                continue
            yield from iter_references(value, f"{path}.{key}" if path else key)
    elif isinstance(node, list):
        for index, item in enumerate(node):
            yield from iter_references(item, f"{path}[{index}]")


class BundleComplianceValidator:
    """
    JP-CLINS document bundle validator.

    Runs after assembly, catching defects before a document leaves the
    engine.
    """

    def __init__(self, strict: Optional[bool] = None):
        """
        Args:
            strict: If True, warnings count as errors. Defaults to
                FHIR_STRICT_COMPLIANCE.
        """
        if strict is None:
            strict = fhir_settings.FHIR_STRICT_COMPLIANCE
        self.strict = strict

    def validate(self, bundle: Bundle) -> ValidationResult:
        """
        Validate a FHIR document Bundle.

        Args:
            bundle: Bundle to validate

        Returns:
            ValidationResult with all errors and warnings
        """
        result = ValidationResult()

        try:
            tree = json.loads(bundle.model_dump_json())
        except (TypeError, ValueError) as e:
            result.add_error(f"Bundle cannot be serialized: {e}")
            return self._finish(result)

        self._check_envelope(bundle, result)

        entries = bundle.entry or []
        if not entries:
            result.add_error("Bundle has no entries")
            return self._finish(result)

        targets = self._check_entries(entries, result)
        self._check_composition(entries, targets, result)
        self._check_references(tree.get("entry", []), entries, targets, result)
        self._check_participants(entries, result)

        for index, entry in enumerate(entries):
            self._check_resource(entry.resource, index, result)

        return self._finish(result)

    def _finish(self, result: ValidationResult) -> ValidationResult:
        if self.strict and result.warnings:
            result = ValidationResult(errors=[*result.errors, *result.warnings])

        if result.errors:
            logger.warning(f"Bundle validation found {len(result.errors)} errors")
            for error in result.errors:
                logger.warning(f"  - {error}")
        logger.debug(f"Bundle validation found {len(result.warnings)} warnings")

        return result

    # ========================================================================
    # ENVELOPE AND ENTRIES
    # ========================================================================

    def _check_envelope(self, bundle: Bundle, result: ValidationResult) -> None:
        if bundle.type != "document":
            result.add_error(f"Bundle type must be 'document', got '{bundle.type}'")

        if not bundle.id:
            result.add_error("Bundle missing required 'id' field")

        if not bundle.timestamp:
            result.add_error("Bundle missing 'timestamp'")

        profiles = set(bundle.meta.profile or []) if bundle.meta else set()
        if not profiles & RECOGNIZED_DOCUMENT_PROFILES:
            result.add_error("Bundle does not declare a recognized JP-CLINS document profile")

    def _check_entries(self, entries, result: ValidationResult) -> Dict[str, Any]:
        """Map fullUrl -> resource, flagging missing and duplicate fullUrls."""
        targets: Dict[str, Any] = {}

        for index, entry in enumerate(entries):
            if entry.resource is None:
                result.add_error(f"Entry {index}: missing resource")
                continue
            if not entry.fullUrl:
                result.add_error(f"Entry {index} ({resource_type_of(entry.resource)}): missing fullUrl")
                continue
            if entry.fullUrl in targets:
                result.add_error(f"Entry {index}: duplicate fullUrl {entry.fullUrl}")
                continue
            targets[entry.fullUrl] = entry.resource

        return targets

    def _check_composition(self, entries, targets: Dict[str, Any], result: ValidationResult) -> None:
        first = entries[0].resource
        if resource_type_of(first) != "Composition":
            result.add_error(
                f"Entry 0 must be the Composition, found {resource_type_of(first)}"
            )
        else:
            subject = first.subject.reference if first.subject else None
            if not subject:
                result.add_error("Composition has no subject")
            elif resource_type_of(targets.get(subject)) != "Patient":
                result.add_error(f"Composition subject {subject} does not resolve to a Patient entry")

            if not first.section:
                result.add_warning("Composition has no sections")

        for index, entry in enumerate(entries[1:], start=1):
            if resource_type_of(entry.resource) == "Composition":
                result.add_error(f"Entry {index}: a document may contain only one Composition")

    def _check_references(
        self,
        entry_trees: List[Dict[str, Any]],
        entries,
        targets: Dict[str, Any],
        result: ValidationResult
    ) -> None:
        relative_targets = {
            f"{resource_type_of(entry.resource)}/{entry.resource.id}"
            for entry in entries
            if entry.resource is not None and entry.resource.id
        }

        for index, entry_tree in enumerate(entry_trees):
            resource_tree = entry_tree.get("resource") or {}
            label = f"Entry {index} ({resource_tree.get('resourceType', 'resource')})"

            for path, reference in iter_references(resource_tree):
                if reference.startswith("#"):
                    continue
                if is_same_document_reference(reference):
                    if reference not in targets and reference not in relative_targets:
                        result.add_error(f"{label}: broken reference {reference} at {path}")
                elif not is_external_reference(reference):
                    result.add_error(f"{label}: malformed reference '{reference}' at {path}")

    def _check_participants(self, entries, result: ValidationResult) -> None:
        present = {resource_type_of(entry.resource) for entry in entries if entry.resource is not None}
        for name, resource_types in REQUIRED_PARTICIPANTS:
            if not present.intersection(resource_types):
                result.add_warning(f"Bundle has no {name} resource")

    # ========================================================================
    # PER-RESOURCE RULES
    # ========================================================================

    def _check_resource(self, resource: Any, index: int, result: ValidationResult) -> None:
        resource_type = resource_type_of(resource)

        if resource_type == "Observation":
            self._validate_observation(resource, index, result)
        elif resource_type == "MedicationRequest":
            self._validate_medication_request(resource, index, result)
        elif resource_type == "Condition":
            self._check_recommended_systems(resource.code, cs.DIAGNOSIS_SYSTEMS, f"Entry {index} (Condition)", result)
        elif resource_type == "Practitioner":
            systems = {identifier.system for identifier in resource.identifier or []}
            if cs.MEDICAL_LICENSE_NUMBER not in systems:
                result.add_warning(f"Entry {index} (Practitioner): no medical license identifier")

    def _validate_observation(self, obs: Observation, index: int, result: ValidationResult) -> None:
        """
        Validate an Observation resource.

        Required fields:
        - status
        - code
        - Either value[x] or dataAbsentReason
        """
        prefix = f"Entry {index} (Observation)"

        if obs.status is None:
            result.add_error(f"{prefix}: missing required 'status'")
        elif obs.status not in OBSERVATION_STATUSES:
            result.add_error(f"{prefix}: invalid status '{obs.status}'")

        if obs.code is None:
            result.add_error(f"{prefix}: missing required 'code'")
        elif not obs.code.coding:
            result.add_warning(f"{prefix}: code has no coding, text only")

        has_value = any(getattr(obs, name, None) is not None for name in VALUE_FIELDS)
        if not has_value and not getattr(obs, 'dataAbsentReason', None):
            result.add_error(f"{prefix}: must have either value[x] or dataAbsentReason")

        for rr_idx, ref_range in enumerate(obs.referenceRange or []):
            if not ref_range.low and not ref_range.high and not ref_range.text:
                result.add_error(f"{prefix}: referenceRange[{rr_idx}] must have low, high, or text")

        categories = {
            coding.code
            for concept in obs.category or []
            for coding in concept.coding or []
        }
        if "laboratory" in categories:
            self._check_recommended_systems(obs.code, cs.LABORATORY_SYSTEMS, prefix, result)

    def _validate_medication_request(self, request: MedicationRequest, index: int, result: ValidationResult) -> None:
        prefix = f"Entry {index} (MedicationRequest)"

        concept = request.medicationCodeableConcept
        if concept is None and request.medicationReference is None:
            result.add_error(f"{prefix}: missing medication")
        if request.subject is None:
            result.add_error(f"{prefix}: missing required 'subject'")

        self._check_recommended_systems(concept, cs.MEDICATION_SYSTEMS, prefix, result)

    def _check_recommended_systems(self, concept, systems, prefix: str, result: ValidationResult) -> None:
        """
        Validate terminology against the profile's recommended systems.

        Text-only concepts are left to the business rules.
        """
        if concept is None or not concept.coding:
            return
        found = [coding.system for coding in concept.coding if coding.system]
        if not any(system in systems for system in found):
            result.add_warning(
                f"{prefix}: no coding from a recommended code system (found: {', '.join(found)})"
            )


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def validate_bundle(bundle: Bundle, strict: Optional[bool] = None) -> bool:
    """
    Quick bundle validation.

    Returns:
        True if valid
    """
    validator = BundleComplianceValidator(strict=strict)
    return validator.validate(bundle).is_valid


def get_validation_errors(bundle: Bundle) -> List[str]:
    """
    Get list of validation errors for a bundle.

    Returns:
        List of error messages (empty if valid)
    """
    validator = BundleComplianceValidator()
    return validator.validate(bundle).errors
