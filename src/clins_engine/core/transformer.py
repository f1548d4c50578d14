# ============================================================================
# src/clins_engine/core/transformer.py
# ============================================================================
"""
Document Transformer

This is the MAIN entry point for document conversion.

Flow:
1. Validate the input record against business rules
2. Build the resource graph
3. Assemble the Composition and document Bundle
4. Validate the Bundle for JP-CLINS compliance
5. Return the Bundle, or the complete list of reasons there is none

The transformer keeps no state between calls; concurrent calls on
independent records need no coordination.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union
import logging

from fhir.resources.R4B.bundle import Bundle

from ..constants.document_types import DocumentType
from ..fhir_utils.assembler import DocumentAssembler
from ..fhir_utils.builder import ResourceGraphBuilder
from ..fhir_utils.serializer import bundle_to_dict
from ..fhir_utils.validator import BundleComplianceValidator
from ..models.documents import parse_document_record
from ..models.validation import ValidationResult
from ..utils.clock import utc_now
from ..utils.exceptions import DocumentValidationError
from ..utils.logging import LogAdapter, log_performance
from ..validators.rule_validator import BusinessRuleValidator

logger = logging.getLogger(__name__)


@dataclass
class TransformResult:
    """
    Outcome of one transformation: a bundle or an error report, never both.

    Warnings are carried either way.
    """
    document_type: DocumentType
    validation: ValidationResult
    bundle: Optional[Bundle] = None

    @property
    def success(self) -> bool:
        return self.bundle is not None and self.validation.is_valid

    @property
    def errors(self):
        return self.validation.errors

    @property
    def warnings(self):
        return self.validation.warnings

    def raise_for_errors(self) -> "TransformResult":
        """Raise DocumentValidationError when the transformation failed."""
        if not self.success:
            raise DocumentValidationError(
                f"{self.document_type.value} document failed validation with "
                f"{len(self.validation.errors)} error(s)",
                self.validation
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "documentType": self.document_type.value,
            "validation": self.validation.to_dict(),
            "bundle": bundle_to_dict(self.bundle) if self.bundle is not None else None,
        }


class DocumentTransformer:
    """
    Main orchestration engine for document conversion.

    Responsibilities:
    1. Business-rule validation of the input record
    2. Resource graph construction
    3. Document assembly
    4. Bundle compliance validation

    Usage:
        transformer = DocumentTransformer()
        result = transformer.transform_payload(payload)
        if result.success:
            send(result.bundle)
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        strict: Optional[bool] = None,
        include_narrative: Optional[bool] = None
    ):
        """
        Args:
            clock: Returns the current aware datetime; injectable for tests
            strict: Promote compliance warnings to errors
            include_narrative: Generate narrative for entry-only sections
        """
        self.clock = clock or utc_now
        self.rule_validator = BusinessRuleValidator(clock=self.clock)
        self.builder = ResourceGraphBuilder()
        self.assembler = DocumentAssembler(include_narrative=include_narrative)
        self.compliance_validator = BundleComplianceValidator(strict=strict)

    @log_performance(logger, "Document transformation")
    def transform(self, record) -> TransformResult:
        """
        Transform a document record into a JP-CLINS document Bundle.

        Args:
            record: ReferralRecord, DischargeSummaryRecord or CheckupRecord

        Returns:
            TransformResult with the bundle, or with errors and no bundle

        Raises:
            ReferenceResolutionError: a correlation id cannot be resolved
            DocumentAssemblyError: the assembled document is inconsistent
        """
        kind = record.kind
        log = LogAdapter(logger, {"document_id": record.id, "document_type": kind.value})
        log.info(f"Transforming {kind.value} document '{record.id}'")

        # ================================================================
        # STEP 1: Business rules
        # ================================================================
        validation = self.rule_validator.validate(record)
        if not validation.is_valid:
            log.warning(
                f"Business rules rejected '{record.id}' with {len(validation.errors)} error(s)"
            )
            return TransformResult(kind, validation)

        # ================================================================
        # STEP 2-3: Build and assemble
        # ================================================================
        graph = self.builder.build(record)
        bundle = self.assembler.assemble(record, graph, now=self.clock())

        # ================================================================
        # STEP 4: Compliance
        # ================================================================
        validation.merge(self.compliance_validator.validate(bundle))
        if not validation.is_valid:
            log.warning(
                f"Bundle compliance rejected '{record.id}' with {len(validation.errors)} error(s)"
            )
            return TransformResult(kind, validation)

        log.info(
            f"Produced bundle {bundle.id} with {len(bundle.entry)} entries "
            f"and {len(validation.warnings)} warning(s)"
        )
        return TransformResult(kind, validation, bundle)

    def transform_payload(
        self,
        payload: Mapping[str, Any],
        document_type: Optional[Union[str, DocumentType]] = None
    ) -> TransformResult:
        """
        Parse a transport mapping and transform it.

        Raises:
            InputShapeError: the payload is not a valid document record
        """
        record = parse_document_record(payload, document_type)
        return self.transform(record)


def transform_document(
    payload: Mapping[str, Any],
    document_type: Optional[Union[str, DocumentType]] = None,
    clock: Optional[Callable[[], datetime]] = None
) -> TransformResult:
    """Convenience function to transform one payload."""
    return DocumentTransformer(clock=clock).transform_payload(payload, document_type)
