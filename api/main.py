# ============================================================================
# api/main.py
# ============================================================================
"""
FastAPI Backend for the JP-CLINS Document Engine

Runs on port 8000.
Provides REST API for document conversion, bundle validation and
Japanese era date conversion.
"""

import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from clins_engine import __version__
from clins_engine.config import fhir_settings
from clins_engine.constants import BUNDLE_PROFILES, RECOGNIZED_DOCUMENT_PROFILES, SECTION_PLANS, DocumentType
from clins_engine.core import DocumentTransformer
from clins_engine.fhir_utils import BundleComplianceValidator, parse_bundle
from clins_engine.fhir_utils.serializer import FHIR_JSON_MEDIA_TYPE
from clins_engine.utils import (
    ERAS,
    EraConversionError,
    InputShapeError,
    TransformAbortedError,
    era_to_gregorian,
    gregorian_to_era,
    parse_era_date,
    parse_japanese_date,
    setup_logging_from_settings,
)


setup_logging_from_settings()

app = FastAPI(
    title="JP-CLINS Document Engine API",
    description="API for converting clinical records into JP-CLINS FHIR document bundles",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Models
# ============================================================================

class EraDateResponse(BaseModel):
    gregorian: str
    era: str
    era_romaji: str
    year: int
    month: int
    day: int
    formatted: str


def _era_response(era_date) -> EraDateResponse:
    return EraDateResponse(
        gregorian=era_date.to_gregorian().isoformat(),
        era=era_date.era.name,
        era_romaji=era_date.era.romaji,
        year=era_date.year,
        month=era_date.month,
        day=era_date.day,
        formatted=era_date.format("kanji"),
    )


def _input_error(e: InputShapeError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"message": str(e), "details": e.details}
    )


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "JP-CLINS Document Engine API"}


@app.get("/api/health")
async def health():
    """Health check for monitoring."""
    return {"status": "healthy"}


@app.get("/api/capabilities")
async def capabilities():
    """Supported document kinds, profiles and eras."""
    return {
        "version": __version__,
        "fhirVersion": fhir_settings.FHIR_VERSION,
        "igVersion": fhir_settings.CLINS_IG_VERSION,
        "formats": [FHIR_JSON_MEDIA_TYPE],
        "documentTypes": [
            {
                "type": kind.value,
                "profile": BUNDLE_PROFILES[kind],
                "sections": [section.key for section in SECTION_PLANS[kind]],
            }
            for kind in DocumentType
        ],
        "recognizedProfiles": sorted(RECOGNIZED_DOCUMENT_PROFILES),
        "eras": [
            {"name": era.name, "romaji": era.romaji, "start": era.start.isoformat()}
            for era in ERAS
        ],
    }


@app.post("/api/convert/{document_type}")
def convert(
    document_type: str,
    payload: Dict[str, Any] = Body(...),
    strict: Optional[bool] = Query(None, description="Treat compliance warnings as errors"),
):
    """
    Convert a document record into a JP-CLINS document Bundle.

    Returns 200 with the bundle, 422 with the error report when validation
    fails, 400 when the payload is malformed.
    """
    transformer = DocumentTransformer(strict=strict)

    try:
        result = transformer.transform_payload(payload, document_type)
    except InputShapeError as e:
        raise _input_error(e)
    except TransformAbortedError as e:
        logger.error(f"Conversion of {document_type} aborted: {e}")
        raise HTTPException(status_code=422, detail={"message": str(e)})

    return JSONResponse(
        status_code=200 if result.success else 422,
        content=result.to_dict(),
    )


@app.post("/api/validate")
def validate(
    bundle: Dict[str, Any] = Body(...),
    strict: Optional[bool] = Query(None, description="Treat warnings as errors"),
):
    """Validate an existing FHIR document Bundle for JP-CLINS compliance."""
    try:
        parsed = parse_bundle(bundle)
    except InputShapeError as e:
        raise _input_error(e)

    result = BundleComplianceValidator(strict=strict).validate(parsed)
    return result.to_dict()


@app.get("/api/era/to-gregorian", response_model=EraDateResponse)
async def era_to_gregorian_date(
    date: Optional[str] = Query(None, description="Era notation such as 令和3年4月1日 or R3.4.1"),
    era: Optional[str] = Query(None, description="Era name, letter or romaji"),
    year: Optional[str] = Query(None, description="Year within the era; 元 for the first year"),
    month: Optional[int] = Query(None),
    day: int = Query(1),
):
    """Convert an era date to a Gregorian date."""
    try:
        if date:
            era_date = parse_era_date(date)
        elif era and year and month:
            gregorian = era_to_gregorian(era, year, month, day)
            era_date = gregorian_to_era(gregorian)
        else:
            raise HTTPException(
                status_code=400,
                detail="Give either 'date' or 'era', 'year' and 'month'"
            )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _era_response(era_date)


@app.get("/api/era/to-japanese", response_model=EraDateResponse)
async def gregorian_to_era_date(
    date: str = Query(..., description="Gregorian date such as 2019-04-30"),
):
    """Convert a Gregorian date to an era date."""
    try:
        era_date = gregorian_to_era(parse_japanese_date(date))
    except EraConversionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _era_response(era_date)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
