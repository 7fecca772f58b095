"""
FastAPI application for FAIB Internal Tools.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from faib_tools import __version__
from faib_tools.config import Settings, get_settings
from faib_tools.models import ApplicationStatus
from faib_tools.services.analysis_service import AnalysisService
from faib_tools.services.pricing import calculate_renewal_pricing
from faib_tools.services.review_service import ReviewService
from faib_tools.services.sheepcrm_service import CrmUri, SheepCRMClient, SheepCRMError
from faib_tools.services.storage_service import StorageService, get_storage_service, is_licence_path, LICENCE_PREFIX
from faib_tools.services.webhooks import SIGNATURE_HEADER, resolve_form_response_uri, verify_webhook_signature

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Schemas
# ============================================================================
class PricingRequest(BaseModel):
    """Schema for a renewal pricing calculation."""

    certificates_issued: int
    number_of_trainers: int


class AnalyzeRenewalRequest(BaseModel):
    """Schema for a manual renewal form analysis."""

    form_response_uri: str
    post_to_crm: bool = False


class AnalyzeApplicationRequest(BaseModel):
    """Schema for an assessor application analysis."""

    post_to_crm: bool = False


class ReviewRequest(BaseModel):
    """Schema for posting a review to an assessor application."""

    review_content: str
    update_status: Optional[Literal["accepted", "rejected"]] = None


class SignUrlRequest(BaseModel):
    """Schema for requesting a presigned licence URL."""

    path: str


class HealthResponse(BaseModel):
    """Schema for the health check."""

    status: str
    app_name: str
    version: str
    sheepcrm_configured: bool
    claude_configured: bool
    storage_configured: bool


# ============================================================================
# Application Setup
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    if not settings.is_sheepcrm_configured():
        logger.warning("SheepCRM credentials not configured - CRM routes will fail")
    yield


async def sheepcrm_error_handler(request: Request, exc: SheepCRMError):
    return JSONResponse(status_code=502, content={"detail": str(exc), "upstream_status": exc.status_code})


async def configuration_error_handler(request: Request, exc: ValueError):
    logger.error("Request to %s failed: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Renewal pricing, form reviews and licence storage for FAIB",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SheepCRMError, sheepcrm_error_handler)
    app.add_exception_handler(ValueError, configuration_error_handler)

    return app


app = create_app()


# ============================================================================
# Dependencies
# ============================================================================
def get_sheepcrm_client(settings: Settings = Depends(get_settings)) -> SheepCRMClient:
    """Dependency for the SheepCRM client."""
    return SheepCRMClient(settings)


def get_analysis_service(settings: Settings = Depends(get_settings)) -> AnalysisService:
    """Dependency for the AI analysis service."""
    return AnalysisService(settings)


def get_review_service(
    settings: Settings = Depends(get_settings),
    crm: SheepCRMClient = Depends(get_sheepcrm_client),
    analysis: AnalysisService = Depends(get_analysis_service),
) -> ReviewService:
    """Dependency for the review workflow service."""
    return ReviewService(crm=crm, analysis=analysis, settings=settings)


def get_licence_storage() -> StorageService:
    """Dependency for licence storage."""
    return get_storage_service()


# ============================================================================
# API Routes - Health and Pricing
# ============================================================================
@app.get("/api/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(
        status="ok",
        app_name=settings.app_name,
        version=__version__,
        sheepcrm_configured=settings.is_sheepcrm_configured(),
        claude_configured=bool(settings.anthropic_api_key),
        storage_configured=bool(settings.s3_bucket),
    )


@app.post("/api/pricing")
def calculate_pricing(data: PricingRequest):
    """Calculate renewal pricing for a certificate count and trainer count."""
    pricing = calculate_renewal_pricing(data.certificates_issued, data.number_of_trainers)
    return pricing.to_dict()


# ============================================================================
# API Routes - Renewal Forms
# ============================================================================
@app.post("/api/analyze-renewal")
def analyze_renewal(
    data: AnalyzeRenewalRequest,
    service: ReviewService = Depends(get_review_service),
):
    """Analyze a renewal form submission, optionally posting a journal note."""
    if not data.form_response_uri.strip():
        raise HTTPException(400, "form_response_uri is required")

    logger.info("Manual analysis requested for %s", data.form_response_uri)
    review = service.review_renewal(data.form_response_uri, post_to_crm=data.post_to_crm)
    return {"success": True, "data": review.to_dict()}


@app.post("/api/webhooks/form-submission")
async def form_submission_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    service: ReviewService = Depends(get_review_service),
):
    """Receive a SheepCRM form submission and review the renewal."""
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    if not verify_webhook_signature(raw_body, signature, settings.sheepcrm_webhook_secret):
        logger.error("Invalid webhook signature")
        raise HTTPException(401, "Invalid signature")

    try:
        payload = json.loads(raw_body)
    except ValueError:
        raise HTTPException(400, "Invalid JSON payload")

    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise HTTPException(400, "No form_response URI found in webhook payload")

    logger.info("Received form submission webhook: event=%s", payload.get("event"))

    form_response_uri = resolve_form_response_uri(data)
    if not form_response_uri:
        raise HTTPException(400, "No form_response URI found in webhook payload")

    status = data.get("status")
    if status and status != ApplicationStatus.SUBMITTED.value:
        logger.info("Form status is %r, skipping processing", status)
        return {"success": True, "message": f'Form status is "{status}", not processing'}

    review = await run_in_threadpool(service.review_renewal, form_response_uri, True)
    return {
        "success": True,
        "message": "Renewal form analyzed and note created successfully",
        "data": {
            "organization_name": review.submission.organization_name,
            "certificates_issued": review.submission.certificates_issued,
            "trainers": review.submission.number_of_trainers,
            "total_cost": review.pricing.to_dict()["total"]["inc_vat"],
            "journal_entry_uri": review.journal_entry_uri,
        },
    }


@app.get("/api/webhooks/form-submission")
def webhook_ready():
    return {"message": "SheepCRM form submission webhook endpoint is active", "status": "ready"}


# ============================================================================
# API Routes - Trainer/Assessor Applications
# ============================================================================
@app.get("/api/assessor-applications")
def list_assessor_applications(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    service: ReviewService = Depends(get_review_service),
):
    """List Trainer/Assessor applications."""
    status_filter = None
    if status:
        try:
            status_filter = ApplicationStatus(status.lower())
        except ValueError:
            raise HTTPException(400, f"Invalid status: {status}")

    applications = service.list_assessor_applications(status=status_filter, limit=limit)
    return {"success": True, "data": {"applications": applications, "total": len(applications)}}


@app.get("/api/assessor-applications/{application_id}")
def get_assessor_application(
    application_id: str,
    service: ReviewService = Depends(get_review_service),
):
    application = service.get_assessor_application(application_id)
    return {"success": True, "data": application.to_dict()}


@app.post("/api/assessor-applications/{application_id}/analyze")
def analyze_assessor_application(
    application_id: str,
    data: Optional[AnalyzeApplicationRequest] = None,
    service: ReviewService = Depends(get_review_service),
):
    """Run the AI review of an application, optionally posting it to SheepCRM."""
    post_to_crm = data.post_to_crm if data else False
    review = service.review_assessor_application(application_id, post_to_crm=post_to_crm)
    return {"success": True, "data": review.to_dict()}


@app.post("/api/assessor-applications/{application_id}/review")
def post_assessor_review(
    application_id: str,
    data: ReviewRequest,
    service: ReviewService = Depends(get_review_service),
):
    """Save an (edited) review to the application's internal comments."""
    if not data.review_content.strip():
        raise HTTPException(400, "Review content is required")

    update_status = ApplicationStatus(data.update_status) if data.update_status else None
    result = service.post_assessor_review(application_id, data.review_content, update_status)
    return {"success": True, "message": "Review posted successfully", "data": result}


# ============================================================================
# API Routes - Licences
# ============================================================================
@app.get("/api/licences")
def list_licences(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    storage: StorageService = Depends(get_licence_storage),
):
    """List licence PDFs, newest first."""
    return storage.list_licences(page=page, limit=limit)


@app.post("/api/licences/sign-url")
def sign_licence_url(
    data: SignUrlRequest,
    storage: StorageService = Depends(get_licence_storage),
):
    """Get a short-lived download URL for a licence."""
    if not is_licence_path(data.path):
        raise HTTPException(400, f'Invalid path: must start with "{LICENCE_PREFIX}"')

    return {"url": storage.get_licence_url(data.path), "expires_in": storage.settings.licence_url_expiry_seconds}


# ============================================================================
# API Routes - Members
# ============================================================================
@app.get("/api/members/certificate-data")
def get_certificate_data(
    member_uri: str,
    crm: SheepCRMClient = Depends(get_sheepcrm_client),
):
    """Get licence certificate data for a training provider membership."""
    try:
        CrmUri.parse(member_uri)
    except ValueError as e:
        raise HTTPException(400, str(e))

    return {"success": True, "data": crm.get_certificate_data_from_member(member_uri).to_dict()}
