"""
FastAPI Endpoints for the Lead Discovery Engine
===============================================
RESTful API for starting discovery jobs and working with the leads they find.

Base URL: http://localhost:8000

Endpoints:
- GET    /                               - API info
- GET    /api/health                     - Health check
- GET    /api/stats                      - Engine statistics
- POST   /api/discovery/start            - Start a discovery job
- GET    /api/discovery/{job_id}         - Job status and progress
- GET    /api/discovery                  - Active (pending/running) jobs
- GET    /api/leads                      - Leads, optionally for one job
- GET    /api/leads/export/csv           - CSV export of leads
- GET    /api/leads/{lead_id}            - One lead
- POST   /api/leads/{lead_id}/outreach   - Generate outreach drafts
- DELETE /api/leads/{lead_id}            - Delete a lead
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from ..models.schemas import (
    SearchConfig,
    DiscoveryJob,
    BusinessLead,
    OutreachResult,
    StartJobResponse,
)
from ..config.settings import LLM_CONFIG, GOOGLE_MAPS_API_KEY
from ..engine import DiscoveryEngine, create_engine
from ..export import leads_to_csv
from .. import __version__

logger = logging.getLogger(__name__)


# =============================================================================
# FastAPI App Initialization
# =============================================================================

app = FastAPI(
    title="Lead Discovery Engine API",
    description="""
## Local Business Lead Discovery

Finds local businesses with weak web presence, scores them as sales leads and
drafts personalized outreach.

### Pipeline:
- **Acquisition**: Google Places (or offline sample data)
- **Classification**: No website / social only / outdated / modern
- **Enrichment**: Owner lookup, personal hook, demo assets
- **Scoring**: Five weighted factors, 0-100
- **Outreach**: Email, DM and SMS drafts

### Quick Start:
1. `POST /api/discovery/start` with a location and business type
2. Poll `GET /api/discovery/{job_id}` until `completed`
3. `GET /api/leads?job_id=...` or export with `/api/leads/export/csv`
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - Allow all origins for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Engine Initialization
# =============================================================================

_engine: Optional[DiscoveryEngine] = None


def get_engine() -> DiscoveryEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def set_engine(engine: Optional[DiscoveryEngine]):
    """Replace the process-wide engine (None resets to lazy default)."""
    global _engine
    _engine = engine


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """API information and available endpoints"""
    return {
        "service": "Lead Discovery Engine",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "Start Discovery": "POST /api/discovery/start",
            "Job Status": "GET /api/discovery/{job_id}",
            "Active Jobs": "GET /api/discovery",
            "Leads": "GET /api/leads",
            "Export CSV": "GET /api/leads/export/csv",
            "Outreach": "POST /api/leads/{lead_id}/outreach",
            "Health": "GET /api/health",
        },
    }


@app.get("/api/health", tags=["Info"])
async def health_check():
    """Health check endpoint for monitoring"""
    api_key = LLM_CONFIG.get("api_key", "")
    return {
        "status": "healthy",
        "service": "Lead Discovery Engine",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "llm_configured": bool(api_key and len(api_key) > 10),
        "places_configured": bool(GOOGLE_MAPS_API_KEY),
    }


@app.get("/api/stats", tags=["Info"])
async def get_stats():
    """Get engine processing statistics"""
    return get_engine().get_stats()


# =============================================================================
# Discovery Endpoints
# =============================================================================

@app.post("/api/discovery/start", response_model=StartJobResponse, tags=["Discovery"])
async def start_discovery(request: Request):
    """
    Start a discovery job in the background.

    Returns immediately with the job id; poll the job for progress.
    An invalid body is rejected with 400 and no job is created.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")

    try:
        search = SearchConfig.model_validate(payload)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise HTTPException(status_code=400, detail={"message": "Invalid search", "errors": errors})

    job = get_engine().start_job(search)
    return StartJobResponse(job_id=job.id)


@app.get("/api/discovery/{job_id}", response_model=DiscoveryJob, tags=["Discovery"])
async def get_job(job_id: str):
    """Get a job's status, progress and counters"""
    job = get_engine().store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")
    return job


@app.get("/api/discovery", response_model=List[DiscoveryJob], tags=["Discovery"])
async def list_active_jobs():
    """List pending and running jobs"""
    return get_engine().store.list_active_jobs()


# =============================================================================
# Lead Endpoints
# =============================================================================

@app.get("/api/leads", response_model=List[BusinessLead], tags=["Leads"])
async def list_leads(job_id: Optional[str] = Query(None, description="Only leads from this job")):
    """List leads, highest score first"""
    return get_engine().store.list_leads(job_id)


# Declared before /api/leads/{lead_id} so "export" is not taken as an id
@app.get("/api/leads/export/csv", tags=["Leads"])
async def export_leads_csv(job_id: Optional[str] = Query(None, description="Only leads from this job")):
    """Download leads as CSV"""
    leads = get_engine().store.list_leads(job_id)
    return Response(
        content=leads_to_csv(leads),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="leads.csv"'},
    )


@app.get("/api/leads/{lead_id}", response_model=BusinessLead, tags=["Leads"])
async def get_lead(lead_id: str):
    """Get a single lead"""
    lead = get_engine().store.get_lead(lead_id)
    if lead is None:
        raise HTTPException(status_code=404, detail=f"Lead not found: {lead_id}")
    return lead


@app.post("/api/leads/{lead_id}/outreach", response_model=OutreachResult, tags=["Leads"])
async def generate_outreach(lead_id: str):
    """Generate email/DM/SMS drafts plus formal and casual variants"""
    result = get_engine().generate_outreach(lead_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Lead not found: {lead_id}")
    return result


@app.delete("/api/leads/{lead_id}", tags=["Leads"])
async def delete_lead(lead_id: str):
    """Delete a lead"""
    if not get_engine().store.delete_lead(lead_id):
        raise HTTPException(status_code=404, detail=f"Lead not found: {lead_id}")
    return {"status": "deleted", "id": lead_id}


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "path": str(request.url),
        },
    )
