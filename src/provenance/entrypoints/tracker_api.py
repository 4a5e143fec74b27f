"""
Provenance Tracker API - Thin API over the tracker service
Registration, scan/update and flag requests are dispatched as commands;
lookups delegate to views.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

import config
from provenance.domain.exceptions import (
    DuplicateIdError,
    InvalidStatusError,
    NotFoundError,
    TokenMismatchError,
    TrackerError,
)
from provenance.domain.model import LedgerEntry, ProductSnapshot
from provenance.service_layer.tracker import SupplyChainTracker

logging.basicConfig(
    level=getattr(logging, config.get_log_level()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SmartSupply Provenance API",
    description="Product registration, delivery checkpoints and counterfeit reports on a simulated ledger",
    version="1.0.0"
)

tracker = SupplyChainTracker()


@app.on_event("startup")
async def startup_event():
    if config.get_seed_sample_products():
        tracker.seed_sample_products()
    logger.info("✓ Provenance tracker initialized")


# ---------- Request/Response models ----------

class RegisterRequest(BaseModel):
    name: str
    manufacturer: str
    distributor: str
    retailer: str
    assigned_actor: str
    latitude: float
    longitude: float
    product_id: Optional[str] = None
    batch_number: Optional[str] = None

class ProductResponse(BaseModel):
    product_id: str
    name: str
    batch_number: str
    manufacturer: str
    distributor: str
    retailer: str
    assigned_actor: str
    status: str
    latitude: float
    longitude: float
    flagged: bool
    timeline: List[str]

class QrResponse(BaseModel):
    product_id: str
    qr_string: str

class ProvenanceResponse(BaseModel):
    product_id: str
    provenance: str

class ScanRequest(BaseModel):
    token: str

class ScanUpdateRequest(BaseModel):
    token: str
    status: str
    actor: str

class FlagRequest(BaseModel):
    actor: str

class LedgerEntryResponse(BaseModel):
    sequence: int
    timestamp: str
    event_kind: str
    product_id: str
    actor: str
    description: str


def _product_response(product: ProductSnapshot) -> ProductResponse:
    return ProductResponse(
        product_id=product.product_id,
        name=product.name,
        batch_number=product.batch_number,
        manufacturer=product.manufacturer,
        distributor=product.distributor,
        retailer=product.retailer,
        assigned_actor=product.assigned_actor,
        status=product.status.value,
        latitude=product.latitude,
        longitude=product.longitude,
        flagged=product.flagged,
        timeline=list(product.timeline),
    )


def _ledger_entry_response(entry: LedgerEntry) -> LedgerEntryResponse:
    return LedgerEntryResponse(
        sequence=entry.sequence,
        timestamp=entry.timestamp.isoformat(),
        event_kind=entry.event_kind.value,
        product_id=entry.product_id,
        actor=entry.actor,
        description=entry.description,
    )


def _http_error(e: TrackerError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, TokenMismatchError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, DuplicateIdError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, InvalidStatusError):
        return HTTPException(status_code=422, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


# ---------- Endpoints ----------

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "provenance-tracker-api",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.post("/api/v1/products", response_model=ProductResponse, status_code=201, summary="Register a product")
def register_product(request: RegisterRequest):
    try:
        product = tracker.register(**request.model_dump())
        return _product_response(product)
    except TrackerError as e:
        logger.error(f"Error registering product {request.product_id or request.name}: {e}")
        raise _http_error(e)


@app.get("/api/v1/products", response_model=List[ProductResponse], summary="List products in registration order")
def list_products():
    return [_product_response(p) for p in tracker.list_products()]


@app.get("/api/v1/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: str):
    product = tracker.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return _product_response(product)


@app.get("/api/v1/products/{product_id}/qr", response_model=QrResponse, summary="Generate QR string for a product")
def get_qr_string(product_id: str):
    try:
        return QrResponse(product_id=product_id, qr_string=tracker.qr_string(product_id))
    except TrackerError as e:
        raise _http_error(e)


@app.get("/api/v1/products/{product_id}/provenance", response_model=ProvenanceResponse)
def get_provenance(product_id: str):
    try:
        return ProvenanceResponse(product_id=product_id, provenance=tracker.render_provenance(product_id))
    except TrackerError as e:
        raise _http_error(e)


@app.post("/api/v1/products/{product_id}/flag", response_model=ProductResponse, summary="Report product as fake")
def flag_product(product_id: str, request: FlagRequest):
    try:
        return _product_response(tracker.flag(product_id, request.actor))
    except TrackerError as e:
        logger.error(f"Error flagging product {product_id}: {e}")
        raise _http_error(e)


@app.post("/api/v1/products/{product_id}/scan-update", response_model=ProductResponse,
          summary="Update a selected product with its scanned QR string")
def submit_scanned_update(product_id: str, request: ScanUpdateRequest):
    try:
        product = tracker.submit_scanned_update(
            product_id, request.token.strip(), request.status, request.actor
        )
        return _product_response(product)
    except TrackerError as e:
        logger.error(f"Error updating product {product_id}: {e}")
        raise _http_error(e)


@app.post("/api/v1/scan", response_model=ProvenanceResponse, summary="Validate a scanned QR string")
def scan(request: ScanRequest):
    product = tracker.lookup_by_token(request.token.strip())
    if product is None:
        raise HTTPException(status_code=404, detail="QR not recognized / product not found on chain.")
    return ProvenanceResponse(
        product_id=product.product_id,
        provenance=tracker.render_provenance(product.product_id),
    )


@app.post("/api/v1/scan/update", response_model=ProductResponse, summary="Scan a QR string and update status")
def scan_and_update(request: ScanUpdateRequest):
    try:
        product = tracker.update_status(request.token.strip(), request.status, request.actor)
        return _product_response(product)
    except TrackerError as e:
        logger.error(f"Error updating status by scan: {e}")
        raise _http_error(e)


@app.get("/api/v1/actors/{actor}/assignments", response_model=List[ProductResponse],
         summary="Deliveries assigned to an actor")
def list_assignments(actor: str):
    return [_product_response(p) for p in tracker.list_assigned(actor)]


@app.get("/api/v1/ledger", response_model=List[LedgerEntryResponse], summary="Full ledger in append order")
def get_ledger():
    return [_ledger_entry_response(e) for e in tracker.ledger_snapshot()]


def main():
    api_config = config.get_api_host_and_port()
    uvicorn.run(app, host=api_config["host"], port=api_config["port"])


if __name__ == "__main__":
    main()
