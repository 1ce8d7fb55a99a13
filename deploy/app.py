import logging
import time
from decimal import Decimal
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from pydantic import BaseModel, Field
from starlette.responses import Response

from src.validation.aliases import BidderAliases
from src.validation.config import ValidatorConfig
from src.validation.enforcement import BidValidationEnforcement
from src.validation.metrics import PrometheusMetrics
from src.validation.schema import (
    Account,
    AccountBidValidationConfig,
    AuctionContext,
    Banner,
    Bid,
    BidderBid,
    BidRequest,
    BidType,
    Format,
    Imp,
)
from src.validation.validator import ResponseBidValidator

# --- Metrics ---
REQUEST_COUNT = Counter('bid_validation_requests_total', 'Total bids submitted for validation')
REJECT_COUNT = Counter('bid_validation_rejected_total', 'Bids rejected by validation')
LATENCY = Histogram('bid_validation_latency_seconds', 'Validation latency in seconds', buckets=[0.0001, 0.0005, 0.001, 0.005, 0.010])
ERROR_COUNT = Counter('bid_validation_errors', 'Internal validation errors', ['type'])


# --- Payload models ---
class FormatModel(BaseModel):
    w: Optional[int] = None
    h: Optional[int] = None


class BannerModel(BaseModel):
    format: Optional[List[FormatModel]] = None


class ImpModel(BaseModel):
    id: str
    banner: Optional[BannerModel] = None
    secure: Optional[int] = None


class BidRequestModel(BaseModel):
    id: str
    imp: List[ImpModel] = Field(default_factory=list)


class BidModel(BaseModel):
    id: Optional[str] = None
    impid: Optional[str] = None
    price: Optional[Decimal] = None
    crid: Optional[str] = None
    dealid: Optional[str] = None
    adm: Optional[str] = None
    nurl: Optional[str] = None
    w: Optional[int] = None
    h: Optional[int] = None


class AccountModel(BaseModel):
    id: str
    banner_max_size_enforcement: Optional[BidValidationEnforcement] = None
    secure_markup_enforcement: Optional[BidValidationEnforcement] = None


class ValidateRequest(BaseModel):
    bidder: str
    type: BidType
    bid: Optional[BidModel] = None
    currency: Optional[str] = None
    request: BidRequestModel
    account: AccountModel
    aliases: Dict[str, str] = Field(default_factory=dict)


class ValidateResponse(BaseModel):
    valid: bool
    warnings: List[str]
    errors: List[str]


def to_bidder_bid(payload: ValidateRequest) -> BidderBid:
    bid = Bid(**payload.bid.model_dump()) if payload.bid is not None else None
    return BidderBid(bid=bid, type=payload.type, bid_currency=payload.currency)


def to_auction_context(payload: ValidateRequest) -> AuctionContext:
    imps = []
    for imp in payload.request.imp:
        banner = None
        if imp.banner is not None:
            formats = [Format(w=f.w, h=f.h) for f in imp.banner.format] if imp.banner.format is not None else None
            banner = Banner(format=formats)
        imps.append(Imp(id=imp.id, banner=banner, secure=imp.secure))

    acc = payload.account
    overrides = None
    if acc.banner_max_size_enforcement is not None or acc.secure_markup_enforcement is not None:
        overrides = AccountBidValidationConfig(
            banner_max_size_enforcement=acc.banner_max_size_enforcement,
            secure_markup_enforcement=acc.secure_markup_enforcement,
        )
    return AuctionContext(
        bid_request=BidRequest(id=payload.request.id, imp=imps),
        account=Account(id=acc.id, bid_validations=overrides),
    )


# Initialize App & Validator
app = FastAPI(title="Response Bid Validator", version="1.0.0")
validator = ResponseBidValidator.from_config(ValidatorConfig.from_env(), PrometheusMetrics())


@app.on_event("startup")
async def startup_event():
    logging.info(
        "Starting bid validator (banner=%s, secure=%s)",
        validator.banner_max_size_enforcement.value,
        validator.secure_markup_enforcement.value,
    )


@app.on_event("shutdown")
async def shutdown_event():
    logging.info("Shutting down...")


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
async def health_check():
    """Health check endpoint for k8s/LB."""
    return {"status": "healthy", "service": "bid-validator"}


@app.post("/validate", response_model=ValidateResponse)
async def validate_bid(payload: ValidateRequest):
    """
    Validate one bidder bid against its auction context.
    """
    start_time = time.perf_counter()
    REQUEST_COUNT.inc()

    try:
        result = validator.validate(
            to_bidder_bid(payload),
            payload.bidder,
            to_auction_context(payload),
            BidderAliases(payload.aliases),
        )
    except Exception as e:
        ERROR_COUNT.labels(type=type(e).__name__).inc()
        logging.error(f"Validation error for bidder {payload.bidder}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_error")

    LATENCY.observe(time.perf_counter() - start_time)
    if result.has_errors:
        REJECT_COUNT.inc()

    return ValidateResponse(valid=not result.has_errors, warnings=result.warnings, errors=result.errors)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
