"""
FastAPI application exposing the calculator over HTTP.

Mirrors the CTP line protocol: the response carries the same status
strings, and requests longer than the protocol allows are refused with
`max-length-exceeded`.
"""

import structlog
from fastapi import FastAPI

from ctp_calc import __version__
from ctp_calc.config import settings
from ctp_calc.models import (
    EvaluateRequest,
    EvaluateResponse,
    ParseOutcome,
    ServiceLimits,
    Status,
)
from ctp_calc.parser import evaluate

logger = structlog.get_logger()

app = FastAPI(
    title=settings.app_name,
    description="Integer expression evaluator",
    version=__version__,
)


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/v1/config", response_model=ServiceLimits)
async def get_config():
    """Get public limits."""
    return ServiceLimits(
        max_request_bytes=settings.max_request_bytes,
        max_expression_length=settings.max_expression_length,
    )


# =============================================================================
# Evaluation API
# =============================================================================

@app.post("/api/v1/evaluate", response_model=EvaluateResponse)
def evaluate_expression(request: EvaluateRequest):
    """Evaluate one expression."""
    if len(request.expression) > settings.max_expression_length:
        outcome = ParseOutcome.failure(Status.MAX_LENGTH_EXCEEDED)
    else:
        outcome = evaluate(request.expression)

    logger.info(
        "Evaluated via API",
        expression=request.expression[: settings.max_expression_length],
        status=outcome.status.value,
    )
    return EvaluateResponse.from_outcome(outcome)
