"""
analysis.py — Stateless risk analysis endpoint.

Route:
  POST /api/v1/analyze — TelemetryReading in, RiskAssessment out.

Does not touch the dashboard state. Always answers 200 for a valid reading:
when Gemini fails, the body is the fallback assessment (risk 0, danger
"unknown", one "SYSTEM MALFUNCTION" alert). Invalid readings (NaN, a lone
latitude, non-numeric values) are rejected with 422 before any call.
"""

import logging

from fastapi import APIRouter, Request

from sentinel.ai.risk_analyzer import risk_analyzer
from sentinel.core.rate_limit import ANALYSIS_RATE, limiter
from sentinel.models.assessment import RiskAssessment
from sentinel.models.telemetry import TelemetryReading

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analyze", tags=["analysis"])


@router.post("", response_model=RiskAssessment, status_code=200)
@limiter.limit(ANALYSIS_RATE)
async def analyze(request: Request, payload: TelemetryReading):
    """One analysis pass over the submitted reading."""
    return await risk_analyzer.analyze(payload)
