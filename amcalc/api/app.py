"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from amcalc.api.routes import calculator
from amcalc.api.schemas import CalculatorErrorResponse, FieldErrorResponse
from amcalc.config import settings
from amcalc.models.amortization import ValidationFailed

logger = logging.getLogger(__name__)

app = FastAPI(
    title="AmCalc",
    description="Loan Amortization Calculator",
    version="0.1.0",
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calculator.router)


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    logger.info("Rejected %s: %s", request.url.path, exc)
    body = CalculatorErrorResponse(
        error=", ".join(e.message for e in exc.errors),
        errors=[FieldErrorResponse(field=e.field, message=e.message) for e in exc.errors],
    )
    return JSONResponse(status_code=400, content=body.model_dump())


@app.get("/health")
async def health():
    return {"status": "ok"}
