import logging
import os
from typing import List, Optional

import sentry_sdk
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sentry_sdk.integrations.aws_lambda import AwsLambdaIntegration

from analysis.analyze import analyze
from analysis.diagnostics import Diagnostics
from report import InvalidSelection, Report, UnknownCategory

SENTRY_ENABLED = os.environ.get("AWS_EXECUTION_ENV") is not None
if SENTRY_ENABLED:
    sentry_sdk.init(
        dsn=os.environ.get("SENTRY_DSN"),
        traces_sample_rate=0.05,
        attach_stacktrace=True,
        integrations=[AwsLambdaIntegration()],
    )
CORS_ORIGINS = os.environ.get(
    "CORS_ORIGINS", "http://localhost:5173,https://www.warcraftlogs.com"
).split(",")

app = FastAPI()


async def catch_exceptions_middleware(request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logging.exception(e)
        return Response("Internal server error", status_code=500)


# Add this middleware first so 500 errors have CORS headers
app.middleware("http")(catch_exceptions_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AnalyzeRequest(BaseModel):
    report: dict
    fight_id: int = -1
    effect_ids: List[int]
    source_filters: Optional[List[dict]] = None
    target_filters: Optional[List[dict]] = None
    ability_filters: Optional[List[dict]] = None
    canceled_min_seconds: int = 1
    canceled_max_seconds: int = 15
    health_threshold: float = 0.8
    debug: bool = False


class AnalyzeResponse(BaseModel):
    data: dict


@app.post("/analyze_fight")
async def analyze_fight(request: AnalyzeRequest, response: Response):
    diagnostics = Diagnostics(request.debug)

    try:
        data = analyze(
            Report(request.report),
            request.fight_id,
            request.effect_ids,
            source_filters=request.source_filters,
            target_filters=request.target_filters,
            ability_filters=request.ability_filters,
            canceled_seconds=(
                request.canceled_min_seconds,
                request.canceled_max_seconds,
            ),
            health_threshold=request.health_threshold,
            diagnostics=diagnostics,
        )
    except InvalidSelection as e:
        response.status_code = 400
        return {"error": str(e)}
    except UnknownCategory as e:
        response.status_code = 422
        return {"error": str(e)}

    logging.info(
        f"Analyzed fight {request.fight_id} for effects {request.effect_ids}"
    )
    if request.debug:
        data["diagnostics"] = diagnostics.messages

    return AnalyzeResponse(data=data)
