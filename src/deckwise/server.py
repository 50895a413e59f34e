import logging
import time
from contextlib import asynccontextmanager

import pytz
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from deckwise.application.classification import classify
from deckwise.application.queue_selector import select_queue
from deckwise.application.scheduler import schedule
from deckwise.application.stats.metrics_calculator import MetricsCalculator
from deckwise.application.streaks import compute_streak, local_date, to_local_dates
from deckwise.consts import VERSION
from deckwise.domain.clock import utcnow
from deckwise.domain.errors import InvalidRating
from deckwise.domain.memory_model import RATING_BUTTONS, is_pass
from deckwise.interface.schemas import (
    ClassifyRequest,
    ClassifyResponse,
    QueueRequest,
    QueueResponse,
    RatingButton,
    ScheduleRequest,
    ScheduleResponse,
    StatisticsRequest,
    StatisticsResponse,
    StreakRequest,
    StreakResponse,
)

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("deckwise.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"deckwise server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("deckwise server shutting down...")


app = FastAPI(
    title="deckwise",
    description="Spaced-repetition scheduling engine.",
    version=VERSION,
    lifespan=lifespan,
)


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


start_time = time.time()


def _check_time_zone(time_zone: str) -> None:
    if time_zone not in pytz.all_timezones_set:
        raise HTTPException(status_code=400, detail=f"Unknown time zone: {time_zone}")


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/ratings", response_model=list[RatingButton])
async def get_ratings():
    """Study buttons and the rating each one submits."""
    return [
        RatingButton(rating=rating, label=label, passed=is_pass(rating))
        for rating, label in RATING_BUTTONS.items()
    ]


@app.post("/schedule", response_model=ScheduleResponse)
async def schedule_review(req: ScheduleRequest):
    """
    Apply a quality rating to a card and return the new card and review event.
    The caller persists both.
    """
    try:
        result = schedule(req.card.to_domain(), req.quality_rating, req.now or utcnow())
    except InvalidRating as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return ScheduleResponse.model_validate(result)


@app.post("/classify", response_model=ClassifyResponse)
async def classify_card(req: ClassifyRequest):
    return ClassifyResponse(classification=classify(req.card.to_domain(), req.now or utcnow()))


@app.post("/queue", response_model=QueueResponse)
async def build_queue(req: QueueRequest):
    """
    Select the study queue from a deck's cards. Reuse the seed for the whole session.
    """
    queue = select_queue(
        [c.to_domain() for c in req.cards],
        req.now or utcnow(),
        session_limit=req.session_limit,
        seed=req.seed,
        new_card_limit=req.new_card_limit,
        shuffle=req.shuffle,
    )
    return QueueResponse.model_validate(queue)


@app.post("/streak", response_model=StreakResponse)
async def get_streak(req: StreakRequest):
    _check_time_zone(req.time_zone)
    dates = to_local_dates(req.review_timestamps, req.time_zone)
    today = local_date(req.now or utcnow(), req.time_zone)

    return StreakResponse.model_validate(compute_streak(dates, today))


@app.post("/statistics", response_model=StatisticsResponse)
async def get_statistics(req: StatisticsRequest):
    """
    Dashboard statistics from the cards and history supplied in the request.
    """
    _check_time_zone(req.time_zone)
    calc = MetricsCalculator(
        retention_window_days=req.retention_window_days,
        weighted_retention=req.weighted_retention,
    )
    try:
        snapshot = calc.aggregate(
            [c.to_domain() for c in req.cards],
            [r.to_domain() for r in req.reviews],
            [s.to_domain() for s in req.sessions],
            req.now or utcnow(),
            req.date_range,
            req.time_zone,
        )
    except Exception as e:
        logger.error(f"Statistics failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return StatisticsResponse.model_validate(snapshot)
