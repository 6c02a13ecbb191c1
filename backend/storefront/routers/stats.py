"""Dashboard rollups and demo seeding."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..config import get_settings
from ..database import get_db
from ..seed import upsert_sample_orders
from ..services.stats import collect_stats

router = APIRouter(tags=["Stats"])


@router.get("/stats", response_model=schemas.StatsOut)
def stats(db: Session = Depends(get_db)):
    return schemas.StatsOut.model_validate(collect_stats(db, recent_limit=get_settings().recent_orders_limit))


@router.post("/seed-orders", response_model=schemas.SeedResult)
def seed_orders(db: Session = Depends(get_db)):
    count = upsert_sample_orders(db)
    return schemas.SeedResult(message=f"{count} sample orders added or updated.")
