from datetime import datetime
from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from boxoffice.core.config import EngineConfig, settings
from boxoffice.db.session import get_db
from boxoffice.services.engine import BookingEngine, utc_now


def get_engine_config() -> EngineConfig:
    return EngineConfig.from_settings(settings)


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_engine(
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_engine_config),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> BookingEngine:
    return BookingEngine(db, config, clock)
