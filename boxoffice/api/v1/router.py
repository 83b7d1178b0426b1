from fastapi import APIRouter

from boxoffice.api.v1.rooms import router as rooms_router, config_router
from boxoffice.api.v1.showings import router as showings_router
from boxoffice.api.v1.reservations import (
    router as reservations_router,
    transfer_router,
)

api_router = APIRouter()

# --- Rooms & rules ---
api_router.include_router(config_router)
api_router.include_router(rooms_router)

# --- Showings ---
api_router.include_router(showings_router)

# --- Reservations (nested under /showings) & transfers ---
api_router.include_router(reservations_router)
api_router.include_router(transfer_router)
