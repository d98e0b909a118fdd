from fastapi import APIRouter

# Auth
from app.api.v1.public.auth import router as auth_router

# Public: health
from app.api.v1.public.health import router as health_router

# Public: availability & bookings
from app.api.v1.public.bookings import router as bookings_router

# Public: walk-in queue
from app.api.v1.public.queue import router as queue_router

# Admin
from app.api.v1.admin.bookings import router as admin_bookings_router
from app.api.v1.admin.blocked_slots import router as admin_blocked_slots_router
from app.api.v1.admin.queue import router as admin_queue_router

api_router = APIRouter()

# --- Auth ---
api_router.include_router(auth_router)

# --- Public ---
api_router.include_router(health_router)
api_router.include_router(bookings_router)
api_router.include_router(queue_router)

# --- Admin ---
api_router.include_router(admin_bookings_router)
api_router.include_router(admin_blocked_slots_router)
api_router.include_router(admin_queue_router)
