from fastapi import APIRouter
from cmis_portal.api.endpoints import auth, students, events, webhook, health

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(webhook.router, prefix="/webhook", tags=["Automation"])
