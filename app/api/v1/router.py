"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import drivers, jobs, notifications, webhooks

api_router = APIRouter()

# Jobs
api_router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])

# Drivers
api_router.include_router(drivers.router, prefix="/drivers", tags=["Drivers"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Webhooks
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
