from fastapi import APIRouter

from sensorwatch.api.routes import auth, catalog, measurements, series

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(catalog.router, tags=["catalog"])
api_router.include_router(series.router, tags=["series"])
api_router.include_router(measurements.router, tags=["measurements"])
