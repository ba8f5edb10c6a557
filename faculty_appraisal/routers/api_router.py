from fastapi import APIRouter
from faculty_appraisal.routers import appraisals, cycles, reports

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(cycles.router, tags=["Appraisal Cycles"])
api_router.include_router(appraisals.router, tags=["Appraisals"])
api_router.include_router(reports.router, tags=["Appraisal Reports"])
