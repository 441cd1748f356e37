from fastapi import APIRouter
from invoice_analytics.api.endpoints import analysis, chat

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(analysis.router)
api_router.include_router(chat.router)
