"""
API v1 routes.
"""

from fastapi import APIRouter

from .endpoints import lookups, messages, tickets

api_router = APIRouter()

api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])

api_router.include_router(messages.router, prefix="/tickets", tags=["ticket-messages"])

api_router.include_router(lookups.router, tags=["lookups"])
