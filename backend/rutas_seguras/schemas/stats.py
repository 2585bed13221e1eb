"""
Rutas Seguras Backend — Dashboard Stats Schema
==============================================
"""

from pydantic import BaseModel, Field


class StatsResponse(BaseModel):
    """Row counts shown on the dashboard landing page."""
    users: int = Field(description="Active users")
    routes: int = Field(description="Active routes")
    units: int = Field(description="Active units")
    contacts: int = Field(description="All contact messages")
