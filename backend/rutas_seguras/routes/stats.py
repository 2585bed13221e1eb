"""
Rutas Seguras Backend — Dashboard Stats Route
=============================================
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.database import get_db_session
from rutas_seguras.dependencies import get_current_user
from rutas_seguras.schemas.common import ApiResponse
from rutas_seguras.schemas.stats import StatsResponse
from rutas_seguras.security import TokenClaims
from rutas_seguras.services.stats_service import stats_service

router = APIRouter(prefix="/api", tags=["Stats"])


@router.get("/stats", response_model=ApiResponse[StatsResponse], summary="Dashboard counters")
async def get_stats(
    _: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[StatsResponse]:
    return ApiResponse[StatsResponse](data=await stats_service.get_stats(db))
