"""
Health Check Endpoints

- /health            - liveness (registered on the app in main.py)
- /api/health/ready  - readiness: the database answers a round trip
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timezone
from typing import Any, Dict
import time

from eventqr.core.database import get_db
from eventqr.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database(db: AsyncSession) -> Dict[str, Any]:
    """Check database connectivity and that the schema exists"""
    start = time.time()
    try:
        await db.execute(text("SELECT 1"))
        try:
            await db.execute(text("SELECT COUNT(*) FROM users"))
            tables_ok = True
        except Exception:
            await db.rollback()
            tables_ok = False

        return {
            "status": "healthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "tables_ready": tables_ok,
        }
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "tables_ready": False,
        }


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_db)):
    """503 until the database is reachable and migrated"""
    database = await check_database(db)
    ready = database["status"] == "healthy" and database["tables_ready"]
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {"database": database},
        },
    )
