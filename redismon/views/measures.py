from typing import Any

from fastapi import APIRouter, HTTPException

from redismon.app import get_collector

router = APIRouter(prefix="/measures", tags=["measures"])


@router.get("/")
async def timeline() -> dict[str, Any]:
    """Timeline of the time collector, including every statement recorded so far."""
    collector = get_collector()
    time_collector = collector.time_collector
    if time_collector is None or not hasattr(time_collector, "collect"):
        raise HTTPException(
            status_code=404, detail="The collector has no time collector."
        )
    collector.emit_measures()
    return time_collector.collect()
