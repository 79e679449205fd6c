import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from redis_collector.exceptions import ConnectionNotFoundError
from redismon.app import get_collector

router = APIRouter(prefix="/connections", tags=["connections"])
logger = logging.getLogger("redismon.views.connections")


def _summary(name: str, data: dict[str, Any]) -> dict[str, Any]:
    summary = {key: value for key, value in data.items() if key != "statements"}
    summary["name"] = name
    return summary


@router.get("/")
async def list_connections() -> list[dict[str, Any]]:
    """Totals of every traced connection, without the statements."""
    collector = get_collector()
    return [
        _summary(name, collector.collect_redis(redis, emit_measures=False))
        for name, redis in collector.get_connections().items()
    ]


@router.get("/{name}")
async def connection_details(name: str) -> dict[str, Any]:
    """Totals and statements of one traced connection."""
    collector = get_collector()
    try:
        redis = collector.get_connection(name)
    except ConnectionNotFoundError as ex:
        logger.warning(f"Requested unknown connection {name}")
        raise HTTPException(status_code=404, detail=str(ex)) from ex
    data = collector.collect_redis(redis, emit_measures=False)
    data["statements"] = [{**s, "connection": name} for s in data["statements"]]
    data["name"] = name
    return data
