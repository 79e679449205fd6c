from typing import Any, Optional

from fastapi import APIRouter, HTTPException

from redismon.app import get_collector

router = APIRouter(prefix="/statements", tags=["statements"])


@router.get("/")
async def list_statements(
    connection: Optional[str] = None, failed_only: bool = False
) -> list[dict[str, Any]]:
    """
    Statements of every connection, in collection order.

    :param connection: Only the statements of this connection
    :param failed_only: Only the failed statements
    """
    collector = get_collector()
    if connection is not None and connection not in collector.get_connections():
        raise HTTPException(
            status_code=404, detail=f"Connection '{connection}' not found."
        )
    statements = collector.collect(emit_measures=False)["statements"]
    if connection is not None:
        statements = [s for s in statements if s["connection"] == connection]
    if failed_only:
        statements = [s for s in statements if not s["is_success"]]
    return statements
