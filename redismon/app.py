import logging
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, HTTPException

from redis_collector.collector import RedisCollector

logger = logging.getLogger("redismon")
handler = logging.StreamHandler()
handler.setFormatter(
    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
)
logger.addHandler(handler)
logger.setLevel(logging.INFO)

app = FastAPI(title="Redis Collector Monitor")

# Collector being served
collector_instance: Optional[RedisCollector] = None


@app.get("/")
async def root() -> dict[str, Any]:
    """Everything collected, under the collector name."""
    collector = get_collector()
    data = collector.collect(emit_measures=False)
    return {"name": collector.get_name(), "data": data}


def setup_routes() -> None:
    """Set up all route modules."""
    # imported here to avoid circular imports
    from redismon.views import connections, measures, statements

    app.include_router(connections.router)
    app.include_router(statements.router)
    app.include_router(measures.router)


def set_collector(collector: Optional[RedisCollector]) -> None:
    global collector_instance
    collector_instance = collector


def get_collector() -> RedisCollector:
    """
    Get the collector being monitored.

    :raises HTTPException: 500 if no collector is configured
    """
    if collector_instance is None:
        raise HTTPException(
            status_code=500,
            detail="No RedisCollector is configured for monitoring.",
        )
    return collector_instance


def start_monitor(
    collector: RedisCollector, host: str = "127.0.0.1", port: int = 8000
) -> None:
    """
    Start the monitoring web server for a collector.

    :param collector: The collector to serve
    :param host: Host to bind to
    :param port: Port to listen on
    """
    if collector is None:
        raise ValueError("A RedisCollector instance must be provided")
    set_collector(collector)
    logger.info(f"Monitoring connections: {list(collector.get_connections())}")
    print(f"Starting Redis Collector Monitor at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


setup_routes()
