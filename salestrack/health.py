"""
Liveness and readiness checks.
"""
from datetime import datetime, timezone
from typing import Dict, Any
import time
import psutil
from . import SERVICE_NAME, __version__
from .adapters.base import EventStore
from .logging import get_logger

logger = get_logger()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class HealthChecker:
    """
    Health checker for the salestrack service.

    Provides:
    - Liveness checks (is the service running?)
    - Readiness checks (can the store serve requests?)
    """

    def __init__(self, store: EventStore, service_name: str = SERVICE_NAME, version: str = __version__,
                 min_memory_mb: float = 50.0):
        self.store = store
        self.service_name = service_name
        self.version = version
        self.min_memory_mb = min_memory_mb

    def liveness(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "service": self.service_name,
            "version": self.version,
            "timestamp": _now(),
        }

    async def readiness(self) -> Dict[str, Any]:
        """
        Readiness check.

        Checks:
        - Event store connectivity
        - Memory availability

        Returns:
            dict: Readiness status with detailed check results
        """
        checks = {
            "store": await self._check_store(),
            "memory": self._check_memory(),
        }
        ready = all(c["status"] != "error" for c in checks.values())

        return {
            "status": "ready" if ready else "not_ready",
            "service": self.service_name,
            "version": self.version,
            "timestamp": _now(),
            "checks": checks,
        }

    async def _check_store(self) -> Dict[str, Any]:
        start = time.time()
        healthy = await self.store.health_check()
        result = {
            "status": "ok" if healthy else "error",
            "backend": type(self.store).__name__,
            "latency_ms": round((time.time() - start) * 1000, 2),
        }
        if not healthy:
            logger.warning("store_health_check_failed", backend=result["backend"])
        return result

    def _check_memory(self) -> Dict[str, Any]:
        try:
            memory = psutil.virtual_memory()
        except OSError as e:
            logger.warning("memory_health_check_failed", error=str(e))
            return {"status": "error", "error": str(e)}

        available_mb = memory.available / (1024**2)
        if available_mb < self.min_memory_mb:
            status = "error"
        elif available_mb < self.min_memory_mb * 2:
            status = "warning"
        else:
            status = "ok"

        return {
            "status": status,
            "available_mb": round(available_mb, 2),
            "used_percent": memory.percent,
        }
