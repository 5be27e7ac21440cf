"""
Prometheus metrics for the opportunity scanner.

ScannerMetrics doubles as the scan-count collaborator: the scanner calls
increment() once per completed scan. start_server() exposes the registry
over HTTP for scraping.
"""

import logging
from typing import Optional

from aiohttp import web
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

logger = logging.getLogger(__name__)


class ScannerMetrics:
    """
    Scanner counters.

    Args:
        registry: Collector registry, defaults to the global one
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or REGISTRY
        self._app = None
        self._runner = None
        self._site = None
        self._initialize_metrics()

    def _initialize_metrics(self):
        self.scans_total = Counter(
            "dex_scanner_scans_total",
            "Total number of completed scans",
            registry=self.registry,
        )

        self.opportunities_found_total = Counter(
            "dex_scanner_opportunities_found_total",
            "Opportunities meeting the minimum profit threshold",
            ["base_token"],
            registry=self.registry,
        )

        self.validation_rejected_total = Counter(
            "dex_scanner_validation_rejected_total",
            "Opportunities rejected by the validation pipeline",
            ["reason"],
            registry=self.registry,
        )

        self.handler_errors_total = Counter(
            "dex_scanner_handler_errors_total",
            "Exceptions raised by the opportunity handler",
            registry=self.registry,
        )

        self.last_scan_opportunities = Gauge(
            "dex_scanner_last_scan_opportunities",
            "Opportunities returned by the most recent scan",
            registry=self.registry,
        )

    def increment(self) -> None:
        """Record one completed scan."""
        self.scans_total.inc()

    def record_opportunity(self, base_token: str) -> None:
        self.opportunities_found_total.labels(base_token=base_token).inc()

    def record_rejection(self, reason: str) -> None:
        # Venue names are folded out of the label to keep cardinality low
        label = reason.split(" on ")[0]
        self.validation_rejected_total.labels(reason=label).inc()

    def record_handler_error(self) -> None:
        self.handler_errors_total.inc()

    def set_last_scan(self, count: int) -> None:
        self.last_scan_opportunities.set(count)

    # === SERVER MANAGEMENT ===

    async def start_server(
        self, port: int = 8000, host: str = "0.0.0.0", path: str = "/metrics"
    ) -> bool:
        """Start the Prometheus scrape endpoint."""
        try:
            self._app = web.Application()
            self._app.router.add_get(path, self._metrics_handler)
            self._app.router.add_get("/health", self._health_handler)

            self._runner = web.AppRunner(self._app)
            await self._runner.setup()

            self._site = web.TCPSite(self._runner, host, port)
            await self._site.start()

            logger.info(f"Metrics server started on http://{host}:{port}{path}")
            return True

        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            return False

    async def stop_server(self) -> None:
        try:
            if self._site:
                await self._site.stop()
            if self._runner:
                await self._runner.cleanup()
            logger.info("Metrics server stopped")
        except Exception as e:
            logger.error(f"Error stopping metrics server: {e}")

    async def _metrics_handler(self, request):
        try:
            metrics_output = generate_latest(self.registry)
            # aiohttp rejects a charset inside content_type
            content_type = CONTENT_TYPE_LATEST.split(";")[0]
            return web.Response(
                text=metrics_output.decode("utf-8"), content_type=content_type
            )
        except Exception as e:
            logger.error(f"Error generating metrics: {e}")
            return web.Response(text="Error generating metrics", status=500)

    async def _health_handler(self, request):
        return web.json_response({"status": "healthy", "service": "dex_scanner"})
