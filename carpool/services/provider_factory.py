"""
Builds the routing provider once at process start from configuration.
"""

import logging
from typing import Optional

from carpool.config import Settings, settings as default_settings
from carpool.services.estimator_provider import EstimatorRoutingProvider
from carpool.services.google_provider import GoogleRoutingProvider
from carpool.services.routing_provider import RoutingProvider

logger = logging.getLogger(__name__)


def create_routing_provider(config: Optional[Settings] = None) -> RoutingProvider:
    """
    GEO_PROVIDER=google selects the Google Maps provider (API key required);
    any other value selects the offline estimator.
    """
    cfg = config or default_settings
    logger.info(f"[Geo] provider = {cfg.GEO_PROVIDER}")

    if cfg.uses_google():
        if not cfg.GOOGLE_MAPS_API_KEY:
            raise ValueError("GOOGLE_MAPS_API_KEY is required when GEO_PROVIDER=google")
        return GoogleRoutingProvider(
            api_key=cfg.GOOGLE_MAPS_API_KEY,
            base_url=cfg.GOOGLE_MAPS_BASE_URL,
            timeout_seconds=cfg.GEO_TIMEOUT_SECONDS,
            cache_ttl_seconds=cfg.GEO_CACHE_TTL_SECONDS,
        )

    return EstimatorRoutingProvider(
        speed_kmh=cfg.ESTIMATOR_SPEED_KMH,
        overhead_minutes=cfg.ESTIMATOR_OVERHEAD_MINUTES,
    )
