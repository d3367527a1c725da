"""Factory for creating the crawler service based on configuration."""

import logging

from llmsgen.config import Settings
from llmsgen.services.firecrawl_crawler import FirecrawlCrawler

logger = logging.getLogger(__name__)


def get_crawler_service(settings: Settings) -> FirecrawlCrawler | None:
    """Return a live crawler, or None when discovery should use the stub path.

    The stub path is used when no Firecrawl key is configured or when
    ``firecrawl_use_stub`` is set.
    """
    if not settings.firecrawl_api_key or settings.firecrawl_use_stub:
        logger.info("Using stub page discovery")
        return None

    logger.info("Using Firecrawl crawler backend")
    return FirecrawlCrawler(settings)
