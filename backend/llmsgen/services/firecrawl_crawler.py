"""Page discovery using the Firecrawl API."""

import logging
from typing import Any

from firecrawl import AsyncFirecrawl
from firecrawl.v2.types import ScrapeOptions

from llmsgen.config import Settings

logger = logging.getLogger(__name__)


class FirecrawlCrawler:
    """Crawl a website once using Firecrawl for markdown extraction."""

    def __init__(self, settings: Settings, client: AsyncFirecrawl | None = None):
        """Initialize crawler with settings.

        Args:
            settings: Application settings containing Firecrawl API key
            client: Optional pre-built client (tests)
        """
        if client is None and not settings.firecrawl_api_key:
            raise ValueError("FIRECRAWL_API_KEY is required")

        self.client = client or AsyncFirecrawl(api_key=settings.firecrawl_api_key)
        self.max_pages = settings.max_pages_per_crawl

    async def crawl_website(self, start_url: str) -> list[dict[str, Any]]:
        """Crawl a website and return raw page data.

        Blocks (cooperatively) until Firecrawl reports the crawl complete.
        Provider errors propagate; callers decide how to degrade.

        Returns:
            List of dicts with url, title, description and markdown keys
        """
        logger.info(f"Starting Firecrawl crawl of {start_url} (max {self.max_pages} pages)")

        result = await self.client.crawl(
            url=start_url,
            limit=self.max_pages,
            scrape_options=ScrapeOptions(
                formats=["markdown"],
                only_main_content=True,
            ),
        )

        pages = []
        # result is a CrawlJob, access .data for the list of Document objects
        data = result.data if getattr(result, "data", None) else []

        for doc in data:
            meta = doc.metadata
            pages.append({
                "url": getattr(meta, "url", "") or getattr(meta, "source_url", "") or "",
                "title": getattr(meta, "title", "") or "",
                "description": getattr(meta, "description", "") or "",
                "markdown": doc.markdown or "",
            })

        logger.info(f"Firecrawl completed: {len(pages)} pages crawled")
        return pages
