from __future__ import annotations

import os
from dataclasses import dataclass

BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass
class ScraperSettings:
    ufc_base_url: str = os.getenv("UFC_BASE_URL", "https://www.ufc.com")
    thesportsdb_base_url: str = os.getenv(
        "THESPORTSDB_BASE_URL", "https://www.thesportsdb.com/api/v1/json/3"
    )
    sportsdataio_base_url: str = os.getenv(
        "MMA_API_BASE_URL", "https://api.sportsdata.io/v3/mma"
    )
    sportsdataio_api_key: str = os.getenv("MMA_API_KEY", "")
    user_agent: str = os.getenv("SCRAPER_USER_AGENT", BROWSER_USER_AGENT)
    request_timeout: float = float(os.getenv("SCRAPER_REQUEST_TIMEOUT", "30"))
    retry_attempts: int = int(os.getenv("SCRAPER_RETRY_ATTEMPTS", "3"))
    retry_base_delay: float = float(os.getenv("SCRAPER_RETRY_BASE_DELAY", "1.0"))
    page_delay_seconds: float = float(os.getenv("SCRAPER_PAGE_DELAY_SECONDS", "0.1"))
    detail_delay_seconds: float = float(os.getenv("SCRAPER_DETAIL_DELAY_SECONDS", "0.1"))
    records_batch_size: int = int(os.getenv("SCRAPER_RECORDS_BATCH_SIZE", "20"))
    max_sitemap_pages: int = int(os.getenv("SCRAPER_MAX_SITEMAP_PAGES", "50"))
    max_roster_pages: int = int(os.getenv("SCRAPER_MAX_ROSTER_PAGES", "50"))


settings = ScraperSettings()
