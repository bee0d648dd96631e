"""
IAESTE Reports - scraper and JSON API for IAESTE CZ student internship reports.

Architecture:
- core/: Stable foundation (models, HTTP client, selectors, bilingual joins)
- navigators/: Listing pages (taxonomy, specializations, report tables)
- parsers/: Report detail pages
- config/: YAML-driven runtime settings
- orchestrator: Full-site aggregation
- server: aiohttp API with periodic refresh
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
