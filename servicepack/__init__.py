"""Service Pack Package.

Two independent lookup clients bundled together:
- Currency conversion against the TraderMade market-data API, including
  batch conversion with per-pair error reporting
- IP geolocation enriched with locale, language and currency metadata from a
  bundled country reference dataset

Every public service method returns a pydantic result model or a
``ServiceError`` value instead of raising, so callers deal with one return
shape per operation.
"""
