"""
vendor-api - declarative retrieval of paginated REST data.

See :mod:`vendor_api.api_fetcher` for the public entry points.
"""

__version__ = "0.1.0"
