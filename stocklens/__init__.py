"""
StockLens Backend

Stock research API: quotes, fundamentals, indicators, news and watchlists.
"""

__version__ = "0.1.0"
