from scraper.client import PastebinClient

__all__ = ["PastebinClient"]
