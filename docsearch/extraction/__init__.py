from .extractor import ExtractorEngine

__all__ = ["ExtractorEngine"]
