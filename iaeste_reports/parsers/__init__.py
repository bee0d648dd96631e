"""
Parsers for report detail pages.
"""

from .review_detail import ReviewDetailParser

__all__ = ["ReviewDetailParser"]
