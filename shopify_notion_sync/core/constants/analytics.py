"""
Analytics constants — report period and ranking sizes.
Version: 1.0.0
"""

DEFAULT_PERIOD_DAYS: int = 30
TOP_PRODUCTS_LIMIT: int = 10
