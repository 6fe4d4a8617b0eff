"""
Constants used across the court directory.
"""

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Cost filter placement for non-search listings
COST_FILTER_POST_PAGE = "post_page"  # filter the fetched page in memory
COST_FILTER_PRE_PAGE = "pre_page"  # push the filter into the query
COST_FILTER_MODES = (COST_FILTER_POST_PAGE, COST_FILTER_PRE_PAGE)

# Full-text search configuration (PostgreSQL)
SEARCH_TEXT_CONFIG = "english"
