"""List endpoint paging limits.

`PAGE_LIMIT_DEFAULT` and `PAGE_LIMIT_MAX` may be overridden from the environment.
"""
import os

DEFAULT_LIMIT = int(os.getenv('PAGE_LIMIT_DEFAULT', '50'))
MAX_LIMIT = int(os.getenv('PAGE_LIMIT_MAX', '200'))


def normalize_pagination(limit_raw, offset_raw):
    """Parse raw query values into a clamped (limit, offset) pair.

    Raises ValueError for non-integer input; callers turn that into a 400.
    """
    try:
        limit = DEFAULT_LIMIT if limit_raw in (None, '') else int(limit_raw)
        offset = 0 if offset_raw in (None, '') else int(offset_raw)
    except ValueError:
        raise ValueError('limit and offset must be integers')
    return max(1, min(limit, MAX_LIMIT)), max(0, offset)
