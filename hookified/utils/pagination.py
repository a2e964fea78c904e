DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def clamp_limit(
    limit: int | None, default: int = DEFAULT_PAGE_SIZE, max_: int = MAX_PAGE_SIZE
) -> int:
    if limit is None or limit <= 0:
        return default
    return min(limit, max_)


def clamp_offset(offset: int | None) -> int:
    if offset is None or offset < 0:
        return 0
    return offset
