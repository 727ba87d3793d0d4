"""Query helpers for the local store."""

PAGE_SIZE = 100


def fetch_all(query, page_size: int = PAGE_SIZE) -> list:
    """Every record matching ``query``, read page by page.

    Protean querysets return at most the aggregate's default limit per call.
    """
    records = []
    offset = 0
    while True:
        page = query.offset(offset).limit(page_size).all().items
        records.extend(page)
        if len(page) < page_size:
            return records
        offset += page_size
