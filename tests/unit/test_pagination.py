from utils.pagination import resolve_page, pagination_meta, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def test_resolve_page_defaults():
    page = resolve_page(None, None)

    assert page.page == 1
    assert page.limit == DEFAULT_PAGE_SIZE
    assert page.offset == 0


def test_resolve_page_clamps():
    assert resolve_page(0, 1000).limit == MAX_PAGE_SIZE
    assert resolve_page(-5, -1).page == 1
    assert resolve_page(-5, -1).limit == 1
    assert resolve_page(3, 10).offset == 20


def test_pagination_meta():
    assert pagination_meta(resolve_page(1, 10), 25) == {
        "current_page": 1,
        "total_pages": 3,
        "total_products": 25,
        "limit": 10,
        "has_more": True
    }
    assert pagination_meta(resolve_page(3, 10), 25)["has_more"] is False


def test_pagination_meta_empty():
    meta = pagination_meta(resolve_page(1, 12), 0)

    assert meta["total_pages"] == 0
    assert meta["has_more"] is False


def test_resolve_page_non_numeric_falls_back_to_defaults():
    page = resolve_page("abc", "lots")

    assert page.page == 1
    assert page.limit == DEFAULT_PAGE_SIZE
    assert resolve_page("2", "5") == resolve_page(2, 5)
