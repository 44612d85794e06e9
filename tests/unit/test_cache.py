from view_engine.templates.cache import CacheEntry, RenderCache


def test_get_and_set():
    cache = RenderCache()
    entry = CacheEntry(result="<p></p>")
    cache.set("/site/view.html", entry)

    assert cache.get("/site/view.html") is entry
    assert cache.get("/site/other.html") is None
    assert "/site/view.html" in cache
    assert len(cache) == 1


def test_disabled_cache_misses_but_stores():
    """Test lookups miss while writes still land."""
    cache = RenderCache(disabled=True)
    entry = CacheEntry(result={"a": 1})
    cache.set("/site/data.json", entry)

    assert cache.get("/site/data.json") is None
    assert cache.peek("/site/data.json") is entry


def test_invalidate_pattern():
    cache = RenderCache()
    cache.set("/site/blog/a.html", CacheEntry(result="a"))
    cache.set("/site/blog/b.html", CacheEntry(result="b"))
    cache.set("/site/news/c.html", CacheEntry(result="c"))

    assert cache.invalidate(r"/blog/") == 2
    assert list(cache.entries) == ["/site/news/c.html"]


def test_invalidate_all_keeps_placeholders():
    cache = RenderCache()
    cache.set("__default_layout__", CacheEntry(result="layout"))
    cache.set("/site/blog/a.html", CacheEntry(result="a"))

    assert cache.invalidate() == 1
    assert "__default_layout__" in cache
    assert cache.invalidate("__default_layout__") == 1
    assert len(cache) == 0
