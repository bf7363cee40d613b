from leadcrawl.core.profiles import (
    build_page_url,
    detect_pagination_style,
    estimate_total_pages,
    resolve_profile,
)
from leadcrawl.models.lead import PaginationStyle, SelectorProfile


def test_start_style_uses_item_offset():
    url = build_page_url("https://dir.example.com/results?start=0", 3, items_per_page=20)
    assert url == "https://dir.example.com/results?start=40"


def test_page_style_uses_page_number():
    url = build_page_url("https://dir.example.com/list?q=marine&page=1", 4, items_per_page=20)
    assert url == "https://dir.example.com/list?q=marine&page=4"


def test_offset_style_uses_item_offset():
    url = build_page_url("https://dir.example.com/list?offset=0&sort=name", 2, items_per_page=25)
    assert url == "https://dir.example.com/list?offset=25&sort=name"


def test_missing_parameter_defaults_to_start():
    assert detect_pagination_style("https://dir.example.com/list?mode=bro") is PaginationStyle.START
    url = build_page_url("https://dir.example.com/list?mode=bro", 2, items_per_page=20)
    assert url == "https://dir.example.com/list?mode=bro&start=20"


def test_homepage_param_is_not_mistaken_for_page():
    assert detect_pagination_style("https://dir.example.com/?homepage=1") is PaginationStyle.START


def test_explicit_style_overrides_detection():
    url = build_page_url(
        "https://dir.example.com/list?start=0", 2, items_per_page=10, style=PaginationStyle.PAGE
    )
    assert url == "https://dir.example.com/list?start=0&page=2"


def test_lloyds_profile_resolved_by_host():
    profile = resolve_profile("https://ldc.lloyds.com/market-directory/results?mode=bro&bro=1")
    assert profile.name == "lloyds"
    assert profile.pagination_style is PaginationStyle.START
    assert profile.contact_page_paths == ("/contact", "/contact-us", "/about")
    assert estimate_total_pages(profile) == 228


def test_generic_profile_excludes_own_host_from_external_links():
    profile = resolve_profile("https://dir.example.com/results?start=0")
    assert profile.name == "generic"
    assert 'a[href^="http"]:not([href*="dir.example.com"])' in profile.external_website
    assert profile.container[0] == ".company-listing"
    assert "/contact" in profile.contact_page_paths
    assert estimate_total_pages(profile, default=7) == 7


def test_override_profile_wins():
    custom = SelectorProfile(name="custom", container=(".card",))
    assert resolve_profile("https://ldc.lloyds.com/x", custom) is custom
