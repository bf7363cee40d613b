import pytest

from bs4 import BeautifulSoup

from leadcrawl.core.parser import extract_listings
from leadcrawl.core.profiles import resolve_profile
from leadcrawl.enricher.contact_extractor import extract_contact_details
from leadcrawl.enricher.enricher import ContactEnricher
from leadcrawl.models.lead import EnrichedLead, EnrichmentStatus, ExtractedListing

SOURCE = "https://dir.example.com/results?start=0"


@pytest.fixture
def profile():
    return resolve_profile(SOURCE)


def _lead(**fields):
    fields.setdefault("company_name", "Acme")
    fields.setdefault("source_page_url", SOURCE)
    return EnrichedLead(**fields)


def test_mailto_link_on_company_site(make_fetcher, profile):
    fetcher = make_fetcher(
        {"https://acme.test": '<html><body><a href="mailto:info@acme.test">Email us</a></body></html>'}
    )
    lead = ContactEnricher(fetcher, profile).enrich(_lead(external_website="https://acme.test"))

    assert lead.email == "info@acme.test"
    assert lead.enrichment_status is EnrichmentStatus.COMPLETED
    assert lead.enriched is True
    assert lead.contact_page_url is None
    assert fetcher.calls == ["https://acme.test"]


def test_phone_found_on_contact_page(make_fetcher, profile):
    fetcher = make_fetcher(
        {
            "https://acme.test": "<html><body><h1>Acme</h1><p>Welcome to Acme.</p></body></html>",
            "https://acme.test/contact": (
                '<html><body><a href="tel:+44 20 7123 4567">Call us</a></body></html>'
            ),
        }
    )
    lead = ContactEnricher(fetcher, profile).enrich(_lead(external_website="https://acme.test"))

    assert lead.phone == "+44 20 7123 4567"
    assert lead.email is None
    assert lead.contact_page_url == "https://acme.test/contact"
    assert lead.enrichment_status is EnrichmentStatus.COMPLETED
    assert fetcher.calls == ["https://acme.test", "https://acme.test/contact"]


def test_contact_probe_skips_failing_paths(make_fetcher, profile):
    fetcher = make_fetcher(
        {
            "https://acme.test/about/": "<html><body><p>About</p></body></html>",
            "https://acme.test/contacts": '<p class="email">hello@acme.test</p>',
        }
    )
    lead = ContactEnricher(fetcher, profile).enrich(
        _lead(external_website="https://acme.test/about/")
    )

    assert lead.email == "hello@acme.test"
    assert lead.contact_page_url == "https://acme.test/contacts"
    assert fetcher.calls == [
        "https://acme.test/about/",
        "https://acme.test/contact",
        "https://acme.test/contact-us",
        "https://acme.test/contacts",
    ]


def test_nothing_found_is_still_completed(make_fetcher, profile):
    fetcher = make_fetcher({"https://quiet.test": "<html><body><p>Hi</p></body></html>"})
    lead = ContactEnricher(fetcher, profile).enrich(_lead(external_website="https://quiet.test"))

    assert lead.enrichment_status is EnrichmentStatus.COMPLETED
    assert lead.enriched is False
    assert lead.contact_page_url is None
    assert len(fetcher.calls) == 1 + len(profile.contact_page_paths)


def test_missing_website_fails_without_network(make_fetcher, profile):
    fetcher = make_fetcher()
    listing = ExtractedListing(company_name="No Site", source_page_url=SOURCE)

    lead = ContactEnricher(fetcher, profile).enrich(listing)

    assert isinstance(lead, EnrichedLead)
    assert lead.enrichment_status is EnrichmentStatus.FAILED
    assert lead.enrichment_error == "no external website"
    assert fetcher.calls == []


def test_unreachable_website_fails(make_fetcher, profile):
    lead = ContactEnricher(make_fetcher(), profile).enrich(
        _lead(external_website="https://down.test")
    )

    assert lead.enrichment_status is EnrichmentStatus.FAILED
    assert "down.test" in lead.enrichment_error


def test_listing_page_data_takes_precedence(make_fetcher, profile):
    fetcher = make_fetcher(
        {
            "https://acme.test": (
                '<a href="mailto:site@acme.test">Mail</a>'
                '<span class="phone">Tel: 020 7946 0000</span>'
                '<p class="contact-person">Jane Doe</p>'
            )
        }
    )
    lead = ContactEnricher(fetcher, profile).enrich(
        _lead(external_website="https://acme.test", email="listing@acme.test")
    )

    assert lead.email == "listing@acme.test"
    assert lead.phone == "020 7946 0000"
    assert lead.contact_person == "Jane Doe"


def test_generic_addresses_fall_back_to_text_scan(profile):
    soup = BeautifulSoup(
        '<html><body><a href="mailto:noreply@acme.test">Newsletter</a>'
        "<p>Write to sales@acme.test or admin@acme.test</p></body></html>",
        "lxml",
    )
    details = extract_contact_details(soup, profile)
    assert details.email == "sales@acme.test"


def test_phone_regex_fallback_and_digit_bounds(profile):
    soup = BeautifulSoup(
        "<html><body><p>Ref 12345</p><p>Office: (212) 555-0147</p></body></html>", "lxml"
    )
    details = extract_contact_details(soup, profile)
    assert details.phone == "(212) 555-0147"
    assert 7 <= len("".join(ch for ch in details.phone if ch.isdigit())) <= 15


def test_contact_person_must_look_like_a_name(profile):
    soup = BeautifulSoup(
        '<p class="contact-person">Contact: Jane</p><p class="director">Tom Baker</p>', "lxml"
    )
    assert extract_contact_details(soup, profile).contact_person == "Tom Baker"


def test_resolve_offline_never_fetches(make_fetcher):
    fetcher = make_fetcher()
    enricher = ContactEnricher(fetcher)

    with_site = enricher.resolve_offline(_lead(external_website="https://acme.test"))
    without = enricher.resolve_offline(_lead())

    assert with_site.enrichment_status is EnrichmentStatus.COMPLETED
    assert without.enrichment_status is EnrichmentStatus.FAILED
    assert fetcher.calls == []


def test_year_range_on_listing_does_not_block_contact_probe(make_fetcher, profile):
    html = (
        '<div class="company-listing"><h3>Acme</h3><p>Member 1990 - 2024 (active)</p>'
        '<a class="website-link" href="https://acme.test">Website</a></div>'
    )
    (listing,) = extract_listings(html, SOURCE, profile)
    assert listing.phone is None

    fetcher = make_fetcher(
        {
            "https://acme.test": "<html><body><p>Welcome</p></body></html>",
            "https://acme.test/contact": '<a href="tel:+44 20 7123 4567">Call</a>',
        }
    )
    lead = ContactEnricher(fetcher, profile).enrich(listing)

    assert lead.phone == "+44 20 7123 4567"
    assert fetcher.calls == ["https://acme.test", "https://acme.test/contact"]
