"""Tests for the organization profile built from facts."""

from conftest import make_fact
from enrichment_tracker.services.organization import (
    build_organization_profile,
    evidence_tier,
    extract_contacts,
    extract_people,
    extract_sites,
    normalize_operating_status,
    normalize_site_type,
    site_type_for,
    transform_site,
)

ORG_ID = "fallback-acme.com"
STORED_ORG_ID = "0b6f7f4e-2b4a-4c55-9c6e-0b9a3d1e5f21"
SITE_KEYS = {
    "siteId", "organizationId", "name", "addressStreet", "city", "stateProvince",
    "postalCode", "country", "latitude", "longitude", "siteType", "sitePurpose",
    "operatingStatus", "employeeCount", "productionCapacity", "parentCompany",
    "certifications", "products", "technologies", "capabilities", "contacts", "evidence",
}


def stored_site(**overrides):
    site = {
        "site_id": "5d1b7c9a-8e3f-4a21-b6d4-2f9e0c7a1b33",
        "organization_id": STORED_ORG_ID,
        "site_name": "Northfield Plant",
        "address": "22 W Frontage Rd",
        "city": "Northfield",
        "state_province": "IL",
        "country": "USA",
        "postal_code": "60093",
        "geo_coordinates": {"latitude": 42.1, "longitude": -87.78},
        "site_type": "Chemical plant",
        "site_purpose": "Surfactant production",
        "certifications": [],
        "operating_status": "active",
        "production_capacity": "50kt/yr",
        "employee_count": 120,
        "major_products": [],
        "evidence_text": "Our Northfield plant produces surfactants",
        "source": "https://acme.com/locations",
        "confidence_score": 0.9,
        "last_verified_date": None,
    }
    site.update(overrides)
    return site


class TestEvidenceTier:
    def test_tiers(self):
        assert evidence_tier(0.95) == "Tier 1"
        assert evidence_tier(0.8) == "Tier 2"
        assert evidence_tier(None) == "Tier 2"


class TestSites:
    def test_site_type_keywords(self):
        assert site_type_for("Our global HQ in Boston") == "Headquarters"
        assert site_type_for("R&D center") == "R&D"
        assert site_type_for("Main warehouse") == "Distribution"
        assert site_type_for(None) == "Manufacturing"

    def test_location_fact(self):
        fact = make_fact(
            fact_type="location",
            fact_data={
                "city": "Boston",
                "country": "USA",
                "address": "1 Main St",
                "coordinates": {"lat": 42.36, "lng": -71.06},
            },
            source_text="Headquarters in Boston",
        )
        (site,) = extract_sites([fact], ORG_ID)
        assert site["siteId"] == f"fact-site-{fact['id']}"
        assert site["name"] == "Boston, USA"
        assert site["siteType"] == "Headquarters"
        assert site["latitude"] == 42.36
        assert site["longitude"] == -71.06
        assert site["operatingStatus"] == "Active"
        assert site["evidence"][0]["tier"] == "Tier 1"

    def test_unnamed_location(self):
        fact = make_fact(fact_type="location", fact_data={"purpose": "assembly"})
        (site,) = extract_sites([fact], ORG_ID)
        assert site["name"] == "Location 1"
        assert site["latitude"] is None

    def test_site_carries_every_viewer_field(self):
        fact = make_fact(fact_type="location", fact_data={"city": "Chicago", "country": "USA"})
        (site,) = extract_sites([fact], ORG_ID)
        assert set(site) == SITE_KEYS
        assert site["parentCompany"] == ""
        for key in ("certifications", "products", "technologies", "capabilities", "contacts"):
            assert site[key] == []

    def test_city_geocoded_without_coordinates(self):
        fact = make_fact(fact_type="location", fact_data={"city": "Chicago", "country": "USA"})
        (site,) = extract_sites([fact], ORG_ID)
        assert (site["latitude"], site["longitude"]) == (41.8781, -87.6298)

    def test_address_geocoded_without_city(self):
        fact = make_fact(
            fact_type="location", fact_data={"address": "100 Main St, Houston, TX"}
        )
        (site,) = extract_sites([fact], ORG_ID)
        assert site["name"] == "100 Main St, Houston, TX"
        assert (site["latitude"], site["longitude"]) == (29.7604, -95.3698)


class TestStoredSites:
    def test_normalize_site_type(self):
        assert normalize_site_type("Chemical plant") == "Manufacturing"
        assert normalize_site_type("Corporate office") == "Headquarters"
        assert normalize_site_type("Research campus") == "R&D"
        assert normalize_site_type("Logistics hub") == "Distribution"
        assert normalize_site_type(None) == "Manufacturing"

    def test_normalize_operating_status(self):
        assert normalize_operating_status("active") == "Active"
        assert normalize_operating_status("inactive") == "Inactive"
        assert normalize_operating_status("under_construction") == "Under Construction"
        assert normalize_operating_status("closed") == "Closed"
        assert normalize_operating_status(None) == "Active"

    def test_transform_site(self):
        site = transform_site(stored_site())
        assert set(site) == SITE_KEYS
        assert site["siteId"] == "5d1b7c9a-8e3f-4a21-b6d4-2f9e0c7a1b33"
        assert site["organizationId"] == STORED_ORG_ID
        assert site["name"] == "Northfield Plant"
        assert site["stateProvince"] == "IL"
        assert site["postalCode"] == "60093"
        assert (site["latitude"], site["longitude"]) == (42.1, -87.78)
        assert site["siteType"] == "Manufacturing"
        assert site["employeeCount"] == 120
        (evidence,) = site["evidence"]
        assert evidence["snippet"] == "Our Northfield plant produces surfactants"
        assert evidence["sourceURL"] == "https://acme.com/locations"
        assert evidence["tier"] == "Tier 1"

    def test_certifications_and_products(self):
        site = transform_site(
            stored_site(
                certifications=["ISO 9001", {"name": "ISO 14001", "issuer": "BSI"}],
                major_products=[{"name": "Surfactants", "applications": ["Detergents"]}, "Polyols"],
            )
        )
        assert [c["name"] for c in site["certifications"]] == ["ISO 9001", "ISO 14001"]
        assert site["certifications"][1]["issuer"] == "BSI"
        assert site["certifications"][0]["linkedSiteId"] == site["siteId"]
        assert [p["name"] for p in site["products"]] == ["Surfactants", "Polyols"]
        assert site["products"][0]["applications"] == ["Detergents"]
        assert site["products"][1]["description"] == "Polyols production"

    def test_bad_coordinates_dropped(self):
        site = transform_site(stored_site(geo_coordinates={"lat": 200, "lng": 10}))
        assert site["latitude"] is None
        assert transform_site(stored_site(geo_coordinates=None))["longitude"] is None


class TestPeople:
    def test_person_fact(self):
        fact = make_fact(fact_type="person", fact_data={"name": "Jane Doe", "title": "CEO"})
        (person,) = extract_people([fact], ORG_ID)
        assert person["name"] == "Jane Doe"
        assert person["role"] == "CEO"
        assert person["linkedToOrgOrSite"] == ORG_ID

    def test_people_listed_on_company_info(self):
        fact = make_fact(
            fact_data={
                "name": "Acme",
                "people": [{"name": "A. One", "role": "CTO"}, "not a person", {"email": "x@acme.com"}],
            }
        )
        people = extract_people([fact], ORG_ID)
        assert [p["name"] for p in people] == ["A. One", "Unknown"]
        assert people[1]["contactInfo"] == "x@acme.com"

    def test_person_without_name_skipped(self):
        assert extract_people([make_fact(fact_type="person", fact_data={})], ORG_ID) == []


class TestContacts:
    def test_contact_and_company_info(self):
        contact = make_fact(fact_type="contact_info", fact_data={"phoneNumber": "555-0100"})
        company = make_fact(fact_data={"name": "Acme", "email": "info@acme.com"})
        plain = make_fact(fact_data={"name": "Acme"})
        contacts = extract_contacts([contact, company, plain], ORG_ID)
        assert [c["phoneNumber"] for c in contacts] == ["555-0100", ""]
        assert contacts[1]["email"] == "info@acme.com"


class TestBuildOrganizationProfile:
    def test_from_company_info(self):
        facts = [
            make_fact(
                fact_data={"name": "Acme Corp", "industry": "Robotics", "headquarters": "Boston"}
            ),
            make_fact(
                fact_type="financial_metric",
                fact_data={"metric_name": "Annual Revenue", "value": "$10M"},
            ),
        ]
        profile = build_organization_profile("acme.com", facts)
        org = profile["organization"]
        assert org["organizationId"] == ORG_ID
        assert org["name"] == "Acme Corp"
        assert org["website"] == "https://acme.com"
        assert org["industrySectors"] == ["Robotics"]
        assert org["headquarters"] == "Boston"
        assert org["financialSummary"] == "$10M revenue"
        assert len(org["evidence"]) == 1
        assert profile["sites"] == []
        assert profile["people"] == []

    def test_without_company_info(self):
        profile = build_organization_profile(
            "globex.io", [make_fact(fact_type="metric", fact_data={"amount": 42})]
        )
        org = profile["organization"]
        assert org["name"] == "globex"
        assert org["industry"] == "Unknown"
        assert org["financialSummary"] == "42"
        assert org["evidence"] == []

    def test_evidence_capped_at_five(self):
        facts = [make_fact() for _ in range(8)]
        profile = build_organization_profile("acme.com", facts)
        assert len(profile["organization"]["evidence"]) == 5

    def test_industry_from_first_fact_that_names_one(self):
        facts = [
            make_fact(fact_data={"name": "Acme Corp"}),
            make_fact(fact_data={"industry": "Chemicals"}),
        ]
        org = build_organization_profile("acme.com", facts)["organization"]
        assert org["name"] == "Acme Corp"
        assert org["industry"] == "Chemicals"
        assert org["industrySectors"] == ["Chemicals"]

    def test_stored_organization_and_sites(self):
        organization = {
            "organization_id": STORED_ORG_ID,
            "company_name": "Acme Corporation",
            "website": "https://www.acme.com",
            "headquarters_address": "1 Main St, Northfield, IL",
            "industry_sectors": ["Specialty Chemicals", "Surfactants"],
        }
        location = make_fact(fact_type="location", fact_data={"city": "Chicago"})
        profile = build_organization_profile(
            "acme.com",
            [make_fact(fact_data={"name": "Acme"}), location],
            organization=organization,
            stored_sites=[stored_site()],
        )
        org = profile["organization"]
        assert org["organizationId"] == STORED_ORG_ID
        assert org["name"] == "Acme Corporation"
        assert org["website"] == "https://www.acme.com"
        assert org["industry"] == "Specialty Chemicals"
        assert org["industrySectors"] == ["Specialty Chemicals", "Surfactants"]
        assert [s["siteId"] for s in profile["sites"]] == [
            "5d1b7c9a-8e3f-4a21-b6d4-2f9e0c7a1b33",
            f"fact-site-{location['id']}",
        ]
        assert profile["sites"][1]["organizationId"] == STORED_ORG_ID
