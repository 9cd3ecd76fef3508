"""Organization profile for the fact viewer.

The profile is built from a domain's facts, most confident first. When an
``organizations`` record exists for the domain it supplies the identity,
and its stored ``sites`` come ahead of the sites read from location facts.
Every piece of the profile (contacts, sites, people) carries an evidence
list pointing back at the fact or record it was read from.
"""

from typing import Any

from enrichment_tracker.core.time import isoformat, utc_now
from enrichment_tracker.services.geocoding import coordinates_for_location, is_valid_coordinates

DEFAULT_CONFIDENCE = 0.8
TIER_ONE_THRESHOLD = 0.8
MAX_ORGANIZATION_EVIDENCE = 5

# First matching keyword group in a location fact's source text sets the site type
_SITE_TYPE_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("headquarters", "hq"), "Headquarters"),
    (("research", "r&d"), "R&D"),
    (("distribution", "warehouse"), "Distribution"),
)
DEFAULT_SITE_TYPE = "Manufacturing"

# Free-text site_type on stored sites, first match wins
_STORED_SITE_TYPES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("manufacturing", "plant", "factory"), "Manufacturing"),
    (("r&d", "research", "development"), "R&D"),
    (("headquarters", "hq", "corporate"), "Headquarters"),
    (("distribution", "warehouse", "logistics"), "Distribution"),
)

# "inactive" contains "active", so it is matched first
_OPERATING_STATUSES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("inactive", "idle", "shutdown"), "Inactive"),
    (("active", "operational", "running"), "Active"),
    (("construction", "building", "development"), "Under Construction"),
    (("closed", "decommissioned", "abandoned"), "Closed"),
)
DEFAULT_OPERATING_STATUS = "Active"


def _data(fact: dict[str, Any]) -> dict[str, Any]:
    data = fact.get("fact_data")
    return data if isinstance(data, dict) else {}


def _confidence(value: Any) -> float:
    return float(value) if value else DEFAULT_CONFIDENCE


def evidence_tier(confidence: float | None) -> str:
    if confidence and confidence > TIER_ONE_THRESHOLD:
        return "Tier 1"
    return "Tier 2"


def _evidence_entry(
    evidence_id: str, snippet: str, source_url: str | None, confidence: Any, verified_at: Any
) -> dict[str, Any]:
    score = _confidence(confidence)
    return {
        "evidenceId": evidence_id,
        "snippet": snippet,
        "sourceURL": source_url or "",
        "confidenceScore": score,
        "lastVerified": isoformat(verified_at or utc_now()),
        "tier": evidence_tier(score),
    }


def _evidence(fact: dict[str, Any], evidence_id: str, fallback_snippet: str) -> dict[str, Any]:
    return _evidence_entry(
        evidence_id,
        fact.get("source_text") or fallback_snippet,
        fact.get("source_url"),
        fact.get("confidence_score"),
        fact.get("created_at"),
    )


def _match_keywords(
    text: str | None, table: tuple[tuple[tuple[str, ...], str], ...], default: str
) -> str:
    lowered = (text or "").lower()
    for keywords, label in table:
        if any(keyword in lowered for keyword in keywords):
            return label
    return default


def site_type_for(source_text: str | None) -> str:
    """Site type of a location fact, guessed from the text it was read from."""
    return _match_keywords(source_text, _SITE_TYPE_KEYWORDS, DEFAULT_SITE_TYPE)


def normalize_site_type(site_type: str | None) -> str:
    return _match_keywords(site_type, _STORED_SITE_TYPES, DEFAULT_SITE_TYPE)


def normalize_operating_status(status: str | None) -> str:
    return _match_keywords(status, _OPERATING_STATUSES, DEFAULT_OPERATING_STATUS)


def _site_name(data: dict[str, Any], index: int) -> str:
    city = data.get("city") or ""
    country = data.get("country") or ""
    if city and country:
        return f"{city}, {country}"
    if city:
        return city
    if data.get("address"):
        return data["address"]
    return f"Location {index + 1}"


def _site(
    site_id: str,
    organization_id: str,
    name: str,
    location: dict[str, Any],
    coordinates: tuple[float, float] | None,
    **fields: Any,
) -> dict[str, Any]:
    """Viewer site with every list the site card reads present, even when empty."""
    latitude, longitude = coordinates if coordinates else (None, None)
    site = {
        "siteId": site_id,
        "organizationId": organization_id,
        "name": name,
        "addressStreet": location.get("address") or "",
        "city": location.get("city") or "",
        "stateProvince": location.get("state") or "",
        "postalCode": location.get("postal_code") or "",
        "country": location.get("country") or "",
        "latitude": latitude,
        "longitude": longitude,
        "siteType": DEFAULT_SITE_TYPE,
        "sitePurpose": "",
        "operatingStatus": DEFAULT_OPERATING_STATUS,
        "employeeCount": None,
        "productionCapacity": None,
        "parentCompany": "",
        "certifications": [],
        "products": [],
        "technologies": [],
        "capabilities": [],
        "contacts": [],
        "evidence": [],
    }
    site.update(fields)
    return site


def extract_sites(facts: list[dict[str, Any]], organization_id: str) -> list[dict[str, Any]]:
    """One site per ``location`` fact, geocoded by city when it has no coordinates."""
    sites = []
    location_facts = [f for f in facts if f.get("fact_type") == "location" and _data(f)]
    for index, fact in enumerate(location_facts):
        data = _data(fact)
        name = _site_name(data, index)
        location = {
            "address": data.get("address"),
            "city": data.get("city"),
            "state": data.get("state"),
            "postal_code": data.get("postalCode") or data.get("zipCode"),
            "country": data.get("country"),
        }
        sites.append(
            _site(
                f"fact-site-{fact['id']}",
                organization_id,
                name,
                location,
                coordinates_for_location(data),
                siteType=site_type_for(fact.get("source_text")),
                sitePurpose=data.get("purpose") or "",
                employeeCount=data.get("employeeCount"),
                productionCapacity=data.get("capacity"),
                evidence=[
                    _evidence(fact, f"evidence-location-{fact['id']}", f"Location information: {name}")
                ],
            )
        )
    return sites


def _stored_coordinates(value: Any) -> tuple[float, float] | None:
    if not isinstance(value, dict):
        return None
    latitude = value.get("latitude", value.get("lat"))
    longitude = value.get("longitude", value.get("lng", value.get("lon")))
    if latitude is None or longitude is None:
        return None
    latitude, longitude = float(latitude), float(longitude)
    if not is_valid_coordinates(latitude, longitude):
        return None
    return latitude, longitude


def _stored_items(site: dict[str, Any], column: str) -> list[Any]:
    value = site.get(column)
    return value if isinstance(value, list) else []


def _item_name(item: Any, *keys: str, default: str) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        for key in keys:
            if item.get(key):
                return str(item[key])
    return default


def transform_site(site: dict[str, Any]) -> dict[str, Any]:
    """Viewer site from a stored ``sites`` row."""
    site_id = str(site["site_id"])
    name = site.get("site_name") or "Unknown Site"
    confidence = site.get("confidence_score")
    verified_at = site.get("last_verified_date")
    source = site.get("source")

    def evidence(evidence_id: str, snippet: str) -> list[dict[str, Any]]:
        return [_evidence_entry(evidence_id, snippet, source, confidence, verified_at)]

    certifications = []
    for index, cert in enumerate(_stored_items(site, "certifications")):
        cert_name = _item_name(cert, "name", "certification", default="Unknown")
        details = cert if isinstance(cert, dict) else {}
        certifications.append(
            {
                "certificationId": f"cert-{site_id}-{index}",
                "name": cert_name,
                "issuer": details.get("issuer") or "Unknown",
                "validFrom": details.get("validFrom") or details.get("valid_from") or "",
                "validTo": details.get("validTo") or details.get("valid_to") or "",
                "linkedSiteId": site_id,
                "evidence": evidence(
                    f"evidence-cert-{site_id}-{index}", f"{cert_name} certification found"
                ),
            }
        )

    products = []
    for index, product in enumerate(_stored_items(site, "major_products")):
        product_name = _item_name(product, "name", "product", default="Unknown Product")
        details = product if isinstance(product, dict) else {}
        applications = details.get("applications")
        products.append(
            {
                "productId": f"product-{site_id}-{index}",
                "name": product_name,
                "description": details.get("description") or f"{product_name} production",
                "applications": applications if isinstance(applications, list) else ["Industrial"],
                "linkedSiteId": site_id,
                "evidence": evidence(
                    f"evidence-product-{site_id}-{index}", f"{product_name} production mentioned"
                ),
            }
        )

    location = {
        "address": site.get("address"),
        "city": site.get("city"),
        "state": site.get("state_province"),
        "postal_code": site.get("postal_code"),
        "country": site.get("country"),
    }
    return _site(
        site_id,
        str(site["organization_id"]),
        name,
        location,
        _stored_coordinates(site.get("geo_coordinates")),
        siteType=normalize_site_type(site.get("site_type")),
        sitePurpose=site.get("site_purpose") or "",
        operatingStatus=normalize_operating_status(site.get("operating_status")),
        employeeCount=site.get("employee_count"),
        productionCapacity=site.get("production_capacity"),
        certifications=certifications,
        products=products,
        evidence=evidence(
            f"evidence-site-{site_id}", site.get("evidence_text") or f"{name} site information"
        ),
    )


def _person(
    person_id: str, name: str, details: dict[str, Any], organization_id: str, evidence: dict
) -> dict[str, Any]:
    return {
        "personId": f"person-{person_id}",
        "name": name,
        "role": details.get("role") or details.get("title") or "Unknown",
        "linkedToOrgOrSite": organization_id,
        "contactInfo": details.get("email") or details.get("contact") or "",
        "evidence": [evidence],
    }


def extract_people(facts: list[dict[str, Any]], organization_id: str) -> list[dict[str, Any]]:
    """People from ``person`` facts and from ``people`` lists on company info."""
    people = []
    for fact in facts:
        data = _data(fact)
        fact_type = fact.get("fact_type")
        if fact_type == "company_info" and isinstance(data.get("people"), list):
            for position, person in enumerate(data["people"]):
                if not isinstance(person, dict):
                    continue
                person_id = f"{fact['id']}-{position}"
                name = person.get("name") or "Unknown"
                people.append(
                    _person(
                        person_id,
                        name,
                        person,
                        organization_id,
                        _evidence(fact, f"evidence-person-{person_id}", f"{name} mentioned"),
                    )
                )
        elif fact_type == "person" and data.get("name"):
            people.append(
                _person(
                    str(fact["id"]),
                    data["name"],
                    data,
                    organization_id,
                    _evidence(fact, f"evidence-person-{fact['id']}", f"{data['name']} mentioned"),
                )
            )
    return people


def extract_contacts(facts: list[dict[str, Any]], organization_id: str) -> list[dict[str, Any]]:
    contacts = []
    for fact in facts:
        data = _data(fact)
        is_contact = fact.get("fact_type") == "contact_info" or (
            fact.get("fact_type") == "company_info" and (data.get("phone") or data.get("email"))
        )
        if not is_contact:
            continue
        contacts.append(
            {
                "contactId": f"contact-{fact['id']}",
                "phoneNumber": data.get("phone") or data.get("phoneNumber") or "",
                "email": data.get("email") or "",
                "linkedToOrganizationId": organization_id,
                "evidence": [
                    _evidence(fact, f"evidence-contact-{fact['id']}", "Contact information found")
                ],
            }
        )
    return contacts


def _financial_summary(facts: list[dict[str, Any]]) -> str | None:
    financial = [f for f in facts if f.get("fact_type") in ("financial_metric", "metric")]
    if not financial:
        return None

    def value_of(fact):
        data = _data(fact)
        return data.get("value") or data.get("amount")

    for fact in financial:
        data = _data(fact)
        label = str(data.get("metric_name") or data.get("name") or "").lower()
        if "revenue" in label:
            value = value_of(fact)
            if value:
                return f"{value} revenue"
            break

    value = value_of(financial[0])
    return str(value) if value else None


def fallback_organization(domain: str, facts: list[dict[str, Any]]) -> dict[str, Any]:
    """Stand-in ``organizations`` row for a domain with facts but no record.

    The first ``company_info`` fact supplies name and headquarters. Without
    one the name falls back to the domain's first label.
    """
    company_facts = [f for f in facts if f.get("fact_type") == "company_info"]
    company = _data(company_facts[0]) if company_facts else {}
    return {
        "organization_id": f"fallback-{domain}",
        "company_name": company.get("name") or domain.split(".")[0],
        "website": f"https://{domain}",
        "headquarters_address": company.get("headquarters") or "Unknown",
        "industry_sectors": [_industry({}, facts)],
    }


def _industry(organization: dict[str, Any], facts: list[dict[str, Any]]) -> str:
    """First company_info fact that names an industry, else the stored sectors."""
    for fact in facts:
        if fact.get("fact_type") == "company_info":
            industry = _data(fact).get("industry")
            if industry:
                return industry
    sectors = organization.get("industry_sectors")
    if isinstance(sectors, list) and sectors:
        return sectors[0]
    return "Unknown"


def build_organization_profile(
    domain: str,
    facts: list[dict[str, Any]],
    organization: dict[str, Any] | None = None,
    stored_sites: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Organization, sites and people for ``domain``.

    ``organization`` is the stored record when there is one; without it a
    fallback is built from the facts. Stored sites are listed before the
    sites read from location facts.
    """
    if organization is None:
        organization = fallback_organization(domain, facts)
    organization_id = str(organization["organization_id"])
    sectors = organization.get("industry_sectors")
    company_facts = [f for f in facts if f.get("fact_type") == "company_info"]

    profile = {
        "organizationId": organization_id,
        "name": organization.get("company_name") or domain.split(".")[0],
        "website": organization.get("website") or "",
        "headquarters": organization.get("headquarters_address") or "Unknown",
        "industry": _industry(organization, facts),
        "industrySectors": sectors if isinstance(sectors, list) else [],
        "financialSummary": _financial_summary(facts),
        "contacts": extract_contacts(facts, organization_id),
        "evidence": [
            _evidence(fact, f"evidence-org-{fact['id']}", "Company information found")
            for fact in company_facts[:MAX_ORGANIZATION_EVIDENCE]
        ],
    }

    sites = [transform_site(site) for site in stored_sites or []]
    sites.extend(extract_sites(facts, organization_id))
    return {
        "organization": profile,
        "sites": sites,
        "people": extract_people(facts, organization_id),
    }
