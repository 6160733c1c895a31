"""
Normalization of provider person records into ProviderContact.

Absent fields stay None so they are omitted on the wire instead of being
sent as empty strings.
"""

from typing import Any

from leadagent.schemas.enrich import ProviderContact


PHONE_KEYS = ("raw_number", "sanitized_number")


def contact_from_match(match: dict[str, Any]) -> ProviderContact:
    """Build a contact from an enrichment match (bulk match response or callback)."""
    first_name = _clean(match.get("first_name")) or ""
    last_name = _clean(match.get("last_name")) or ""
    return ProviderContact(
        id=_clean(match.get("id")),
        first_name=first_name,
        last_name=last_name,
        name=f"{first_name} {last_name}".strip(),
        email=_clean(match.get("email")),
        phone=first_phone(match.get("phone_numbers")),
        title=_clean(match.get("title")),
        linkedin_url=_clean(match.get("linkedin_url")),
        organization_name=_organization_name(match),
    )


def contact_from_person(person: dict[str, Any]) -> ProviderContact:
    """Build a contact from a people-search hit. Email and phone are never present at search time."""
    first_name = _clean(person.get("first_name")) or ""
    last_name = _clean(person.get("last_name")) or ""
    return ProviderContact(
        id=_clean(person.get("id")),
        first_name=first_name,
        last_name=last_name,
        name=_clean(person.get("name")) or f"{first_name} {last_name}".strip(),
        title=_clean(person.get("title")),
        linkedin_url=_clean(person.get("linkedin_url")),
        organization_name=_clean(person.get("organization_name")) or _organization_name(person),
        has_email=bool(person.get("has_email")),
        has_direct_phone=bool(person.get("has_direct_phone")),
    )


def first_phone(phone_numbers: Any) -> str | None:
    """First non-empty number, trying raw then sanitized on each entry in order."""
    if not isinstance(phone_numbers, list):
        return None
    for entry in phone_numbers:
        if not isinstance(entry, dict):
            continue
        for key in PHONE_KEYS:
            value = _clean(entry.get(key))
            if value:
                return value
    return None


def _organization_name(record: dict[str, Any]) -> str | None:
    organization = record.get("organization")
    if isinstance(organization, dict) and _clean(organization.get("name")):
        return _clean(organization.get("name"))
    return _clean(record.get("organization_name"))


def _clean(value: Any) -> str | None:
    """Strip strings; anything empty or non-scalar becomes None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None
