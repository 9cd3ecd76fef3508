"""Domain name validation and normalization."""

import ipaddress
import re

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_PATH_RE = re.compile(r"/.*$")
_LABEL = r"[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
_DOMAIN_RE = re.compile(rf"^{_LABEL}(\.{_LABEL})*$")
_TLD_RE = re.compile(r"^[a-zA-Z]+$")

EXCLUDED_ROOT_DOMAINS = frozenset(
    {
        "facebook.com",
        "twitter.com",
        "instagram.com",
        "linkedin.com",
        "youtube.com",
        "google.com",
        "amazon.com",
    }
)


def _strip_url(value: str) -> str:
    return _PATH_RE.sub("", _SCHEME_RE.sub("", value.strip()))


def _is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def validate_domain(value: str | None) -> bool:
    """Check whether ``value`` looks like a public, crawlable host name.

    A scheme and path are ignored. The host needs at least two labels, an
    alphabetic TLD of two or more characters, and must not be ``localhost``
    or an IP literal.
    """
    if not value or not isinstance(value, str):
        return False

    host = _strip_url(value)
    if not _DOMAIN_RE.match(host):
        return False

    labels = host.split(".")
    if len(labels) < 2:
        return False
    for label in labels:
        if not label or len(label) > 63:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False

    tld = labels[-1]
    if len(tld) < 2 or not _TLD_RE.match(tld):
        return False

    if host.lower() == "localhost" or _is_ip_address(host):
        return False

    return True


def normalize_domain(value: str | None) -> str:
    """Strip scheme, path and a leading ``www.``, then lowercase."""
    if not value:
        return ""
    host = _strip_url(value)
    if host.lower().startswith("www."):
        host = host[4:]
    return host.lower()


def extract_root_domain(value: str) -> str:
    """Return the last two labels of the normalized domain."""
    normalized = normalize_domain(value)
    labels = normalized.split(".")
    if len(labels) <= 2:
        return normalized
    return ".".join(labels[-2:])


def is_domain_crawlable(value: str) -> bool:
    """Valid and not one of the big social or retail platforms."""
    if not validate_domain(value):
        return False
    return extract_root_domain(value) not in EXCLUDED_ROOT_DOMAINS


def generate_crawl_url(value: str, use_https: bool = True) -> str:
    scheme = "https://" if use_https else "http://"
    return f"{scheme}{normalize_domain(value)}"


def validate_domains(values: list[str]) -> tuple[list[str], list[str]]:
    """Split ``values`` into normalized valid domains and raw invalid ones."""
    valid: list[str] = []
    invalid: list[str] = []
    for value in values:
        normalized = normalize_domain(value)
        if validate_domain(value) and validate_domain(normalized):
            valid.append(normalized)
        else:
            invalid.append(value)
    return valid, invalid
