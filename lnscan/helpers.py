import ipaddress
import re
from typing import Optional
from urllib.parse import parse_qsl, urlparse

BITCOIN_PREFIX = "bitcoin:"
LIGHTNING_PREFIX = "lightning:"
BIP353_PREFIX = "₿"

LNURL_SCHEMES = ("lnurlp", "lnurlw", "keyauth")


def has_prefix(value: str, prefix: str) -> bool:
    return value[: len(prefix)].lower() == prefix.lower()


def strip_prefix(value: str, prefix: str) -> Optional[str]:
    if not has_prefix(value, prefix):
        return None
    return value[len(prefix) :]


def strip_bip353_prefix(value: str) -> str:
    return value[len(BIP353_PREFIX) :] if value.startswith(BIP353_PREFIX) else value


def is_onion_domain(domain: str) -> bool:
    return domain.lower().rstrip(".").endswith(".onion")


def is_valid_dns_label(label: str) -> bool:
    return 0 < len(label) <= 63


def is_valid_lightning_username(username: str) -> bool:
    return re.fullmatch(r"[a-z0-9._-]+", username) is not None


def url_domain(url: str) -> Optional[str]:
    """
    Return the host of `url` when it is a domain name.
    IP literals and urls without a host yield None.
    """
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    try:
        ipaddress.ip_address(host)
        return None
    except ValueError:
        return host


def query_params(url: str) -> list[tuple[str, str]]:
    return parse_qsl(urlparse(url).query, keep_blank_values=True)


def query_param(url: str, key: str) -> Optional[str]:
    for k, v in query_params(url):
        if k == key:
            return v
    return None


def normalize_lnurl_scheme(url: str) -> str:
    """Accept both `lnurlp:host` and `lnurlp://host` conventions."""
    lowered = url.lower()
    for scheme in LNURL_SCHEMES:
        if lowered.startswith(f"{scheme}:") and not lowered.startswith(f"{scheme}://"):
            return f"{scheme}://{url[len(scheme) + 1 :]}"
    return url


def append_query(url: str, **params: str) -> str:
    separator = "&" if urlparse(url).query else "?"
    query = "&".join(f"{key}={value}" for key, value in params.items())
    return f"{url}{separator}{query}"
