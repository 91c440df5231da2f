from .address import lightning_address_url, parse_lightning_address
from .auth import (
    LnurlAuthSigner,
    SeedLnurlAuthSigner,
    perform_lnurl_auth,
    validate_lnurl_auth,
)
from .resolver import LnurlResolver, decode_lnurl, enforce_scheme

__all__ = [
    "LnurlAuthSigner",
    "LnurlResolver",
    "SeedLnurlAuthSigner",
    "decode_lnurl",
    "enforce_scheme",
    "lightning_address_url",
    "parse_lightning_address",
    "perform_lnurl_auth",
    "validate_lnurl_auth",
]
