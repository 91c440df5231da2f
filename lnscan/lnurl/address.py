from typing import Optional

from loguru import logger

from lnscan.exceptions import LnurlError
from lnscan.helpers import (
    is_onion_domain,
    is_valid_lightning_username,
    strip_bip353_prefix,
    url_domain,
)
from lnscan.models import (
    LightningAddress,
    LnurlPay,
    PaymentRequest,
    PaymentRequestSource,
)

from .resolver import LnurlResolver


def lightning_address_url(user: str, domain: str) -> str:
    scheme = "http" if is_onion_domain(domain) else "https"
    return f"{scheme}://{domain}/.well-known/lnurlp/{user}"


async def parse_lightning_address(
    value: str, resolver: LnurlResolver
) -> Optional[LightningAddress]:
    """LUD-16: resolve `user@domain` through the domain's lnurlp endpoint."""
    user, sep, domain = strip_bip353_prefix(value).partition("@")
    if not sep:
        return None

    # domains are case insensitive, rfc3986 3.2.2
    user, domain = user.lower(), domain.lower()
    if not is_valid_lightning_username(user):
        return None

    url = lightning_address_url(user, domain)
    if url_domain(url) != domain:
        return None

    try:
        input_type = await resolver.resolve(url, PaymentRequestSource())
    except LnurlError as exc:
        logger.debug(f"lightning address {user}@{domain} did not resolve: {exc}")
        return None

    if not isinstance(input_type, PaymentRequest) or not isinstance(
        input_type.request, LnurlPay
    ):
        logger.debug(f"lightning address {user}@{domain} is not an lnurl-pay")
        return None

    return LightningAddress(
        address=f"{user}@{domain}", pay_request=input_type.request.pay_request
    )
