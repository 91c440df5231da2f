from typing import Optional

from loguru import logger

from lnscan.bip21 import LightningParser, decode_bip21
from lnscan.dns_resolver import DnsResolver
from lnscan.exceptions import DnsResolutionError
from lnscan.helpers import (
    BITCOIN_PREFIX,
    has_prefix,
    is_valid_dns_label,
    strip_bip353_prefix,
)
from lnscan.models import Bip21, PaymentRequestSource

BIP353_LABEL = "user._bitcoin-payment"


def bip353_dns_name(local_part: str, domain: str) -> str:
    return f"{local_part}.{BIP353_LABEL}.{domain}"


def extract_bip353_record(records: list[str]) -> Optional[str]:
    bip21_records = [record for record in records if has_prefix(record, BITCOIN_PREFIX)]
    if len(bip21_records) > 1:
        logger.error(
            "Invalid decoded TXT data. "
            f"Multiple records found ({len(bip21_records)})"
        )
        return None
    return bip21_records[0] if bip21_records else None


async def resolve_bip353(
    value: str, dns_resolver: DnsResolver, parse_lightning: LightningParser
) -> Optional[Bip21]:
    """
    Resolve a `user@domain` (optionally `₿` prefixed) human readable
    address into the BIP21 uri published in its TXT record.
    """
    local_part, sep, domain = strip_bip353_prefix(value).partition("@")
    if not sep:
        return None
    # rfc1035 2.3.4
    if not is_valid_dns_label(local_part) or not 0 < len(domain) <= 63:
        return None

    dns_name = bip353_dns_name(local_part, domain)
    try:
        records = await dns_resolver.txt_lookup(dns_name)
    except DnsResolutionError as exc:
        logger.debug(f"no bip353 record for {value}: {exc}")
        return None

    bip21 = extract_bip353_record(records)
    if bip21 is None:
        return None

    return await decode_bip21(
        bip21,
        PaymentRequestSource(bip21_uri=bip21, bip353_address=value),
        parse_lightning,
    )
