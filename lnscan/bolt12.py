"""
BOLT12 offers (`lno`), invoice requests (`lnr`) and invoices (`lni`).

All three are a TLV stream encoded as bech32 without a checksum. A `+`
followed by optional whitespace may split the string across lines.
"""

import re
from typing import Optional

import bitstring
from bech32 import convertbits
from loguru import logger

from lnscan.models import (
    Amount,
    BitcoinAmount,
    Bolt12Invoice,
    Bolt12InvoiceRequest,
    Bolt12Offer,
    Bolt12OfferBlindedPath,
    CurrencyAmount,
    PaymentRequestSource,
)
from lnscan.utils.encoding import bech32_decode_unchecked

OFFER_HRP = "lno"
INVOICE_REQUEST_HRP = "lnr"
INVOICE_HRP = "lni"

BITCOIN_CHAIN_HASH = "6fe28c0ab6f1b372c1a6a246ae63f74f931e8365e15a089c68d6190000000000"

# offer
OFFER_CHAINS = 2
OFFER_METADATA = 4
OFFER_CURRENCY = 6
OFFER_AMOUNT = 8
OFFER_DESCRIPTION = 10
OFFER_FEATURES = 12
OFFER_ABSOLUTE_EXPIRY = 14
OFFER_PATHS = 16
OFFER_ISSUER = 18
OFFER_QUANTITY_MAX = 20
OFFER_ISSUER_ID = 22

# invoice request
INVREQ_METADATA = 0
INVREQ_CHAIN = 80
INVREQ_AMOUNT = 82
INVREQ_FEATURES = 84
INVREQ_QUANTITY = 86
INVREQ_PAYER_ID = 88
INVREQ_PAYER_NOTE = 89
INVREQ_PATHS = 90
SIGNATURE = 240

# invoice
INVOICE_CREATED_AT = 164
INVOICE_RELATIVE_EXPIRY = 166
INVOICE_PAYMENT_HASH = 168
INVOICE_AMOUNT = 170
INVOICE_NODE_ID = 176

DEFAULT_RELATIVE_EXPIRY = 7200

EXPERIMENTAL_RANGE = range(1_000_000_000, 2_000_000_000)
SIGNATURE_RANGE = range(240, 1001)


def _remove_continuations(value: str) -> str:
    if value.startswith("+") or value.rstrip().endswith("+"):
        raise ValueError("Misplaced '+' continuation")
    return re.sub(r"\+\s*", "", value)


def decode_bech32_payload(value: str, expected_hrp: str) -> bytes:
    hrp, data = bech32_decode_unchecked(_remove_continuations(value.strip()))
    if hrp != expected_hrp or data is None:
        raise ValueError(f"Not a {expected_hrp} string")
    decoded = convertbits(data, 5, 8, False)
    if decoded is None:
        raise ValueError("Invalid bech32 padding")
    return bytes(decoded)


def _read_bigsize(stream: bitstring.ConstBitStream) -> int:
    first = stream.read("uint:8")
    if first < 0xFD:
        return first
    if first == 0xFD:
        value, minimum = stream.read("uintbe:16"), 0xFD
    elif first == 0xFE:
        value, minimum = stream.read("uintbe:32"), 0x10000
    else:
        value, minimum = stream.read("uintbe:64"), 0x100000000
    if value < minimum:
        raise ValueError("Non-minimal bigsize")
    return value


def parse_tlv_stream(payload: bytes) -> dict[int, bytes]:
    stream = bitstring.ConstBitStream(bytes=payload)
    records: dict[int, bytes] = {}
    last_type = -1
    while stream.pos != stream.len:
        tlv_type = _read_bigsize(stream)
        length = _read_bigsize(stream)
        if tlv_type <= last_type:
            raise ValueError("TLV records out of order")
        if stream.pos + length * 8 > stream.len:
            raise ValueError("TLV record overflows stream")
        records[tlv_type] = stream.read(length * 8).bytes
        last_type = tlv_type
    return records


def _check_types(
    records: dict[int, bytes], allowed: tuple[range, ...], known: set[int]
):
    for tlv_type in records:
        if tlv_type in EXPERIMENTAL_RANGE:
            continue
        if not any(tlv_type in r for r in allowed):
            raise ValueError(f"Unexpected TLV type {tlv_type}")
        # it's ok to be odd
        if tlv_type % 2 == 0 and tlv_type not in known:
            raise ValueError(f"Unknown even TLV type {tlv_type}")


def _tu64(value: Optional[bytes]) -> Optional[int]:
    if value is None:
        return None
    if len(value) > 8 or (value and value[0] == 0):
        raise ValueError("Invalid truncated integer")
    return int.from_bytes(value, "big")


def _utf8(value: Optional[bytes]) -> Optional[str]:
    return value.decode() if value is not None else None


def _point(value: Optional[bytes]) -> Optional[str]:
    if value is None:
        return None
    if len(value) != 33 or value[0] not in (2, 3):
        raise ValueError("Invalid public key")
    return value.hex()


def _chains(value: Optional[bytes]) -> list[str]:
    if value is None:
        return [BITCOIN_CHAIN_HASH]
    if not value or len(value) % 32 != 0:
        raise ValueError("Invalid chains")
    return [value[i : i + 32].hex() for i in range(0, len(value), 32)]


def _blinded_paths(value: Optional[bytes]) -> list[Bolt12OfferBlindedPath]:
    if value is None:
        return []
    stream = bitstring.ConstBitStream(bytes=value)
    paths = []
    while stream.pos != stream.len:
        # first node is either a node id or a direction byte and a scid
        first = stream.peek("uint:8")
        stream.read("bytes:9" if first in (0, 1) else "bytes:33")
        # first path key
        stream.read("bytes:33")
        num_hops = stream.read("uint:8")
        if num_hops == 0:
            raise ValueError("Blinded path without hops")
        hops = []
        for _ in range(num_hops):
            hops.append(stream.read("bytes:33").hex())
            enclen = stream.read("uintbe:16")
            stream.read(enclen * 8)
        paths.append(Bolt12OfferBlindedPath(blinded_hops=hops))
    if not paths:
        raise ValueError("Empty blinded paths")
    return paths


def _offer_amount(records: dict[int, bytes]) -> Optional[Amount]:
    amount = _tu64(records.get(OFFER_AMOUNT))
    currency = records.get(OFFER_CURRENCY)
    if currency is not None:
        if amount is None:
            raise ValueError("Currency without amount")
        if len(currency) != 3:
            raise ValueError("Currency code must be 3 bytes")
        return CurrencyAmount(iso4217_code=currency.decode(), fractional_amount=amount)
    if amount is None:
        return None
    return BitcoinAmount(amount_msat=amount)


def decode_offer(
    offer: str, source: Optional[PaymentRequestSource] = None
) -> Bolt12Offer:
    records = parse_tlv_stream(decode_bech32_payload(offer, OFFER_HRP))
    _check_types(
        records,
        (range(1, 80),),
        {
            OFFER_CHAINS,
            OFFER_METADATA,
            OFFER_CURRENCY,
            OFFER_AMOUNT,
            OFFER_DESCRIPTION,
            OFFER_FEATURES,
            OFFER_ABSOLUTE_EXPIRY,
            OFFER_PATHS,
            OFFER_ISSUER,
            OFFER_QUANTITY_MAX,
            OFFER_ISSUER_ID,
        },
    )
    min_amount = _offer_amount(records)
    description = _utf8(records.get(OFFER_DESCRIPTION))
    if min_amount is not None and description is None:
        raise ValueError("Offer with an amount requires a description")
    paths = _blinded_paths(records.get(OFFER_PATHS))
    signing_pubkey = _point(records.get(OFFER_ISSUER_ID))
    if signing_pubkey is None and not paths:
        raise ValueError("Offer needs an issuer id or blinded paths")

    return Bolt12Offer(
        offer=offer,
        absolute_expiry=_tu64(records.get(OFFER_ABSOLUTE_EXPIRY)),
        chains=_chains(records.get(OFFER_CHAINS)),
        description=description,
        issuer=_utf8(records.get(OFFER_ISSUER)),
        min_amount=min_amount,
        paths=paths,
        signing_pubkey=signing_pubkey,
        source=source or PaymentRequestSource(),
    )


def decode_invoice_request(
    invoice_request: str, source: Optional[PaymentRequestSource] = None
) -> Bolt12InvoiceRequest:
    records = parse_tlv_stream(
        decode_bech32_payload(invoice_request, INVOICE_REQUEST_HRP)
    )
    _check_types(
        records,
        (range(0, 160), SIGNATURE_RANGE),
        {
            INVREQ_METADATA,
            OFFER_CHAINS,
            OFFER_METADATA,
            OFFER_CURRENCY,
            OFFER_AMOUNT,
            OFFER_DESCRIPTION,
            OFFER_FEATURES,
            OFFER_ABSOLUTE_EXPIRY,
            OFFER_PATHS,
            OFFER_ISSUER,
            OFFER_QUANTITY_MAX,
            OFFER_ISSUER_ID,
            INVREQ_CHAIN,
            INVREQ_AMOUNT,
            INVREQ_FEATURES,
            INVREQ_QUANTITY,
            INVREQ_PAYER_ID,
            INVREQ_PATHS,
            SIGNATURE,
        },
    )
    if INVREQ_METADATA not in records:
        raise ValueError("Invoice request without metadata")
    payer_id = _point(records.get(INVREQ_PAYER_ID))
    if payer_id is None:
        raise ValueError("Invoice request without payer id")
    chain = records.get(INVREQ_CHAIN)
    if chain is not None and len(chain) != 32:
        raise ValueError("Invalid chain")

    return Bolt12InvoiceRequest(
        invoice_request=invoice_request,
        chain=chain.hex() if chain is not None else None,
        amount_msat=_tu64(records.get(INVREQ_AMOUNT)),
        quantity=_tu64(records.get(INVREQ_QUANTITY)),
        payer_id=payer_id,
        payer_note=_utf8(records.get(INVREQ_PAYER_NOTE)),
        description=_utf8(records.get(OFFER_DESCRIPTION)),
        issuer=_utf8(records.get(OFFER_ISSUER)),
        source=source or PaymentRequestSource(),
    )


def decode_invoice(
    invoice: str, source: Optional[PaymentRequestSource] = None
) -> Bolt12Invoice:
    records = parse_tlv_stream(decode_bech32_payload(invoice, INVOICE_HRP))
    for tlv_type in records:
        if tlv_type not in EXPERIMENTAL_RANGE and tlv_type > 1000:
            raise ValueError(f"Unexpected TLV type {tlv_type}")

    payment_hash = records.get(INVOICE_PAYMENT_HASH)
    if payment_hash is None or len(payment_hash) != 32:
        raise ValueError("Invoice without a valid payment hash")
    amount_msat = _tu64(records.get(INVOICE_AMOUNT))
    if amount_msat is None:
        raise ValueError("Invoice without amount")
    created_at = _tu64(records.get(INVOICE_CREATED_AT))
    if created_at is None:
        raise ValueError("Invoice without creation time")
    node_id = _point(records.get(INVOICE_NODE_ID))
    if node_id is None:
        raise ValueError("Invoice without node id")
    relative_expiry = _tu64(records.get(INVOICE_RELATIVE_EXPIRY))

    return Bolt12Invoice(
        invoice=invoice,
        amount_msat=amount_msat,
        payment_hash=payment_hash.hex(),
        signing_pubkey=node_id,
        created_at=created_at,
        relative_expiry=(
            relative_expiry if relative_expiry is not None else DEFAULT_RELATIVE_EXPIRY
        ),
        description=_utf8(records.get(OFFER_DESCRIPTION)),
        issuer=_utf8(records.get(OFFER_ISSUER)),
        source=source or PaymentRequestSource(),
    )


def parse_offer(
    offer: str, source: Optional[PaymentRequestSource] = None
) -> Optional[Bolt12Offer]:
    try:
        return decode_offer(offer, source)
    except Exception as exc:
        logger.trace(f"not a bolt12 offer: {exc}")
        return None


def parse_invoice(
    invoice: str, source: Optional[PaymentRequestSource] = None
) -> Optional[Bolt12Invoice]:
    try:
        return decode_invoice(invoice, source)
    except Exception as exc:
        logger.trace(f"not a bolt12 invoice: {exc}")
        return None


def parse_invoice_request(
    invoice_request: str, source: Optional[PaymentRequestSource] = None
) -> Optional[Bolt12InvoiceRequest]:
    try:
        return decode_invoice_request(invoice_request, source)
    except Exception as exc:
        logger.trace(f"not a bolt12 invoice request: {exc}")
        return None
