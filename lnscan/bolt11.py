import hashlib
import re
from typing import Optional

import bitstring
from bech32 import CHARSET
from ecdsa import SECP256k1, VerifyingKey
from ecdsa.util import sigdecode_string
from loguru import logger

from lnscan.models import (
    Bolt11Invoice,
    Bolt11RouteHint,
    Bolt11RouteHintHop,
    Network,
    PaymentRequestSource,
)
from lnscan.utils.encoding import Encoding, bech32_decode, format_short_channel_id

DEFAULT_EXPIRY = 3600
DEFAULT_MIN_FINAL_CLTV_EXPIRY = 18

CURRENCIES = {
    "bc": Network.bitcoin,
    "tb": Network.testnet3,
    "tbs": Network.signet,
    "bcrt": Network.regtest,
}

# pubkey, short_channel_id, fee_base_msat, fee_proportional_millionths,
# cltv_expiry_delta
ROUTE_HOP_BITS = 264 + 64 + 32 + 32 + 16


def decode(pr: str, source: Optional[PaymentRequestSource] = None) -> Bolt11Invoice:
    """bolt11 decoder,
    based on https://github.com/rustyrussell/lightning-payencode/blob/master/lnaddr.py
    """

    hrp, decoded_data, encoding = bech32_decode(pr)
    if hrp is None or decoded_data is None:
        raise ValueError("Bad bech32 checksum")
    if encoding != Encoding.bech32:
        raise ValueError("Invoices must use bech32, not bech32m")
    if not hrp.startswith("ln"):
        raise ValueError("Does not start with ln")

    m = re.match(r"[^\d]+", hrp[2:])
    if not m or m.group(0) not in CURRENCIES:
        raise ValueError(f"Unknown currency in '{hrp}'")
    network = CURRENCIES[m.group(0)]

    amount_msat = None
    amountstr = hrp[2 + m.end() :]
    if amountstr != "":
        amount_msat = _unshorten_amount(amountstr)

    bitarray = _u5_to_bitarray(decoded_data)

    # final signature 65 bytes, split it off.
    if len(bitarray) < 65 * 8:
        raise ValueError("Too short to contain signature")

    # extract the signature
    signature = bitarray[-65 * 8 :].tobytes()

    # the tagged fields as a bitstream
    data = bitstring.ConstBitStream(bitarray[: -65 * 8])

    # pull out date
    timestamp = data.read(35).uint

    payment_hash = None
    payment_secret = None
    description = None
    description_hash = None
    payee = None
    expiry = DEFAULT_EXPIRY
    min_final_cltv = DEFAULT_MIN_FINAL_CLTV_EXPIRY
    routing_hints: list[Bolt11RouteHint] = []

    while data.pos != data.len:
        tag, tagdata, data = _pull_tagged(data)
        data_length = len(tagdata) / 5

        # BOLT #11:
        # A reader MUST skip over p, h, s or n fields that do not have
        # the expected data length.
        if tag == "d":
            description = _trim_to_bytes(tagdata).decode()
        elif tag == "h" and data_length == 52:
            description_hash = _trim_to_bytes(tagdata).hex()
        elif tag == "p" and data_length == 52:
            payment_hash = _trim_to_bytes(tagdata).hex()
        elif tag == "s" and data_length == 52:
            payment_secret = _trim_to_bytes(tagdata).hex()
        elif tag == "n" and data_length == 53:
            payee = _trim_to_bytes(tagdata).hex()
        elif tag == "x":
            expiry = tagdata.uint
        elif tag == "c":
            min_final_cltv = tagdata.uint
        elif tag == "r":
            s = bitstring.ConstBitStream(tagdata)
            hops = []
            while s.pos + ROUTE_HOP_BITS <= s.len:
                hops.append(
                    Bolt11RouteHintHop(
                        src_node_id=s.read(264).tobytes().hex(),
                        short_channel_id=format_short_channel_id(s.read(64).uintbe),
                        fees_base_msat=s.read(32).uintbe,
                        fees_proportional_millionths=s.read(32).uintbe,
                        cltv_expiry_delta=s.read(16).uintbe,
                    )
                )
            routing_hints.append(Bolt11RouteHint(hops=hops))

    if payment_hash is None:
        raise ValueError("Missing payment hash")

    # BOLT #11:
    # A reader MUST check that the `signature` is valid (see the `n` tagged
    # field specified below).
    # A reader MUST use the `n` field to validate the signature instead of
    # performing signature recovery if a valid `n` field is provided.
    message = bytearray([ord(c) for c in hrp]) + data.tobytes()
    sig = signature[0:64]
    if payee:
        key = VerifyingKey.from_string(bytes.fromhex(payee), curve=SECP256k1)
        key.verify(sig, message, hashlib.sha256, sigdecode=sigdecode_string)
    else:
        keys = VerifyingKey.from_public_key_recovery(
            sig, message, SECP256k1, hashlib.sha256
        )
        recovery_id = signature[64]
        if recovery_id > 1:
            raise ValueError(f"Unsupported recovery id {recovery_id}")
        payee = keys[recovery_id].to_string("compressed").hex()

    return Bolt11Invoice(
        invoice=pr.lower(),
        amount_msat=amount_msat,
        description=description,
        description_hash=description_hash,
        expiry=expiry,
        min_final_cltv_expiry_delta=min_final_cltv,
        network=network,
        payee_pubkey=payee,
        payment_hash=payment_hash,
        payment_secret=payment_secret,
        routing_hints=routing_hints,
        timestamp=timestamp,
        source=source or PaymentRequestSource(),
    )


def parse_bolt11(
    pr: str, source: Optional[PaymentRequestSource] = None
) -> Optional[Bolt11Invoice]:
    """Malformed invoices are not invoices: returns None instead of raising."""
    try:
        return decode(pr, source)
    except Exception as exc:
        logger.trace(f"not a bolt11 invoice: {exc}")
        return None


def _unshorten_amount(amount: str) -> int:
    """Given a shortened amount, return millisatoshis"""
    # BOLT #11:
    # The following `multiplier` letters are defined:
    #
    # * `m` (milli): multiply by 0.001
    # * `u` (micro): multiply by 0.000001
    # * `n` (nano): multiply by 0.000000001
    # * `p` (pico): multiply by 0.000000000001
    units = {"p": 10**12, "n": 10**9, "u": 10**6, "m": 10**3}
    unit = str(amount)[-1]

    # BOLT #11:
    # A reader SHOULD fail if `amount` contains a non-digit, or is followed by
    # anything except a `multiplier` in the table above.
    if not re.fullmatch(r"\d+[pnum]?", str(amount)):
        raise ValueError(f"Invalid amount '{amount}'")

    if unit in units:
        msat, remainder = divmod(int(amount[:-1]) * 100_000_000_000, units[unit])
        # sub-millisatoshi pico amounts are invalid
        if remainder:
            raise ValueError(f"Invalid sub-millisatoshi amount '{amount}'")
        return msat
    else:
        return int(amount) * 100_000_000_000


def _pull_tagged(stream):
    tag = stream.read(5).uint
    length = stream.read(5).uint * 32 + stream.read(5).uint
    return (CHARSET[tag], stream.read(length * 5), stream)


def _trim_to_bytes(barr):
    # Adds a byte if necessary.
    b = barr.tobytes()
    if barr.len % 8 != 0:
        return b[:-1]
    return b


def _u5_to_bitarray(arr: list[int]) -> bitstring.BitArray:
    ret = bitstring.BitArray()
    for a in arr:
        ret += bitstring.pack("uint:5", a)
    return ret
