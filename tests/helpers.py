import hashlib

import bitstring
from bech32 import CHARSET, convertbits
from ecdsa import SigningKey
from ecdsa.util import sigencode_string

from lnscan.utils.encoding import Encoding, bech32_encode_words

# compressed secp256k1 generator and its double
G = bytes.fromhex("0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798")
G2 = bytes.fromhex("02c6047f9441ed7d6d3045406e95c07cd85c778e4b8cef3ca7abac09b95c709ee5")

BOLT11 = (
    "lnbc110n1p38q3gtpp5ypz09jrd8p993snjwnm68cph4ftwp22le34xd4r8ftspwshxhmnsdqqxqyjw5q"
    "cqpxsp5htlg8ydpywvsa7h3u4hdn77ehs4z4e844em0apjyvmqfkzqhhd2q9qgsqqqyssqszpxzxt9u"
    "uqzymr7zxcdccj5g69s8q7zzjs7sgxn9ejhnvdh6gqjcy22mss2yexunagm5r2gqczh8k24cwrqml3n"
    "jskm548aruhpwssq9nvrvz"
)

BITCOIN_ADDRESS = "1andreas3batLhQa2FawWjeyjCqyBzypd"


def tlv(*records: tuple[int, bytes]) -> bytes:
    # single byte bigsize is enough for the types and lengths used here
    stream = b""
    for tlv_type, value in records:
        assert tlv_type < 0xFD and len(value) < 0xFD
        stream += bytes([tlv_type, len(value)]) + value
    return stream


def bolt12_encode(hrp: str, payload: bytes) -> str:
    words = convertbits(list(payload), 8, 5)
    assert words is not None
    return hrp + "1" + "".join(CHARSET[w] for w in words)


def silent_payment_address(
    hrp: str = "sp",
    version: int = 0,
    payload: bytes = G + G2,
    encoding: Encoding = Encoding.bech32m,
) -> str:
    words = convertbits(list(payload), 8, 5)
    assert words
    return bech32_encode_words(hrp, [version, *words], encoding)


OFFER = bolt12_encode("lno", tlv((10, b"coffee"), (22, G)))
SILENT_PAYMENT_ADDRESS = silent_payment_address()


def _bolt11_field(tag: str, value: bytes) -> bitstring.BitArray:
    bits = bitstring.BitArray(bytes=value)
    if bits.len % 5:
        bits.append(bitstring.Bits(length=5 - bits.len % 5))
    words = bits.len // 5
    field = bitstring.BitArray()
    field.append(
        bitstring.pack("uint:5, uint:5, uint:5", CHARSET.find(tag), *divmod(words, 32))
    )
    field.append(bits)
    return field


def bolt11_encode(
    hrp: str,
    timestamp: int,
    fields: list[tuple[str, bytes]],
    node_key: SigningKey,
) -> str:
    """Signed BOLT11 invoice, the `n` field carries the node key."""
    data = bitstring.BitArray(uint=timestamp, length=35)
    for tag, value in fields:
        data.append(_bolt11_field(tag, value))
    signature = node_key.sign_deterministic(
        hrp.encode() + data.tobytes(),
        hashfunc=hashlib.sha256,
        sigencode=sigencode_string,
    )
    data.append(bitstring.Bits(bytes=signature + b"\x00"))
    words = [data[i : i + 5].uint for i in range(0, data.len, 5)]
    return bech32_encode_words(hrp, words)


def route_hop(
    node_id: bytes, scid: int, fee_base: int, fee_ppm: int, cltv_delta: int
) -> bytes:
    return (
        node_id
        + scid.to_bytes(8, "big")
        + fee_base.to_bytes(4, "big")
        + fee_ppm.to_bytes(4, "big")
        + cltv_delta.to_bytes(2, "big")
    )
