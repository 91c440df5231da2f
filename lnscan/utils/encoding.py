from enum import Enum
from typing import Optional

from bech32 import CHARSET, bech32_hrp_expand, bech32_polymod, convertbits

BECH32_CONST = 1
BECH32M_CONST = 0x2BC830A3


class Encoding(Enum):
    bech32 = 1
    bech32m = 2


def _split(bech: str) -> Optional[tuple[str, list[int]]]:
    if any(ord(x) < 33 or ord(x) > 126 for x in bech):
        return None
    if bech.lower() != bech and bech.upper() != bech:
        return None
    bech = bech.lower()
    pos = bech.rfind("1")
    if pos < 1:
        return None
    if not all(x in CHARSET for x in bech[pos + 1 :]):
        return None
    hrp = bech[:pos]
    data = [CHARSET.find(x) for x in bech[pos + 1 :]]
    return hrp, data


def bech32_decode(
    bech: str,
) -> tuple[Optional[str], Optional[list[int]], Optional[Encoding]]:
    """
    Decode a bech32 or bech32m string without the 90 character limit
    of BIP173. Lightning invoices and LNURLs are routinely longer.
    Returns (None, None, None) on any failure.
    """
    split = _split(bech)
    if not split:
        return None, None, None
    hrp, data = split
    if len(data) < 6:
        return None, None, None
    const = bech32_polymod(bech32_hrp_expand(hrp) + data)
    if const == BECH32_CONST:
        encoding = Encoding.bech32
    elif const == BECH32M_CONST:
        encoding = Encoding.bech32m
    else:
        return None, None, None
    return hrp, data[:-6], encoding


def bech32_decode_unchecked(bech: str) -> tuple[Optional[str], Optional[list[int]]]:
    """Decode a bech32 string that carries no checksum (BOLT12)."""
    split = _split(bech)
    if not split:
        return None, None
    return split


def bech32_encode(hrp: str, data: bytes, encoding: Encoding = Encoding.bech32) -> str:
    words = convertbits(list(data), 8, 5)
    assert words is not None
    return bech32_encode_words(hrp, words, encoding)


def bech32_encode_words(
    hrp: str, words: list[int], encoding: Encoding = Encoding.bech32
) -> str:
    const = BECH32_CONST if encoding == Encoding.bech32 else BECH32M_CONST
    values = bech32_hrp_expand(hrp) + words
    polymod = bech32_polymod(values + [0, 0, 0, 0, 0, 0]) ^ const
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(CHARSET[d] for d in words + checksum)


def format_short_channel_id(scid: int) -> str:
    block = (scid >> 40) & 0xFFFFFF
    tx_index = (scid >> 16) & 0xFFFFFF
    output_index = scid & 0xFFFF
    return f"{block}x{tx_index}x{output_index}"
