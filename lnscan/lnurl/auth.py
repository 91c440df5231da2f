import hashlib
import hmac
import json
import re
from io import BytesIO
from typing import Optional, Protocol

from ecdsa import SECP256k1, SigningKey
from loguru import logger

from lnscan.exceptions import (
    InvalidK1Error,
    LnurlAuthError,
    MissingDomainError,
    MissingK1Error,
    ServiceConnectivityError,
    UnsupportedActionError,
)
from lnscan.helpers import append_query, query_param, url_domain
from lnscan.models import LnurlAuthRequestData
from lnscan.rest import RestClient

LNURL_AUTH_ACTIONS = ("register", "login", "link", "auth")


def check_auth_fields(k1: Optional[str], action: Optional[str]) -> str:
    if k1 is None:
        raise MissingK1Error()
    # 32 bytes of hex, no separators
    if not re.fullmatch(r"[0-9a-fA-F]{64}", k1):
        raise InvalidK1Error()
    if action is not None and action not in LNURL_AUTH_ACTIONS:
        raise UnsupportedActionError(action)
    return k1


def validate_lnurl_auth(url: str) -> LnurlAuthRequestData:
    """Validate a LUD-04 `tag=login` url and extract its challenge."""
    action = query_param(url, "action")
    k1 = check_auth_fields(query_param(url, "k1"), action)
    domain = url_domain(url)
    if not domain:
        raise MissingDomainError()
    return LnurlAuthRequestData(k1=k1, action=action, domain=domain, url=url)


class LnurlAuthSigner(Protocol):
    def linking_pubkey(self, domain: str) -> bytes:
        """Compressed public key of the linking key for `domain`."""
        ...

    def sign(self, domain: str, k1: bytes) -> bytes:
        """DER encoded signature of `k1` by the linking key for `domain`."""
        ...


def int_to_bytes_suitable_der(x: int) -> bytes:
    """for strict DER we need to encode the integer with some quirks"""
    b = x.to_bytes((x.bit_length() + 7) // 8, "big")

    if len(b) == 0:
        # ensure there's at least one byte when the int is zero
        return bytes([0])

    if b[0] & 0x80 != 0:
        # ensure it doesn't start with a 0x80 and so it isn't
        # interpreted as a negative number
        return bytes([0]) + b

    return b


def encode_strict_der(r: int, s: int, order: int) -> bytes:
    # low s, see BIP62
    if s > order // 2:
        s = order - s

    r_temp = int_to_bytes_suitable_der(r)
    s_temp = int_to_bytes_suitable_der(s)

    signature = BytesIO()
    signature.write(b"\x30")
    signature.write((4 + len(r_temp) + len(s_temp)).to_bytes(1, "big"))
    signature.write(b"\x02")
    signature.write(len(r_temp).to_bytes(1, "big"))
    signature.write(r_temp)
    signature.write(b"\x02")
    signature.write(len(s_temp).to_bytes(1, "big"))
    signature.write(s_temp)
    return signature.getvalue()


class SeedLnurlAuthSigner:
    """
    Derives one linking key per domain from a seed:
    HMAC-SHA256(sha256(seed), domain) on secp256k1.
    """

    def __init__(self, seed: bytes):
        self.hashing_key = hashlib.sha256(seed).digest()

    def linking_key(self, domain: str) -> SigningKey:
        linking_key = hmac.digest(self.hashing_key, domain.encode(), "sha256")
        return SigningKey.from_string(
            linking_key, curve=SECP256k1, hashfunc=hashlib.sha256
        )

    def linking_pubkey(self, domain: str) -> bytes:
        key = self.linking_key(domain)
        assert key.verifying_key, "LNURLauth verifying_key does not exist"
        return key.verifying_key.to_string("compressed")

    def sign(self, domain: str, k1: bytes) -> bytes:
        return self.linking_key(domain).sign_digest_deterministic(
            k1, sigencode=encode_strict_der
        )


async def perform_lnurl_auth(
    data: LnurlAuthRequestData, signer: LnurlAuthSigner, rest_client: RestClient
) -> None:
    k1 = bytes.fromhex(data.k1)
    url = append_query(
        data.url,
        sig=signer.sign(data.domain, k1).hex(),
        key=signer.linking_pubkey(data.domain).hex(),
    )
    try:
        body, _ = await rest_client.get(url)
    except ServiceConnectivityError as exc:
        logger.warning(f"lnurl-auth callback to {data.domain} failed: {exc}")
        raise LnurlAuthError(str(exc)) from exc

    try:
        resp = json.loads(body)
        if resp["status"] == "OK":
            return
        reason = resp["reason"]
    except (KeyError, TypeError, json.JSONDecodeError):
        reason = body[:200] + "..." if len(body) > 200 else body
    raise LnurlAuthError(reason)
