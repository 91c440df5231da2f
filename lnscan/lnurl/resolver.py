from typing import Any, Optional
from urllib.parse import urlparse, urlunparse

from bech32 import convertbits
from loguru import logger
from pydantic import ValidationError

from lnscan.exceptions import (
    HttpSchemeWithoutOnionDomainError,
    HttpsSchemeWithOnionDomainError,
    LnurlEndpointError,
    ServiceConnectivityError,
    ServiceConnectivityErrorKind,
    UnknownSchemeError,
)
from lnscan.helpers import (
    LNURL_SCHEMES,
    is_onion_domain,
    normalize_lnurl_scheme,
    query_param,
    url_domain,
)
from lnscan.models import (
    InputType,
    LnurlAuth,
    LnurlAuthRequestData,
    LnurlErrorData,
    LnurlPay,
    LnurlPayRequest,
    LnurlWithdrawRequestData,
    PaymentRequest,
    PaymentRequestSource,
    ReceiveRequest,
    Url,
)
from lnscan.rest import RestClient, parse_json
from lnscan.utils.encoding import bech32_decode

from .auth import check_auth_fields, validate_lnurl_auth

LNURL_HRP = "lnurl"


def decode_lnurl(value: str) -> Optional[str]:
    """
    Decode a bech32 `lnurl` into its url. Returns the input unchanged when
    it is not bech32 at all and None when it is bech32 for another hrp.
    """
    hrp, data, _ = bech32_decode(value)
    if hrp is None or data is None:
        return value
    if hrp != LNURL_HRP:
        return None
    decoded = convertbits(data, 5, 8, False)
    if decoded is None:
        return None
    try:
        return bytes(decoded).decode()
    except UnicodeDecodeError:
        return None


def enforce_scheme(url: str, domain: str) -> str:
    """
    http is only valid for onion domains and https only for clearnet ones.
    The LUD-17 schemes are rewritten to whichever of the two fits.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    onion = is_onion_domain(domain)
    if scheme == "http":
        if not onion:
            raise HttpSchemeWithoutOnionDomainError()
        return url
    if scheme == "https":
        if onion:
            raise HttpsSchemeWithOnionDomainError()
        return url
    if scheme in LNURL_SCHEMES:
        return urlunparse(parsed._replace(scheme="http" if onion else "https"))
    raise UnknownSchemeError(scheme)


class LnurlResolver:
    def __init__(self, rest_client: RestClient):
        self.rest_client = rest_client

    async def parse(
        self, value: str, source: Optional[PaymentRequestSource] = None
    ) -> Optional[InputType]:
        source = source or PaymentRequestSource()
        url = decode_lnurl(value)
        if url is None:
            return None
        encoded = url != value

        url = normalize_lnurl_scheme(url)
        domain = url_domain(url)
        if not domain:
            return None
        plain = not encoded and urlparse(url).scheme.lower() in ("http", "https")
        url = enforce_scheme(url, domain)

        # LUD-01: https://service.com/pay?lightning=LNURL1...
        if plain:
            embedded = query_param(url, "lightning")
            if embedded:
                embedded_url = decode_lnurl(embedded)
                if embedded_url and embedded_url != embedded:
                    logger.debug(f"resolving lnurl embedded in {url}")
                    return await self.parse(embedded, source)

        return await self.resolve(url, source, plain=plain)

    async def resolve(
        self,
        url: str,
        source: Optional[PaymentRequestSource] = None,
        plain: bool = False,
    ) -> InputType:
        source = source or PaymentRequestSource()
        if query_param(url, "tag") == "login":
            return LnurlAuth(data=validate_lnurl_auth(url))

        try:
            body, status = await self.rest_client.get(url)
        except ServiceConnectivityError as exc:
            raise LnurlEndpointError(f"could not reach {url}", exc) from exc

        try:
            data = parse_json(body, status)
        except ServiceConnectivityError as exc:
            if plain:
                return Url(url=url)
            raise LnurlEndpointError(f"invalid response from {url}", exc) from exc

        domain = url_domain(url) or ""
        input_type = self._from_json(data, url, domain, source)
        if input_type is None:
            if plain:
                return Url(url=url)
            raise LnurlEndpointError(
                f"unrecognized response from {url}",
                ServiceConnectivityError(
                    ServiceConnectivityErrorKind.json, "not an lnurl response"
                ),
            )
        return input_type

    def _from_json(
        self, data: Any, url: str, domain: str, source: PaymentRequestSource
    ) -> Optional[InputType]:
        # untagged: try each shape in order
        if not isinstance(data, dict):
            return None

        pay_request = _try_validate(LnurlPayRequest, data)
        if pay_request:
            return PaymentRequest(
                request=LnurlPay(
                    pay_request=pay_request.model_copy(
                        update={"domain": domain, "url": url}
                    ),
                    source=source,
                )
            )

        withdraw_request = _try_validate(LnurlWithdrawRequestData, data)
        if withdraw_request:
            return ReceiveRequest(request=withdraw_request)

        if data.get("tag") == "login":
            k1 = data.get("k1")
            action = data.get("action")
            action = str(action) if action is not None else None
            k1 = check_auth_fields(k1 if isinstance(k1, str) else None, action)
            return LnurlAuth(
                data=LnurlAuthRequestData(k1=k1, action=action, domain=domain, url=url)
            )

        error = _try_validate(LnurlErrorData, data)
        if error:
            raise LnurlEndpointError(error.reason)
        return None


def _try_validate(model, data: dict):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.trace(f"not a {model.__name__}: {exc.error_count()} errors")
        return None
