from typing import Optional

from loguru import logger

from lnscan import bolt11, bolt12
from lnscan.bip21 import decode_bip21
from lnscan.bip353 import resolve_bip353
from lnscan.bitcoin import parse_bitcoin_address, parse_silent_payment_address
from lnscan.dns_resolver import DnspythonResolver, DnsResolver
from lnscan.exceptions import EmptyInputError, InvalidInputError
from lnscan.helpers import BITCOIN_PREFIX, LIGHTNING_PREFIX, has_prefix, strip_prefix
from lnscan.lnurl import LnurlResolver, parse_lightning_address
from lnscan.models import (
    InputType,
    PaymentMethodType,
    PaymentRequest,
    PaymentRequestSource,
    ReceiveRequest,
)
from lnscan.picker import pick_and_expand
from lnscan.rest import HttpxRestClient, RestClient


class InputParser:
    """
    Classifies a user supplied string. Formats are tried in a fixed order
    and the first one that decodes wins:
    BIP353 and lightning addresses, BIP21, lightning, bitcoin.
    """

    def __init__(
        self,
        rest_client: Optional[RestClient] = None,
        dns_resolver: Optional[DnsResolver] = None,
    ):
        self._rest_client = rest_client
        self._dns_resolver = dns_resolver

    @property
    def rest_client(self) -> RestClient:
        if self._rest_client is None:
            self._rest_client = HttpxRestClient()
        return self._rest_client

    @property
    def dns_resolver(self) -> DnsResolver:
        if self._dns_resolver is None:
            self._dns_resolver = DnspythonResolver()
        return self._dns_resolver

    @property
    def lnurl(self) -> LnurlResolver:
        return LnurlResolver(self.rest_client)

    async def parse(self, value: str) -> InputType:
        value = value.strip()
        if not value:
            raise EmptyInputError()

        if "@" in value:
            bip21 = await resolve_bip353(
                value, self.dns_resolver, self.parse_lightning
            )
            if bip21:
                return PaymentRequest(request=bip21)

            lightning_address = await parse_lightning_address(value, self.lnurl)
            if lightning_address:
                return PaymentRequest(request=lightning_address)

        if has_prefix(value, BITCOIN_PREFIX):
            bip21 = await decode_bip21(
                value, PaymentRequestSource(bip21_uri=value), self.parse_lightning
            )
            if bip21:
                return PaymentRequest(request=bip21)

        source = PaymentRequestSource()
        input_type = await self.parse_lightning(value, source)
        if input_type:
            return input_type

        input_type = self.parse_bitcoin(value, source)
        if input_type:
            return input_type

        logger.debug(f"unrecognized input: {value}")
        raise InvalidInputError()

    async def parse_lightning(
        self, value: str, source: PaymentRequestSource
    ) -> Optional[InputType]:
        value = strip_prefix(value, LIGHTNING_PREFIX) or value

        invoice = bolt11.parse_bolt11(value, source)
        if invoice:
            return PaymentRequest(request=invoice)

        offer = bolt12.parse_offer(value, source)
        if offer:
            return PaymentRequest(request=offer)

        bolt12_invoice = bolt12.parse_invoice(value, source)
        if bolt12_invoice:
            return PaymentRequest(request=bolt12_invoice)

        invoice_request = bolt12.parse_invoice_request(value, source)
        if invoice_request:
            return ReceiveRequest(request=invoice_request)

        return await self.lnurl.parse(value, source)

    def parse_bitcoin(
        self, value: str, source: PaymentRequestSource
    ) -> Optional[InputType]:
        silent_payment_address = parse_silent_payment_address(value, source)
        if silent_payment_address:
            return PaymentRequest(request=silent_payment_address)

        bitcoin_address = parse_bitcoin_address(value, source)
        if bitcoin_address:
            return PaymentRequest(request=bitcoin_address)

        return None

    async def parse_and_pick(self, value: str, supported: list[PaymentMethodType]):
        """
        Parse and, for payment requests, pick and expand the supported
        payment method. Other inputs are returned unchanged.
        """
        input_type = await self.parse(value)
        if isinstance(input_type, PaymentRequest):
            return pick_and_expand(input_type.request, supported)
        return input_type


async def parse(value: str) -> InputType:
    rest_client = HttpxRestClient()
    async with rest_client:
        return await InputParser(rest_client=rest_client).parse(value)

