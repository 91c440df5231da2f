from typing import ClassVar

from pydantic import Field

from .common import (
    Amount,
    FrozenModel,
    Network,
    PaymentMethodType,
    PaymentRequestSource,
)
from .lnurl import LnurlPayRequest


class PaymentMethodBase(FrozenModel):
    method_type: ClassVar[PaymentMethodType]
    source: PaymentRequestSource = Field(default_factory=PaymentRequestSource)


class BitcoinAddress(PaymentMethodBase):
    method_type = PaymentMethodType.bitcoin_address

    address: str
    network: Network


class Bolt11RouteHintHop(FrozenModel):
    # node_id of the non-target end of the route
    src_node_id: str
    short_channel_id: str
    fees_base_msat: int
    fees_proportional_millionths: int
    cltv_expiry_delta: int
    htlc_minimum_msat: int | None = None
    htlc_maximum_msat: int | None = None


class Bolt11RouteHint(FrozenModel):
    hops: list[Bolt11RouteHintHop] = []


class Bolt11Invoice(PaymentMethodBase):
    method_type = PaymentMethodType.bolt11_invoice

    invoice: str
    amount_msat: int | None = None
    description: str | None = None
    description_hash: str | None = None
    expiry: int
    min_final_cltv_expiry_delta: int
    network: Network
    payee_pubkey: str
    payment_hash: str
    payment_secret: str | None = None
    routing_hints: list[Bolt11RouteHint] = []
    timestamp: int

    @property
    def expires_at(self) -> int:
        return self.timestamp + self.expiry


class Bolt12OfferBlindedPath(FrozenModel):
    # node id of each blinded hop, hex encoded
    blinded_hops: list[str] = []


class Bolt12Offer(PaymentMethodBase):
    method_type = PaymentMethodType.bolt12_offer

    offer: str
    absolute_expiry: int | None = None
    chains: list[str] = []
    description: str | None = None
    issuer: str | None = None
    min_amount: Amount | None = None
    paths: list[Bolt12OfferBlindedPath] = []
    signing_pubkey: str | None = None


class Bolt12Invoice(PaymentMethodBase):
    method_type = PaymentMethodType.bolt12_invoice

    invoice: str
    amount_msat: int | None = None
    payment_hash: str | None = None
    signing_pubkey: str | None = None
    created_at: int | None = None
    relative_expiry: int = 7200
    description: str | None = None
    issuer: str | None = None


class Bolt12InvoiceRequest(FrozenModel):
    invoice_request: str
    chain: str | None = None
    amount_msat: int | None = None
    quantity: int | None = None
    payer_id: str | None = None
    payer_note: str | None = None
    description: str | None = None
    issuer: str | None = None
    source: PaymentRequestSource = Field(default_factory=PaymentRequestSource)


class LightningAddress(PaymentMethodBase):
    method_type = PaymentMethodType.lightning_address

    address: str
    pay_request: LnurlPayRequest


class LiquidAddress(PaymentMethodBase):
    method_type = PaymentMethodType.liquid_address

    address: str
    network: Network


class LnurlPay(PaymentMethodBase):
    method_type = PaymentMethodType.lnurl_pay

    pay_request: LnurlPayRequest


class SilentPaymentAddress(PaymentMethodBase):
    method_type = PaymentMethodType.silent_payment_address

    address: str
    network: Network
    version: int = 0
    scan_pubkey: str
    spend_pubkey: str


PaymentMethod = (
    BitcoinAddress
    | Bolt11Invoice
    | Bolt12Invoice
    | Bolt12Offer
    | LightningAddress
    | LiquidAddress
    | LnurlPay
    | SilentPaymentAddress
)
