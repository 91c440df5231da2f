from .common import FrozenModel, PaymentMethodType
from .lnurl import LnurlAuthRequestData, LnurlPayRequest, LnurlWithdrawRequestData
from .payment_methods import (
    BitcoinAddress,
    Bolt11Invoice,
    Bolt12Invoice,
    Bolt12InvoiceRequest,
    Bolt12Offer,
    LiquidAddress,
    PaymentMethod,
    SilentPaymentAddress,
)


class Bip21Extra(FrozenModel):
    key: str
    value: str


class Bip21(FrozenModel):
    uri: str
    amount_sat: int | None = None
    asset_id: str | None = None
    extras: list[Bip21Extra] = []
    label: str | None = None
    message: str | None = None
    payment_methods: list[PaymentMethod] = []

    def method_types(self) -> list[PaymentMethodType]:
        return [method.method_type for method in self.payment_methods]


class LnurlAuth(FrozenModel):
    data: LnurlAuthRequestData


class PaymentRequest(FrozenModel):
    request: Bip21 | PaymentMethod


class ReceiveRequest(FrozenModel):
    request: Bolt12InvoiceRequest | LnurlWithdrawRequestData


class Url(FrozenModel):
    url: str


InputType = LnurlAuth | PaymentRequest | ReceiveRequest | Url


class BitcoinPayment(FrozenModel):
    address: BitcoinAddress | SilentPaymentAddress


class LightningPayment(FrozenModel):
    # None means the payment method does not bound the amount
    min_amount_msat: int | None = None
    max_amount_msat: int | None = None
    method: Bolt11Invoice | Bolt12Invoice | Bolt12Offer


class LnurlPayment(FrozenModel):
    address: str | None = None
    pay_request: LnurlPayRequest


class LiquidPayment(FrozenModel):
    address: LiquidAddress


PickedPaymentMethod = BitcoinPayment | LightningPayment | LnurlPayment | LiquidPayment
