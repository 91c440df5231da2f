from .common import (
    Amount,
    BitcoinAmount,
    CurrencyAmount,
    Network,
    PaymentMethodType,
    PaymentRequestSource,
)
from .inputs import (
    Bip21,
    Bip21Extra,
    BitcoinPayment,
    InputType,
    LightningPayment,
    LiquidPayment,
    LnurlAuth,
    LnurlPayment,
    PaymentRequest,
    PickedPaymentMethod,
    ReceiveRequest,
    Url,
)
from .lnurl import (
    LnurlAuthRequestData,
    LnurlErrorData,
    LnurlPayRequest,
    LnurlWithdrawRequestData,
)
from .payment_methods import (
    BitcoinAddress,
    Bolt11Invoice,
    Bolt11RouteHint,
    Bolt11RouteHintHop,
    Bolt12Invoice,
    Bolt12InvoiceRequest,
    Bolt12Offer,
    Bolt12OfferBlindedPath,
    LightningAddress,
    LiquidAddress,
    LnurlPay,
    PaymentMethod,
    SilentPaymentAddress,
)

__all__ = [
    # common
    "Amount",
    "BitcoinAmount",
    "CurrencyAmount",
    "Network",
    "PaymentMethodType",
    "PaymentRequestSource",
    # inputs
    "Bip21",
    "Bip21Extra",
    "BitcoinPayment",
    "InputType",
    "LightningPayment",
    "LiquidPayment",
    "LnurlAuth",
    "LnurlPayment",
    "PaymentRequest",
    "PickedPaymentMethod",
    "ReceiveRequest",
    "Url",
    # lnurl
    "LnurlAuthRequestData",
    "LnurlErrorData",
    "LnurlPayRequest",
    "LnurlWithdrawRequestData",
    # payment methods
    "BitcoinAddress",
    "Bolt11Invoice",
    "Bolt11RouteHint",
    "Bolt11RouteHintHop",
    "Bolt12Invoice",
    "Bolt12InvoiceRequest",
    "Bolt12Offer",
    "Bolt12OfferBlindedPath",
    "LightningAddress",
    "LiquidAddress",
    "LnurlPay",
    "PaymentMethod",
    "SilentPaymentAddress",
]
