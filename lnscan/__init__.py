from .exceptions import (
    Bip21Error,
    DnsResolutionError,
    EmptyInputError,
    InvalidInputError,
    LnurlAuthError,
    LnurlEndpointError,
    LnurlError,
    ParseError,
    PickPaymentMethodError,
    ServiceConnectivityError,
    UnsupportedPaymentMethodError,
)
from .models import (
    Bip21,
    InputType,
    LnurlAuth,
    PaymentMethod,
    PaymentMethodType,
    PaymentRequest,
    PickedPaymentMethod,
    ReceiveRequest,
    Url,
)
from .parser import InputParser, parse
from .picker import expand_payment_method, pick_and_expand, pick_payment_method

__all__ = [
    "Bip21",
    "Bip21Error",
    "DnsResolutionError",
    "EmptyInputError",
    "InputParser",
    "InputType",
    "InvalidInputError",
    "LnurlAuth",
    "LnurlAuthError",
    "LnurlEndpointError",
    "LnurlError",
    "ParseError",
    "PaymentMethod",
    "PaymentMethodType",
    "PaymentRequest",
    "PickPaymentMethodError",
    "PickedPaymentMethod",
    "ReceiveRequest",
    "ServiceConnectivityError",
    "UnsupportedPaymentMethodError",
    "Url",
    "expand_payment_method",
    "parse",
    "pick_and_expand",
    "pick_payment_method",
]
