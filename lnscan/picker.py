from typing import Union

from lnscan.exceptions import UnsupportedPaymentMethodError
from lnscan.models import (
    Bip21,
    BitcoinAddress,
    BitcoinAmount,
    BitcoinPayment,
    Bolt11Invoice,
    Bolt12Invoice,
    Bolt12Offer,
    LightningAddress,
    LightningPayment,
    LiquidAddress,
    LiquidPayment,
    LnurlPay,
    LnurlPayment,
    PaymentMethod,
    PaymentMethodType,
    PickedPaymentMethod,
    SilentPaymentAddress,
)


def pick_payment_method(
    request: Union[Bip21, PaymentMethod], supported: list[PaymentMethodType]
) -> PaymentMethod:
    """
    A single payment method is returned as is. For a BIP21 bundle the first
    method of each type is kept and the first type in `supported` that the
    bundle carries wins.
    """
    if not isinstance(request, Bip21):
        return request

    by_type: dict[PaymentMethodType, PaymentMethod] = {}
    for method in request.payment_methods:
        by_type.setdefault(method.method_type, method)

    for method_type in supported:
        if method_type in by_type:
            return by_type[method_type]

    raise UnsupportedPaymentMethodError(
        f"none of {[m.value for m in supported]} in "
        f"{[m.value for m in request.method_types()]}"
    )


def expand_payment_method(method: PaymentMethod) -> PickedPaymentMethod:
    if isinstance(method, (BitcoinAddress, SilentPaymentAddress)):
        return BitcoinPayment(address=method)
    if isinstance(method, Bolt11Invoice):
        return LightningPayment(
            min_amount_msat=method.amount_msat,
            max_amount_msat=method.amount_msat,
            method=method,
        )
    if isinstance(method, Bolt12Invoice):
        return LightningPayment(
            min_amount_msat=method.amount_msat,
            max_amount_msat=method.amount_msat,
            method=method,
        )
    if isinstance(method, Bolt12Offer):
        min_amount = (
            method.min_amount.amount_msat
            if isinstance(method.min_amount, BitcoinAmount)
            else None
        )
        return LightningPayment(min_amount_msat=min_amount, method=method)
    if isinstance(method, LightningAddress):
        return LnurlPayment(address=method.address, pay_request=method.pay_request)
    if isinstance(method, LnurlPay):
        return LnurlPayment(pay_request=method.pay_request)
    if isinstance(method, LiquidAddress):
        return LiquidPayment(address=method)
    raise TypeError(f"unknown payment method {type(method).__name__}")


def pick_and_expand(
    request: Union[Bip21, PaymentMethod], supported: list[PaymentMethodType]
) -> PickedPaymentMethod:
    return expand_payment_method(pick_payment_method(request, supported))
