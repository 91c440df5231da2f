import re
from decimal import Decimal
from typing import Awaitable, Callable, Optional
from urllib.parse import unquote

from loguru import logger

from lnscan import bolt12
from lnscan.bitcoin import parse_bitcoin_address, parse_silent_payment_address
from lnscan.exceptions import (
    InvalidAddressError,
    InvalidAmountError,
    InvalidParameterError,
    MissingEqualsError,
    MultipleParamsError,
    NoPaymentMethodsError,
    ParseError,
    UnknownRequiredParameterError,
)
from lnscan.helpers import BITCOIN_PREFIX, strip_prefix
from lnscan.models import (
    Bip21,
    Bip21Extra,
    InputType,
    PaymentMethod,
    PaymentRequest,
    PaymentRequestSource,
)

LightningParser = Callable[[str, PaymentRequestSource], Awaitable[Optional[InputType]]]

SATS_PER_BTC = 100_000_000
MAX_MONEY_SAT = 21_000_000 * SATS_PER_BTC

SCALAR_KEYS = ("amount", "assetid", "label", "message")


def parse_amount(value: str) -> int:
    """BTC denominated decimal to satoshis, without float rounding."""
    if not re.fullmatch(r"\d+(\.\d{0,8})?", value):
        raise InvalidAmountError(f"invalid amount '{value}'")
    amount_sat = int(Decimal(value) * SATS_PER_BTC)
    if amount_sat > MAX_MONEY_SAT:
        raise InvalidAmountError(f"amount '{value}' exceeds the supply")
    return amount_sat


def _decode_text(key: str, value: str) -> str:
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as exc:
        raise InvalidParameterError(key, exc) from exc


def _payment_method(result: Optional[InputType]) -> Optional[PaymentMethod]:
    if isinstance(result, PaymentRequest) and not isinstance(result.request, Bip21):
        return result.request
    return None


async def decode_bip21(
    value: str,
    source: PaymentRequestSource,
    parse_lightning: LightningParser,
) -> Optional[Bip21]:
    """
    Decode a `bitcoin:` uri. Returns None when the prefix is missing and
    raises a Bip21Error when the uri is malformed.
    """
    rest = strip_prefix(value, BITCOIN_PREFIX)
    if rest is None:
        return None

    address, _, query = rest.partition("?")
    payment_methods: list[PaymentMethod] = []
    if address:
        bitcoin_address = parse_bitcoin_address(address, source)
        if bitcoin_address is None:
            raise InvalidAddressError(f"invalid address '{address}'")
        payment_methods.append(bitcoin_address)

    seen: set[str] = set()
    scalars: dict[str, str] = {}
    extras: list[Bip21Extra] = []

    for param in query.split("&"):
        if not param:
            continue
        key, sep, param_value = param.partition("=")
        if not sep:
            raise MissingEqualsError(f"parameter '{param}' is missing an '='")
        key = key.lower()
        required = key.startswith("req-")
        name = key[len("req-") :] if required else key

        if name in SCALAR_KEYS:
            if name in seen:
                raise MultipleParamsError(name)
            seen.add(name)
            scalars[name] = param_value
        elif name in ("lightning", "lno", "b12", "sp"):
            method = await _alternate_method(
                name, unquote(param_value), source, parse_lightning
            )
            if method:
                payment_methods.append(method)
        elif name == "bc":
            continue
        elif required:
            raise UnknownRequiredParameterError(key)
        else:
            extras.append(Bip21Extra(key=key, value=param_value))

    if not payment_methods:
        raise NoPaymentMethodsError()

    amount = scalars.get("amount")
    label = scalars.get("label")
    message = scalars.get("message")
    return Bip21(
        uri=value,
        amount_sat=parse_amount(amount) if amount is not None else None,
        asset_id=scalars.get("assetid"),
        extras=extras,
        label=_decode_text("label", label) if label is not None else None,
        message=_decode_text("message", message) if message is not None else None,
        payment_methods=payment_methods,
    )


async def _alternate_method(
    name: str,
    value: str,
    source: PaymentRequestSource,
    parse_lightning: LightningParser,
) -> Optional[PaymentMethod]:
    method: Optional[PaymentMethod] = None
    try:
        if name == "lightning":
            result = await parse_lightning(value, source)
            method = _payment_method(result)
            if result is not None and method is None:
                logger.warning(f"ignoring non payment lightning parameter: {value}")
                return None
        elif name == "lno":
            method = bolt12.parse_offer(value, source)
        elif name == "b12":
            method = bolt12.parse_invoice(value, source) or bolt12.parse_offer(
                value, source
            )
        elif name == "sp":
            method = parse_silent_payment_address(value, source)
    except ParseError as exc:
        raise InvalidParameterError(name, exc) from exc

    if method is None:
        logger.debug(f"skipping undecodable bip21 parameter '{name}'")
    return method
