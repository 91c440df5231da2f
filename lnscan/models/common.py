from enum import Enum

from pydantic import BaseModel, ConfigDict


class Network(str, Enum):
    bitcoin = "bitcoin"
    testnet3 = "testnet3"
    testnet4 = "testnet4"
    signet = "signet"
    regtest = "regtest"


class PaymentMethodType(str, Enum):
    bitcoin_address = "bitcoin_address"
    bolt11_invoice = "bolt11_invoice"
    bolt12_invoice = "bolt12_invoice"
    bolt12_offer = "bolt12_offer"
    lightning_address = "lightning_address"
    liquid_address = "liquid_address"
    lnurl_pay = "lnurl_pay"
    silent_payment_address = "silent_payment_address"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class PaymentRequestSource(FrozenModel):
    """Where a payment method was found: the BIP21 uri and the BIP353 address."""

    bip21_uri: str | None = None
    bip353_address: str | None = None


class BitcoinAmount(FrozenModel):
    amount_msat: int


class CurrencyAmount(FrozenModel):
    # ISO 4217 code and the amount adjusted by its exponent, e.g. USD cents
    iso4217_code: str
    fractional_amount: int


Amount = BitcoinAmount | CurrencyAmount
