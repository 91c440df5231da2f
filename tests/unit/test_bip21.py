import pytest

from lnscan.bip21 import decode_bip21, parse_amount
from lnscan.exceptions import (
    InvalidAddressError,
    InvalidAmountError,
    InvalidParameterError,
    MissingEqualsError,
    MultipleParamsError,
    NoPaymentMethodsError,
    UnknownRequiredParameterError,
)
from lnscan.models import (
    Bip21,
    Bip21Extra,
    BitcoinAddress,
    Bolt11Invoice,
    Bolt12Offer,
    PaymentMethodType,
    PaymentRequestSource,
)
from lnscan.parser import InputParser
from tests.helpers import BITCOIN_ADDRESS as ADDRESS
from tests.helpers import BOLT11, OFFER


async def decode(input_parser: InputParser, uri: str) -> Bip21:
    bip21 = await decode_bip21(
        uri, PaymentRequestSource(bip21_uri=uri), input_parser.parse_lightning
    )
    assert bip21
    return bip21


@pytest.mark.anyio
async def test_address_only(input_parser: InputParser):
    for uri in [f"bitcoin:{ADDRESS}", f"BITCOIN:{ADDRESS}", f"bitcoin:{ADDRESS}?"]:
        bip21 = await decode(input_parser, uri)
        assert bip21.uri == uri
        assert bip21.amount_sat is None
        assert bip21.label is None
        assert len(bip21.payment_methods) == 1
        address = bip21.payment_methods[0]
        assert isinstance(address, BitcoinAddress)
        assert address.address == ADDRESS
        assert address.source.bip21_uri == uri


@pytest.mark.anyio
async def test_not_bip21(input_parser: InputParser):
    bip21 = await decode_bip21(
        ADDRESS, PaymentRequestSource(), input_parser.parse_lightning
    )
    assert bip21 is None


@pytest.mark.anyio
@pytest.mark.parametrize(
    "amount_sat, amount_btc",
    [
        (999, "0.00000999"),
        (1000, "0.00001000"),
        (59810, "0.00059810"),
        (2000, "0.00002"),
        (100_000_000, "1"),
        (100_000_000, "1."),
    ],
)
async def test_amount(input_parser: InputParser, amount_sat: int, amount_btc: str):
    bip21 = await decode(input_parser, f"bitcoin:{ADDRESS}?amount={amount_btc}")
    assert bip21.amount_sat == amount_sat


@pytest.mark.parametrize(
    "amount", ["", "-1", "1e3", "0.123456789", "0,1", "21000001", " 1"]
)
def test_invalid_amount(amount: str):
    with pytest.raises(InvalidAmountError):
        parse_amount(amount)


@pytest.mark.anyio
async def test_label_and_message(input_parser: InputParser):
    bip21 = await decode(
        input_parser,
        f"bitcoin:{ADDRESS}?label=Luke-Jr&message=Donation%20for%20project%20xyz",
    )
    assert bip21.label == "Luke-Jr"
    assert bip21.message == "Donation for project xyz"

    with pytest.raises(InvalidParameterError, match="label"):
        await decode(input_parser, f"bitcoin:{ADDRESS}?label=%ff%fe")


@pytest.mark.anyio
@pytest.mark.parametrize(
    "query, key",
    [
        ("amount=1&amount=2", "amount"),
        ("amount=1&AMOUNT=2", "amount"),
        ("label=a&req-label=b", "label"),
        ("message=a&message=a", "message"),
    ],
)
async def test_duplicate_parameters(input_parser: InputParser, query: str, key: str):
    with pytest.raises(MultipleParamsError) as exc_info:
        await decode(input_parser, f"bitcoin:{ADDRESS}?{query}")
    assert exc_info.value.key == key


@pytest.mark.anyio
async def test_required_parameters(input_parser: InputParser):
    with pytest.raises(
        UnknownRequiredParameterError, match="req-somethingyoudontunderstand"
    ):
        await decode(
            input_parser,
            f"bitcoin:{ADDRESS}?req-somethingyoudontunderstand=50",
        )

    # known keys may be required
    bip21 = await decode(input_parser, f"bitcoin:{ADDRESS}?req-amount=0.1")
    assert bip21.amount_sat == 10_000_000


@pytest.mark.anyio
async def test_extras(input_parser: InputParser):
    bip21 = await decode(
        input_parser, f"bitcoin:{ADDRESS}?somethingyoudontunderstand=50&Other=x%20y"
    )
    assert bip21.extras == [
        Bip21Extra(key="somethingyoudontunderstand", value="50"),
        Bip21Extra(key="other", value="x%20y"),
    ]


@pytest.mark.anyio
async def test_malformed(input_parser: InputParser):
    with pytest.raises(InvalidAddressError):
        await decode(input_parser, "bitcoin:1andreas3batLhQa2FawWjeyjCqyBzype")

    with pytest.raises(MissingEqualsError):
        await decode(input_parser, f"bitcoin:{ADDRESS}?amount")

    with pytest.raises(NoPaymentMethodsError):
        await decode(input_parser, "bitcoin:?amount=1")

    with pytest.raises(NoPaymentMethodsError):
        await decode(input_parser, "bitcoin:")


@pytest.mark.anyio
async def test_lightning_parameter(input_parser: InputParser):
    uri = f"bitcoin:{ADDRESS}?amount=0.00000011&lightning={BOLT11}"
    bip21 = await decode(input_parser, uri)
    assert bip21.method_types() == [
        PaymentMethodType.bitcoin_address,
        PaymentMethodType.bolt11_invoice,
    ]
    invoice = bip21.payment_methods[1]
    assert isinstance(invoice, Bolt11Invoice)
    assert invoice.source.bip21_uri == uri

    # no on-chain address at all
    bip21 = await decode(input_parser, f"bitcoin:?lightning={BOLT11.upper()}")
    assert bip21.method_types() == [PaymentMethodType.bolt11_invoice]


@pytest.mark.anyio
async def test_undecodable_alternate_is_skipped(input_parser: InputParser):
    bip21 = await decode(
        input_parser, f"bitcoin:{ADDRESS}?lightning=nonsense&lno=lno1qqqq&bc=x"
    )
    assert bip21.method_types() == [PaymentMethodType.bitcoin_address]
    assert bip21.extras == []


@pytest.mark.anyio
async def test_bolt12_parameters(input_parser: InputParser):
    bip21 = await decode(input_parser, f"bitcoin:{ADDRESS}?lno={OFFER}")
    assert isinstance(bip21.payment_methods[1], Bolt12Offer)

    # b12 falls back to an offer
    bip21 = await decode(input_parser, f"bitcoin:?b12={OFFER}")
    assert bip21.method_types() == [PaymentMethodType.bolt12_offer]
