from typing import Optional

from bech32 import convertbits
from embit import base58
from embit import bech32 as segwit
from embit.ec import PublicKey
from embit.networks import NETWORKS
from loguru import logger

from lnscan.models import (
    BitcoinAddress,
    Network,
    PaymentRequestSource,
    SilentPaymentAddress,
)
from lnscan.utils.encoding import Encoding, bech32_decode

# the test networks share base58 prefixes and signet shares `tb` with both
# testnets, so testnet3 and testnet4 are never matched first
NETWORK_PRIORITY: list[tuple[Network, dict]] = [
    (Network.bitcoin, NETWORKS["main"]),
    (Network.regtest, NETWORKS["regtest"]),
    (Network.signet, NETWORKS["signet"]),
    (Network.testnet3, NETWORKS["test"]),
    (Network.testnet4, NETWORKS["test"]),
]

SILENT_PAYMENT_HRPS = {
    "sp": Network.bitcoin,
    "tsp": Network.testnet3,
}


def _is_valid_for(address: str, params: dict) -> bool:
    version, program = segwit.decode(params["bech32"], address)
    if version is not None and program is not None:
        return True
    try:
        raw = base58.decode_check(address)
    except ValueError:
        return False
    if len(raw) != 21:
        return False
    return raw[:1] in (params["p2pkh"], params["p2sh"])


def address_network(address: str) -> Optional[Network]:
    for network, params in NETWORK_PRIORITY:
        if _is_valid_for(address, params):
            return network
    return None


def parse_bitcoin_address(
    address: str, source: Optional[PaymentRequestSource] = None
) -> Optional[BitcoinAddress]:
    network = address_network(address)
    if network is None:
        return None
    return BitcoinAddress(
        address=address,
        network=network,
        source=source or PaymentRequestSource(),
    )


def parse_silent_payment_address(
    address: str, source: Optional[PaymentRequestSource] = None
) -> Optional[SilentPaymentAddress]:
    """
    BIP352 silent payment address: bech32m, `sp` or `tsp` hrp, a version
    character and the 33 byte scan and spend public keys.
    """
    hrp, data, encoding = bech32_decode(address)
    if hrp is None or data is None or hrp not in SILENT_PAYMENT_HRPS:
        return None
    if encoding != Encoding.bech32m or len(data) < 1:
        return None

    version = data[0]
    if version == 31:
        return None
    payload = convertbits(data[1:], 5, 8, False)
    if payload is None:
        return None
    payload = bytes(payload)
    if version == 0 and len(payload) != 66:
        return None
    if len(payload) < 66:
        return None
    # later versions must stay readable by v0 wallets
    scan_key, spend_key = payload[:33], payload[33:66]
    try:
        PublicKey.parse(scan_key)
        PublicKey.parse(spend_key)
    except Exception as exc:
        logger.debug(f"invalid silent payment key: {exc}")
        return None

    return SilentPaymentAddress(
        address=address,
        network=SILENT_PAYMENT_HRPS[hrp],
        version=version,
        scan_pubkey=scan_key.hex(),
        spend_pubkey=spend_key.hex(),
        source=source or PaymentRequestSource(),
    )
