import json

from pydantic import ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .common import FrozenModel


class LnurlModel(FrozenModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class LnurlPayRequest(LnurlModel):
    callback: str
    min_sendable: int = Field(ge=0)
    max_sendable: int = Field(ge=0)
    # raw json string as per LUD-06, see metadata_list()
    metadata_str: str = Field(alias="metadata")
    comment_allowed: int = 0
    # domain of the lnurl-pay endpoint, not of the callback
    domain: str = Field(default="", exclude=True)
    url: str = Field(default="", exclude=True)
    allows_nostr: bool = False
    nostr_pubkey: str | None = None

    @model_validator(mode="after")
    def check_sendable(self):
        if self.min_sendable > self.max_sendable:
            raise ValueError("minSendable is greater than maxSendable")
        return self

    def metadata_list(self) -> list[list[str]]:
        try:
            items = json.loads(self.metadata_str)
        except json.JSONDecodeError:
            return []
        if not isinstance(items, list):
            return []
        return [
            [str(v) for v in item]
            for item in items
            if isinstance(item, list) and len(item) >= 2
        ]

    def _metadata_value(self, *mime_types: str) -> str | None:
        for item in self.metadata_list():
            if item[0] in mime_types:
                return item[1]
        return None

    @property
    def description(self) -> str | None:
        return self._metadata_value("text/plain")

    @property
    def long_description(self) -> str | None:
        return self._metadata_value("text/long-desc")

    @property
    def identifier(self) -> str | None:
        return self._metadata_value("text/identifier", "text/email")


class LnurlWithdrawRequestData(LnurlModel):
    callback: str
    k1: str
    default_description: str
    min_withdrawable: int = Field(ge=0)
    max_withdrawable: int = Field(ge=0)


class LnurlAuthRequestData(LnurlModel):
    """
    LUD-04 challenge. `k1` is 32 bytes of hex, `action` one of
    register, login, link or auth. `url` is called back with the
    signed challenge and the linking key.
    """

    k1: str
    action: str | None = None
    domain: str = Field(default="", exclude=True)
    url: str = Field(default="", exclude=True)


class LnurlErrorData(LnurlModel):
    status: str = "ERROR"
    reason: str
