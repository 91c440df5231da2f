from __future__ import annotations

from enum import Enum
from typing import Optional


class ParseError(Exception):
    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class EmptyInputError(ParseError):
    def __init__(self, message: str = "empty input"):
        super().__init__(message)


class InvalidInputError(ParseError):
    def __init__(self, message: str = "invalid input"):
        super().__init__(message)


class Bip21Error(InvalidInputError):
    pass


class InvalidAddressError(Bip21Error):
    def __init__(self, message: str = "invalid address"):
        super().__init__(message)


class InvalidAmountError(Bip21Error):
    def __init__(self, message: str = "invalid amount"):
        super().__init__(message)


class MissingEqualsError(Bip21Error):
    def __init__(self, message: str = "parameter is missing an '='"):
        super().__init__(message)


class MultipleParamsError(Bip21Error):
    def __init__(self, key: str):
        super().__init__(f"parameter '{key}' appears more than once")
        self.key = key


class UnknownRequiredParameterError(Bip21Error):
    def __init__(self, key: str):
        super().__init__(f"unknown required parameter '{key}'")
        self.key = key


class InvalidParameterError(Bip21Error):
    def __init__(self, key: str, cause: Optional[Exception] = None):
        reason = f": {cause}" if cause else ""
        super().__init__(f"invalid parameter '{key}'{reason}")
        self.key = key
        self.cause = cause


class NoPaymentMethodsError(Bip21Error):
    def __init__(self, message: str = "no payment methods"):
        super().__init__(message)


class ServiceConnectivityErrorKind(str, Enum):
    builder = "builder"
    redirect = "redirect"
    status = "status"
    timeout = "timeout"
    request = "request"
    connect = "connect"
    body = "body"
    decode = "decode"
    json = "json"
    other = "other"


class ServiceConnectivityError(Exception):
    def __init__(self, kind: ServiceConnectivityErrorKind, message: str):
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message


class LnurlError(ParseError):
    pass


class MissingK1Error(LnurlError):
    def __init__(self, message: str = "missing k1 parameter"):
        super().__init__(message)


class InvalidK1Error(LnurlError):
    def __init__(self, message: str = "k1 must be 32 bytes of hex"):
        super().__init__(message)


class UnsupportedActionError(LnurlError):
    def __init__(self, action: str):
        super().__init__(f"unsupported action '{action}'")
        self.action = action


class MissingDomainError(LnurlError):
    def __init__(self, message: str = "url has no domain"):
        super().__init__(message)


class HttpSchemeWithoutOnionDomainError(LnurlError):
    def __init__(self, message: str = "http scheme is only allowed for onion domains"):
        super().__init__(message)


class HttpsSchemeWithOnionDomainError(LnurlError):
    def __init__(self, message: str = "https scheme is not allowed for onion domains"):
        super().__init__(message)


class UnknownSchemeError(LnurlError):
    def __init__(self, scheme: str):
        super().__init__(f"unknown scheme '{scheme}'")
        self.scheme = scheme


class LnurlEndpointError(LnurlError):
    def __init__(self, reason: str, cause: Optional[Exception] = None):
        super().__init__(reason)
        self.reason = reason
        self.cause = cause

    @property
    def is_connectivity(self) -> bool:
        if not isinstance(self.cause, ServiceConnectivityError):
            return False
        return self.cause.kind not in (
            ServiceConnectivityErrorKind.json,
            ServiceConnectivityErrorKind.decode,
        )


class DnsResolutionError(Exception):
    def __init__(self, name: str, message: str):
        super().__init__(f"{name}: {message}")
        self.name = name
        self.message = message


class PickPaymentMethodError(Exception):
    pass


class UnsupportedPaymentMethodError(PickPaymentMethodError):
    def __init__(self, message: str = "no supported payment method found"):
        super().__init__(message)
        self.message = message


class LnurlAuthError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
