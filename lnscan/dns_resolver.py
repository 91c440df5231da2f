from typing import Optional, Protocol

import dns.asyncresolver
import dns.exception
import dns.flags
from loguru import logger

from lnscan.exceptions import DnsResolutionError
from lnscan.settings import settings


class DnsResolver(Protocol):
    async def txt_lookup(self, name: str) -> list[str]: ...


class DnspythonResolver:
    """
    TXT lookups through dnspython. DNSSEC validation is left to the
    recursive resolver: answers without the AD flag are rejected when
    `dns_require_dnssec` is set.
    """

    def __init__(
        self,
        nameservers: Optional[list[str]] = None,
        timeout: Optional[float] = None,
        require_dnssec: Optional[bool] = None,
    ):
        self.nameservers = nameservers or settings.dns_nameservers
        self.timeout = timeout or settings.dns_timeout
        self.require_dnssec = (
            settings.dns_require_dnssec if require_dnssec is None else require_dnssec
        )
        self._resolver: Optional[dns.asyncresolver.Resolver] = None

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        if self._resolver is None:
            resolver = dns.asyncresolver.Resolver(configure=not self.nameservers)
            if self.nameservers:
                resolver.nameservers = self.nameservers
            resolver.lifetime = self.timeout
            resolver.flags = dns.flags.RD | dns.flags.AD
            resolver.use_edns(0, dns.flags.DO, 1232)
            self._resolver = resolver
        return self._resolver

    async def txt_lookup(self, name: str) -> list[str]:
        try:
            answer = await self._get_resolver().resolve(name, "TXT")
        except dns.exception.DNSException as exc:
            raise DnsResolutionError(name, str(exc) or type(exc).__name__) from exc

        if self.require_dnssec and not answer.response.flags & dns.flags.AD:
            raise DnsResolutionError(name, "answer is not DNSSEC authenticated")

        records = []
        for rdata in answer:
            try:
                records.append(b"".join(rdata.strings).decode())
            except UnicodeDecodeError:
                logger.debug(f"skipping non utf-8 TXT record for {name}")
        return records
