"""DNS endpoint configuration and queries."""

from __future__ import annotations

import ipaddress
import re
import socket
from dataclasses import dataclass

import dns.exception
import dns.message
import dns.query
import dns.rcode
import dns.rdatatype

from healthprobe.result import Result

__all__ = ["DNSConfigError", "DNSConfig"]

NO_QUERY_NAME_MESSAGE = "you must specify a query name for DNS"
INVALID_QUERY_TYPE_MESSAGE = "invalid query type"
UNSUPPORTED_QUERY_TYPE_BODY = "query type is not supported yet"
DNS_PORT = 53
QUERY_TIMEOUT = 2.0

_TYPE_NAME = re.compile(r"[A-Z][A-Z0-9-]*")
_GENERIC_TYPE = re.compile(r"TYPE[0-9]+")


class DNSConfigError(ValueError):
    """Raised when a DNS endpoint is misconfigured."""


def _rdatatype(name: str) -> dns.rdatatype.RdataType:
    if not _TYPE_NAME.fullmatch(name) or _GENERIC_TYPE.fullmatch(name):
        raise DNSConfigError(INVALID_QUERY_TYPE_MESSAGE)
    try:
        return dns.rdatatype.from_text(name)
    except dns.rdatatype.UnknownRdatatype as exc:
        raise DNSConfigError(INVALID_QUERY_TYPE_MESSAGE) from exc


def _split_host_port(address: str) -> tuple[str, int]:
    if address.startswith("["):
        end = address.find("]")
        if end == -1 or address[end + 1 : end + 2] != ":":
            raise ValueError(f"address {address}: missing port in address")
        host, port_text = address[1:end], address[end + 2 :]
    else:
        host, _, port_text = address.rpartition(":")
        if ":" in host:
            raise ValueError(f"address {address}: too many colons in address")
    if not port_text.isdigit():
        raise ValueError(f"address {address}: invalid port")
    return host, int(port_text)


def _resolve(host: str, port: int) -> str:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0][4][0]
    return host


def _describe(rdtype: int, rdata) -> str:
    if rdtype in (dns.rdatatype.A, dns.rdatatype.AAAA):
        return rdata.address
    if rdtype == dns.rdatatype.CNAME:
        return rdata.target.to_text()
    if rdtype == dns.rdatatype.MX:
        return rdata.exchange.to_text()
    if rdtype == dns.rdatatype.NS:
        return rdata.target.to_text()
    return UNSUPPORTED_QUERY_TYPE_BODY


@dataclass
class DNSConfig:
    """The record type and name to query for a DNS endpoint."""

    query_type: str = ""
    query_name: str = ""

    def validate_and_set_default(self) -> None:
        """Check the configuration and make the query name fully qualified."""
        if not self.query_name:
            raise DNSConfigError(NO_QUERY_NAME_MESSAGE)
        if not self.query_name.endswith("."):
            self.query_name += "."
        _rdatatype(self.query_type)

    def query(self, url: str, result: Result) -> None:
        """Query the DNS server at ``url`` and record the outcome on ``result``."""
        if ":" not in url:
            url = f"{url}:{DNS_PORT}"
        try:
            host, port = _split_host_port(url)
            rdtype = _rdatatype(self.query_type)
            request = dns.message.make_query(self.query_name, rdtype)
            response = dns.query.udp(request, _resolve(host, port), timeout=QUERY_TIMEOUT, port=port)
        except (ValueError, OSError, dns.exception.DNSException) as exc:
            result.add_error(str(exc) or type(exc).__name__)
            return
        result.connected = True
        result.dns_rcode = dns.rcode.to_text(response.rcode())
        for rrset in response.answer:
            for rdata in rrset:
                result.body = _describe(rrset.rdtype, rdata).encode()