import socket
import threading

import dns.message
import dns.rcode
import dns.rdatatype
import dns.rrset
import pytest

from healthprobe.dns import DNSConfig, DNSConfigError
from healthprobe.pattern import match
from healthprobe.result import Result

RECORDS = {
    ("example.com.", "A"): ["93.184.216.34"],
    ("example.com.", "AAAA"): ["2606:2800:220:1:248:1893:25c8:1946"],
    ("en.wikipedia.org.", "CNAME"): ["dyna.wikimedia.org."],
    ("example.com.", "MX"): ["0 ."],
    ("example.com.", "NS"): ["a.iana-servers.net.", "b.iana-servers.net."],
    ("example.com.", "TXT"): ['"v=spf1 -all"'],
}


@pytest.fixture
def server_address():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(0.05)
    stop = threading.Event()

    def serve():
        while not stop.is_set():
            try:
                data, peer = sock.recvfrom(4096)
            except socket.timeout:
                continue
            except OSError:
                return
            request = dns.message.from_wire(data)
            response = dns.message.make_response(request)
            question = request.question[0]
            key = (question.name.to_text(), dns.rdatatype.to_text(question.rdtype))
            answers = RECORDS.get(key)
            if answers is None:
                response.set_rcode(dns.rcode.NXDOMAIN)
            else:
                response.answer.append(
                    dns.rrset.from_text(question.name, 300, "IN", question.rdtype, *answers)
                )
            sock.sendto(response.to_wire(), peer)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield f"127.0.0.1:{sock.getsockname()[1]}"
    stop.set()
    thread.join(timeout=1)
    sock.close()


@pytest.mark.parametrize(
    ("query_type", "query_name", "expected_body"),
    [
        ("A", "example.com.", "93.184.216.34"),
        ("AAAA", "example.com.", "2606:2800:220:1:248:1893:25c8:1946"),
        ("CNAME", "en.wikipedia.org.", "dyna.wikimedia.org."),
        ("MX", "example.com.", "."),
    ],
)
def test_query(server_address, query_type, query_name, expected_body):
    result = Result()
    DNSConfig(query_type=query_type, query_name=query_name).query(server_address, result)
    assert result.errors == []
    assert result.connected is True
    assert result.dns_rcode == "NOERROR"
    assert result.body.decode() == expected_body


def test_query_ns_matches_suffix(server_address):
    result = Result()
    DNSConfig(query_type="NS", query_name="example.com.").query(server_address, result)
    assert result.dns_rcode == "NOERROR"
    assert match("*.iana-servers.net.", result.body.decode())


def test_query_unsupported_type_body(server_address):
    result = Result()
    DNSConfig(query_type="TXT", query_name="example.com.").query(server_address, result)
    assert result.body == b"query type is not supported yet"


def test_query_unknown_name_reports_rcode(server_address):
    result = Result()
    DNSConfig(query_type="A", query_name="missing.example.com.").query(server_address, result)
    assert result.connected is True
    assert result.dns_rcode == "NXDOMAIN"
    assert result.body == b""


def test_query_with_fake_type_records_error(server_address):
    result = Result()
    DNSConfig(query_type="B", query_name="example").query(server_address, result)
    assert len(result.errors) == 1
    assert result.dns_rcode == ""
    assert result.body == b""
    assert result.connected is False


def test_query_with_malformed_address_records_error():
    result = Result()
    DNSConfig(query_type="A", query_name="example.com.").query("a:b:c", result)
    assert len(result.errors) == 1
    assert result.connected is False


def test_validate_without_query_name():
    with pytest.raises(DNSConfigError, match="you must specify a query name for DNS"):
        DNSConfig(query_type="A", query_name="").validate_and_set_default()


def test_validate_with_invalid_query_type():
    with pytest.raises(DNSConfigError, match="invalid query type"):
        DNSConfig(query_type="B", query_name="example.com").validate_and_set_default()


def test_validate_appends_trailing_dot():
    config = DNSConfig(query_type="A", query_name="example.com")
    config.validate_and_set_default()
    assert config.query_name == "example.com."
    config.validate_and_set_default()
    assert config.query_name == "example.com."