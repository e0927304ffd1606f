import errno
import io
import socket
import struct

import pytest

from fakes import FakeSocket
from pingSweep import scanner
from pingSweep.errors import ScanSetupError
from pingSweep.interfaces import InterfaceInfo
from pingSweep.scanner import AddressRange, ScanConfig, Scanner


@pytest.fixture
def fake_sockets(monkeypatch):
    """
    подмена socket.socket; возвращает список созданных сокетов
    """
    created = []
    options = {"responders": set(), "fail_option": None}

    def factory(family, type, proto):
        sock = FakeSocket(family, type, proto, responders=options["responders"],
                          fail_option=options["fail_option"])
        created.append(sock)
        return sock

    monkeypatch.setattr(scanner.socket, "socket", factory)
    return created, options


def test_range_for_class_c_mask():
    addresses = AddressRange.from_interface("192.168.1.77", "255.255.255.0")
    assert addresses.base == scanner.ip_to_int("192.168.1.0")
    assert addresses.host_range == 255
    assert list(addresses) == ["192.168.1.%d" % i for i in range(256)]


def test_range_for_degenerate_mask():
    addresses = AddressRange.from_interface("10.1.2.3", "0.0.0.0")
    assert addresses.host_range == 4294967295
    assert len(addresses) == 2 ** 32
    assert addresses[0] == "0.0.0.0"
    assert addresses[-1] == "255.255.255.255"
    assert list(addresses.items(0xFFFFFFFE)) == [(4294967294, "255.255.255.254"),
                                                 (4294967295, "255.255.255.255")]
    with pytest.raises(IndexError):
        addresses[2 ** 32]


def test_range_for_host_mask():
    addresses = AddressRange.from_interface("172.16.5.9", "255.255.255.255")
    assert addresses.host_range == 0
    assert list(addresses) == ["172.16.5.9"]


def test_ip_conversion_uses_network_order():
    assert scanner.ip_to_int("10.0.0.1") == 0x0A000001
    assert scanner.int_to_ip(0x0A000001) == "10.0.0.1"
    assert scanner.int_to_ip(0x1_0000_0001) == "0.0.0.1"


def test_scan_end_to_end(fake_sockets):
    created, options = fake_sockets
    options["responders"].add("10.0.0.6")
    out = io.StringIO()
    found = Scanner(ScanConfig(timeout=0.01), out).scan(
        InterfaceInfo("eth0", "10.0.0.5", "255.255.255.252"))

    assert found == ["10.0.0.6"]
    assert out.getvalue() == ("Interface:      eth0\n"
                              "IPv4 Address:   10.0.0.5\n"
                              "IP Subnet Mask: 255.255.255.252\n"
                              "\n"
                              "10.0.0.6\n")
    assert len(created) == 1
    sock = created[0]
    assert sock.closed
    assert sock.type == socket.SOCK_DGRAM
    assert sock.options[(socket.IPPROTO_IP, socket.IP_TTL)] == 64
    assert [address for _, address in sock.sent] == [
        ("10.0.0.4", 0), ("10.0.0.5", 0), ("10.0.0.6", 0), ("10.0.0.7", 0)]
    assert [struct.unpack('!BBHHH', msg)[4] for msg, _ in sock.sent] == [0, 1, 2, 3]


def test_scan_uses_configured_socket(fake_sockets):
    created, _ = fake_sockets
    config = ScanConfig(ttl=5, timeout=0.01, raw=True)
    Scanner(config, io.StringIO()).scan(InterfaceInfo("lo", "127.0.0.1", "255.255.255.255"))
    assert created[0].type == socket.SOCK_RAW
    assert created[0].options[(socket.IPPROTO_IP, socket.IP_TTL)] == 5
    assert created[0].gettimeout() == 0.01


def test_ttl_failure_is_fatal(fake_sockets):
    created, options = fake_sockets
    options["fail_option"] = socket.IP_TTL
    out = io.StringIO()
    with pytest.raises(ScanSetupError, match="TTL"):
        Scanner(ScanConfig(timeout=0.01), out).scan(
            InterfaceInfo("eth0", "10.0.0.5", "255.255.255.252"))
    assert created[0].closed
    assert created[0].sent == []
    assert out.getvalue() == ""


def test_timeout_failure_is_fatal(fake_sockets):
    created, _ = fake_sockets
    with pytest.raises(ScanSetupError):
        Scanner(ScanConfig(timeout=-1), io.StringIO()).scan(
            InterfaceInfo("eth0", "10.0.0.5", "255.255.255.252"))
    assert created[0].closed


def test_socket_creation_failure_is_fatal(monkeypatch):
    def factory(family, type, proto):
        raise PermissionError(errno.EPERM, "Operation not permitted")

    monkeypatch.setattr(scanner.socket, "socket", factory)
    with pytest.raises(ScanSetupError, match="Operation not permitted"):
        Scanner(ScanConfig(), io.StringIO()).scan(
            InterfaceInfo("eth0", "10.0.0.5", "255.255.255.0"))


def test_socket_closed_on_interrupt(fake_sockets, monkeypatch):
    created, _ = fake_sockets

    def interrupted(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(scanner.icmp, "probe", interrupted)
    with pytest.raises(KeyboardInterrupt):
        Scanner(ScanConfig(timeout=0.01), io.StringIO()).scan(
            InterfaceInfo("eth0", "10.0.0.5", "255.255.255.0"))
    assert created[0].closed


def test_pooled_scan(fake_sockets):
    created, options = fake_sockets
    options["responders"].update({"192.168.7.1", "192.168.7.5"})
    out = io.StringIO()
    found = Scanner(ScanConfig(timeout=0.01, workers=3), out).scan(
        InterfaceInfo("wlan0", "192.168.7.3", "255.255.255.248"))

    assert sorted(found) == ["192.168.7.1", "192.168.7.5"]
    lines = out.getvalue().splitlines()
    assert lines[:4] == ["Interface:      wlan0", "IPv4 Address:   192.168.7.3",
                         "IP Subnet Mask: 255.255.255.248", ""]
    assert sorted(lines[4:]) == ["192.168.7.1", "192.168.7.5"]
    assert len(created) == 3
    assert all(sock.closed for sock in created)
    sent = sorted(address[0] for sock in created for _, address in sock.sent)
    assert sent == sorted("192.168.7.%d" % i for i in range(8))


def test_pooled_scan_closes_sockets_on_setup_failure(fake_sockets, monkeypatch):
    created, _ = fake_sockets
    original = Scanner.open_socket
    calls = []

    def flaky_open(self):
        calls.append(1)
        if len(calls) == 2:
            raise ScanSetupError("не удалось создать ICMP сокет")
        return original(self)

    monkeypatch.setattr(Scanner, "open_socket", flaky_open)
    with pytest.raises(ScanSetupError):
        Scanner(ScanConfig(timeout=0.01, workers=4), io.StringIO()).scan(
            InterfaceInfo("eth0", "10.0.0.5", "255.255.255.0"))
    assert len(created) == 1
    assert created[0].closed
