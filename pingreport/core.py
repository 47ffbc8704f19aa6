import logging
import os
import select
import socket
import struct
import time
from typing import Dict, Optional, Tuple

from .exceptions import (
    HostUnreachable,
    PingTimeout,
    RootRequired,
    SetupError,
    TransportError,
)
from .transport import EchoReply, EchoTransport, ReplyStatus

logger = logging.getLogger(__name__)

ICMP_ECHO_REPLY = 0
ICMP_DEST_UNREACH = 3
ICMP_ECHO_REQUEST = 8
ICMP_TIME_EXCEEDED = 11
ICMP_PARAMETER_PROBLEM = 12

ICMP6_DEST_UNREACH = 1
ICMP6_TIME_EXCEEDED = 3
ICMP6_PARAMETER_PROBLEM = 4
ICMP6_ECHO_REQUEST = 128
ICMP6_ECHO_REPLY = 129

ICMP_HEADER_SIZE = 8
IPV6_HEADER_SIZE = 40
RECV_BUFFER_SIZE = 65535


def icmp_code_to_text(code: int) -> str:
    # See RFC 792
    codes = {
        0: "Network unreachable",
        1: "Host unreachable",
        2: "Protocol unreachable",
        3: "Port unreachable",
        4: "Fragmentation needed and DF set",
        5: "Source route failed",
        13: "Communication administratively prohibited (firewalled)",
    }
    return codes.get(code, "Unknown reason")


def icmpv6_code_to_text(code: int) -> str:
    # See RFC 4443
    codes = {
        0: "No route to destination",
        1: "Communication administratively prohibited (firewalled)",
        2: "Beyond scope of source address",
        3: "Address unreachable",
        4: "Port unreachable",
        5: "Source address failed ingress/egress policy",
        6: "Reject route to destination",
        7: "Error in Source Routing Header",
    }
    return codes.get(code, "Unknown reason")


def time_exceeded_to_text(code: int) -> str:
    if code == 1:
        return "Fragment reassembly time exceeded"
    return "TTL expired in transit"


def checksum(source: bytes) -> int:
    """RFC 1071 internet checksum of `source`."""
    if len(source) % 2:
        source += b"\x00"
    total = sum(struct.unpack("!%dH" % (len(source) // 2), source))
    total = (total >> 16) + (total & 0xffff)
    total += total >> 16
    return ~total & 0xffff


def resolve_host(host: str) -> Tuple[int, str]:
    """Try to resolve host to IPv4 or IPv6, return (family, address)."""
    try:
        info = socket.getaddrinfo(host, None, 0, socket.SOCK_RAW)
    except (OSError, UnicodeError) as e:
        raise HostUnreachable(f"Cannot resolve host: {host}") from e
    if not info:
        raise HostUnreachable(f"Cannot resolve host: {host}")
    family, _, _, _, sockaddr = info[0]
    return family, sockaddr[0]


def create_packet(family: int, packet_id: int, seq: int, payload: bytes) -> bytes:
    """Create an ICMP Echo packet carrying `payload`."""
    if not payload:
        raise ValueError("Payload must not be empty.")
    echo_type = ICMP_ECHO_REQUEST if family == socket.AF_INET else ICMP6_ECHO_REQUEST
    seq &= 0xffff
    header = struct.pack("!BBHHH", echo_type, 0, 0, packet_id, seq)
    my_checksum = checksum(header + payload)
    header = struct.pack("!BBHHH", echo_type, 0, my_checksum, packet_id, seq)
    return header + payload


class IcmpTransport(EchoTransport):
    """
    Echo transport over raw ICMP/ICMPv6 sockets.

    One raw socket per address family is opened on first use and kept
    until :meth:`close`.

    Note:
        Opening a raw socket requires root privileges or CAP_NET_RAW.
    """

    def __init__(self) -> None:
        self.packet_id = os.getpid() & 0xffff
        self._sockets: Dict[int, socket.socket] = {}

    def _get_socket(self, family: int) -> socket.socket:
        sock = self._sockets.get(family)
        if sock is not None:
            return sock
        proto = socket.IPPROTO_ICMP if family == socket.AF_INET else socket.IPPROTO_ICMPV6
        try:
            sock = socket.socket(family, socket.SOCK_RAW, proto)
        except PermissionError as e:
            raise RootRequired("Root privileges or CAP_NET_RAW are required to create RAW socket.") from e
        except OSError as e:
            raise SetupError(f"Socket error: {e}") from e
        logger.debug("Opened raw socket for family %s", family)
        self._sockets[family] = sock
        return sock

    def echo(self, host: str, payload: bytes, timeout: float, seq: int = 1) -> EchoReply:
        family, addr = resolve_host(host)
        sock = self._get_socket(family)
        packet = create_packet(family, self.packet_id, seq, payload)
        dest = (addr, 0, 0, 0) if family == socket.AF_INET6 else (addr, 0)
        time_sent = time.perf_counter()
        try:
            sock.sendto(packet, dest)
        except OSError as e:
            raise TransportError(f"Send failed: {e}") from e
        deadline = time_sent + timeout
        while True:
            remaining = deadline - time.perf_counter()
            if remaining <= 0:
                break
            ready, _, _ = select.select([sock], [], [], remaining)
            if not ready:
                break
            try:
                rec_packet, source = sock.recvfrom(RECV_BUFFER_SIZE)
            except OSError as e:
                raise TransportError(f"Receive failed: {e}") from e
            rtt = time.perf_counter() - time_sent
            if family == socket.AF_INET:
                reply = self._parse_v4(rec_packet, source[0], seq, rtt)
            else:
                reply = self._parse_v6(rec_packet, source[0], seq, rtt)
            if reply is not None:
                return reply
        raise PingTimeout(f"Request timed out after {timeout * 1000:.0f} ms")

    def _is_ours(self, quoted: bytes, seq: int) -> bool:
        """Check whether a quoted ICMP header belongs to our request."""
        if len(quoted) < ICMP_HEADER_SIZE:
            return False
        _, _, _, recv_id, recv_seq = struct.unpack("!BBHHH", quoted[:ICMP_HEADER_SIZE])
        return recv_id == self.packet_id and recv_seq == (seq & 0xffff)

    def _parse_v4(self, rec_packet: bytes, source: str, seq: int, rtt: float) -> Optional[EchoReply]:
        if len(rec_packet) < 20:
            logger.debug("Dropping truncated IP packet from %s (%d bytes)", source, len(rec_packet))
            return None
        ihl = (rec_packet[0] & 0x0f) * 4
        icmp = rec_packet[ihl:]
        if len(icmp) < ICMP_HEADER_SIZE:
            logger.debug("Dropping truncated ICMP packet from %s (%d bytes)", source, len(icmp))
            return None
        recv_ttl = rec_packet[8]
        _type, code = icmp[0], icmp[1]
        if _type == ICMP_ECHO_REPLY:
            if not self._is_ours(icmp, seq):
                return None
            return EchoReply(
                ReplyStatus.SUCCESS,
                source,
                size=len(icmp) - ICMP_HEADER_SIZE,
                rtt=rtt,
                ttl=recv_ttl,
            )
        if _type not in (ICMP_DEST_UNREACH, ICMP_TIME_EXCEEDED, ICMP_PARAMETER_PROBLEM):
            return None
        # Error messages quote the original IP header and the first 8 bytes of our request
        inner = icmp[ICMP_HEADER_SIZE:]
        if not inner:
            return None
        inner_ihl = (inner[0] & 0x0f) * 4
        if not self._is_ours(inner[inner_ihl:], seq):
            return None
        if _type == ICMP_DEST_UNREACH:
            return EchoReply(
                ReplyStatus.DESTINATION_UNREACHABLE,
                source,
                rtt=rtt,
                message=f"Destination unreachable: {icmp_code_to_text(code)}",
            )
        if _type == ICMP_TIME_EXCEEDED:
            return EchoReply(ReplyStatus.TTL_EXPIRED, source, rtt=rtt, message=time_exceeded_to_text(code))
        return EchoReply(ReplyStatus.PARAMETER_PROBLEM, source, rtt=rtt, message=f"Parameter problem (code {code})")

    def _parse_v6(self, rec_packet: bytes, source: str, seq: int, rtt: float) -> Optional[EchoReply]:
        # IPv6: raw sockets deliver the ICMP message without the IP header
        if len(rec_packet) < ICMP_HEADER_SIZE:
            logger.debug("Dropping truncated ICMPv6 packet from %s (%d bytes)", source, len(rec_packet))
            return None
        _type, code = rec_packet[0], rec_packet[1]
        if _type == ICMP6_ECHO_REPLY:
            if not self._is_ours(rec_packet, seq):
                return None
            # Getting TTL for IPv6 is non-trivial
            return EchoReply(ReplyStatus.SUCCESS, source, size=len(rec_packet) - ICMP_HEADER_SIZE, rtt=rtt)
        if _type not in (ICMP6_DEST_UNREACH, ICMP6_TIME_EXCEEDED, ICMP6_PARAMETER_PROBLEM):
            return None
        if not self._is_ours(rec_packet[ICMP_HEADER_SIZE + IPV6_HEADER_SIZE:], seq):
            return None
        if _type == ICMP6_DEST_UNREACH:
            return EchoReply(
                ReplyStatus.DESTINATION_UNREACHABLE,
                source,
                rtt=rtt,
                message=f"Destination unreachable: {icmpv6_code_to_text(code)}",
            )
        if _type == ICMP6_TIME_EXCEEDED:
            return EchoReply(ReplyStatus.TTL_EXPIRED, source, rtt=rtt, message=time_exceeded_to_text(code))
        return EchoReply(ReplyStatus.PARAMETER_PROBLEM, source, rtt=rtt, message=f"Parameter problem (code {code})")

    def close(self) -> None:
        for sock in self._sockets.values():
            sock.close()
        self._sockets.clear()
