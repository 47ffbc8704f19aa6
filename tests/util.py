import socket
from collections import deque
from functools import lru_cache

from pingreport import EchoReply, EchoTransport, PingTimeout, ReplyStatus


def ok(rtt_ms, address="192.0.2.10", size=32, ttl=64):
    """Successful reply with `rtt_ms` round-trip time."""
    return EchoReply(ReplyStatus.SUCCESS, address, size=size, rtt=rtt_ms / 1000, ttl=ttl)


def unreachable(address="192.0.2.1"):
    return EchoReply(
        ReplyStatus.DESTINATION_UNREACHABLE,
        address,
        message="Destination unreachable: Host unreachable",
    )


class ScriptedTransport(EchoTransport):
    """
    script: sequence of EchoReply objects or exceptions, one per attempt.
    If no scripted item is left, the attempt times out.
    """

    def __init__(self, script=()):
        self.script = deque(script)
        self.calls = []
        self.closed = False

    def echo(self, host, payload, timeout, seq=1):
        self.calls.append((host, payload, timeout, seq))
        item = self.script.popleft() if self.script else PingTimeout("Request timed out after 1000 ms")
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self):
        self.closed = True


class Factory:
    """Transport factory that remembers the transports it created."""

    def __init__(self, script=()):
        self.script = list(script)
        self.created = []

    def __call__(self):
        transport = ScriptedTransport(self.script)
        self.created.append(transport)
        return transport


def no_sleep(_):
    pass


@lru_cache(maxsize=None)
def has_raw_socket():
    """Check system allows IPv4 raw ICMP sockets."""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
    except OSError:
        return False
    s.close()
    return True
