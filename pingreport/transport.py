"""
Echo transport abstraction.

A transport sends one echo request and reports what came back. It either
returns an :class:`EchoReply` or raises a
:class:`~pingreport.exceptions.TransportError` for the attempt.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ReplyStatus(Enum):
    SUCCESS = "Success"
    DESTINATION_UNREACHABLE = "DestinationUnreachable"
    TTL_EXPIRED = "TtlExpired"
    PARAMETER_PROBLEM = "ParameterProblem"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class EchoReply:
    """
    Reply to a single echo request.

    Attributes:
        status (ReplyStatus): Classification of the reply.
        address (str): Address the reply came from.
        size (int): Number of payload bytes echoed back.
        rtt (float): Round-trip time (seconds).
        ttl (Optional[int]): TTL of the reply packet, None when unknown.
        message (str): Status text for non-success replies.
    """
    status: ReplyStatus
    address: str
    size: int = 0
    rtt: float = 0.0
    ttl: Optional[int] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ReplyStatus.SUCCESS


class EchoTransport(ABC):
    """
    Sends echo requests to a target.

    A transport is opened once per run and used as a context manager, so
    any handle it holds is released when the run ends.
    """

    @abstractmethod
    def echo(self, host: str, payload: bytes, timeout: float, seq: int = 1) -> EchoReply:
        """Send exactly one echo request and wait up to `timeout` seconds for the reply."""
        raise NotImplementedError

    def close(self) -> None:
        """Release resources held by the transport."""

    def __enter__(self) -> "EchoTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
