import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from .core import IcmpTransport
from .exceptions import TransportError
from .stats import ProbeStatistics, summarize
from .transport import EchoReply, EchoTransport

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 4
DEFAULT_SIZE = 32
MAX_PAYLOAD_SIZE = 65500
DEFAULT_TIMEOUT = 1.0
DEFAULT_INTERVAL = 0.5


@dataclass(frozen=True)
class ProbeRequest:
    """
    Parameters of one probe run.

    Attributes:
        target (str): Hostname or IP address to probe.
        count (int): Number of echo attempts.
        size (int): Payload size in bytes (1..65500).
        timeout (float): Timeout for each attempt in seconds.
        interval (float): Pause between attempts in seconds.
    """
    target: str
    count: int = DEFAULT_COUNT
    size: int = DEFAULT_SIZE
    timeout: float = DEFAULT_TIMEOUT
    interval: float = DEFAULT_INTERVAL

    def __post_init__(self):
        if not self.target or not self.target.strip():
            raise ValueError("Target must not be empty.")
        if self.count < 1:
            raise ValueError("Count must be at least 1.")
        if not 1 <= self.size <= MAX_PAYLOAD_SIZE:
            raise ValueError(f"Size must be between 1 and {MAX_PAYLOAD_SIZE} bytes.")
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive.")
        if self.interval < 0:
            raise ValueError("Interval must not be negative.")


@dataclass(frozen=True)
class ProbeOutcome:
    """
    Result of a single echo attempt.

    `round_trip_ms` is only meaningful when `succeeded` is true and is 0
    otherwise. `ttl` is None when the reply carried no TTL.
    """
    seq: int
    succeeded: bool
    round_trip_ms: int
    detail: str
    address: Optional[str] = None
    ttl: Optional[int] = None

    @classmethod
    def from_reply(cls, seq: int, reply: EchoReply) -> "ProbeOutcome":
        if not reply.ok:
            return cls.failed(seq, f"Error: {reply.message or reply.status.value}")
        rtt_ms = int(round(reply.rtt * 1000))
        ttl = reply.ttl if reply.ttl is not None else 0
        return cls(
            seq=seq,
            succeeded=True,
            round_trip_ms=rtt_ms,
            detail=f"Reply from {reply.address}: bytes={reply.size} time={rtt_ms}ms TTL={ttl}",
            address=reply.address,
            ttl=reply.ttl,
        )

    @classmethod
    def failed(cls, seq: int, detail: str) -> "ProbeOutcome":
        return cls(seq=seq, succeeded=False, round_trip_ms=0, detail=detail)


class ProbeRunner:
    """
    Runs a fixed number of sequential echo attempts against one target.

    Args:
        transport_factory: Callable returning a fresh :class:`EchoTransport`.
            Called once per run.
        sleep: Function used to pause between attempts.

    Example:
        >>> from pingreport import ProbeRunner, ProbeRequest
        >>> outcomes = ProbeRunner().run(ProbeRequest("8.8.8.8", count=3))
        >>> [o.succeeded for o in outcomes]
    """

    def __init__(
        self,
        transport_factory: Callable[[], EchoTransport] = IcmpTransport,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.transport_factory = transport_factory
        self.sleep = sleep

    def iter_run(self, request: ProbeRequest) -> Iterator[ProbeOutcome]:
        """
        Yield one outcome per attempt, as soon as the attempt resolves.

        Raises:
            SetupError: If the transport cannot be used at all. The run is aborted.
        """
        payload = os.urandom(request.size)
        logger.info("Probing %s: %d attempts, %d bytes", request.target, request.count, request.size)
        with self.transport_factory() as transport:
            for seq in range(1, request.count + 1):
                if seq > 1 and request.interval:
                    self.sleep(request.interval)
                yield self._attempt(transport, request, payload, seq)

    def _attempt(self, transport: EchoTransport, request: ProbeRequest, payload: bytes, seq: int) -> ProbeOutcome:
        try:
            reply = transport.echo(request.target, payload, request.timeout, seq)
        except (TransportError, OSError) as e:
            logger.warning("Attempt %d to %s failed: %s", seq, request.target, e)
            return ProbeOutcome.failed(seq, f"Exception: {e}")
        outcome = ProbeOutcome.from_reply(seq, reply)
        logger.debug("Attempt %d to %s: %s", seq, request.target, outcome.detail)
        return outcome

    def run(self, request: ProbeRequest) -> List[ProbeOutcome]:
        """Run all attempts and return the outcomes in send order."""
        outcomes = list(self.iter_run(request))
        received = sum(1 for o in outcomes if o.succeeded)
        logger.info("Probe of %s finished: %d/%d replies", request.target, received, len(outcomes))
        return outcomes

    def run_target(self, target: str, count: int = DEFAULT_COUNT, size: int = DEFAULT_SIZE) -> List[ProbeOutcome]:
        """Shortcut for :meth:`run` with the default timeout and interval."""
        return self.run(ProbeRequest(target, count=count, size=size))


def probe(
    target: str,
    count: int = DEFAULT_COUNT,
    size: int = DEFAULT_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    interval: float = DEFAULT_INTERVAL,
    transport_factory: Callable[[], EchoTransport] = IcmpTransport,
) -> Tuple[List[ProbeOutcome], ProbeStatistics]:
    """
    Probe a host and summarize the result.

    Parameters:
        target (str): Hostname or IP address to ping.
        count (int): Number of echo attempts. Default is 4.
        size (int): Payload size in bytes. Default is 32.
        timeout (float): Timeout for each attempt in seconds. Default is 1.
        interval (float): Pause between attempts in seconds. Default is 0.5.
        transport_factory: Callable returning the echo transport to use.

    Returns:
        Tuple of the outcome list and its :class:`ProbeStatistics`.

    Raises:
        ValueError: If a parameter is out of range.
        RootRequired: If insufficient privileges to create a RAW socket.
        SetupError: For other socket setup errors.
    """
    request = ProbeRequest(target, count=count, size=size, timeout=timeout, interval=interval)
    outcomes = ProbeRunner(transport_factory).run(request)
    return outcomes, summarize(outcomes)
