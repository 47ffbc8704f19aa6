from dataclasses import dataclass
from statistics import mean, median, stdev
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from .runner import ProbeOutcome

LATENCY_FIELDS = ("min", "max", "mean", "median", "jitter", "p95")


def percentile(data, percent):
    """
    Calculate the desired percentile of a list of numbers (0-100).
    """
    if not data:
        return None
    data = sorted(data)
    k = (len(data) - 1) * (percent / 100)
    f = int(k)
    c = f + 1
    if c > len(data) - 1:
        return data[-1]
    return data[f] * (c - k) + data[c] * (k - f)


@dataclass(frozen=True)
class ProbeStatistics:
    """
    Aggregate statistics of a probe run.

    Latency values are in milliseconds and cover successful attempts only.
    They are None when no attempt succeeded.

    Attributes:
        total (int): Number of attempts.
        received (int): Number of successful attempts.
        lost (int): Number of failed attempts.
        loss_percent (Optional[float]): Percentage of failed attempts, None for an empty run.
        min (Optional[int]): Minimum round-trip time.
        max (Optional[int]): Maximum round-trip time.
        mean (Optional[float]): Mean round-trip time.
        median (Optional[float]): Median round-trip time.
        jitter (Optional[float]): Standard deviation of round-trip times.
        p95 (Optional[float]): 95th percentile of round-trip times.
    """
    total: int
    received: int
    lost: int
    loss_percent: Optional[float]
    min: Optional[int] = None
    max: Optional[int] = None
    mean: Optional[float] = None
    median: Optional[float] = None
    jitter: Optional[float] = None
    p95: Optional[float] = None

    @property
    def has_latency(self) -> bool:
        return self.received > 0

    def as_dict(self) -> dict:
        """Return statistics as a dictionary, leaving out unmeasured values."""
        d = {
            "total": self.total,
            "received": self.received,
            "lost": self.lost,
            "loss_percent": self.loss_percent,
        }
        for name in LATENCY_FIELDS:
            value = getattr(self, name)
            if value is not None:
                d[name] = value
        return d


def summarize(outcomes: Sequence["ProbeOutcome"]) -> ProbeStatistics:
    """
    Reduce a sequence of probe outcomes to statistics.

    The input is only read. Calling it twice on the same sequence gives
    equal results.

    Example:
        >>> stats = summarize(outcomes)
        >>> stats.loss_percent
        25.0
    """
    total = len(outcomes)
    rtt_list = [o.round_trip_ms for o in outcomes if o.succeeded]
    received = len(rtt_list)
    lost = total - received
    loss = lost / total * 100 if total else None
    if not rtt_list:
        return ProbeStatistics(total=total, received=received, lost=lost, loss_percent=loss)
    return ProbeStatistics(
        total=total,
        received=received,
        lost=lost,
        loss_percent=loss,
        min=min(rtt_list),
        max=max(rtt_list),
        mean=float(mean(rtt_list)),
        median=float(median(rtt_list)),
        jitter=stdev(rtt_list) if len(rtt_list) > 1 else 0.0,
        p95=percentile(rtt_list, 95),
    )
