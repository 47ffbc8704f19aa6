from .runner import ProbeRequest, ProbeOutcome, ProbeRunner, probe
from .stats import ProbeStatistics, summarize
from .transport import EchoTransport, EchoReply, ReplyStatus
from .core import IcmpTransport
from .report import format_report, save_report, load_report
from .validators import is_valid_host, is_valid_filename
from .exceptions import (
    PingReportException,
    SetupError,
    RootRequired,
    TransportError,
    HostUnreachable,
    PingTimeout,
    ReportError,
    ReportNotFound,
    ReportExists,
)

__version__ = '0.1.0'
