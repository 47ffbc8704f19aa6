class PingReportException(Exception):
    """Base exception for pingreport."""


class SetupError(PingReportException):
    """Raised when a probe run cannot start at all."""


class RootRequired(SetupError):
    """Raised if the user does not have required root privileges."""


class TransportError(PingReportException):
    """Raised when a single echo attempt fails at the transport level."""


class HostUnreachable(TransportError):
    """Raised when the host could not be resolved or reached."""


class PingTimeout(TransportError):
    """Raised when no reply arrives before the attempt deadline."""


class ReportError(PingReportException):
    """Raised when a report cannot be written or read."""


class ReportNotFound(ReportError):
    """Raised when loading a report file that does not exist."""


class ReportExists(ReportError):
    """Raised when saving over an existing report is not allowed."""
