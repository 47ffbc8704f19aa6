"""
Plain-text probe reports.

A report is written once and read back as raw text for display. It is
never parsed back into outcomes.
"""
import logging
import os
from datetime import datetime
from typing import Optional, Sequence

from .exceptions import ReportError, ReportExists, ReportNotFound
from .runner import ProbeOutcome
from .stats import summarize

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_report(outcomes: Sequence[ProbeOutcome], generated: Optional[datetime] = None) -> str:
    """Render outcomes and their statistics as report text."""
    generated = generated or datetime.now()
    stats = summarize(outcomes)
    lines = [f"=== Ping Results - {generated.strftime(TIMESTAMP_FORMAT)} ==="]
    if stats.loss_percent is None:
        lines.append(f"Lost packets: {stats.lost}/{stats.total}")
    else:
        lines.append(f"Lost packets: {stats.lost}/{stats.total} ({stats.loss_percent:.1f}%)")
    if stats.has_latency:
        lines.append(f"Average response time: {stats.mean:.2f}ms")
    lines.append("")
    lines.extend(o.detail for o in outcomes)
    return "".join(f"{line}\n" for line in lines)


def save_report(
    path: str,
    outcomes: Sequence[ProbeOutcome],
    generated: Optional[datetime] = None,
    overwrite: bool = True,
) -> str:
    """
    Write a report file and return the text written.

    Raises:
        ReportExists: If `path` exists and `overwrite` is false.
        ReportError: If the file cannot be written.
    """
    if not overwrite and os.path.exists(path):
        raise ReportExists(f"Report already exists: {path}")
    text = format_report(outcomes, generated)
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise ReportError(f"Cannot save report {path}: {e}") from e
    logger.info("Saved report with %d results to %s", len(outcomes), path)
    return text


def load_report(path: str) -> str:
    """
    Read a report file back exactly as it was written.

    Raises:
        ReportNotFound: If the file does not exist.
        ReportError: If the file cannot be read.
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError as e:
        raise ReportNotFound(f"Report not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ReportError(f"Cannot load report {path}: {e}") from e
