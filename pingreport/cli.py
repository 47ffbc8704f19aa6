import argparse
import json
import logging
import os
import random
import sys
from typing import List, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from .console import THEMES, ConsoleUI, RenderContext
from .exceptions import ReportError, ReportNotFound, SetupError
from .report import load_report, save_report
from .runner import (
    DEFAULT_COUNT,
    DEFAULT_INTERVAL,
    DEFAULT_SIZE,
    DEFAULT_TIMEOUT,
    MAX_PAYLOAD_SIZE,
    ProbeOutcome,
    ProbeRequest,
    ProbeRunner,
)
from .stats import summarize
from .validators import is_valid_filename, is_valid_host

MENU = ["Start ping", "Load previous results", "Change theme", "Exit"]


def host_arg(value: str) -> str:
    if not is_valid_host(value):
        raise argparse.ArgumentTypeError(f"invalid IP address or domain name: {value!r}")
    return value


def count_arg(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}")
    if count < 1:
        raise argparse.ArgumentTypeError("count must be at least 1")
    return count


def size_arg(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid size: {value!r}")
    if not 1 <= size <= MAX_PAYLOAD_SIZE:
        raise argparse.ArgumentTypeError(f"size must be between 1 and {MAX_PAYLOAD_SIZE}")
    return size


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pingreport",
        description="Probe host reachability and keep a text report. Starts an interactive menu when no host is given.",
    )
    parser.add_argument("host", nargs="?", type=host_arg, help="Host to ping")
    parser.add_argument("-c", "--count", type=count_arg, default=DEFAULT_COUNT,
                        help=f"Number of packets (default: {DEFAULT_COUNT})")
    parser.add_argument("-s", "--size", type=size_arg, default=DEFAULT_SIZE,
                        help=f"Payload size in bytes (default: {DEFAULT_SIZE})")
    parser.add_argument("-t", "--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help=f"Timeout per packet in seconds (default: {DEFAULT_TIMEOUT:g})")
    parser.add_argument("-i", "--interval", type=float, default=DEFAULT_INTERVAL,
                        help=f"Interval between packets in seconds (default: {DEFAULT_INTERVAL:g})")
    parser.add_argument("-j", "--json", action="store_true", help="Output in JSON format")
    parser.add_argument("--save", metavar="FILE", help="Save the report to FILE")
    parser.add_argument("--load", metavar="FILE", help="Print a previously saved report and exit")
    parser.add_argument("--theme", choices=sorted(THEMES), help="Color theme (random when omitted)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


class PingApplication:
    """
    Interactive menu around the probe engine.

    Args:
        ui: Console to talk to.
        runner: Probe runner to use.
    """

    def __init__(self, ui: ConsoleUI, runner: Optional[ProbeRunner] = None):
        self.ui = ui
        self.runner = runner or ProbeRunner()

    def run(self) -> int:
        self.ui.logo()
        while True:
            self.ui.header("PING PONG")
            self.ui.menu(MENU)
            choice = self.ui.get_input("Choose an option").strip()
            if choice == "1":
                self.execute_ping()
            elif choice == "2":
                self.load_results()
            elif choice == "3":
                self.change_theme()
            elif choice == "4":
                self.ui.message("Exiting...")
                return 0
            else:
                self.ui.error("Invalid choice!")

    def change_theme(self) -> None:
        self.ui.header("Theme selector")
        names = list(THEMES)
        for i, name in enumerate(names, 1):
            self.ui.message(f"{i}. {name}")
        index = self.ui.get_number("Choose a theme", 1, len(names), 1) - 1
        self.ui.ctx.set_theme(names[index])
        self.ui.success(f"Theme changed to {names[index]}!")

    def execute_ping(self) -> None:
        self.ui.header("PING OPERATION")
        host = self.ui.get_valid_input(
            "Enter IP address or domain name",
            is_valid_host,
            "Invalid IP address or domain name. Try again.",
        )
        count = self.ui.get_number(f"Number of ping attempts (default {DEFAULT_COUNT})", 1, sys.maxsize, DEFAULT_COUNT)
        size = self.ui.get_number(f"Packet size in bytes (default {DEFAULT_SIZE})", 1, MAX_PAYLOAD_SIZE, DEFAULT_SIZE)
        request = ProbeRequest(host, count=count, size=size)
        self.ui.spinner("Sending ping...")
        self.ui.banner(f"Pinging {host} with {size} bytes of data")
        try:
            outcomes = self.runner.run(request)
        except SetupError as e:
            self.ui.error(str(e))
            return
        stats = summarize(outcomes)
        self.ui.progress_bar(stats.received, stats.total)
        self.ui.outcomes(outcomes)
        self.ui.statistics(stats)
        if self.ui.get_yes_no("\nDo you want to save the results?"):
            self.save_results(outcomes)

    def save_results(self, outcomes: Sequence[ProbeOutcome]) -> None:
        filename = self.ui.get_valid_input(
            "Enter file name (e.g. pingresults.txt)",
            is_valid_filename,
            "Invalid file name. Try again.",
        )
        if os.path.exists(filename) and not self.ui.get_yes_no(
            "A file with this name already exists, overwrite it?"
        ):
            self.ui.message("Save cancelled.")
            return
        try:
            save_report(filename, outcomes)
        except ReportError as e:
            self.ui.error(f"Error while saving: {e}")
            return
        self.ui.success("Results saved.")

    def load_results(self) -> None:
        self.ui.header("LOAD RESULTS")
        filename = self.ui.get_input("Enter file name to load results from")
        try:
            text = load_report(filename)
        except ReportNotFound:
            self.ui.error("The file does not exist.")
            return
        except ReportError as e:
            self.ui.error(f"Error while loading: {e}")
            return
        self.ui.banner("Saved ping results")
        self.ui.message(text)


def run_once(ns: argparse.Namespace, ui: ConsoleUI, runner: ProbeRunner) -> int:
    request = ProbeRequest(ns.host, count=ns.count, size=ns.size, timeout=ns.timeout, interval=ns.interval)
    try:
        outcomes = runner.run(request)
    except SetupError as e:
        ui.error(str(e))
        return 1
    stats = summarize(outcomes)
    if ns.json:
        data = {
            "target": ns.host,
            "outcomes": [
                {
                    "seq": o.seq,
                    "succeeded": o.succeeded,
                    "round_trip_ms": o.round_trip_ms,
                    "detail": o.detail,
                    "address": o.address,
                    "ttl": o.ttl,
                }
                for o in outcomes
            ],
            "statistics": stats.as_dict(),
        }
        ui.ctx.stream.write(json.dumps(data, indent=2) + "\n")
    else:
        ui.message(f"Pinging {ns.host} with {ns.size} bytes of data:")
        ui.outcomes(outcomes)
        ui.statistics(stats)
    if ns.save:
        try:
            save_report(ns.save, outcomes)
        except ReportError as e:
            ui.error(str(e))
            return 1
    return 0


def main(argv: Optional[List[str]] = None, runner: Optional[ProbeRunner] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )
    if ns.timeout <= 0:
        parser.error("timeout must be positive")
    if ns.interval < 0:
        parser.error("interval must not be negative")
    ctx = RenderContext(theme=ns.theme or random.choice(list(THEMES)))
    ui = ConsoleUI(ctx)
    runner = runner or ProbeRunner()

    if ns.load:
        try:
            ctx.stream.write(load_report(ns.load))
        except ReportError as e:
            ui.error(str(e))
            return 1
        return 0
    if ns.host:
        return run_once(ns, ui, runner)
    try:
        return PingApplication(ui, runner).run()
    except (KeyboardInterrupt, EOFError):
        ui.message("")
        return 0


if __name__ == "__main__":
    sys.exit(main())
