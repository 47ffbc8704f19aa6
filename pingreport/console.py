"""
Console presentation for pingreport.

Everything that knows about colors, terminal width or prompting lives
here. The echo engine never imports this module. Rendering and prompts
are done with rich.
"""
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Sequence, TextIO

from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, InvalidResponse, Prompt
from rich.rule import Rule
from rich.text import Text

from .runner import ProbeOutcome
from .stats import ProbeStatistics

PROGRESS_WIDTH = 40
COURT_WIDTH = 40

LOGO = r"""
 ____  _                 ____
|  _ \(_)_ __   __ _    |  _ \ ___  _ __   __ _
| |_) | | '_ \ / _` |   | |_) / _ \| '_ \ / _` |
|  __/| | | | | (_| |   |  __/ (_) | | | | (_| |
|_|   |_|_| |_|\__, |   |_|   \___/|_| |_|\__, |
               |___/                      |___/
"""


@dataclass(frozen=True)
class Theme:
    """Rich color names; text and highlight are drawn on `background`."""

    text: str
    background: str
    success: str
    error: str
    highlight: str


THEMES: Dict[str, Theme] = {
    "Standard": Theme("white", "black", "green", "red", "cyan"),
    "Hacker": Theme("green", "black", "green", "red", "yellow"),
    "Ocean": Theme("cyan", "blue", "white", "red", "bright_cyan"),
    "Vintage": Theme("yellow", "magenta", "green", "red", "white"),
    "Nord": Theme("bright_black", "blue", "cyan", "red", "white"),
}
DEFAULT_THEME = "Standard"


def court_frames(width: int = COURT_WIDTH) -> Iterator[str]:
    """Ball bouncing from the left paddle to the right one and back."""
    positions = list(range(width)) + list(range(width - 2, -1, -1))
    for pos in positions:
        yield "|" + " " * pos + "o" + " " * (width - 1 - pos) + "|"


class RenderContext:
    """
    Explicit rendering state for the console.

    Args:
        theme: Theme name, one of :data:`THEMES`.
        width: Line width; terminal width when empty.
        stream: Output stream, stdout when empty.
        color: Emit colors. Enabled only for terminals when empty.
    """

    def __init__(
        self,
        theme: str = DEFAULT_THEME,
        width: Optional[int] = None,
        stream: Optional[TextIO] = None,
        color: Optional[bool] = None,
    ):
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self.theme_name = theme
        self.console = Console(
            file=stream,
            width=width,
            force_terminal=color,
            color_system="standard" if color else "auto",
            highlight=False,
            emoji=False,
        )

    @property
    def theme(self) -> Theme:
        return THEMES[self.theme_name]

    @property
    def stream(self) -> TextIO:
        return self.console.file

    @property
    def color(self) -> bool:
        return self.console.is_terminal

    @property
    def width(self) -> int:
        return self.console.width

    def set_theme(self, name: str) -> None:
        if name not in THEMES:
            raise ValueError(f"Unknown theme: {name}")
        self.theme_name = name

    def style(self, color: str) -> str:
        return f"{color} on {self.theme.background}"


class NumberPrompt(IntPrompt):
    """Integer prompt accepting only values in ``[min_value, max_value]``."""

    def __init__(self, prompt, *, min_value: int, max_value: int, **kwargs):
        super().__init__(prompt, **kwargs)
        self.min_value = min_value
        self.max_value = max_value
        self.validate_error_message = (
            f"[prompt.invalid]Invalid input. Enter a number between {min_value} and {max_value}."
        )

    def process_response(self, value: str) -> int:
        number = super().process_response(value)
        if not self.min_value <= number <= self.max_value:
            raise InvalidResponse(self.validate_error_message)
        return number


class _InputReader:
    # rich prompts read from anything with readline(); an empty line selects the default
    def __init__(self, input_func: Callable[[str], str]):
        self.input_func = input_func

    def readline(self) -> str:
        return self.input_func("")


class ConsoleUI:
    """
    Prompts and display helpers on top of a :class:`RenderContext`.

    Args:
        ctx: Rendering context.
        input_func: Function reading one line of input. Terminal input
            through rich when empty.
    """

    def __init__(self, ctx: RenderContext, input_func: Optional[Callable[[str], str]] = None):
        self.ctx = ctx
        self._reader = _InputReader(input_func) if input_func else None

    @property
    def console(self) -> Console:
        return self.ctx.console

    def _print(self, text="", color: Optional[str] = None) -> None:
        style = self.ctx.style(color) if color else None
        self.console.print(text, style=style, markup=False, soft_wrap=True)

    def _prompt_text(self, prompt: str) -> Text:
        return Text(prompt, style=self.ctx.style(self.ctx.theme.highlight))

    # Display
    def logo(self, delay: float = 0.02) -> None:
        """Play the startup animation; skipped when output is not a terminal."""
        if not self.ctx.color:
            return
        art = Text(LOGO.strip("\n"), style=self.ctx.style(self.ctx.theme.highlight))
        ball_style = self.ctx.style(self.ctx.theme.success)
        with Live(console=self.console, auto_refresh=False, transient=True) as live:
            for frame in court_frames():
                live.update(Group(art, Text(frame, style=ball_style)), refresh=True)
                time.sleep(delay)
        self.console.print(art)

    def message(self, text: str) -> None:
        self._print(text, self.ctx.theme.text)

    def success(self, text: str) -> None:
        self._print(f"✓ {text}", self.ctx.theme.success)

    def error(self, text: str) -> None:
        self._print(f"❌ {text}", self.ctx.theme.error)

    def header(self, title: str) -> None:
        style = self.ctx.style(self.ctx.theme.highlight)
        self._print()
        self.console.print(Rule(Text(title, style=style), characters="=", style=style))
        self._print()

    def banner(self, text: str) -> None:
        self._print()
        self.console.print(
            Panel(Text(text, justify="center"), box=box.DOUBLE, style=self.ctx.style("yellow"))
        )
        self._print()

    def menu(self, options: Sequence[str]) -> None:
        for i, option in enumerate(options, 1):
            self._print(Text.assemble("  ", (f"[{i}]", self.ctx.style("yellow")), f" {option}"))
        self._print()

    def progress_bar(self, success: int, total: int) -> None:
        if not total:
            return
        filled = round(success / total * PROGRESS_WIDTH)
        self._print(
            Text.assemble(
                "[",
                ("█" * filled, self.ctx.style(self.ctx.theme.success)),
                ("█" * (PROGRESS_WIDTH - filled), self.ctx.style(self.ctx.theme.error)),
                f"] {success}/{total} ({success / total * 100:.1f}%)",
            )
        )

    def outcomes(self, outcomes: Sequence[ProbeOutcome]) -> None:
        for outcome in outcomes:
            self.outcome(outcome)

    def outcome(self, outcome: ProbeOutcome) -> None:
        if outcome.succeeded:
            self.success(outcome.detail)
        else:
            self.error(outcome.detail)

    def statistics(self, stats: ProbeStatistics) -> None:
        self._print()
        self._print("=== Statistics ===", self.ctx.theme.highlight)
        self._print(f"Packets sent: {stats.total}")
        self._print(f"Packets received: {stats.received}")
        if stats.loss_percent is None:
            self._print(f"Packets lost: {stats.lost}")
        else:
            self._print(f"Packets lost: {stats.lost} ({stats.loss_percent:.1f}%)")
        if stats.has_latency:
            self._print(f"Minimum response time: {stats.min}ms")
            self._print(f"Maximum response time: {stats.max}ms")
            self._print(f"Average response time: {stats.mean:.2f}ms")

    def spinner(self, text: str, duration: float = 0.8) -> None:
        """Show a short spinner; skipped when output is not a terminal."""
        if not self.ctx.color:
            return
        with self.console.status(text, spinner="dots"):
            time.sleep(duration)

    # Prompts
    def get_input(self, prompt: str) -> str:
        return Prompt(self._prompt_text(prompt), console=self.console)(stream=self._reader)

    def get_valid_input(self, prompt: str, validator: Callable[[str], bool], error_message: str) -> str:
        while True:
            value = self.get_input(prompt)
            if validator(value):
                return value
            self.error(error_message)

    def get_number(self, prompt: str, min_value: int, max_value: int, default: int) -> int:
        """Read an integer in range; empty input selects `default`."""
        number_prompt = NumberPrompt(
            self._prompt_text(prompt),
            min_value=min_value,
            max_value=max_value,
            console=self.console,
            show_default=False,
        )
        return number_prompt(default=default, stream=self._reader)

    def get_yes_no(self, prompt: str) -> bool:
        return Confirm(self._prompt_text(prompt), console=self.console)(stream=self._reader)
