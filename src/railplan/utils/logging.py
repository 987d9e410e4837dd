"""Colored console logging and a tqdm progress bar for the planner CLI."""
import logging
from tqdm import tqdm

class Colors:
    """ANSI color codes for prettier output."""
    CYAN = '\033[36m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    RED = '\033[31m'
    BLUE = '\033[34m'
    GRAY = '\033[37m'
    BOLD = '\033[1m'
    RESET = '\033[0m'

class Symbols:
    """Unicode symbols for status indicators."""
    CHECK = '✓'
    CROSS = '✗'
    WARN = '⚠'
    TRAIN = '🚆'
    PACKAGE = '📦'
    CLOCK = '⏱'

LEVEL_COLORS = {
    'DEBUG': Colors.GRAY,
    'INFO': Colors.CYAN,
    'WARNING': Colors.YELLOW,
    'ERROR': Colors.RED,
    'CRITICAL': Colors.RED + Colors.BOLD
}

# Planning failures and plan violations get a glyph so they stand out from the instruction sheet
LEVEL_SYMBOLS = {
    'WARNING': Symbols.WARN,
    'ERROR': Symbols.CROSS,
    'CRITICAL': Symbols.CROSS,
}

class SimpleFormatter(logging.Formatter):
    """Message-only formatter colored by level."""
    def format(self, record):
        color = LEVEL_COLORS.get(record.levelname, Colors.RESET)
        message = record.getMessage()
        symbol = LEVEL_SYMBOLS.get(record.levelname)
        if symbol:
            message = f"{symbol} {message}"
        return f"{color}{message}{Colors.RESET}"

def setup_logging(level: int = logging.INFO) -> None:
    """Install a single colored console handler on the root logger."""
    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(SimpleFormatter())
    logger.addHandler(console)

class ProgressTracker:
    """Progress bar over the planning pipeline; the postfix names the running step."""
    def __init__(self, steps, disable: bool = False):
        self.steps = list(steps)
        self.pbar = tqdm(
            total=len(self.steps),
            desc=f"{Colors.BLUE}{Symbols.TRAIN} Planning Progress{Colors.RESET}",
            bar_format="{desc}: {percentage:3.0f}%|{bar}| {n_fmt}/{total_fmt} {postfix}",
            disable=disable
        )
        self.current = 0
        self.disabled = disable

        self.status_formats = {
            'success': f"{Colors.GREEN}{Symbols.CHECK}",
            'warning': f"{Colors.YELLOW}{Symbols.CLOCK}",
            'error': f"{Colors.RED}{Symbols.CROSS}",
            'info': f"{Colors.CYAN}{Symbols.PACKAGE}",
        }
        self._show_step()

    @property
    def current_step(self):
        """Name of the step in progress, or None once every step is done."""
        return self.steps[self.current] if self.current < len(self.steps) else None

    def _show_step(self):
        self.pbar.set_postfix_str(self.current_step or '')

    def advance(self, message=None, status='success'):
        """Finish the current step, optionally printing a status line above the bar."""
        if message and not self.disabled:
            prefix = self.status_formats.get(status, '')
            label = f"[{self.current_step}] " if self.current_step else ''
            self.pbar.write(f"{prefix} {label}{message}{Colors.RESET}")
        self.current += 1
        self.pbar.update(1)
        self._show_step()

    def close(self, message: str = "Planning completed!"):
        if not self.disabled:
            self.pbar.write(f"\n{Colors.GREEN}{Symbols.TRAIN} {message}{Colors.RESET}\n")
        self.pbar.close()
