"""Reusable UI components: menu(), ask_text(), loading()

This module consolidates the small terminal UI used around the fzf picker:
- menu() / ask_text() - Interactive prompts with InquirerPy
- loading() - Rich spinners for network calls
- console - Themed Rich console for user-facing messages
"""

from contextlib import contextmanager

from InquirerPy import inquirer
from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.theme import Theme

# Catppuccin Mocha Theme
CATPPUCCIN_MOCHA = Theme(
    {
        "menu.title": "bold #cba6f7",  # Purple header
        "menu.text": "#cdd6f4",  # Light text
        "menu.muted": "#6c7086",  # Muted gray
        "info": "#89dceb",  # Sky blue for info
        "success": "#a6e3a1",  # Green for success
        "warning": "#f9e2af",  # Yellow for warnings
        "error": "#f38ba8",  # Red for errors
    }
)

# Global console with theme
console = Console(theme=CATPPUCCIN_MOCHA)


def menu(opts: list[str], msg: str = "", default: str | None = None) -> str | None:
    """Display a small select menu.

    Args:
        opts: List of menu options
        msg: Title message
        default: Pre-selected option

    Returns:
        Selected option, or None if the user pressed Q / Ctrl+C
    """
    return inquirer.select(
        message=msg or "Menu",
        choices=opts,
        default=default,
        qmark="",
        amark="►",
        pointer="►",
        instruction="(Use arrow keys, Q to quit)",
        mandatory=False,
        keybindings={
            "skip": [
                {"key": "q"},
                {"key": "Q"},
            ],
        },
        raise_keyboard_interrupt=False,
    ).execute()


def ask_text(msg: str) -> str | None:
    """Prompt for a line of text. Returns None when empty or cancelled."""
    answer = inquirer.text(
        message=msg,
        qmark="",
        amark="►",
        mandatory=False,
        raise_keyboard_interrupt=False,
    ).execute()
    if not answer or not answer.strip():
        return None
    return answer.strip()


@contextmanager
def loading(msg: str = "Carregando..."):
    """Context manager for displaying loading indicators during operations.

    Args:
        msg: The message to display alongside the spinner

    Usage:
        with loading("Buscando episódios..."):
            episodes = scraper.latest_episodes()

    """
    with Live(
        Spinner("dots", text=msg),
        console=console,
        refresh_per_second=12.5,
        transient=True,  # Spinner disappears after completion
    ):
        yield
