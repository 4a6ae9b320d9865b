"""Anime selection and playback command handlers.

This module handles:
- Latest episodes listing (-l, repeatable for several picks)
- Anime search and episode selection (-s)
- Interactive mode when no action flag is given
- Playback of the selected episodes
"""

from models.config import Workspace
from services.repository import rep
from services.selection import SelectionOrchestrator
from ui.components import ask_text, console, menu
from utils.logging import get_logger

logger = get_logger(__name__)

MODE_LATEST = "📺 Últimos episódios"
MODE_SEARCH = "🔍 Buscar anime"
MODE_ORIGIN = "🌐 Trocar origem"


def run_selection(args, latest: int = 0, query: str | None = None) -> int:
    """Run the requested flows for the chosen origin, then play the selection.

    Returns:
        Number of episodes played
    """
    scraper = rep.get_scraper_or_default(args.origin)
    logger.debug(f"Using origin '{scraper.name}'")

    selected = []
    with SelectionOrchestrator(
        scraper,
        Workspace.from_settings(),
        preview=not args.no_preview,
    ) as orchestrator:
        if latest:
            selected.extend(orchestrator.latest_flow(rounds=latest))
        if query:
            selected.extend(orchestrator.search_flow(query))

    if not selected:
        console.print("[menu.muted]Nenhum episódio selecionado.[/menu.muted]")
        return 0
    return orchestrator.play(selected, debug=args.debug)


def anime(args) -> int:
    """Handle -l / -s from the command line."""
    return run_selection(args, latest=args.latest, query=args.search)


def interactive(args) -> int:
    """Main menu used when no action flag is given."""
    while True:
        origin = rep.get_scraper_or_default(args.origin).name
        choice = menu(
            [MODE_LATEST, MODE_SEARCH, MODE_ORIGIN],
            msg=f"bakashi-cli ({origin})",
        )
        if choice is None:
            return 0
        if choice == MODE_ORIGIN:
            selected_origin = menu(rep.get_active_sources(), msg="Origem", default=origin)
            if selected_origin:
                args.origin = selected_origin
            continue
        if choice == MODE_LATEST:
            return run_selection(args, latest=1)

        query = ask_text("Nome do anime:")
        if not query:
            continue
        return run_selection(args, query=query)
