"""Origin listing command handler."""

from models.config import settings
from services.repository import rep
from ui.components import console


def list_sources(args) -> None:
    """Print the registered origins, marking the default one."""
    sources = rep.get_active_sources()
    if not sources:
        console.print("[error]Nenhuma origem carregada.[/error]")
        return
    for name in sources:
        scraper = rep.get_scraper(name)
        marker = " [success](padrão)[/success]" if name == settings.scrapers.default_origin else ""
        console.print(f"[menu.text]{name}[/menu.text] [menu.muted]{scraper.referer()}[/menu.muted]{marker}")
