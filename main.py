import argparse
import sys

from commands import anime, interactive, list_sources
from models.config import settings
from scrapers import loader
from utils.exceptions import BakashiError
from utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bakashi-cli",
        description="Veja anime sem sair do terminal.",
    )
    parser.add_argument(
        "--latest",
        "-l",
        action="count",
        default=0,
        help="exibir os últimos episódios (repita para escolher mais de um)",
    )
    parser.add_argument(
        "--search",
        "-s",
        metavar="QUERY",
        help="buscar anime, ex: 'naruto'",
    )
    parser.add_argument(
        "--origin",
        "-o",
        metavar="ORIGIN",
        help=f"origem da busca (padrão: {settings.scrapers.default_origin})",
    )
    parser.add_argument("--no-preview", action="store_true", help="desativar miniaturas")
    parser.add_argument("--sources", action="store_true", help="listar origens disponíveis")
    parser.add_argument("--debug", "-d", action="store_true")
    return parser


def cli(argv: list[str] | None = None) -> int:
    """Entry point para CLI."""
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)

    loader.load_plugins(settings.scrapers.languages)

    try:
        if args.sources:
            list_sources(args)
            return 0
        if args.latest or args.search:
            anime(args)
        else:
            interactive(args)
    except KeyboardInterrupt:
        return 130
    except BakashiError as e:
        logger.error(str(e))
        print(f"\n❌ {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(cli())
