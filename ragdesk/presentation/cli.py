import argparse
import asyncio
import json
import logging
import subprocess
import sys
from pathlib import Path

from ragdesk.config.settings import settings
from ragdesk.container import configure_container, container
from ragdesk.core.exceptions import ConfigurationError
from ragdesk.core.services.chat_service import ChatService
from ragdesk.core.services.ingest_service import IngestService
from ragdesk.core.services.search_service import SearchService

logger = logging.getLogger(__name__)


def _print(data: dict) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_ask(args: argparse.Namespace) -> int:
    """Ask command - full answer pipeline."""
    configure_container(settings)
    chat = container.resolve(ChatService)
    payload = {"question": args.question, "sessionId": args.session}
    if args.top is not None:
        payload["top"] = args.top

    result = asyncio.run(chat.handle(payload))
    _print(result)
    return 0 if result.get("success") else 1


def cmd_search(args: argparse.Namespace) -> int:
    """Search command - raw hits, no answer."""
    configure_container(settings)
    search = container.resolve(SearchService)
    result = asyncio.run(search.search(args.query, top=args.top, mode=args.mode))
    _print(result)
    return 0 if result.get("success") else 1


def cmd_ingest(args: argparse.Namespace) -> int:
    """Ingest command - index files or folders."""
    configure_container(settings)
    ingest = container.resolve(IngestService)

    files: list[str] = []
    for raw in args.paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(str(p) for p in sorted(path.iterdir()) if ingest.loader.supports(p))
        else:
            files.append(str(path))

    if not files:
        logger.error("No supported files found")
        return 1

    try:
        report = asyncio.run(ingest.ingest_files(files))
    except ConfigurationError as e:
        _print({"success": False, "error": str(e)})
        return 1

    _print(report.to_dict())
    return 0 if report.success else 1


def cmd_ui(args: argparse.Namespace) -> int:
    """UI command - run the chat app."""
    app = Path(__file__).parent / "chainlit_app.py"
    logger.info("Starting Chainlit...")
    return subprocess.run(
        [
            sys.executable,
            "-m",
            "chainlit",
            "run",
            str(app),
            "--host",
            args.host,
            "--port",
            str(args.port),
        ]
    ).returncode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ragdesk", description="Document question answering with citations"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Answer a question from the indexed documents")
    ask.add_argument("question")
    ask.add_argument("--session", default="default", help="Conversation session id")
    ask.add_argument("--top", type=int, default=None, help="Result cap (1-8)")
    ask.set_defaults(func=cmd_ask)

    search = sub.add_parser("search", help="Search the index without answering")
    search.add_argument("query")
    search.add_argument("--top", type=int, default=5)
    search.add_argument("--mode", choices=["hybrid", "text"], default="hybrid")
    search.set_defaults(func=cmd_search)

    ingest = sub.add_parser("ingest", help="Parse, chunk, embed and upload files")
    ingest.add_argument("paths", nargs="+")
    ingest.set_defaults(func=cmd_ingest)

    ui = sub.add_parser("ui", help="Launch the chat UI")
    ui.add_argument("--host", default="0.0.0.0")
    ui.add_argument("--port", type=int, default=8000)
    ui.set_defaults(func=cmd_ui)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
