"""
main.py
CLI entry point for the Maritime Operations Assistant.

Usage:
  python main.py demo
  python main.py ingest --pdf /path/to/charter_party.pdf
  python main.py api
"""
import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path when running directly
sys.path.insert(0, str(Path(__file__).parent))

# ── Sample chat questions, one per routing path ───────────────────────────────
DEMO_QUERIES = [
    "Calculate laytime: vessel arrived at 14:30 and completed loading at 08:15 the next day",
    "What's the distance from Rotterdam to Singapore?",
    "What's the weather in Hamburg?",
    "Interpret this clause: 'Weather Working Days means days when weather permits normal cargo operations'",
    "Calculate laytime for my vessel",
    "What does SOLAS require for lifeboat drills?",
]


# Demo mode

def run_demo() -> None:
    from rich import box
    from rich.console import Console
    from rich.table import Table

    from api.services import Services
    from query_processor.models import Query

    console = Console()
    console.print("\n[bold blue]═══ MARITIME OPERATIONS ASSISTANT — DEMO ═══[/bold blue]\n")

    services = Services.build()
    ai_status = "[green]configured[/green]" if services.registry.configured else "[yellow]not configured[/yellow]"
    console.print(f"  [bold]LLM provider:[/bold] {ai_status}\n")

    table = Table(title="Query routing", box=box.ROUNDED, show_lines=True)
    table.add_column("Query",      style="cyan", width=40)
    table.add_column("Category",   width=16)
    table.add_column("Confidence", justify="right", width=10)
    table.add_column("Source",     width=9)
    table.add_column("Reply",      style="green", width=60)

    for text in DEMO_QUERIES:
        classification = services.classifier.classify(text)
        reply = services.dispatcher.respond(Query(raw_text=text), classification)
        first_lines = "\n".join(reply.splitlines()[:6])
        table.add_row(
            text,
            classification.category.value,
            f"{classification.confidence:.0%}",
            classification.source,
            first_lines,
        )

    console.print(table)
    console.print()


# Ingest mode

def run_ingest(pdf_path: str) -> None:
    from api.services import Services
    services = Services.build()
    summary  = services.pipeline.run(pdf_path)
    print(json.dumps(summary, indent=2))


# ── API mode ──────────────────────────────────────────────────────────────────

def run_api(reload: bool = False) -> None:
    import uvicorn
    from config.settings import settings
    from monitoring import start_metrics_server
    start_metrics_server(settings.metrics_port)
    uvicorn.run(
        "api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Maritime Operations Assistant")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("demo", help="Run sample queries through the chat pipeline")

    ingest = sub.add_parser("ingest", help="Ingest a PDF into the knowledge base")
    ingest.add_argument("--pdf", required=True, help="Path to the PDF document")

    api = sub.add_parser("api", help="Run the HTTP API")
    api.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    args = parser.parse_args(argv)
    if args.command == "demo":
        run_demo()
    elif args.command == "ingest":
        run_ingest(args.pdf)
    else:
        run_api(reload=args.reload)


if __name__ == "__main__":
    main()
