"""
Main Application Entry Point

Provides CLI interface for the RFP Assistant.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rfp_assistant.assistant import RFPAssistant
from rfp_assistant.config import Config


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(levelname)s] %(message)s",
    )


def parse_meta(pairs):
    """Turn ["key=value", ...] into a dict."""
    meta = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"Invalid --meta value '{pair}', expected key=value")
        key, value = pair.split("=", 1)
        meta[key.strip()] = value.strip()
    return meta


def ingest(args, assistant: RFPAssistant):
    """Ingest an RFP workbook into the vector index."""
    path = Path(args.file)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    metadata = parse_meta(args.meta)
    metadata["rfp_id"] = args.rfp_id

    print(f"📂 Reading: {path}")
    result = assistant.process_excel_rfp(path.read_bytes(), metadata)

    stats = result.stats
    print(f"\n{'='*50}")
    print("✅ COMPLETE!" if not result.mock_mode else "⚠️  COMPLETE (mock mode, nothing stored)")
    print(f"📄 Sheets: {', '.join(result.sheets)}")
    print(f"📊 Total: {stats.total_items} | Processed: {stats.processed} | "
          f"Skipped: {stats.skipped} | Errors: {stats.errors}")
    print(f"{'='*50}")


def query(args, assistant: RFPAssistant):
    """Ask a question against the ingested RFP data."""
    filters = {}
    if args.category:
        filters["category"] = args.category
    if args.sheet:
        filters["sheetName"] = args.sheet

    result = assistant.query_rfp_data(args.question, filters)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    print("\n" + "="*50)
    print("[ANSWER]")
    print("="*50)
    print(result.answer)
    if result.sources:
        print("\n[SOURCES]")
        for idx, source in enumerate(result.sources, 1):
            print(f"  {idx}. {source.sheet_name} / {source.category} "
                  f"(similarity {source.similarity:.3f})")
    if result.error:
        print(f"\n[ERROR] {result.error}", file=sys.stderr)


def health(args, assistant: RFPAssistant):
    """Report the store strategy and connectivity."""
    print(f"Store strategy: {assistant.store.strategy}")
    print(f"Store status:   {assistant.availability.value}")
    if assistant.mock_mode:
        sys.exit(2)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="RFP Assistant - spreadsheet RFP ingestion and question answering"
    )
    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--settings", help="Path to YAML settings file")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    ingest_parser = subparsers.add_parser("ingest", help="Ingest an RFP workbook (.xlsx)")
    ingest_parser.add_argument("file", help="Path to the .xlsx file")
    ingest_parser.add_argument("--rfp-id", required=True, help="Identifier of the RFP")
    ingest_parser.add_argument("--meta", action="append", metavar="KEY=VALUE",
                               help="Extra metadata stored with every record (repeatable)")

    query_parser = subparsers.add_parser("query", help="Ask a question")
    query_parser.add_argument("question", help="Question text")
    query_parser.add_argument("--category", help="Only search this category")
    query_parser.add_argument("--sheet", help="Only search this sheet")
    query_parser.add_argument("--json", action="store_true", help="Print the raw result as JSON")

    subparsers.add_parser("health", help="Check vector store connectivity")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = Config(env_file=args.env_file, settings_file=args.settings)
        setup_logging(config.log_level)
        assistant = RFPAssistant.from_config(config)

        if args.command == "ingest":
            ingest(args, assistant)
        elif args.command == "query":
            query(args, assistant)
        elif args.command == "health":
            health(args, assistant)
    except Exception as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
