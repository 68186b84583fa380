"""
Financial Assistant CLI

Usage:
    fin-assistant ingest statement.csv --context my_transactions
    fin-assistant analyze my_transactions --category Coffee --period "last week"
    fin-assistant tax 1500000 --regime new --age 30
    fin-assistant contexts
    fin-assistant chat                  # interactive, needs GOOGLE_AI_API_KEY
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from fin_assistant.audit import configure_logging, create_correlation_id
from fin_assistant.capabilities import FinancialCapabilities
from fin_assistant.config import get_settings
from fin_assistant.models.results import ToolResult
from fin_assistant.orchestrator import AssistantFlow, create_app_components


EXIT_OK = 0
EXIT_TOOL_ERROR = 1
EXIT_NOT_CONFIGURED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fin-assistant",
        description="Ask questions about your transactions and estimate income tax.",
    )
    parser.add_argument(
        "--context-dir",
        help="Directory holding stored contexts (default: <data_dir>/<context_dir_name> from settings)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full tool result as JSON instead of the message",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    
    ingest = sub.add_parser("ingest", help="Store a CSV statement as a named context")
    ingest.add_argument("csv_file_path")
    ingest.add_argument("--context", dest="context_name")
    
    analyze = sub.add_parser("analyze", help="Filter and aggregate a stored context")
    analyze.add_argument("context_name")
    analyze.add_argument("--category")
    analyze.add_argument("--period", dest="time_period",
                         help="'last week', 'last month', 'this month', 'this year' or 'YYYY-MM-DD to YYYY-MM-DD'")
    analyze.add_argument("--type", dest="transaction_type", choices=["Expense", "Income"])
    analyze.add_argument("--aggregation", choices=["sum", "count", "average"], default="sum")
    analyze.add_argument("--start", dest="start_date", help="YYYY-MM-DD (with --end)")
    analyze.add_argument("--end", dest="end_date", help="YYYY-MM-DD (with --start)")
    
    tax = sub.add_parser("tax", help="Estimate income tax (India, FY 2024-25)")
    tax.add_argument("income_amount", type=float)
    tax.add_argument("--age", type=int)
    tax.add_argument("--regime", dest="tax_regime", choices=["old", "new"])
    
    sub.add_parser("contexts", help="List stored contexts")
    sub.add_parser("chat", help="Interactive question answering (needs GOOGLE_AI_API_KEY)")
    
    return parser


def _print_result(result: ToolResult, as_json: bool) -> int:
    if as_json:
        print(json.dumps(result.to_payload(), indent=2, ensure_ascii=False))
    elif result.success:
        print(result.message)
    else:
        print(f"Error: {result.message}", file=sys.stderr)
        if result.details:
            print(result.details, file=sys.stderr)
    return EXIT_OK if result.success else EXIT_TOOL_ERROR


def _arguments(args: argparse.Namespace, *names: str) -> dict:
    """Collect the given attributes, dropping the ones not supplied."""
    return {
        name: getattr(args, name)
        for name in names
        if getattr(args, name) is not None
    }


async def chat(
    capabilities: FinancialCapabilities,
    flow: AssistantFlow,
    ask=input,
) -> None:
    """
    Interactive session: ingest a CSV first, then answer questions until 'exit'.
    
    `ask` is the prompt function (input() by default) so tests can script it.
    """
    print("\n--- Financial Assistant CLI ---")
    
    while True:
        csv_file_path = ask("Enter the path to your transaction CSV file (e.g., 'transactions.csv'): ").strip()
        if not Path(csv_file_path).expanduser().is_file():
            print("File not found. Please enter a valid path.")
            continue
        context_name = ask(
            "Enter a name for this transaction context (e.g., 'my_transactions'): "
        ).strip() or None
        result = await capabilities.ingest_csv(csvFilePath=csv_file_path, contextName=context_name)
        print(result.message)
        if result.success:
            break
        print("Failed to process CSV. Please try again.")
    
    print("\nCSV processed. You can now ask questions about your financial data.")
    print(f"Try questions like: 'How much did I spend on coffee last week from {result.context_name}?'")
    print("Or: 'What is my tax slab if my income is 1500000 under the new regime?'")
    print("Type 'exit' to quit.")
    
    while True:
        question = ask("\nYour query: ").strip()
        if question.lower() == "exit":
            break
        if not question:
            continue
        answer, _, _ = await flow.answer_question(question, correlation_id=create_correlation_id())
        print(f"Assistant: {answer}")
    
    print("Exiting Financial Assistant CLI. Goodbye!")


async def run(args: argparse.Namespace) -> int:
    capabilities, flow = create_app_components(
        use_ai=args.command == "chat",
        context_dir=args.context_dir,
    )
    
    if args.command == "ingest":
        result = await capabilities.ingest_csv(**_arguments(args, "csv_file_path", "context_name"))
        return _print_result(result, args.json)
    
    if args.command == "analyze":
        result = await capabilities.analyze_transactions(**_arguments(
            args,
            "context_name", "category", "time_period", "transaction_type",
            "aggregation", "start_date", "end_date",
        ))
        return _print_result(result, args.json)
    
    if args.command == "tax":
        result = await capabilities.calculate_tax(
            **_arguments(args, "income_amount", "age", "tax_regime")
        )
        return _print_result(result, args.json)
    
    if args.command == "contexts":
        names = await capabilities.list_contexts()
        print("\n".join(names) if names else "No contexts stored yet.")
        return EXIT_OK
    
    if flow is None:
        print(
            "The AI assistant is not configured. Set GOOGLE_AI_API_KEY "
            "(environment or .env) and try again.",
            file=sys.stderr,
        )
        return EXIT_NOT_CONFIGURED
    await chat(capabilities, flow)
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().app.log_level)
    try:
        return asyncio.run(run(args))
    except (KeyboardInterrupt, EOFError):
        print("\nExiting Financial Assistant CLI. Goodbye!")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
