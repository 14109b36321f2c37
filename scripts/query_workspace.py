"""
Analyse a workspace and answer questions about it from the command line.

    python scripts/query_workspace.py <workspace> "who calls parse_config"
    python scripts/query_workspace.py <workspace>             # interactive
    python scripts/query_workspace.py <workspace> --snapshot  # write a snapshot

Exit status is 1 when the workspace cannot be analysed.
"""

import argparse
import asyncio
import json
import os
import sys

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cartographer.ai.explainer import create_explainer
from cartographer.builder import WorkspaceNotFoundError, build_analysis_context
from cartographer.config import AnalysisConfig
from cartographer.snapshot import save_snapshot


def _print_result(result, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    print(f"\nIntent: {result.intent}")
    if result.error:
        print(f"Error: {result.error}")
    if result.files:
        print(f"Files ({len(result.files)}):")
        for file_path in result.files[:20]:
            print(f"  - {file_path}")
    if result.functions:
        print(f"Functions ({len(result.functions)}):")
        for function_id in result.functions[:20]:
            print(f"  - {function_id}")
    if result.context_preview:
        print(f"\n{result.context_preview}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Query the structure of a codebase.")
    parser.add_argument("workspace", help="Path of the workspace to analyse")
    parser.add_argument("question", nargs="*", help="Question to ask (interactive if omitted)")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--snapshot", action="store_true", help="Write a graph snapshot and exit")
    parser.add_argument("--no-ai", action="store_true", help="Do not use an LLM explainer")
    args = parser.parse_args(argv)

    print("--- Cartographer ---")
    config = AnalysisConfig.from_env()
    config.workspace_path = os.path.abspath(args.workspace)
    explainer = create_explainer(disable_ai=args.no_ai or config.disable_ai)

    try:
        context = asyncio.run(build_analysis_context(config.workspace_path, explainer, config))
    except WorkspaceNotFoundError as e:
        print(f"Error: {e}")
        return 1

    if args.snapshot:
        path = save_snapshot(context.graph, config.resolved_snapshot_dir, context.knowledge)
        print(f"Snapshot written to {path}")
        return 0

    if args.question:
        _print_result(context.orchestrator.run_query(" ".join(args.question)), args.json)
        return 0

    print("Ask a question (empty line to quit).")
    while True:
        try:
            question = input("> ").strip()
        except EOFError:
            break
        if not question:
            break
        _print_result(context.orchestrator.run_query(question), args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
