#!/usr/bin/env python3
"""
=============================================================================
Task Planner - Command-line Runner
=============================================================================

Runs the multi-agent task planner workflow in-process and prints the
summary plus a table of every collected task item.

USAGE:
------
    uv run python scripts/plan_tasks.py "Fetch all tasks including TCI and issues"
    uv run python scripts/plan_tasks.py "Show me scan vulnerabilities" --app-id APP-002
    uv run python scripts/plan_tasks.py "Get TCI items" --store /tmp/tasks.csv --offline

Without LLM credentials (or with --offline) the workflow runs on its
keyword routing, regex extraction and template summary fallbacks.
=============================================================================
"""

import argparse
import asyncio

from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table
from rich.theme import Theme

from task_planner.config.logging_config import configure_logging
from task_planner.config.settings import get_settings
from task_planner.graph import WorkflowServices, run_workflow
from task_planner.graph.services import UnavailableLLMService
from task_planner.models import TaskItem
from task_planner.store import TaskItemStore

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red bold",
        "success": "green",
        "agent": "magenta",
    }
)
console = Console(theme=custom_theme)


def build_services(store_path: str | None, offline: bool) -> WorkflowServices:
    settings = get_settings()
    services = WorkflowServices.from_settings(settings)

    if store_path:
        services.store = TaskItemStore(store_path)

    if offline:
        offline_llm = UnavailableLLMService()
        services.decision = offline_llm
        services.extraction = offline_llm

    return services


def items_table(items: list[TaskItem]) -> Table:
    table = Table(title=f"Collected Task Items ({len(items)})", show_header=True)
    table.add_column("Type", style="cyan")
    table.add_column("SubType")
    table.add_column("Task")
    table.add_column("Due")
    table.add_column("Ticket", style="agent")
    table.add_column("Status", style="warning")
    for item in items:
        table.add_row(
            item.task_type,
            item.task_subtype,
            item.task,
            item.due_date,
            item.ticket or item.parent_ticket,
            item.status,
        )
    return table


def main():
    parser = argparse.ArgumentParser(
        description="Run the multi-agent task planner for one query",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uv run python scripts/plan_tasks.py "Fetch all tasks including TCI and issues" --app-id APP-003
  uv run python scripts/plan_tasks.py "Any open CVEs?" --offline
        """,
    )
    parser.add_argument("query", help="Natural-language request")
    parser.add_argument(
        "--app-id",
        default=None,
        help="Application identifier (default: DEFAULT_APP_ID setting)",
    )
    parser.add_argument("--store", default=None, help="Path of the CSV task table")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the LLM and use the deterministic fallbacks",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")

    args = parser.parse_args()

    configure_logging(args.log_level)
    app_id = args.app_id or get_settings().default_app_id
    services = build_services(args.store, args.offline)

    console.print(f"📋 Query: [info]{args.query}[/info]")
    console.print(f"   App ID: [info]{app_id}[/info]\n")

    try:
        result = asyncio.run(run_workflow(args.query, app_id, services=services))
    except KeyboardInterrupt:
        console.print("\n👋 Cancelled.", style="warning")
        raise SystemExit(130)

    agents = ", ".join(agent.value for agent in result.get("agents_to_invoke") or [])
    console.print(f"Agents invoked: [agent]{agents or 'none'}[/agent]\n")
    console.print(Markdown(result["final_summary"]))

    items = result.get("all_items") or []
    if items:
        console.print(items_table(items))
    console.print(f"\n✅ Total items: {len(items)} (stored in {services.store.path})", style="success")


if __name__ == "__main__":
    main()
