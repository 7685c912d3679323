"""
Deterministic planning helpers.

Keyword routing and the template summary used when the decision service is
unavailable, plus the per-agent report renderer.
"""

from task_planner.models import AgentKind, TaskItem
from task_planner.store.csv_store import to_csv_text

AGENT_KEYWORDS: dict[AgentKind, tuple[str, ...]] = {
    AgentKind.COMPLIANCE: ("tci", "compliance", "technical compliance", "certificate"),
    AgentKind.ISSUE: ("itracker", "tracker", "issue", "bug", "feature", "task"),
    AgentKind.SCAN: (
        "scan",
        "security scan",
        "vulnerability",
        "vulnerabilities",
        "checkmarx",
        "sast",
        "dast",
        "cve",
    ),
}

ALL_KEYWORDS: tuple[str, ...] = ("all", "everything", "complete", "full")

REPORT_NOUNS: dict[AgentKind, str] = {
    AgentKind.COMPLIANCE: "compliance items",
    AgentKind.ISSUE: "issues",
    AgentKind.SCAN: "security scan issues",
}


def fallback_agents_for_query(query: str) -> list[AgentKind]:
    """
    Keyword routing. Never returns an empty list: an "all" keyword or no
    match at all selects every agent.
    """
    lowered = query.lower()

    if any(keyword in lowered for keyword in ALL_KEYWORDS):
        return AgentKind.priority_order()

    matched = [
        agent
        for agent in AgentKind.priority_order()
        if any(keyword in lowered for keyword in AGENT_KEYWORDS[agent])
    ]
    return matched or AgentKind.priority_order()


def render_report(source: AgentKind, items: list[TaskItem]) -> str:
    """Markdown fragment: one count line plus the items as a csv block."""
    return (
        f"**{source.label} Agent:** Found {len(items)} {REPORT_NOUNS[source]}.\n\n"
        f"```csv\n{to_csv_text(items)}\n```"
    )


def build_fallback_summary(
    user_query: str,
    app_id: str,
    agents: list[AgentKind],
    fragments: dict[AgentKind, str],
    total_items: int,
    store_location: str | None = None,
) -> str:
    """Fixed-template summary used when the decision service fails."""
    parts = [
        "## Task Planner Summary\n",
        f"**Query:** {user_query}",
        f"**App ID:** {app_id}",
        f"**Agents invoked:** {', '.join(agent.value for agent in agents) or 'none'}\n",
    ]

    for agent in AgentKind.priority_order():
        fragment = fragments.get(agent)
        if fragment:
            parts.append(f"### {agent.label} Results")
            parts.append(fragment)

    parts.append(f"\n**Total items:** {total_items}")
    if store_location:
        parts.append(f"All items have been stored to `{store_location}`")

    return "\n".join(parts)
