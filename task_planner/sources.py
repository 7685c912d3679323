"""
=============================================================================
Document Sources
=============================================================================

Each agent fetches one raw HTML document for an application id.

- FixtureDocumentSource: built-in sample tables, never fails
- HttpDocumentSource: GETs a URL template, retries transient transport
  errors, raises FetchError on anything it cannot recover from

FetchError is fatal for the workflow run.
=============================================================================
"""

import logging
from typing import Protocol

import httpx
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from task_planner.errors import FetchError
from task_planner.models import AgentKind

logger = logging.getLogger(__name__)


class DocumentSource(Protocol):
    async def fetch(self, app_id: str) -> str: ...


# =============================================================================
# Built-in fixtures
# =============================================================================

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>{title} for {app_id}</title></head>
<body>
    <h1>{title} - {app_id}</h1>
    <table border="1">
        <thead>
            <tr>
{header}
            </tr>
        </thead>
        <tbody>
{rows}
        </tbody>
    </table>
</body>
</html>
"""

_FIXTURES: dict[AgentKind, dict] = {
    AgentKind.COMPLIANCE: {
        "title": "Technical Compliance Items",
        "header": ("Task Type", "Task SubType", "Task", "Due Date", "Parent JIRA"),
        "rows": [
            ("Security", "Vulnerability", "Update OpenSSL to v3.0", "2026-03-15", "SEC-1234"),
            ("Compliance", "Audit", "Complete SOX audit requirements", "2026-02-28", "AUDIT-567"),
            ("Security", "Certificate", "Renew SSL certificate", "2026-04-01", "CERT-890"),
            ("Performance", "Optimization", "Optimize database queries", "2026-03-20", "PERF-111"),
        ],
    },
    AgentKind.ISSUE: {
        "title": "iTracker Issues",
        "header": (
            "Task Type",
            "Task SubType",
            "Task",
            "Due Date",
            "JIRA",
            "Status",
            "More Details",
        ),
        "rows": [
            (
                "Bug",
                "Critical",
                "Fix login timeout issue",
                "2026-02-20",
                "BUG-2001",
                "In Progress",
                "Users experiencing 30s timeout on login",
            ),
            (
                "Feature",
                "Enhancement",
                "Add MFA support",
                "2026-03-10",
                "FEAT-3002",
                "Open",
                "Multi-factor authentication requirement",
            ),
            (
                "Bug",
                "Medium",
                "Memory leak in report generation",
                "2026-02-25",
                "BUG-2003",
                "Open",
                "Memory increases over time when generating reports",
            ),
            (
                "Task",
                "Documentation",
                "Update API documentation",
                "2026-03-05",
                "DOC-4001",
                "Done",
                "Swagger docs need updating for v2 APIs",
            ),
        ],
    },
    AgentKind.SCAN: {
        "title": "Security Scan Issues",
        "header": (
            "Task Type",
            "Task SubType",
            "Task",
            "Due Date",
            "JIRA",
            "Status",
            "More Details",
        ),
        "rows": [
            (
                "Security Scan",
                "SQL Injection",
                "Fix SQL injection in login module",
                "2026-02-15",
                "SCAN-1001",
                "Critical",
                "User input not sanitized in auth/login.ts:45",
            ),
            (
                "Security Scan",
                "XSS",
                "Remediate XSS vulnerability in comments",
                "2026-02-20",
                "SCAN-1002",
                "High",
                "Reflected XSS in comments/display.ts:112",
            ),
            (
                "Security Scan",
                "Dependency",
                "Upgrade vulnerable lodash package",
                "2026-02-25",
                "SCAN-1003",
                "Medium",
                "CVE-2021-23337 affects lodash &lt;4.17.21",
            ),
            (
                "Security Scan",
                "Secrets",
                "Remove hardcoded API keys",
                "2026-02-18",
                "SCAN-1004",
                "Critical",
                "API keys found in config/secrets.ts",
            ),
            (
                "Security Scan",
                "CSRF",
                "Implement CSRF tokens for forms",
                "2026-03-01",
                "SCAN-1005",
                "High",
                "Missing CSRF protection on POST endpoints",
            ),
        ],
    },
}


def render_fixture(source: AgentKind, app_id: str) -> str:
    """Render the sample HTML table for a source."""
    fixture = _FIXTURES[source]
    header = "\n".join(f"                <th>{name}</th>" for name in fixture["header"])
    rows = "\n".join(
        "            <tr>\n"
        + "\n".join(f"                <td>{cell}</td>" for cell in row)
        + "\n            </tr>"
        for row in fixture["rows"]
    )
    return _PAGE_TEMPLATE.format(title=fixture["title"], app_id=app_id, header=header, rows=rows)


class FixtureDocumentSource:
    """Serves the built-in sample table for one source."""

    def __init__(self, source: AgentKind):
        self.source = source

    async def fetch(self, app_id: str) -> str:
        logger.info(f"[FETCH] Serving {self.source} fixture for app {app_id}")
        return render_fixture(self.source, app_id)


# =============================================================================
# HTTP source
# =============================================================================

_TRANSIENT_ERRORS = (httpx.ConnectError, httpx.TimeoutException, httpx.RemoteProtocolError)


class HttpDocumentSource:
    """
    Fetches the raw document over HTTP.

    url_template must contain an {app_id} placeholder. Transport errors are
    retried (3 attempts, exponential backoff); HTTP error statuses are not.
    """

    def __init__(
        self,
        source: AgentKind,
        url_template: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.source = source
        self.url_template = url_template
        self.timeout = timeout
        self._transport = transport

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    )
    async def _get(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.get(url)

    async def fetch(self, app_id: str) -> str:
        url = self.url_template.format(app_id=app_id)
        logger.info(f"[FETCH] GET {url} ({self.source})")

        try:
            response = await self._get(url)
        except RetryError as e:
            raise FetchError(f"{self.source} source unreachable at {url}: {e}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"{self.source} source failed at {url}: {e}") from e

        if response.is_error:
            raise FetchError(
                f"{self.source} source returned HTTP {response.status_code} for {url}"
            )

        return response.text
