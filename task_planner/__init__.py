"""Multi-agent task planner: routes a query to data-collection agents and summarizes their findings."""

__version__ = "0.1.0"
