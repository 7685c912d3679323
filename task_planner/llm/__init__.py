# LLM package
from task_planner.llm.services import (
    DecisionService,
    ExtractionService,
    LLMTaskPlannerService,
    parse_agent_list,
)

__all__ = ["DecisionService", "ExtractionService", "LLMTaskPlannerService", "parse_agent_list"]
