from forexai.agent_runtime.agents.catalog import (
    ANALYST,
    ASSISTANT,
    EXECUTOR,
    PLANNER,
    AgentCatalog,
    build_browser_tool,
    build_catalog,
)

__all__ = ["ANALYST", "ASSISTANT", "EXECUTOR", "PLANNER", "AgentCatalog", "build_browser_tool", "build_catalog"]
