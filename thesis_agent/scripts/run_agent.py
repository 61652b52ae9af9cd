"""Run the ThesisFlow agent service locally.

Install the project first (``pip install -e .``); settings come from the
environment or a ``.env`` file, see ``thesis_agent.core.config``.
"""

from __future__ import annotations

import uvicorn

from thesis_agent.core.config import get_settings


def main() -> None:
    settings = get_settings()
    reload_enabled = settings.app_env == "development"
    if reload_enabled:
        uvicorn.run(
            "thesis_agent.llm.main:app",
            host=settings.agent_host,
            port=settings.agent_port,
            reload=True,
        )
    else:
        from thesis_agent.llm.main import app

        uvicorn.run(
            app,
            host=settings.agent_host,
            port=settings.agent_port,
            reload=False,
        )


if __name__ == "__main__":
    main()
