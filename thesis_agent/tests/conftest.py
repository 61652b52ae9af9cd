import pytest

from thesis_agent.core.config import AgentSettings
from thesis_agent.tests.fakes import SpyStore


@pytest.fixture
def settings() -> AgentSettings:
    return AgentSettings(_env_file=None, llm_api_key=None, default_user_id=None)


@pytest.fixture
def store() -> SpyStore:
    return SpyStore()
