"""Natural-language command endpoint."""

from fastapi import APIRouter, Depends

from ...core.logging_config import get_logger
from ..schemas.agent import AgentRequest, AgentResponse
from ..services.thesis_agent import ThesisAgent
from .deps import get_thesis_agent

router = APIRouter(prefix="/agent", tags=["agent"])
logger = get_logger(__name__)


@router.post("/", response_model=AgentResponse)
async def process_user_request(
    request: AgentRequest,
    agent: ThesisAgent = Depends(get_thesis_agent),
) -> AgentResponse:
    response = await agent.process_user_request(request)
    logger.info(
        "agent_request_completed",
        actions=len(response.actions_taken or []),
        degraded=response.degraded,
        reply_preview=response.response_message[:120],
    )
    return response
