"""POST /api/v1/ask — forward an analytics question to the LLM."""

from fastapi import APIRouter, Depends

from backend.app.models.llm import AskRequest, AskResponse, LLMFailure
from backend.app.services.dashboard import DashboardService, get_dashboard_service
from backend.app.services.qa_forwarder import (
    FORWARDER_FAILURE_MESSAGE,
    LLMProvider,
    ask,
    get_provider,
)

router = APIRouter()


def get_llm_provider() -> LLMProvider:
    return get_provider()


@router.post("/api/v1/ask", response_model=AskResponse)
def ask_question(
    body: AskRequest,
    service: DashboardService = Depends(get_dashboard_service),
    provider: LLMProvider = Depends(get_llm_provider),
) -> AskResponse:
    """Answer *question* using the current snapshot summary and recent posts.

    Provider failures come back as an ``error`` result with a fixed
    user-facing message; the category is preserved for the UI.
    """
    snapshot = service.snapshot()
    recent = [scored.post for scored in snapshot.posts]
    result, metadata = ask(
        body.question,
        snapshot.aggregates.summary(),
        recent,
        provider=provider,
    )
    if isinstance(result, LLMFailure):
        result = result.model_copy(update={"user_message": FORWARDER_FAILURE_MESSAGE})
    return AskResponse(result=result, prompt_metadata=metadata)
