"""
API route for the EduGuide AI chat assistant
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..services.llm_service import LLMService, LLMServiceError, get_llm_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


@router.post("/ask")
async def ask(request: ChatRequest, llm: LLMService = Depends(get_llm_service)):
    """Forward a question to Gemini and return its reply"""
    try:
        reply = await llm.ask(request.message)
        return {"success": True, "reply": reply}

    except LLMServiceError as e:
        logger.error(f"Gemini error: {e}")
        return JSONResponse(
            status_code=503 if e.status_code == 503 else 500,
            content={"success": False, "reply": "AI server error"}
        )
