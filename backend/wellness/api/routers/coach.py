from __future__ import annotations
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends

from wellness.api.deps import get_storage
from wellness.models import User
from wellness.schemas import (
    ChatMessage, CoachChatReq, CoachChatResp, CoachTextResp, JournalReflectionReq, MoodSuggestionReq,
)
from wellness.services import coach_client
from wellness.services.aggregation import to_millis
from wellness.services.auth_service import get_current_user
from wellness.services.dashboard_storage import DashboardStorage

router = APIRouter(prefix="/coach", tags=["coach"])

@router.get("/history", response_model=List[ChatMessage])
async def get_history(storage: DashboardStorage = Depends(get_storage)):
    return await storage.get_chat_history()

@router.post("/chat", response_model=CoachChatResp)
async def chat(req: CoachChatReq, storage: DashboardStorage = Depends(get_storage)):
    await storage.record_event("AIChat", "sendMessage")

    # 1) earlier conversation, used as prompt context
    history = await storage.get_chat_history()

    # 2) user message
    now_ms = to_millis(datetime.now())
    user_msg = ChatMessage(id=str(now_ms), content=req.message.strip(), sender="user", timestamp=now_ms)

    # 3) LLM reply, fallback text on failure
    reply_text = await coach_client.coach_reply(user_msg.content, [m.content for m in history])
    ai_msg = ChatMessage(id=str(now_ms + 1), content=reply_text, sender="ai", timestamp=to_millis(datetime.now()))

    # 4) persist both messages
    await storage.append_chat_messages(user_msg, ai_msg)
    return CoachChatResp(reply=ai_msg, history=[*history, user_msg, ai_msg])

@router.post("/journal-reflection", response_model=CoachTextResp)
async def journal_reflection(req: JournalReflectionReq, current_user: User = Depends(get_current_user)):
    return CoachTextResp(text=await coach_client.journal_reflection(req.content))

@router.post("/mood-suggestion", response_model=CoachTextResp)
async def mood_suggestion(req: MoodSuggestionReq, current_user: User = Depends(get_current_user)):
    return CoachTextResp(text=await coach_client.mood_suggestion(req.mood_label))
