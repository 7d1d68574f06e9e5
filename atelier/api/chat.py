"""Chat widget endpoints"""

from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.database import get_db
from atelier.schemas.chat import (
    ChatSessionCreate,
    ChatSessionResponse,
    ChatMessageCreate,
    ChatMessageResponse,
)
from atelier.services.chat_service import ChatService, CompletionClient, get_completion_client
from atelier.api.errors import NotFoundError

router = APIRouter(prefix="/api/chat", tags=["Chat"])


async def get_chat_session_or_404(service: ChatService, session_id: str):
    session = await service.get_session(session_id)
    if not session:
        raise NotFoundError("Chat session not found")
    return session


@router.post("/sessions", response_model=ChatSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_chat(
    data: Optional[ChatSessionCreate] = None,
    db: AsyncSession = Depends(get_db),
):
    """Start a chat session; visitor details are optional"""
    data = data or ChatSessionCreate()
    session = await ChatService(db).create_session(
        name=data.name,
        email=data.email,
        company=data.company,
    )
    return ChatSessionResponse.model_validate(session)


@router.get("/sessions/{session_id}/messages", response_model=List[ChatMessageResponse])
async def get_chat_messages(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """The latest messages of a chat session, oldest first"""
    service = ChatService(db)
    await get_chat_session_or_404(service, session_id)
    messages = await service.get_messages(session_id)
    return [ChatMessageResponse.model_validate(m) for m in messages]


@router.post("/sessions/{session_id}/messages", response_model=ChatMessageResponse)
async def send_chat_message(
    session_id: str,
    data: ChatMessageCreate,
    db: AsyncSession = Depends(get_db),
    completion: CompletionClient = Depends(get_completion_client),
):
    """
    Send a visitor message and get the assistant's reply

    Raises:
        NotFoundError: If the chat session does not exist
        UpstreamError: If the assistant is unavailable
    """
    service = ChatService(db)
    session = await get_chat_session_or_404(service, session_id)
    reply = await service.reply(session, data.content, completion)
    return ChatMessageResponse.model_validate(reply)
