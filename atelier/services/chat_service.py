"""Chat widget conversations and the completion client behind them"""

import logging
import secrets
from datetime import datetime
from typing import List, Optional
from anthropic import AsyncAnthropic, APIError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.api.errors import UpstreamError
from atelier.config import settings
from atelier.models import ChatMessage, ChatSession

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are the website assistant of Digitaal Atelier, a web development agency. "
    "Answer questions about our services (websites, web applications, e-commerce, "
    "dashboards and mobile apps), our process and pricing in a friendly, concise way. "
    "Reply in the language the visitor writes in. When a visitor wants a quote, "
    "ask them to use the contact form or to create a project in the client dashboard."
)


class CompletionClient:
    """Text completion for the chat widget"""

    def __init__(self):
        self.model = settings.chat_model
        self.max_tokens = settings.chat_max_tokens
        self.client = (
            AsyncAnthropic(api_key=settings.anthropic_api_key)
            if settings.anthropic_api_key
            else None
        )

    async def complete(self, history: List[dict]) -> str:
        """
        Generate the assistant's next reply

        Args:
            history: Conversation so far as role/content dicts, oldest first

        Returns:
            Reply text

        Raises:
            UpstreamError: If the assistant is unavailable
        """
        if self.client is None:
            raise UpstreamError("The chat assistant is not available right now")

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=history,
            )
        except APIError as e:
            logger.error(f"Chat completion failed: {e}")
            raise UpstreamError("The chat assistant could not answer, please try again")

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )


def get_completion_client() -> CompletionClient:
    """FastAPI dependency returning the completion client"""
    return CompletionClient()


class ChatService:
    """Stores chat sessions and messages"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_session(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        company: Optional[str] = None,
    ) -> ChatSession:
        session = ChatSession(
            session_id=secrets.token_urlsafe(24),
            name=name,
            email=email,
            company=company,
            preferences={},
            last_activity=datetime.utcnow(),
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        return session

    async def get_session(self, session_id: str) -> Optional[ChatSession]:
        result = await self.db.execute(
            select(ChatSession).where(ChatSession.session_id == session_id)
        )
        return result.scalar_one_or_none()

    async def get_messages(self, session_id: str, limit: Optional[int] = None) -> List[ChatMessage]:
        """The latest messages of a session in chronological order"""
        limit = limit or settings.chat_history_limit
        result = await self.db.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        messages = list(result.scalars().all())
        messages.reverse()
        return messages

    async def add_message(self, session: ChatSession, role: str, content: str) -> ChatMessage:
        message = ChatMessage(session_id=session.session_id, role=role, content=content)
        session.last_activity = datetime.utcnow()
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message

    async def reply(
        self,
        session: ChatSession,
        content: str,
        completion: CompletionClient,
    ) -> ChatMessage:
        """
        Store a visitor message, ask the assistant for an answer and store it

        The visitor's message is kept even when the assistant fails.
        """
        await self.add_message(session, "user", content)

        history = [
            {"role": message.role, "content": message.content}
            for message in await self.get_messages(session.session_id)
        ]
        # The conversation sent to the assistant must open with a visitor turn
        while history and history[0]["role"] != "user":
            history.pop(0)

        answer = await completion.complete(history)
        return await self.add_message(session, "assistant", answer)
