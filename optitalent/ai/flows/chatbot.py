"""HR assistant chatbot flow."""

from __future__ import annotations

from typing import Literal, Sequence

from pydantic import BaseModel, Field

from optitalent.ai.client import ChatTurn
from optitalent.ai.flow import Flow
from optitalent.common.exceptions import AIServiceError
from optitalent.config import settings


class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    content: str


class ChatbotInput(BaseModel):
    history: list[ChatMessage] = Field(default_factory=list)
    query: str = Field(..., min_length=1)


class ChatbotOutput(BaseModel):
    response: str


class ChatbotFlow(Flow[ChatbotInput, ChatbotOutput]):
    """Free-text reply; the only flow not in JSON response mode."""

    name = "hr_chatbot"
    input_model = ChatbotInput
    output_model = ChatbotOutput
    json_mode = False
    system_prompt = (
        "You are a friendly and helpful HR assistant chatbot for a company called OptiTalent.\n"
        "Your goal is to answer employee questions about company policies, benefits, "
        "leave requests, and other HR-related topics.\n"
        "Be concise and clear in your answers.\n"
        "Use the conversation history to maintain context.\n"
        "If you don't know the answer to a question, politely state that you don't "
        "have that information and suggest contacting the HR department directly at "
        f"{settings.HR_CONTACT_EMAIL}."
    )

    def build_prompt(self, data: ChatbotInput) -> str:
        return data.query

    def history(self, data: ChatbotInput) -> Sequence[ChatTurn]:
        return tuple(ChatTurn(role=m.role, text=m.content) for m in data.history)

    def parse(self, text: str) -> ChatbotOutput:
        reply = text.strip()
        if not reply:
            raise AIServiceError(self.name, "empty reply")
        return ChatbotOutput(response=reply)
