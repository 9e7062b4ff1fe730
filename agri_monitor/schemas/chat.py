from typing import Any, Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage]
    language: str = "english"


class ChatResponse(BaseModel):
    message: str
    usage: dict[str, Any] | None = None
