"""
Schemas for the inbound conversation.

The caller sends its own history with every request; nothing here is
persisted between requests.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationTurn(BaseModel):
    """One chat message, oldest first within a conversation."""
    role: Role
    content: str = ""

    model_config = ConfigDict(use_enum_values=True)


class AskRequest(BaseModel):
    messages: list[ConversationTurn] = Field(default_factory=list)
