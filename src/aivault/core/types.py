"""Shared type aliases for the core and domain layers."""
from typing import Callable, Literal

RoomId = Literal["space", "food", "ethics", "green", "cyber"]
ScreenName = Literal["title", "settings", "room-select", "room", "meta", "end"]
HintSource = Literal["ai", "fallback"]
AIProvider = Literal["openai", "anthropic"]
MetaInputType = Literal["text", "number", "choice", "slider"]

Clock = Callable[[], float]

__all__ = ["AIProvider", "Clock", "HintSource", "MetaInputType", "RoomId", "ScreenName"]
