"""
Renderer contract.

Concrete renderers (canvas bars, WebGL, LED strips, ...) live outside the
core and consume FrameData through this interface.
"""

import abc
from enum import Enum
from typing import Any


class AgentState(str, Enum):
    """Conversation state of the voice agent being visualized."""

    CONNECTING = "connecting"
    INITIALIZING = "initializing"
    LISTENING = "listening"
    THINKING = "thinking"
    SPEAKING = "speaking"


class Renderer(abc.ABC):
    """Base class for visual outputs driven by a VoicePipeline."""

    @abc.abstractmethod
    def mount(self, container: Any) -> None:
        """Attach to a drawing surface."""

    @abc.abstractmethod
    def draw(self, frame) -> None:
        """Draw one FrameData."""

    def on_state_change(self, state: AgentState) -> None:
        """React to an agent state change. No-op by default."""

    @abc.abstractmethod
    def dispose(self) -> None:
        """Release the drawing surface."""
