"""
speech.py — Fire-and-forget speech output.

The browser owns real speech synthesis. On the server side a Speaker is
anything with speak(utterance); nobody waits for it and nobody reads its
result. The default implementation writes the utterance to the log so
operators running headless still see the announcement.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Speaker(Protocol):
    def speak(self, utterance: str) -> None: ...


class LogSpeaker:
    """Speaker that announces through the application log."""

    def speak(self, utterance: str) -> None:
        logger.warning("ANNOUNCE: %s", utterance)


def speak_quietly(speaker: Speaker, utterance: str) -> None:
    """Call speaker.speak() and swallow anything it raises."""
    try:
        speaker.speak(utterance)
    except Exception as exc:
        logger.warning("Speech output failed: %s", exc)
