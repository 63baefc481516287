"""Speech recognition engine abstractions and implementations."""

from .engine import RecognitionEngine
from .google_engine import SpeechRecognitionEngine

__all__ = ["RecognitionEngine", "SpeechRecognitionEngine"]
