"""
minutes Backend

Python backend for minutes providing:
- Multi-provider transcription routing (cloud APIs, Gemini, on-device MLX-Whisper)
- Credential and model preference storage
- Meeting summaries with Strands Agent over Ollama
- Command-line interface
"""

__version__ = "1.0.0"
