"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build the intake prompt from the dialogue and the current requirements.
- Call the Groq LLM to extract structured event requirements.
- Return ``None`` when the LLM is unavailable so callers can fall back.
"""
