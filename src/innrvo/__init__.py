"""Innrvo - intent detection and prompt planning for a wellness chat app.

Classifies free-form requests into meditation, affirmation, self-hypnosis,
guided journey and children's story content, asks a clarifying question when
the request is ambiguous, and turns resolved requests into word-budgeted
generation prompts.
"""

__version__ = "0.1.0"
