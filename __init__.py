"""
ELIZA Responder - Rule-based conversational responder
=====================================================

A small ELIZA-style responder: user text is matched against an ordered
table of pattern rules and the first matching rule supplies a reply,
with captured fragments of the input substituted into it.

Front ends:
1. Line-based chat and one-shot replies (main.py)
2. Terminal chat (Textual)
3. Web chat and JSON API (FastAPI)

License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"
__license__ = "MIT"
