"""
Application constants

Centralized prompt text, Gemini request settings and user-facing messages.
"""

from typing import Dict, List

# ============================================================================
# Prompt
# ============================================================================

SYSTEM_PROMPT = """You are the HEVA AI assistant, a friendly credit advisor for creative-industry professionals (musicians, filmmakers, designers, visual artists, writers and other creative businesses).

You may ONLY help with:
- Credit scores: how the HEVA score is calculated and how to improve it
- Loan applications: steps, eligibility and status
- Required documents and verification
- Financial assessment and planning for creative businesses
- Industry-specific guidance for creative professionals

IMPORTANT RULES:
- If the question is outside these topics, politely explain that you can only help with credit and finance questions
- Never invent a user's personal score, balance or application status
- Keep answers concise, practical and encouraging"""

HISTORY_USER_PREFIX = "User"
HISTORY_ASSISTANT_PREFIX = "Assistant"

# Sent by the connection check
CONNECTION_TEST_MESSAGE = 'Hello, can you respond with "Connection successful"?'

# ============================================================================
# Gemini request settings
# ============================================================================

SAFETY_CATEGORIES: List[str] = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"

SAFETY_SETTINGS: List[Dict[str, str]] = [
    {"category": category, "threshold": SAFETY_THRESHOLD}
    for category in SAFETY_CATEGORIES
]

# ============================================================================
# User-facing messages
# ============================================================================

GENERIC_ERROR_MESSAGE = (
    "I apologize, but I encountered an error processing your request. "
    "Please try again in a moment."
)
HISTORY_ERROR_MESSAGE = "Failed to retrieve chat history"

ANONYMOUS_USER_ID = "anonymous"
UNKNOWN_PAGE = "unknown"

# Truncation applied to user messages written to the chat interaction log
LOGGED_MESSAGE_MAX_CHARS = 200
