"""
Canned responses for the offline chat assistant.

Used when LLM_PROVIDER=canned: no external call is made, replies are
picked by keyword from a fixed set of credit-related answers.
"""

import re
from typing import Optional

from src.models.domain import ClientContext


# Messages without any of these words get the scope reminder.
# Matched at word starts, so "payments" counts but "this" is not "hi".
CREDIT_KEYWORDS = [
    "credit", "score", "loan", "financ", "payment", "debt", "rating",
    "application", "apply", "document", "upload", "help",
]
GREETING_WORDS = ["hello", "hi", "hey"]

OFF_TOPIC_RESPONSE = (
    "I'm a credit scoring assistant. I can only help with questions about credit scores, "
    "loan applications, financial assessments, and credit decisioning. "
    "Please ask me something related to credit or finance."
)

GREETING_RESPONSE = (
    "Hello! I'm your HEVA AI assistant. I'm here to help you with your credit score "
    "and loan application questions. How can I assist you today?"
)

SCORE_RESPONSE = (
    "Your credit score is a crucial factor in loan approvals. It ranges from 300-850, "
    "with higher scores getting better terms. I can help you understand how to improve it!"
)

LOAN_RESPONSE = (
    "I can guide you through the loan application process! You'll need to provide business "
    "information, financial statements, and undergo our credit assessment. "
    "Would you like me to explain the requirements?"
)

DOCUMENT_RESPONSE = (
    "For your loan application, you'll typically need: business registration, financial "
    "statements, bank statements, and ID verification. I can help you understand what "
    "specific documents are required."
)

HELP_RESPONSE = (
    "I'm here to help! I can assist with:\n"
    "• Credit score explanations\n"
    "• Loan application guidance\n"
    "• Document requirements\n"
    "• Financial assessment tips\n\n"
    "What would you like to know more about?"
)

DEFAULT_RESPONSE = (
    "Thank you for your question about credit and finance. I'm here to help you understand "
    "credit scoring, loan applications, and improve your financial profile. "
    "Could you be more specific about what you'd like to know?"
)


def _has_prefix(text: str, prefix: str) -> bool:
    return re.search(rf"\b{re.escape(prefix)}", text) is not None


def _has_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


def is_greeting(message: str) -> bool:
    lower = message.lower()
    return any(_has_word(lower, word) for word in GREETING_WORDS)


def is_credit_related(message: str) -> bool:
    lower = message.lower()
    return is_greeting(lower) or any(_has_prefix(lower, keyword) for keyword in CREDIT_KEYWORDS)


def _format_score(score: float) -> str:
    return str(int(score)) if float(score).is_integer() else str(score)


def generate_response(message: str, context: Optional[ClientContext] = None) -> str:
    """
    Pick a canned reply for a message.

    Args:
        message: The user's message
        context: Optional UI context; a known score personalises the score answer

    Returns:
        Reply text
    """
    if not is_credit_related(message):
        return OFF_TOPIC_RESPONSE

    lower = message.lower()

    if is_greeting(lower):
        return GREETING_RESPONSE

    if _has_prefix(lower, "credit") and _has_prefix(lower, "score"):
        if context is not None and context.user_score is not None:
            tier = context.user_tier or "unrated"
            return (
                f'Based on your current credit score of {_format_score(context.user_score)}, '
                f'you\'re in the "{tier}" tier. This affects your loan eligibility and interest rates. '
                "Would you like tips on improving your score?"
            )
        return SCORE_RESPONSE

    if _has_prefix(lower, "loan") or _has_prefix(lower, "apply"):
        return LOAN_RESPONSE

    if _has_prefix(lower, "document") or _has_prefix(lower, "upload"):
        return DOCUMENT_RESPONSE

    if _has_prefix(lower, "help") or _has_prefix(lower, "support"):
        return HELP_RESPONSE

    return DEFAULT_RESPONSE
