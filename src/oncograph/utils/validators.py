"""Input validation for OncoGraph.

Validates:
- Anthropic API key presence and format (before any network call)
- Chat queries (non-empty, reasonable size)
"""

from typing import Optional


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


def validate_api_key(api_key: Optional[str], prefix: str = "sk-ant-") -> str:
    """Validate the Anthropic API key.

    Args:
        api_key: Key from configuration
        prefix: Literal prefix every valid key starts with

    Returns:
        Stripped key

    Raises:
        ValidationError: If the key is missing or malformed
    """
    if not api_key or not api_key.strip():
        raise ValidationError(
            "Anthropic API key is not configured. Please set ANTHROPIC_API_KEY in your .env file."
        )

    api_key = api_key.strip()
    if not api_key.startswith(prefix):
        raise ValidationError(f'Invalid Anthropic API key format. The key should start with "{prefix}".')

    return api_key


def validate_query(query: Optional[str], max_length: int = 2000) -> str:
    """Validate a chat query.

    Args:
        query: Raw user text
        max_length: Maximum number of characters

    Returns:
        Stripped query

    Raises:
        ValidationError: If the query is empty or too long
    """
    if query is None or not query.strip():
        raise ValidationError("Question cannot be empty")

    query = query.strip()
    if len(query) > max_length:
        raise ValidationError(f"Question is too long ({len(query)} characters, max {max_length})")

    return query
