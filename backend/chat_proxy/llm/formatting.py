"""
Response format instructions appended to the outgoing user message.

Only the text sent upstream is shaped; session history keeps what the user
actually typed.
"""

from ..models.chat import ResponseFormat

FORMAT_INSTRUCTIONS = {
    ResponseFormat.PLAIN_TEXT: None,
    ResponseFormat.JSON: (
        "Please format your response as valid JSON. "
        "Structure the response appropriately based on the content."
    ),
    ResponseFormat.XML: (
        "Please format your response as valid XML. "
        "Use appropriate tags and structure based on the content."
    ),
}


def enhance_message(user_message: str, response_format: ResponseFormat) -> str:
    """Return user_message with the instruction for response_format, if any."""
    instruction = FORMAT_INSTRUCTIONS.get(response_format)
    if not instruction:
        return user_message
    return f"{user_message}\n\n{instruction}"
