"""
Prompt Builder Layer
====================

Default instructions and prompt assembly for image analysis providers.

Invariants:
- Caller text is appended only when present (None means "not supplied")
- The CNN hint is advisory: it names the label and confidence, never
  instructs the model to trust it blindly
"""

from typing import Optional

# ── Default Instructions ──────────────────────────────────────────────────────
DEFAULT_ALT_TEXT_PROMPT = (
    "Generate an accessible alt text for this image, adhering to best practices "
    "for web accessibility. The alt text should be concise (one to two sentences "
    "maximum) yet effectively communicate the essential visual information for "
    "someone who cannot see the image. Describe the key figures or subjects, their "
    "relevant actions or states, the overall scene or environment, and any objects "
    "critical to understanding the image's context or message. Consider the likely "
    "purpose and context of the image when writing the alt text to ensure relevance. "
    "Do not include redundant phrases like 'image of' or 'picture of'. Focus on "
    "delivering informative content. This is an alt text for an end user. Avoid "
    "mentioning this prompt or any kind of greeting or introduction. Just provide "
    "the alt text description directly, without any conversational preamble like "
    "'Certainly,' 'Here's the alt text,' 'Of course,' or similar."
)

SHORT_ALT_TEXT_PROMPT = (
    "Write a brief, one to two sentence alt text description for this image that "
    "captures the main subjects, action, and setting."
)

# The <image> token is required by the Replicate vision model.
REPLICATE_DEFAULT_PROMPT = (
    "Write a brief, one to two sentence alt text description for this <image>, "
    "Harvard style, that captures the main subjects, action, and setting. This is "
    "an alt text for an end user."
)


def compose_prompt(base: str, user_prompt: Optional[str] = None, separator: str = ". ") -> str:
    """
    Append caller-supplied text to a base instruction.

    Args:
        base: The fixed instruction
        user_prompt: Optional caller text; None or blank leaves base untouched
        separator: Joiner between base and caller text

    Returns:
        The composed prompt
    """
    if user_prompt is None or not user_prompt.strip():
        return base
    head = base.rstrip()
    if separator.startswith(".") and head.endswith("."):
        head = head[:-1]
    return f"{head}{separator}{user_prompt.strip()}"


def cnn_context_hint(label: Optional[str], confidence: Optional[float] = None) -> str:
    """Describe a CNN prediction as context for the LLM. Empty when no label."""
    if not label:
        return ""
    if confidence is None:
        return (
            f"A specialised image classifier identified the main subject as: {label}. "
            "Use this as a hint and mention it if it matches what you see."
        )
    return (
        f"A specialised image classifier identified the main subject as: {label} "
        f"(confidence {confidence:.1%}). Use this as a hint and mention it if it "
        "matches what you see."
    )


def with_cnn_context(
    prompt: str,
    label: Optional[str],
    confidence: Optional[float] = None,
) -> str:
    """Append the CNN hint to a prompt when a label is known."""
    hint = cnn_context_hint(label, confidence)
    return f"{prompt}\n\n{hint}" if hint else prompt
