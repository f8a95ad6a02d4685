"""Prompt wrapping and response cleanup for reasoning-capable models."""

import re

_THINK_BLOCK = re.compile(r"<think>(.*?)</think>", re.DOTALL)


def enhance_prompt_for_thinking(prompt: str) -> str:
    """Wrap a prompt so the model reasons step by step before answering."""
    return (
        "<thinking>\n"
        "Let me think about this step by step:\n"
        f"1. Analyze the request: {prompt}\n"
        "2. Consider the best approach\n"
        "3. Plan the implementation or response\n"
        "4. Execute the plan\n"
        "</thinking>\n\n"
        f"{prompt}\n\n"
        "Please provide a comprehensive and well-reasoned response."
    )


def has_thinking_text(response: str) -> bool:
    return _THINK_BLOCK.search(response) is not None


def process_thinking_text(response: str, show: bool = False, format_blocks: bool = True) -> str:
    """Strip or reformat <think> blocks in a model response.

    Args:
        response: Raw model output.
        show: Keep reasoning in the output.
        format_blocks: When showing, replace tags with a fenced section.

    Returns:
        Response with reasoning removed, reformatted or untouched.

    """
    if not has_thinking_text(response):
        return response
    if not show:
        return _THINK_BLOCK.sub("", response).strip()
    if format_blocks:
        return _THINK_BLOCK.sub(
            lambda m: f"\n**Thinking:**\n```\n{m.group(1).strip()}\n```\n---\n",
            response,
        )
    return response
