"""
System prompt assembly for grounded answers.
"""

from typing import Dict, List, Sequence

from ragchat.embeddings.schemas import SimilarityResult

DEFAULT_SYSTEM_PROMPT_TEMPLATE = (
    "You are a helpful assistant. Answer the user's question using the "
    "reference material below. If the references do not cover the question, "
    "say so instead of guessing.\n\n"
    "{references}"
)


def build_reference_block(results: Sequence[SimilarityResult]) -> str:
    """Number each retrieved passage and join them with a blank line."""
    return "\n\n".join(
        f"[reference {i}]\n{result.content}"
        for i, result in enumerate(results, start=1)
    )


def build_system_prompt(
    results: Sequence[SimilarityResult],
    template: str = DEFAULT_SYSTEM_PROMPT_TEMPLATE,
) -> str:
    return template.format(references=build_reference_block(results))


def augment_messages(
    messages: Sequence[Dict],
    results: Sequence[SimilarityResult],
    template: str = DEFAULT_SYSTEM_PROMPT_TEMPLATE,
) -> List[Dict]:
    """Prepend the single system instruction to the caller's history."""
    system = {"role": "system", "content": build_system_prompt(results, template)}
    return [system, *messages]
