import json
import re

from langchain_core.messages import BaseMessage

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    # content blocks, e.g. [{"type": "text", "text": "..."}]
    parts = [
        block.get("text", "") if isinstance(block, dict) else str(block) for block in content
    ]
    return "".join(parts)


def parse_llm_json(text: str) -> dict:
    """Parse JSON from an LLM reply, tolerating code fences and surrounding prose.

    Raises json.JSONDecodeError when no JSON object can be recovered.
    """
    cleaned = text.strip()
    match = _FENCE.search(cleaned)
    if match:
        cleaned = match.group(1).strip()
    else:
        match = _OBJECT.search(cleaned)
        if match:
            cleaned = match.group(0)
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise json.JSONDecodeError("expected a JSON object", cleaned, 0)
    return data
