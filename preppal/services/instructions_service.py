"""
Cooking instruction generation with the OpenAI chat completions API.
"""

import json
from typing import Optional

from openai import AsyncOpenAI, APITimeoutError, OpenAIError

from preppal.core.config import settings
from preppal.core.logging import get_logger
from preppal.services.errors import InstructionGenerationError

logger = get_logger(__name__)

MAX_COMPLETION_TOKENS = 2048

PROMPT_TEMPLATE = """You are a professional chef. Generate clear, step-by-step cooking instructions for the following recipe.

Recipe: {title}

Ingredients:
{ingredients}

{tools}

Generate practical cooking instructions that:
1. Use the available tools when appropriate
2. Include prep steps (washing, cutting, measuring)
3. Give approximate cooking times and temperatures
4. Are numbered and easy to follow
5. Result in a well-prepared dish

Respond with JSON in this format: {{ "instructions": ["Step 1...", "Step 2...", ...] }}"""


def _format_amount(value: float) -> str:
    return f"{value:g}"


def format_ingredient_line(ingredient: dict) -> str:
    """
    "- 2 cup rice" when amount and unit are known, else "- 150g rice",
    else just the name.
    """
    name = ingredient["name"]
    if ingredient.get("amount") and ingredient.get("unit"):
        return f"- {_format_amount(ingredient['amount'])} {ingredient['unit']} {name}"
    if ingredient.get("grams"):
        return f"- {_format_amount(ingredient['grams'])}g {name}"
    return f"- {name}"


def build_prompt(title: str, ingredients: list[dict], tools: list[str]) -> str:
    if tools:
        tools_text = "Available cooking tools:\n" + "\n".join(f"- {t}" for t in tools)
    else:
        tools_text = "No specific cooking tools specified."

    return PROMPT_TEMPLATE.format(
        title=title,
        ingredients="\n".join(format_ingredient_line(i) for i in ingredients),
        tools=tools_text,
    )


class InstructionService:
    """Generates recipe steps with an LLM."""

    def __init__(self):
        self.model = settings.OPENAI_MODEL
        self.client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self.client is None:
            if not settings.OPENAI_API_KEY:
                raise InstructionGenerationError("OPENAI_API_KEY is not configured")
            self.client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        return self.client

    async def generate_cooking_instructions(
        self,
        title: str,
        ingredients: list[dict],
        tools: list[str],
    ) -> list[str]:
        """
        Ask the model for numbered cooking steps.

        Args:
            title: Recipe title
            ingredients: Dicts with ``name`` and optional ``amount``, ``unit``, ``grams``
            tools: Names of available cooking tools

        Returns:
            Instruction steps in order

        Raises:
            InstructionGenerationError: on API failure or an unparseable reply
        """
        client = self._get_client()
        prompt = build_prompt(title, ingredients, tools)

        logger.info("instructions.generate title=%s ingredients=%s", title, len(ingredients))
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
                max_completion_tokens=MAX_COMPLETION_TOKENS,
            )
        except APITimeoutError as e:
            raise InstructionGenerationError("request timed out", timeout=True) from e
        except OpenAIError as e:
            raise InstructionGenerationError(str(e)) from e

        content = response.choices[0].message.content
        if not content:
            raise InstructionGenerationError("empty response")

        try:
            result = json.loads(content)
        except json.JSONDecodeError as e:
            raise InstructionGenerationError("response was not valid JSON") from e
        if not isinstance(result, dict):
            raise InstructionGenerationError("response was not a JSON object")

        instructions = result.get("instructions") or []
        return [str(step) for step in instructions]


instruction_service = InstructionService()
