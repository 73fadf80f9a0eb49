"""
Prompt Templates for Barista Bot.

Holds the order-taking system prompt and renders it for each turn.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

CATALOG_PLACEHOLDER = "{{COFFEE_DOCUMENT}}"
USER_INPUT_PLACEHOLDER = "{{USER_INPUT}}"
USER_NAME_PLACEHOLDER = "{{USER_NAME}}"

_PLACEHOLDER_PATTERN = re.compile(
    "|".join(re.escape(p) for p in (CATALOG_PLACEHOLDER, USER_INPUT_PLACEHOLDER, USER_NAME_PLACEHOLDER))
)


class PromptTemplates:
    """
    Manages the system prompt for the order-taking assistant.

    The model is instructed to wrap its reply in <response> tags and to
    report collected order fields as <name>, <email>, <phone>, <address>
    and <order> tags inside that block.
    """

    ORDER_SYSTEM_PROMPT = """You are the friendly order assistant of Barista Bot, a coffee shop that delivers.

You are talking to {{USER_NAME}}.

Here is our menu as JSON (item name, description and price):
<menu>
{{COFFEE_DOCUMENT}}
</menu>

Your role:
1. Answer questions about the menu using only the data above
2. Help the customer choose drinks and take their order
3. Collect the details we need to deliver it: name, email, phone number, delivery address and the order itself

Guidelines:
- Never invent items or prices that are not on the menu
- Ask for one or two missing details at a time, politely
- Confirm the order back to the customer once everything is collected
- Keep answers short and warm

Output format (mandatory):
- Put your whole reply to the customer inside <response></response> tags
- Inside the response, whenever the customer has given one of the details, repeat it in its own tag on its own line:
  <name>...</name>, <email>...</email>, <phone>...</phone>, <address>...</address>, <order>...</order>
- Use only these five tags; the customer will not see them

The customer's latest message:
<message>
{{USER_INPUT}}
</message>"""

    GREETING = "Hi, {name}! I'm the coffee bot. How can I help?"

    @classmethod
    def get_system_prompt(
        cls,
        brand_name: str = "Barista Bot",
        custom_template: Optional[str] = None
    ) -> str:
        """
        Get the system prompt template.

        Args:
            brand_name: Brand name to use
            custom_template: Template that replaces the built-in one

        Returns:
            Template with placeholders still unexpanded
        """
        template = custom_template if custom_template else cls.ORDER_SYSTEM_PROMPT
        return template.replace("Barista Bot", brand_name)

    @classmethod
    def load(cls, prompt_path: Union[str, Path]) -> str:
        """Load a prompt template file as UTF-8 text, stripping any BOM."""
        path = Path(prompt_path)
        try:
            return path.read_text(encoding="utf-8").lstrip("\ufeff")
        except UnicodeDecodeError:
            logger.warning(f"Prompt template {path} is not valid UTF-8, decoding with errors ignored")
            return path.read_bytes().decode("utf-8", errors="ignore").lstrip("\ufeff")

    @staticmethod
    def serialize_catalog(catalog: Dict[str, Any]) -> str:
        """Canonical text form of the catalog embedded in the prompt."""
        return json.dumps(catalog, ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def compile(
        cls,
        template: str,
        catalog: Dict[str, Any],
        user_message: str,
        display_name: str
    ) -> str:
        """
        Render the system prompt for one turn.

        Substitutes the first occurrence of each placeholder in a single
        pass over the template, so placeholder text inside the catalog, the
        message or the name is never expanded. Later occurrences and
        placeholders missing from the template are left as is.

        Args:
            template: Prompt template
            catalog: Product catalog
            user_message: Current user message
            display_name: User's display name

        Returns:
            Compiled system prompt
        """
        values = {
            CATALOG_PLACEHOLDER: cls.serialize_catalog(catalog),
            USER_INPUT_PLACEHOLDER: user_message,
            USER_NAME_PLACEHOLDER: display_name,
        }
        seen = set()

        def substitute(match):
            placeholder = match.group(0)
            if placeholder in seen:
                return placeholder
            seen.add(placeholder)
            return values[placeholder]

        return _PLACEHOLDER_PATTERN.sub(substitute, template)

    @classmethod
    def greeting(cls, name: str) -> str:
        return cls.GREETING.format(name=name)
