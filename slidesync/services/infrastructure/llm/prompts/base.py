"""
Base prompt template classes.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..base import ChatMessage


@dataclass
class PromptTemplate:
    """
    A prompt template with placeholders.

    Usage:
        template = PromptTemplate(
            template="Summarize slide {slide_number}",
            description="Slide summary"
        )
        result = template.format(slide_number=3)
    """
    template: str
    description: str = ""

    def format(self, **kwargs) -> str:
        """Format the template with provided values

        Literal braces in the template must be doubled.

        Raises:
            ValueError: A placeholder has no value, or the template is malformed
        """
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            raise ValueError(
                f"Missing template variable '{e.args[0]}' in {self.description or 'prompt'}"
            ) from e
        except (IndexError, ValueError) as e:
            raise ValueError(f"Malformed template {self.description or 'prompt'}: {e}") from e

    def __str__(self) -> str:
        return f"PromptTemplate({self.description})"


@dataclass
class StagePrompt:
    """System + user templates for one pipeline stage

    The payload passed to `build_messages` supplies the template variables;
    an optional `images` entry (list of data URLs) is attached to the user
    message for vision stages.
    """
    stage: str
    user: PromptTemplate
    system: Optional[PromptTemplate] = None

    def build_messages(self, payload: Mapping[str, Any]) -> List[ChatMessage]:
        variables: Dict[str, Any] = {k: v for k, v in payload.items() if k != "images"}
        messages: List[ChatMessage] = []
        if self.system is not None:
            messages.append(ChatMessage(role="system", content=self.system.format(**variables)))
        messages.append(ChatMessage(
            role="user",
            content=self.user.format(**variables),
            images=list(payload.get("images") or []),
        ))
        return messages
