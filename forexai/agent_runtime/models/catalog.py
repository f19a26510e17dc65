"""Known OpenAI model identifiers with display metadata."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class ModelName(StrEnum):
    GPT_5_NANO = "gpt-5-nano"
    GPT_5_MINI = "gpt-5-mini"
    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4_TURBO = "gpt-4-turbo"
    O1 = "o1"
    O1_MINI = "o1-mini"
    O3_MINI = "o3-mini"


class ModelInfo(BaseModel):
    name: ModelName
    description: str
    context_window: int
    supports_vision: bool

    @property
    def qualified_name(self) -> str:
        """Name in pydantic-ai's ``provider:model`` form."""
        return f"openai:{self.name.value}"


MODEL_CATALOG: dict[ModelName, ModelInfo] = {
    info.name: info
    for info in (
        ModelInfo(
            name=ModelName.GPT_5_NANO,
            description="Lightweight GPT-5 model optimized for speed and efficiency",
            context_window=128_000,
            supports_vision=True,
        ),
        ModelInfo(
            name=ModelName.GPT_5_MINI,
            description="Balanced GPT-5 model with excellent cost-performance ratio",
            context_window=128_000,
            supports_vision=True,
        ),
        ModelInfo(
            name=ModelName.GPT_4O,
            description="Most capable GPT-4 model with vision support",
            context_window=128_000,
            supports_vision=True,
        ),
        ModelInfo(
            name=ModelName.GPT_4O_MINI,
            description="Smaller, faster GPT-4o variant",
            context_window=128_000,
            supports_vision=True,
        ),
        ModelInfo(
            name=ModelName.GPT_4_TURBO,
            description="GPT-4 Turbo with improved performance",
            context_window=128_000,
            supports_vision=True,
        ),
        ModelInfo(
            name=ModelName.O1,
            description="Reasoning model for complex tasks",
            context_window=200_000,
            supports_vision=True,
        ),
        ModelInfo(
            name=ModelName.O1_MINI,
            description="Smaller reasoning model",
            context_window=128_000,
            supports_vision=False,
        ),
        ModelInfo(
            name=ModelName.O3_MINI,
            description="Latest mini reasoning model",
            context_window=200_000,
            supports_vision=True,
        ),
    )
}

DEFAULT_MODEL = ModelName.GPT_5_MINI
