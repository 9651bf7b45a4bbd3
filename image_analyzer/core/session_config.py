from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr

ModelChoice = Literal["gpt-4o-mini", "gpt-4o", "gpt-5"]

MODEL_LABELS = {
    "gpt-4o-mini": "GPT-4o Mini",
    "gpt-4o": "GPT-4o",
    "gpt-5": "GPT-5",
}


class SessionConfig(BaseModel):
    """Per-session analysis options. Kept in memory only."""

    model_config = ConfigDict(validate_assignment=True)

    api_key: SecretStr = Field(default=SecretStr(""))
    model: ModelChoice = "gpt-4o-mini"
    use_filename_context: bool = False
    include_description: bool = False
    sheets_url: str = ""

    def has_api_key(self) -> bool:
        return bool(self.api_key.get_secret_value().strip())
