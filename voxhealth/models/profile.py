"""User profile sent to the analysis provider as context."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from voxhealth.settings import normalize_language


class UserProfile(BaseModel):
    uid: str = Field(..., min_length=1, max_length=128)
    name: str = ""
    age: int = Field(default=0, ge=0, le=130)
    gender: str = ""
    smoking_history: bool = False
    notes: str = ""
    language: str = "en"

    @field_validator("language", mode="before")
    @classmethod
    def _known_language(cls, value: object) -> str:
        return normalize_language(value if isinstance(value, str) else None)

    def context_block(self) -> str:
        """Render the profile as the context paragraph of the analysis prompt."""
        return (
            f"- Age: {self.age}\n"
            f"- Gender: {self.gender or 'Unspecified'}\n"
            f"- Smoker: {'Yes' if self.smoking_history else 'No'}\n"
            f"- Notes: {self.notes or 'None'}"
        )
