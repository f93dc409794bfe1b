"""Request and response models for the Jaguar Flux API.

Field names follow the wire format exactly; the hosted API is a fixed
external contract.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from jaguar_flux.config import Settings


class Limit(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int | float
    max: int | float

    def contains(self, value: int | float) -> bool:
        return self.min <= value <= self.max


PARAMETER_LIMITS: dict[str, Limit] = {
    "height": Limit(min=128, max=2048),
    "width": Limit(min=128, max=2048),
    "guidance_scale": Limit(min=1.0, max=20.0),
    "steps": Limit(min=1, max=50),
    "max_seq_length": Limit(min=1, max=512),
    "batch_size": Limit(min=1, max=10),
}

# Human-readable labels used in validation messages.
_LABELS = {
    "height": "Height",
    "width": "Width",
    "guidance_scale": "Guidance scale",
    "steps": "Steps",
    "max_seq_length": "Max sequence length",
}


class GenerationDefaults(BaseModel):
    """Values filled in for any option the caller leaves unset."""

    model_config = ConfigDict(frozen=True)

    height: int = 1024
    width: int = 1024
    guidance_scale: float = 3.5
    steps: int = 4
    max_seq_length: int = 256

    @classmethod
    def from_settings(cls, settings: Settings) -> GenerationDefaults:
        return cls(
            height=settings.default_height,
            width=settings.default_width,
            guidance_scale=settings.default_guidance_scale,
            steps=settings.default_steps,
            max_seq_length=settings.default_max_seq_length,
        )


class ImageGenerationOptions(BaseModel):
    prompt: str
    height: int | None = None
    width: int | None = None
    guidance_scale: float | None = None
    steps: int | None = None
    max_seq_length: int | None = None
    seed: int | None = None


class BatchGenerationOptions(BaseModel):
    prompts: list[str]
    height: int | None = None
    width: int | None = None
    guidance_scale: float | None = None
    steps: int | None = None
    max_seq_length: int | None = None
    base_seed: int | None = None


class GenerationParameters(BaseModel):
    prompt: str
    height: int
    width: int
    guidance_scale: float
    num_steps: int
    max_seq_length: int
    seed: int | None = None


class ImageGenerationResponse(BaseModel):
    image: str = Field(description="Base64 encoded PNG")
    parameters: GenerationParameters
    generation_time: float


class BatchImageResult(BaseModel):
    prompt: str
    image: str = Field(description="Base64 encoded PNG")
    seed: int
    generation_time: float


class BatchParameters(BaseModel):
    height: int
    width: int
    guidance_scale: float
    num_steps: int
    max_seq_length: int
    base_seed: int | None = None


class BatchGenerationResponse(BaseModel):
    results: list[BatchImageResult]
    parameters: BatchParameters
    total_generation_time: float
    images_generated: int


class RecommendedSettings(BaseModel):
    height: int
    width: int
    guidance_scale: float
    num_steps: int
    max_seq_length: int


class ModelInfo(BaseModel):
    model: str
    version: str
    parameters: str
    format: str
    source: Literal["volume", "huggingface"]
    capabilities: list[str]
    recommended_settings: RecommendedSettings
    volume_path: str


class ModelReloadResponse(BaseModel):
    success: bool
    message: str
    model_path: str | None = None


class APIErrorBody(BaseModel):
    error: str


def _range_errors(options: ImageGenerationOptions | BatchGenerationOptions) -> list[str]:
    errors: list[str] = []
    for name, label in _LABELS.items():
        value = getattr(options, name)
        if value is None:
            continue
        limit = PARAMETER_LIMITS[name]
        if not limit.contains(value):
            errors.append(f"{label} must be between {limit.min} and {limit.max}")
    return errors


def validate_generation_options(options: ImageGenerationOptions) -> list[str]:
    """Return every problem with a single-image request (empty when valid)."""
    errors: list[str] = []
    if not options.prompt or not options.prompt.strip():
        errors.append("Prompt is required and cannot be empty")
    errors.extend(_range_errors(options))
    return errors


def validate_batch_options(options: BatchGenerationOptions) -> list[str]:
    """Return every problem with a batch request (empty when valid)."""
    errors: list[str] = []
    if not options.prompts:
        errors.append("Prompts array is required and cannot be empty")
    else:
        max_batch = int(PARAMETER_LIMITS["batch_size"].max)
        if len(options.prompts) > max_batch:
            errors.append(f"Batch size cannot exceed {max_batch} prompts")
        if any(not p or not p.strip() for p in options.prompts):
            errors.append("All prompts must be non-empty strings")

    errors.extend(_range_errors(options))
    return errors
