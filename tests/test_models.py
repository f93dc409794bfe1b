from jaguar_flux.config import Settings
from jaguar_flux.models import (
    PARAMETER_LIMITS,
    BatchGenerationOptions,
    BatchGenerationResponse,
    GenerationDefaults,
    ImageGenerationOptions,
    ImageGenerationResponse,
    validate_batch_options,
    validate_generation_options,
)


def test_valid_options_have_no_errors() -> None:
    options = ImageGenerationOptions(
        prompt="sunset", height=128, width=2048, guidance_scale=20.0, steps=50, max_seq_length=512
    )
    assert validate_generation_options(options) == []


def test_every_out_of_range_field_is_reported() -> None:
    options = ImageGenerationOptions(
        prompt="sunset", height=100, width=4000, guidance_scale=0.5, steps=51, max_seq_length=600
    )

    assert validate_generation_options(options) == [
        "Height must be between 128 and 2048",
        "Width must be between 128 and 2048",
        "Guidance scale must be between 1.0 and 20.0",
        "Steps must be between 1 and 50",
        "Max sequence length must be between 1 and 512",
    ]


def test_blank_prompt_rejected() -> None:
    assert validate_generation_options(ImageGenerationOptions(prompt="")) == [
        "Prompt is required and cannot be empty"
    ]


def test_batch_validation() -> None:
    assert validate_batch_options(BatchGenerationOptions(prompts=[])) == [
        "Prompts array is required and cannot be empty"
    ]
    assert validate_batch_options(BatchGenerationOptions(prompts=["a", "b"], steps=4)) == []
    assert validate_batch_options(BatchGenerationOptions(prompts=["a"] * 11, width=64)) == [
        "Batch size cannot exceed 10 prompts",
        "Width must be between 128 and 2048",
    ]


def test_parameter_limits_match_api() -> None:
    assert PARAMETER_LIMITS["batch_size"].max == 10
    assert PARAMETER_LIMITS["guidance_scale"].contains(3.5)
    assert not PARAMETER_LIMITS["steps"].contains(0)


def test_defaults_from_settings() -> None:
    settings = Settings(default_height=768, default_steps=6)
    defaults = GenerationDefaults.from_settings(settings)

    assert defaults.height == 768
    assert defaults.steps == 6
    assert defaults.width == 1024


def test_response_models_parse_wire_format(generation_payload, batch_payload) -> None:
    single = ImageGenerationResponse.model_validate(generation_payload(seed=None))
    assert single.parameters.seed is None
    assert single.parameters.num_steps == 4

    batch = BatchGenerationResponse.model_validate(batch_payload(["x", "y", "z"], base_seed=None))
    assert batch.parameters.base_seed is None
    assert batch.images_generated == 3
    assert [r.prompt for r in batch.results] == ["x", "y", "z"]
