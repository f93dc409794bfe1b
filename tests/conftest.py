"""Test fixtures and configuration."""

from collections.abc import Callable
from typing import Any

import pytest

from jaguar_flux.core.retry import RetryPolicy

BASE_URL = "https://tester--shuttle-jaguar"
TINY_PNG_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def png_b64() -> str:
    return TINY_PNG_B64


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """One retry with no waiting, so retry paths run instantly."""
    return RetryPolicy(max_retries=1, base_delay_seconds=0.0, cold_start_delay_seconds=0.0)


@pytest.fixture
def generation_payload() -> Callable[..., dict[str, Any]]:
    def _make(
        prompt: str = "a red fox",
        *,
        seed: int | None = 42,
        height: int = 1024,
        width: int = 1024,
    ) -> dict[str, Any]:
        return {
            "image": TINY_PNG_B64,
            "parameters": {
                "prompt": prompt,
                "height": height,
                "width": width,
                "guidance_scale": 3.5,
                "num_steps": 4,
                "max_seq_length": 256,
                "seed": seed,
            },
            "generation_time": 1.25,
        }

    return _make


@pytest.fixture
def batch_payload() -> Callable[..., dict[str, Any]]:
    def _make(prompts: list[str], *, base_seed: int | None = 7) -> dict[str, Any]:
        first = base_seed or 0
        return {
            "results": [
                {
                    "prompt": p,
                    "image": TINY_PNG_B64,
                    "seed": first + i,
                    "generation_time": 0.5,
                }
                for i, p in enumerate(prompts)
            ],
            "parameters": {
                "height": 512,
                "width": 512,
                "guidance_scale": 4.0,
                "num_steps": 4,
                "max_seq_length": 256,
                "base_seed": base_seed,
            },
            "total_generation_time": 0.5 * len(prompts),
            "images_generated": len(prompts),
        }

    return _make


@pytest.fixture
def model_info_payload() -> dict[str, Any]:
    return {
        "model": "shuttle-jaguar",
        "version": "1.0",
        "parameters": "8B",
        "format": "safetensors",
        "source": "volume",
        "capabilities": ["text-to-image"],
        "recommended_settings": {
            "height": 1024,
            "width": 1024,
            "guidance_scale": 3.5,
            "num_steps": 4,
            "max_seq_length": 256,
        },
        "volume_path": "/models/shuttle-jaguar",
    }
