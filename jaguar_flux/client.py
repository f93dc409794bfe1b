"""
Async client for the Jaguar Flux image generation API.

Each hosted function is its own Modal endpoint, addressed as
``{base_url}-{endpoint}.modal.run``. The client validates parameters
locally, fills in defaults, and routes every request through an optional
RequestQueue (concurrency bound) and ResultCache (dedupe of identical
generations). Both are injected; the client never creates hidden shared
instances.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from jaguar_flux.config import Settings
from jaguar_flux.config import settings as default_settings
from jaguar_flux.core.cache import ResultCache, create_key
from jaguar_flux.core.queue import RequestQueue
from jaguar_flux.core.retry import RetryPolicy, with_retry
from jaguar_flux.errors import JaguarAPIError, JaguarTimeoutError, JaguarValidationError
from jaguar_flux.http_client import create_http_client
from jaguar_flux.logger import get_logger, log_request_performance
from jaguar_flux.models import (
    BatchGenerationOptions,
    BatchGenerationResponse,
    GenerationDefaults,
    ImageGenerationOptions,
    ImageGenerationResponse,
    ModelInfo,
    ModelReloadResponse,
    validate_batch_options,
    validate_generation_options,
)

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")


class ApiEndpoint(str, Enum):
    GENERATE = "shuttlejaguarmodel-generate-api"
    BATCH = "shuttlejaguarmodel-batch-api"
    INFO = "shuttlejaguarmodel-info"
    RELOAD = "shuttlejaguarmodel-reload-model"


def build_api_url(
    base_url: str,
    endpoint: ApiEndpoint | str,
    params: dict[str, str] | None = None,
) -> str:
    """Build the full URL for an endpoint, appending query parameters in order."""
    url = httpx.URL(f"{base_url.rstrip('/')}-{ApiEndpoint(endpoint).value}.modal.run")
    if params:
        url = url.copy_merge_params(params)
    return str(url)


def _coerce_options(model: type[M], first: Any, field: str, extra: dict[str, Any]) -> M:
    data = {**first.model_dump(), **extra} if isinstance(first, model) else {field: first, **extra}
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise JaguarValidationError(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        ) from exc


class JaguarFluxClient:
    """
    Client for the generate, batch, info and reload endpoints.

    Use as an async context manager (or call ``aclose()``) to release the
    underlying connection pool when the client created it.
    """

    def __init__(
        self,
        base_url: str,
        *,
        defaults: GenerationDefaults | None = None,
        timeout_seconds: float = 30.0,
        retry_policy: RetryPolicy | None = None,
        queue: RequestQueue | None = None,
        cache: ResultCache | None = None,
        http_client: httpx.AsyncClient | None = None,
        max_connections: int = 10,
        max_keepalive_connections: int = 5,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Deployment prefix, e.g. ``https://user--shuttle-jaguar``
            defaults: Values for options the caller leaves unset
            timeout_seconds: Total time allowed for one HTTP attempt
            retry_policy: Retry behaviour per request (defaults to one retry)
            queue: Optional queue bounding concurrent requests
            cache: Optional cache for generate and batch results
            http_client: Optional pre-built httpx client (not closed by us)
            max_connections: Pool size when the client builds its own httpx client
            max_keepalive_connections: Keepalive pool size for the same
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.defaults = defaults or GenerationDefaults()
        self.timeout_seconds = timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy()
        self.queue = queue
        self.cache = cache
        self._owns_http_client = http_client is None
        self._http = http_client or create_http_client(
            timeout=timeout_seconds,
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> JaguarFluxClient:
        """Build a client plus its own queue and cache from settings."""
        settings = settings or default_settings
        cache = (
            ResultCache(
                max_size=settings.cache_max_size,
                ttl_seconds=settings.cache_ttl_seconds,
                strategy=settings.cache_strategy,
            )
            if settings.cache_enabled
            else None
        )
        return cls(
            settings.base_url,
            defaults=GenerationDefaults.from_settings(settings),
            timeout_seconds=settings.timeout_seconds,
            retry_policy=RetryPolicy(
                max_retries=settings.retry_attempts,
                base_delay_seconds=settings.retry_base_delay_seconds,
                cold_start_delay_seconds=settings.retry_cold_start_delay_seconds,
            ),
            queue=RequestQueue(settings.max_concurrent),
            cache=cache,
            http_client=http_client,
            max_connections=settings.http_max_connections,
            max_keepalive_connections=settings.http_max_keepalive_connections,
        )

    async def __aenter__(self) -> JaguarFluxClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client and not self._http.is_closed:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate_image(
        self,
        prompt: str | ImageGenerationOptions,
        **options: Any,
    ) -> ImageGenerationResponse:
        """
        Generate a single image.

        Args:
            prompt: Text prompt, or a complete ImageGenerationOptions
            **options: height, width, guidance_scale, steps, max_seq_length, seed

        Returns:
            The generated image (base64 PNG) and the parameters actually used.

        Raises:
            JaguarValidationError: If any option is out of range
            JaguarAPIError: If the request fails after retries
        """
        opts = _coerce_options(ImageGenerationOptions, prompt, "prompt", options)
        errors = validate_generation_options(opts)
        if errors:
            raise JaguarValidationError(errors)

        params = {
            "prompt": opts.prompt,
            "height": str(self._pick(opts.height, self.defaults.height)),
            "width": str(self._pick(opts.width, self.defaults.width)),
            "guidance_scale": str(self._pick(opts.guidance_scale, self.defaults.guidance_scale)),
            "steps": str(self._pick(opts.steps, self.defaults.steps)),
            "max_seq_length": str(self._pick(opts.max_seq_length, self.defaults.max_seq_length)),
        }
        if opts.seed is not None:
            params["seed"] = str(opts.seed)

        url = build_api_url(self.base_url, ApiEndpoint.GENERATE, params)

        async def _generate() -> ImageGenerationResponse:
            data = await self._request("GET", ApiEndpoint.GENERATE, url)
            return self._parse(ImageGenerationResponse, data)

        result = await self._cached(
            create_key({"endpoint": ApiEndpoint.GENERATE.value, **params}),
            _generate,
        )
        logger.info(
            "image_generated",
            width=result.parameters.width,
            height=result.parameters.height,
            seed=result.parameters.seed,
            generation_time=result.generation_time,
        )
        return result

    async def generate_batch(
        self,
        prompts: list[str] | BatchGenerationOptions,
        **options: Any,
    ) -> BatchGenerationResponse:
        """
        Generate one image per prompt in a single request.

        Args:
            prompts: Up to 10 prompts, or a complete BatchGenerationOptions
            **options: height, width, guidance_scale, steps, max_seq_length, base_seed

        Returns:
            Per-prompt results plus the shared parameters.
        """
        opts = _coerce_options(BatchGenerationOptions, prompts, "prompts", options)
        errors = validate_batch_options(opts)
        if errors:
            raise JaguarValidationError(errors)

        body: dict[str, Any] = {
            "prompts": opts.prompts,
            "height": self._pick(opts.height, self.defaults.height),
            "width": self._pick(opts.width, self.defaults.width),
            "guidance_scale": self._pick(opts.guidance_scale, self.defaults.guidance_scale),
            "steps": self._pick(opts.steps, self.defaults.steps),
            "max_seq_length": self._pick(opts.max_seq_length, self.defaults.max_seq_length),
        }
        if opts.base_seed is not None:
            body["base_seed"] = opts.base_seed

        url = build_api_url(self.base_url, ApiEndpoint.BATCH)

        async def _batch() -> BatchGenerationResponse:
            data = await self._request("POST", ApiEndpoint.BATCH, url, json_data=body)
            return self._parse(BatchGenerationResponse, data)

        result = await self._cached(
            create_key({"endpoint": ApiEndpoint.BATCH.value, **body}),
            _batch,
        )
        logger.info(
            "batch_generated",
            images_generated=result.images_generated,
            total_generation_time=result.total_generation_time,
        )
        return result

    async def get_model_info(self) -> ModelInfo:
        url = build_api_url(self.base_url, ApiEndpoint.INFO)

        async def _info() -> ModelInfo:
            data = await self._request("GET", ApiEndpoint.INFO, url)
            return self._parse(ModelInfo, data)

        return await self._execute(_info, name="get_model_info")

    async def reload_model(self) -> ModelReloadResponse:
        """Force the backend to reload model weights from HuggingFace."""
        url = build_api_url(self.base_url, ApiEndpoint.RELOAD)

        async def _reload() -> ModelReloadResponse:
            data = await self._request("POST", ApiEndpoint.RELOAD, url)
            return self._parse(ModelReloadResponse, data)

        result = await self._execute(_reload, name="reload_model")
        logger.info("model_reloaded", success=result.success, model_path=result.model_path)
        return result

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    @staticmethod
    def _pick(value: T | None, default: T) -> T:
        return default if value is None else value

    async def _cached(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        name = getattr(operation, "__name__", "operation").lstrip("_")
        if self.cache is None:
            return await self._execute(operation, name=name)
        return await self.cache.get_or_set(key, lambda: self._execute(operation, name=name))

    async def _execute(self, operation: Callable[[], Awaitable[T]], *, name: str) -> T:
        wrapped = with_retry(operation, self.retry_policy, name=name)
        if self.queue is None:
            return await wrapped()
        return await self.queue.submit(wrapped)

    async def _request(
        self,
        method: str,
        endpoint: ApiEndpoint,
        url: str,
        *,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        start = time.perf_counter()
        status_code: int | None = None
        try:
            response = await asyncio.wait_for(
                self._http.request(method, url, json=json_data),
                timeout=self.timeout_seconds,
            )
            status_code = response.status_code
        except (httpx.TimeoutException, TimeoutError) as exc:
            raise JaguarTimeoutError() from exc
        except httpx.RequestError as exc:
            raise JaguarAPIError(f"Request failed: {exc}") from exc
        finally:
            log_request_performance(
                endpoint=endpoint.name.lower(),
                method=method,
                status_code=status_code,
                duration_ms=(time.perf_counter() - start) * 1000.0,
            )

        if not response.is_success:
            message = f"HTTP error! status: {response.status_code}"
            body: Any = None
            try:
                body = response.json()
            except ValueError:
                pass  # Non-JSON error page; keep the generic message
            if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
                message = body["error"]
            raise JaguarAPIError(message, response.status_code, response=body)

        try:
            return response.json()
        except ValueError as exc:
            raise JaguarAPIError(
                "Invalid JSON in response", response.status_code, response=response.text
            ) from exc

    @staticmethod
    def _parse(model: type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise JaguarAPIError(
                f"Unexpected response shape for {model.__name__}: {exc.error_count()} error(s)",
                response=data,
            ) from exc
