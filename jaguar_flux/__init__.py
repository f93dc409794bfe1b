"""Async client for the Jaguar Flux image generation API."""

from jaguar_flux.client import ApiEndpoint, JaguarFluxClient, build_api_url
from jaguar_flux.core import EvictionStrategy, RequestQueue, ResultCache, RetryPolicy, with_retry
from jaguar_flux.errors import JaguarAPIError, JaguarTimeoutError, JaguarValidationError
from jaguar_flux.images import create_image_url, decode_image, save_image

__all__ = [
    "ApiEndpoint",
    "EvictionStrategy",
    "JaguarAPIError",
    "JaguarFluxClient",
    "JaguarTimeoutError",
    "JaguarValidationError",
    "RequestQueue",
    "ResultCache",
    "RetryPolicy",
    "build_api_url",
    "create_image_url",
    "decode_image",
    "save_image",
    "with_retry",
]
