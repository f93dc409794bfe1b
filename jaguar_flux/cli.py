"""Command-line entry point: generate images, run batches, inspect the model.

Images are written to disk. stdout gets a JSON summary without the base64
payloads (or the error payload on failure); logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from jaguar_flux.client import JaguarFluxClient
from jaguar_flux.config import settings
from jaguar_flux.errors import JaguarAPIError
from jaguar_flux.images import default_filename, save_image
from jaguar_flux.logger import get_logger, setup_logging

logger = get_logger(__name__)


def _add_generation_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--height", type=int, default=None, help="Image height in pixels")
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--guidance-scale", type=float, default=None, help="Guidance scale")
    parser.add_argument("--steps", type=int, default=None, help="Inference steps")
    parser.add_argument("--max-seq-length", type=int, default=None, help="Max sequence length")


def _generation_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "height": args.height,
        "width": args.width,
        "guidance_scale": args.guidance_scale,
        "steps": args.steps,
        "max_seq_length": args.max_seq_length,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jaguar-flux", description="Jaguar Flux image generation client"
    )
    parser.add_argument(
        "--base-url",
        default=settings.base_url,
        help="Deployment prefix, e.g. https://user--shuttle-jaguar (env: JAGUAR_BASE_URL)",
    )
    parser.add_argument(
        "--timeout-seconds", type=float, default=settings.timeout_seconds, help="Per-request timeout"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a single image")
    gen.add_argument("prompt", help="Text prompt")
    _add_generation_options(gen)
    gen.add_argument("--seed", type=int, default=None, help="Seed for reproducible results")
    gen.add_argument("--out", default=None, help="Output PNG path")

    batch = sub.add_parser("batch", help="Generate one image per prompt")
    batch.add_argument("prompts", nargs="+", help="Text prompts (max 10)")
    _add_generation_options(batch)
    batch.add_argument("--base-seed", type=int, default=None, help="Seed for the first image")
    batch.add_argument("--out-dir", default=".", help="Directory for output PNGs")

    sub.add_parser("info", help="Show model information")
    sub.add_parser("reload", help="Force the backend to reload the model")

    return parser


def _build_client(args: argparse.Namespace) -> JaguarFluxClient:
    effective = settings.model_copy(
        update={"base_url": args.base_url, "timeout_seconds": args.timeout_seconds}
    )
    return JaguarFluxClient.from_settings(effective)


async def run(args: argparse.Namespace, client: JaguarFluxClient) -> dict[str, Any]:
    """Execute one subcommand and return its JSON-serialisable summary."""
    if args.command == "generate":
        result = await client.generate_image(
            args.prompt, seed=args.seed, **_generation_kwargs(args)
        )
        out = Path(args.out or default_filename())
        out.parent.mkdir(parents=True, exist_ok=True)
        await save_image(result.image, out)
        return {
            "file": str(out),
            "parameters": result.parameters.model_dump(),
            "generation_time": result.generation_time,
        }

    if args.command == "batch":
        result = await client.generate_batch(
            args.prompts, base_seed=args.base_seed, **_generation_kwargs(args)
        )
        out_dir = Path(args.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        files: list[dict[str, Any]] = []
        for index, item in enumerate(result.results):
            path = out_dir / f"jaguar-batch-{index}-{item.seed}.png"
            await save_image(item.image, path)
            files.append({"file": str(path), "prompt": item.prompt, "seed": item.seed})
        return {
            "images": files,
            "parameters": result.parameters.model_dump(),
            "total_generation_time": result.total_generation_time,
        }

    if args.command == "info":
        return (await client.get_model_info()).model_dump()

    if args.command == "reload":
        return (await client.reload_model()).model_dump()

    raise ValueError(f"Unknown command: {args.command}")


async def _main_async(args: argparse.Namespace) -> int:
    async with _build_client(args) as client:
        try:
            data = await run(args, client)
        except JaguarAPIError as exc:
            logger.error("command_failed", command=args.command, status=exc.status_code)
            print(json.dumps(exc.to_payload(), indent=2, sort_keys=True))
            return 1

    print(json.dumps(data, indent=2, sort_keys=True))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # stdout carries the JSON result, so logs go to stderr.
    setup_logging(debug=args.debug or settings.debug, stream=sys.stderr)

    if not args.base_url:
        parser.error("--base-url (or JAGUAR_BASE_URL) is required")

    return asyncio.run(_main_async(args))


if __name__ == "__main__":
    raise SystemExit(main())
