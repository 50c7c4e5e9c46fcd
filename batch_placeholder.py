#!/usr/bin/env python3
"""Batch compute placeholder codes and write a JSON manifest."""

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path

from image_sampler import PillowSampler
from placeholder import PlaceholderOptions, generate_placeholder

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.gif', '.bmp'}
DEFAULT_JOBS = 4


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    )


async def encode_images(images: list[Path], options: PlaceholderOptions,
                        jobs: int = DEFAULT_JOBS, sampler=None) -> list[tuple]:
    """
    Encode images concurrently.

    Returns:
        List of (path, code or None, error message or None, seconds),
        in the same order as images
    """
    if sampler is None:
        sampler = PillowSampler()
    slots = asyncio.Semaphore(jobs)

    async def encode_one(image_path: Path) -> tuple:
        async with slots:
            start = time.perf_counter()
            try:
                code = await generate_placeholder(image_path, options, sampler=sampler)
            except Exception as e:
                return image_path, None, f"{type(e).__name__}: {e}", time.perf_counter() - start
            return image_path, code, None, time.perf_counter() - start

    return await asyncio.gather(*(encode_one(p) for p in images))


def build_manifest(results: list[tuple]) -> dict:
    """Map file name to code for every successful result."""
    return {path.name: code for path, code, error, _ in results if error is None}


def main():
    parser = argparse.ArgumentParser(
        description='Compute placeholder codes for every image in a directory.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images'
    )
    parser.add_argument(
        '--output', '-o',
        required=True,
        help='Path of the JSON manifest to write'
    )
    parser.add_argument(
        '--no-fast',
        action='store_true',
        help='Sample at full resolution instead of a 64px thumbnail'
    )
    parser.add_argument(
        '--jobs', '-j',
        type=int,
        default=DEFAULT_JOBS,
        help=f'Images decoded in parallel (default {DEFAULT_JOBS})'
    )

    args = parser.parse_args()

    input_dir = Path(args.input)
    output_path = Path(args.output)

    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        sys.exit(2)

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        sys.exit(2)

    options = PlaceholderOptions(fast=not args.no_fast)
    total = len(images)

    batch_start = time.perf_counter()
    results = asyncio.run(encode_images(images, options, jobs=max(1, args.jobs)))
    batch_elapsed = time.perf_counter() - batch_start

    failed = []
    for i, (image_path, code, error, elapsed) in enumerate(results, 1):
        if error is None:
            print(f"[{i}/{total}] {image_path.name} → {code} ({elapsed:.2f}s)")
        else:
            print(f"[{i}/{total}] {image_path.name} → ERROR: {error}", file=sys.stderr)
            failed.append((image_path.name, error))

    manifest = build_manifest(results)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.exists():
        print(f"  Warning: Overwriting {output_path}", file=sys.stderr)
    output_path.write_text(json.dumps(manifest, indent=2, sort_keys=True))

    # Summary
    print()
    print(f"Completed: {len(manifest)}/{total} succeeded in {batch_elapsed:.2f}s")
    print(f"Wrote: {output_path}")
    if failed:
        print(f"Failed ({len(failed)}):")
        for name, error in failed:
            print(f"  - {name}: {error}")
        sys.exit(1)


if __name__ == '__main__':
    main()
