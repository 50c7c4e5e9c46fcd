#!/usr/bin/env python3
"""Profile the placeholder pipeline to identify performance bottlenecks."""

import argparse
import cProfile
import io
import pstats
import sys
import time
from pathlib import Path

from batch_placeholder import find_images
from image_sampler import sample_image
from placeholder import encode_fields, pack_fields


def profile_image(image_path: str, fast: bool = True, verbose: bool = True):
    """Time each stage of the pipeline for a single image."""

    if verbose:
        print(f"\n{'='*60}")
        print(f"Profiling: {Path(image_path).name}")
        print(f"{'='*60}")

    timings = {}

    # Stage 1: Decode and sample
    start = time.perf_counter()
    sample = sample_image(image_path, fast=fast)
    timings['sample_image'] = time.perf_counter() - start

    if verbose:
        w, h = sample.size
        print(f"  Sampled size: {w}x{h}")
        print(f"  Dominant color: {tuple(sample.dominant)}")

    # Stage 2: Quantize
    start = time.perf_counter()
    fields = encode_fields(sample.dominant, sample.grid, sample.channels)
    timings['encode_fields'] = time.perf_counter() - start

    # Stage 3: Pack
    start = time.perf_counter()
    code = pack_fields(fields)
    timings['pack_fields'] = time.perf_counter() - start

    total = sum(timings.values())
    timings['total'] = total

    if verbose:
        print(f"  Code: {code}")
        print(f"\nStage timings:")
        for stage, t in timings.items():
            pct = (t / total * 100) if stage != 'total' and total else 100
            print(f"  {stage:20s}: {t:6.4f}s ({pct:5.1f}%)")

    return timings, sample


def detailed_profile(image_path: str, fast: bool = True):
    """Run detailed cProfile on sample_image (the main compute stage)."""

    print(f"\n{'='*60}")
    print(f"Detailed profile of sample_image()")
    print(f"{'='*60}")

    profiler = cProfile.Profile()
    profiler.enable()
    sample = sample_image(image_path, fast=fast)
    profiler.disable()

    stream = io.StringIO()
    stats = pstats.Stats(profiler, stream=stream)
    stats.sort_stats('cumulative')
    stats.print_stats(30)  # Top 30 functions

    print(stream.getvalue())

    return sample


def main():
    parser = argparse.ArgumentParser(
        description='Time the placeholder pipeline on a directory of images.'
    )
    parser.add_argument(
        '--input', '-i',
        default=str(Path(__file__).parent / "source_images"),
        help='Directory containing images (default: source_images/)'
    )
    parser.add_argument(
        '--no-fast',
        action='store_true',
        help='Sample at full resolution instead of a 64px thumbnail'
    )
    parser.add_argument(
        '--detailed',
        action='store_true',
        help='Run cProfile on the first image'
    )
    args = parser.parse_args()

    images_dir = Path(args.input)
    images = find_images(images_dir) if images_dir.is_dir() else []

    if not images:
        print(f"No images found in {images_dir}")
        sys.exit(1)

    print(f"Found {len(images)} test images")
    fast = not args.no_fast

    all_timings = []
    for img in images:
        timings, sample = profile_image(str(img), fast=fast)
        all_timings.append((img.name, timings, sample.size))

    # Summary
    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    print(f"{'Image':<35} {'Size':>12} {'Total':>10}")
    print("-" * 60)
    for name, timings, (w, h) in all_timings:
        print(f"{name:<35} {f'{w}x{h}':>12} {timings['total']:>9.4f}s")

    if args.detailed:
        detailed_profile(str(images[0]), fast=fast)


if __name__ == "__main__":
    main()
