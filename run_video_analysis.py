"""
Standalone script for the video content analysis pipeline.

Usage:
    python run_video_analysis.py path/to/video.mp4 --interval 5 --max-frames 6
"""

import argparse
import asyncio
import json
import sys

from mediascribe.config.settings import MediaScribeConfig
from mediascribe.exceptions import MediaScribeException
from mediascribe.providers.factory import ProviderFactory
from mediascribe.utils.logging_config import log_manager
from mediascribe.video_pipeline import VideoAnalyzer


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Analyze the visual content of a local video file.")
    parser.add_argument("video_path", help="Path to the video file")
    parser.add_argument("--interval", type=float, default=5, help="Seconds between sampled frames (default: 5)")
    parser.add_argument("--max-frames", type=int, default=6, help="Maximum number of frames to analyze (default: 6)")
    parser.add_argument("--prompt", default=None, help="Custom per-frame analysis prompt")
    parser.add_argument("--output", default=None, help="Write the JSON result to this file instead of stdout")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    config = MediaScribeConfig()
    log_manager.configure(config.logging)
    log = log_manager.get_logger(video_path=args.video_path)

    providers = None
    try:
        providers = ProviderFactory.create_bundle(config.provider)
        analyzer = VideoAnalyzer(providers, config)
        result = await analyzer.analyze(
            args.video_path,
            interval_seconds=args.interval,
            max_frames=args.max_frames,
            custom_prompt=args.prompt,
        )
    except MediaScribeException as e:
        log.error(f"Video analysis failed: {e.message}")
        return 1
    finally:
        if providers is not None:
            await providers.close()

    output = json.dumps(result.to_payload(), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        log.info(f"Wrote analysis of {result.metadata.frames_analyzed} frames to {args.output}")
    else:
        print(output)
    return 0


def cli():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
