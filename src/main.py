"""
Smart Queue - Command Line Entry Point

Query the recommendation pipeline from a terminal:

    smart-queue recommend 3135556 --count 10 --preference diverse
    smart-queue mix 3135556 916424 --count 30
    smart-queue purge-cache
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional, Sequence

# Add src to path
src_path = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, src_path)

from core.provider import ProviderError
from models.recommendation import RecommendationContext, SimilarityPreference
from models.track import Track

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-queue",
        description="Track recommendations and smart mixes from the command line",
    )
    parser.add_argument("--config", help="Configuration file (YAML)")
    parser.add_argument("--db", help="SQLite database path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    recommend = sub.add_parser("recommend", help="Recommend tracks similar to one seed track")
    recommend.add_argument("track_id", type=int)
    recommend.add_argument("--count", type=int, default=10)
    recommend.add_argument(
        "--preference",
        choices=[p.value for p in SimilarityPreference],
        default=SimilarityPreference.BALANCED.value,
    )

    mix = sub.add_parser("mix", help="Blend a smart mix from several seed tracks")
    mix.add_argument("track_ids", type=int, nargs="+")
    mix.add_argument("--count", type=int, default=20)
    mix.add_argument(
        "--preference",
        choices=[p.value for p in SimilarityPreference],
        default=SimilarityPreference.BALANCED.value,
    )

    sub.add_parser("purge-cache", help="Delete expired recommendation cache entries")
    return parser


def format_track(track: Track) -> str:
    return f"{track.artist.name or 'Unknown Artist'} - {track.title} ({track.id})"


async def _resolve_seeds(container, track_ids: Sequence[int]) -> Optional[List[Track]]:
    seeds: List[Track] = []
    for track_id in track_ids:
        try:
            track = await container.catalog.get_track(track_id)
        except ProviderError as e:
            print(f"error: could not look up track {track_id}: {e}", file=sys.stderr)
            return None
        if track is None:
            print(f"error: unknown track id {track_id}", file=sys.stderr)
            return None
        seeds.append(track)
    return seeds


async def run(args: argparse.Namespace) -> int:
    from app.container_factory import AppContainerFactory

    logger.debug("Running command: %s", args.command)
    container = AppContainerFactory.create(config_path=args.config, db_path=args.db)
    try:
        if args.command == "purge-cache":
            removed = container.facade.purge_expired_recommendations()
            print(f"Removed {removed} expired cache entries")
            return 0

        track_ids = [args.track_id] if args.command == "recommend" else args.track_ids
        seeds = await _resolve_seeds(container, track_ids)
        if seeds is None:
            return 1

        preference = SimilarityPreference.parse(args.preference)
        if args.command == "recommend":
            tracks = await container.recommendations.recommend(
                seeds[0],
                args.count,
                preference=preference,
                context=RecommendationContext.MANUAL,
            )
        else:
            tracks = await container.recommendations.generate_smart_mix(seeds, args.count, preference)

        if not tracks:
            print("No recommendations found", file=sys.stderr)
        for track in tracks:
            print(format_track(track))
        return 0
    finally:
        await container.aclose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Application entry point"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
