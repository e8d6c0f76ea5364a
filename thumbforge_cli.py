#!/usr/bin/env python3
"""
ThumbForge command line.

Usage:
    python thumbforge_cli.py generate "gaming setup reveal" --platform youtube --style bold
    python thumbforge_cli.py titles "budget travel in Japan" --count 5
    python thumbforge_cli.py score thumb.png --niche gaming
    python thumbforge_cli.py abtest a.png b.png --title "I tried 100 keyboards"
    python thumbforge_cli.py stats thumb.png

Credentials: GEMINI_API_KEY in .env
Generated images are written to data/output/.
"""

import argparse
import json
import sys

from thumbforge import config, store
from thumbforge.gateway import externalize_images
from thumbforge.store import run_metered
from thumbforge.errors import ThumbForgeError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ThumbForge thumbnail tools")
    parser.add_argument(
        "--user", "-u",
        type=str,
        default=None,
        help="Profile to bill generations to (default: THUMBFORGE_USER_ID or 'local')"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a thumbnail from a prompt")
    gen.add_argument("prompt")
    gen.add_argument("--platform", "-p", default="youtube")
    gen.add_argument("--style", "-s", default="professional")

    titles = sub.add_parser("titles", help="Generate title ideas")
    titles.add_argument("topic")
    titles.add_argument("--platform", "-p", default="YouTube")
    titles.add_argument("--tone", default="engaging")
    titles.add_argument("--count", "-n", type=int, default=5)

    score = sub.add_parser("score", help="Score a thumbnail")
    score.add_argument("image", help="Image path, URL or data URL")
    score.add_argument("--niche", default="general")

    ab = sub.add_parser("abtest", help="A/B test two thumbnails")
    ab.add_argument("image_a")
    ab.add_argument("image_b")
    ab.add_argument("--title", "-t", default="")

    stats = sub.add_parser("stats", help="Local image statistics (no AI call)")
    stats.add_argument("image")

    return parser


def run(args) -> dict:
    user_id = args.user or config.DEFAULT_USER_ID

    if args.command == "generate":
        from thumbforge.generator import generate_thumbnail
        result = run_metered(
            user_id, "thumbnail",
            lambda: generate_thumbnail(args.prompt, args.platform, args.style),
            prompt=args.prompt, platform=args.platform, metadata={"style": args.style},
        )
    elif args.command == "titles":
        from thumbforge.generator import generate_titles
        result = run_metered(
            user_id, "title",
            lambda: generate_titles(args.topic, args.platform, args.tone, args.count),
            prompt=args.topic, platform=args.platform.lower(),
        )
    elif args.command == "score":
        from thumbforge.strategist import score_thumbnail
        result = run_metered(
            user_id, "score",
            lambda: score_thumbnail(args.image, args.niche),
            metadata={"niche": args.niche},
        )
    elif args.command == "abtest":
        from thumbforge.strategist import ab_test_thumbnails
        result = run_metered(
            user_id, "ab_test",
            lambda: ab_test_thumbnails(args.image_a, args.image_b, args.title),
            prompt=args.title or None,
        )
    else:
        from thumbforge.image_stats import analyze_image
        result = analyze_image(args.image)

    return externalize_images(result)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        result = run(args)
    except ThumbForgeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, ensure_ascii=False, indent=2))
    profile = store.get_profile(args.user or config.DEFAULT_USER_ID)
    print(f"Usage: {profile['monthly_usage']}/{profile['usage_limit']}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
