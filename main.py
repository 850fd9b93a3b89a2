"""
ReviewLens - App Store Review Analysis

CLI entry point for collecting and analyzing App Store reviews.
"""

import argparse
import logging
import sys

from src.orchestrator import AnalysisOrchestrator, AppNotFoundError, NoReviewsError
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ReviewLens - App Store Review Analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Collect up to 500 reviews across regions and analyze them
  python main.py --url https://apps.apple.com/us/app/chatgpt/id6448311069

  # Smaller sample, analyze only the newest 200
  python main.py --url https://apps.apple.com/gb/app/chatgpt/id6448311069 \\
                 --target-count 300 --analysis-limit 200

  # Wider word cloud canvas
  python main.py --url https://apps.apple.com/us/app/chatgpt/id6448311069 \\
                 --canvas-width 1200 --canvas-height 600 --max-words 60
        """
    )

    parser.add_argument(
        "--url",
        required=True,
        help="App Store URL (e.g., https://apps.apple.com/us/app/name/id123456789)"
    )

    parser.add_argument(
        "--target-count",
        type=int,
        default=settings.DEFAULT_TARGET_COUNT,
        help=f"Reviews to collect across regions (default: {settings.DEFAULT_TARGET_COUNT})"
    )

    parser.add_argument(
        "--analysis-limit",
        type=int,
        default=None,
        help="Analyze only the newest N collected reviews (default: all)"
    )

    parser.add_argument(
        "--canvas-width",
        type=int,
        default=settings.WORD_CLOUD_WIDTH,
        help=f"Word cloud width in pixels (default: {settings.WORD_CLOUD_WIDTH})"
    )

    parser.add_argument(
        "--canvas-height",
        type=int,
        default=settings.WORD_CLOUD_HEIGHT,
        help=f"Word cloud height in pixels (default: {settings.WORD_CLOUD_HEIGHT})"
    )

    parser.add_argument(
        "--max-words",
        type=int,
        default=settings.WORD_CLOUD_MAX_WORDS,
        help=f"Maximum words in the word cloud (default: {settings.WORD_CLOUD_MAX_WORDS})"
    )

    parser.add_argument(
        "--data-root",
        default=str(settings.DATA_ROOT),
        help=f"Output directory (default: {settings.DATA_ROOT})"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    print("=" * 60)
    print("ReviewLens - App Store Review Analysis")
    print("=" * 60)
    print(f"URL: {args.url}")
    print(f"Target reviews: {args.target_count}")
    if args.analysis_limit:
        print(f"Analysis limit: {args.analysis_limit}")
    print("=" * 60)
    print()

    try:
        orchestrator = AnalysisOrchestrator(
            data_root=args.data_root,
            canvas_width=args.canvas_width,
            canvas_height=args.canvas_height,
            max_words=args.max_words
        )

        report = orchestrator.run(
            app_url=args.url,
            target_count=args.target_count,
            analysis_limit=args.analysis_limit
        )

        sentiment = report["sentiment"]
        print()
        print("=" * 60)
        print("✅ Analysis completed successfully!")
        print("=" * 60)
        print(f"App: {report['app_info']['name']} ({report['app_info']['developer']})")
        print(f"Reviews analyzed: {report['total_reviews']} "
              f"(collected {report['collected_reviews']})")
        print(f"Regions: {', '.join(report['data_source']['regions_collected'])}")
        print(f"Sentiment: {sentiment['positive']} positive, "
              f"{sentiment['neutral']} neutral, {sentiment['negative']} negative")
        print(f"Report: {report['outputs']['report']}")
        print(f"Reviews CSV: {report['outputs']['reviews']}")
        print("=" * 60)

        logger.info("ReviewLens completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.warning("Analysis interrupted by user")
        print("\n⚠️  Analysis interrupted")
        return 1

    except (ValueError, AppNotFoundError, NoReviewsError) as e:
        logger.error(f"Analysis failed: {e}")
        print(f"\n❌ {e}")
        return 1

    except Exception as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        print(f"\n❌ Analysis failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        return 1


if __name__ == "__main__":
    sys.exit(main())
