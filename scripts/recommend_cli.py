"""CLI script for getting recommendations from replayed behavior.

Useful for testing and evaluation. Replays a behavior events CSV into a fresh
service, then prints recommendations for one user to the console.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.recommender import feeds
from src.recommender.config import ServiceConfig
from src.recommender.persistence import load_events_csv, replay_events
from src.recommender.service import RecommendationService

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def build_service(
    events_csv: str,
    max_actions: int,
    catalog_csv: Optional[str] = None,
) -> RecommendationService:
    """Create a service and replay ``events_csv`` into it.

    ``catalog_csv`` replaces the seeded products when given.
    """
    config = ServiceConfig(max_actions_per_user=max_actions, catalog_path=catalog_csv)
    service = RecommendationService(config=config)
    events = load_events_csv(events_csv)
    replay_events(service.store, events)
    return service


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Get recommendations for a user from replayed behavior",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/recommend_cli.py data/fake_events.csv user-7
  python scripts/recommend_cli.py data/fake_events.csv user-7 --limit 3 --explain
  python scripts/recommend_cli.py data/fake_events.csv user-7 --context dashboard --plan free
  python scripts/recommend_cli.py data/fake_events.csv user-7 --catalog data/catalog.csv
        """
    )

    parser.add_argument("events_csv", help="Behavior events CSV to replay")
    parser.add_argument("user_id", help="User ID to get recommendations for")
    parser.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Number of recommendations to return (default: 5)"
    )
    parser.add_argument(
        "--context",
        type=str,
        default=None,
        help="Show the combined feed for a dashboard context instead"
    )
    parser.add_argument(
        "--plan",
        type=str,
        default="free",
        help="Plan tier used for upsell rules (default: free)"
    )
    parser.add_argument(
        "--catalog",
        type=str,
        default=None,
        help="Product catalog CSV (default: built-in catalog)"
    )
    parser.add_argument(
        "--max-actions",
        type=int,
        default=1000,
        help="Raw actions retained per user (default: 1000)"
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show score breakdown for recommendations"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        service = build_service(args.events_csv, args.max_actions, args.catalog)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: invalid events file: {e}", file=sys.stderr)
        sys.exit(1)

    if args.context:
        records = feeds.build_feed(
            service, args.user_id, plan=args.plan, context=args.context, limit=args.limit
        )
        print(f"\nFeed for user {args.user_id} (context: {args.context}):")
        for record in records:
            title = getattr(record, "title", None) or getattr(record, "name", None)
            if title is None:
                title = record.product.name
            print(f"  [{type(record).KIND}] {title}")
        print()
        return

    recommendations = service.get_personalized(args.user_id, args.limit)
    print(f"\nRecommendations for user {args.user_id}:")
    for rec in recommendations:
        print(f"  {rec.product.id:<22} score={rec.score:.3f}  {rec.reason}")

    if args.explain:
        print(f"\nScore breakdown:")
        for product_id, components in service.explain(args.user_id, args.limit).items():
            parts = ", ".join(f"{name}={value:.3f}" for name, value in components.items())
            print(f"  {product_id}: {parts}")

    upsells = service.get_upsell_recommendations(args.user_id, args.plan)
    if upsells:
        print(f"\nUpsell offers ({args.plan} plan):")
        for offer in upsells:
            print(f"  {offer.title} [{offer.urgency}]")

    print()


if __name__ == "__main__":
    main()
