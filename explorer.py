#!/usr/bin/env python3
"""Reading List Dashboard CLI - Open Library enrichment."""
import argparse
import asyncio
import sys
import logging
from tabulate import tabulate
from readinglist.async_client import AsyncCatalogClient
from readinglist.client import CatalogClient
from readinglist.config import Config
from readinglist.export import to_csv, to_json, write_csv
from readinglist.models import SortKey
from readinglist.pipeline import EnrichmentPipeline
from readinglist.session import LOGIN_ERROR, check_credentials
from readinglist.view import ViewController

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    """Configure root logging."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def apply_overrides(args, config: Config):
    """Let command-line flags override configured reading-list options."""
    if args.user:
        config.READING_LIST_USER = args.user
    if args.shelf:
        config.READING_LIST_SHELF = args.shelf
    if args.list_limit is not None:
        config.READING_LIST_LIMIT = args.list_limit


async def load_rows_async(args, config: Config):
    """Run an enrichment session with concurrent author lookups."""
    async with AsyncCatalogClient.from_config(config) as client:
        async with EnrichmentPipeline(client, fetch_ratings=args.ratings) as pipeline:
            rows = await pipeline.run()
            return pipeline, rows


def load_rows_sync(args, config: Config):
    """Run an enrichment session with one lookup at a time."""
    with CatalogClient.from_config(config) as client:
        pipeline = EnrichmentPipeline(client, fetch_ratings=args.ratings)
        rows = pipeline.run_sequential()
        return pipeline, rows


def load_view(args, config: Config):
    """Load the session and build the view; None if the reading list failed."""
    if args.sync:
        pipeline, rows = load_rows_sync(args, config)
    else:
        pipeline, rows = asyncio.run(load_rows_async(args, config))

    if pipeline.error is not None:
        print("Failed to fetch books", file=sys.stderr)
        return None

    logger.info(f"Loaded {len(rows)} rows ({len(pipeline.authors)} authors resolved)")

    view = ViewController(rows, page_size=getattr(args, "page_size", None) or config.DEFAULT_PAGE_SIZE)
    if args.search:
        view.set_search(args.search)
    if args.sort:
        view.toggle_sort(SortKey(args.sort))
        if args.desc:
            view.toggle_sort(SortKey(args.sort))
    return view


def display_rows(view: ViewController, format_type: str, show_rating: bool):
    """Display the current page in specified format."""
    rows = view.page_rows()

    if format_type == "table":
        headers = ["S.No", "Author Name", "Title", "First Publish Year", "Subject",
                   "Author Birth Date", "Author Top Work"]
        if show_rating:
            headers.insert(1, "Ratings Average")
        table = []
        for serial, row in enumerate(rows, view.first_serial):
            line = [
                serial,
                row.authors_str[:30] + "..." if len(row.authors_str) > 30 else row.authors_str or "N/A",
                row.title[:50] + "..." if len(row.title) > 50 else row.title or "N/A",
                row.year_str,
                row.top_subject_str,
                row.birth_date_str,
                row.top_work_str
            ]
            if show_rating:
                line.insert(1, row.rating_str)
            table.append(line)
        print("\n" + tabulate(table, headers=headers, tablefmt="grid"))
        print(f"Page {view.state.page + 1} of {view.page_count} ({len(view.visible())} rows)")

    elif format_type == "json":
        print(to_json(rows))

    elif format_type == "compact":
        for serial, row in enumerate(rows, view.first_serial):
            print(f"{serial}. {row.title} - {row.authors_str or 'N/A'}")


def login(args, config: Config) -> bool:
    """Check credentials; print the login error when they are wrong."""
    if check_credentials(args.email or "", args.password or "", config):
        return True
    print(LOGIN_ERROR, file=sys.stderr)
    return False


def show_dashboard(args, config: Config) -> int:
    """Show one page of the dashboard."""
    view = load_view(args, config)
    if view is None:
        return 1

    view.set_page(args.page - 1)
    display_rows(view, args.format, args.ratings)
    return 0


def export_data(args, config: Config) -> int:
    """Export the filtered and sorted rows."""
    view = load_view(args, config)
    if view is None:
        return 1

    rows = view.visible()
    if args.format == "csv":
        if args.output:
            write_csv(rows, args.output)
        else:
            sys.stdout.write(to_csv(rows))

    elif args.format == "json":
        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(to_json(rows))
            logger.info(f"✅ Exported {len(rows)} rows to {args.output}")
        else:
            print(to_json(rows))
    return 0


def positive_int(value):
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def add_common_arguments(parser):
    parser.add_argument("--email", help="Admin email")
    parser.add_argument("--password", help="Admin password")
    parser.add_argument("--search", default="", help="Filter by author name (case-insensitive)")
    parser.add_argument("--sort", choices=[k.value for k in SortKey], help="Sort column")
    parser.add_argument("--desc", action="store_true", help="Sort descending (requires --sort)")
    parser.add_argument("--ratings", action="store_true", help="Also look up ratings per title")
    parser.add_argument("--sync", action="store_true", help="Look up authors one at a time")
    parser.add_argument("--user", help="Open Library user whose shelf is loaded")
    parser.add_argument("--shelf", help="Reading-log shelf (default: want-to-read)")
    parser.add_argument("--list-limit", type=int, help="Max works kept from the list (0 = all)")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Reading List Dashboard - Open Library enrichment CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the first page
  %(prog)s show --email admin@gmail.com --password admin@123

  # Search by author, sort by year descending, 20 per page
  %(prog)s show --email admin@gmail.com --password admin@123 --search tolkien --sort year --desc --page-size 20

  # Export everything matching the search
  %(prog)s export --email admin@gmail.com --password admin@123 --search le --output books.csv
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Show command
    show_parser = subparsers.add_parser("show", help="Show the dashboard table")
    add_common_arguments(show_parser)
    show_parser.add_argument("--page", type=positive_int, default=1, help="Page number, 1-based (default: 1)")
    show_parser.add_argument("--page-size", type=positive_int, help="Rows per page (default: 10)")
    show_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export filtered rows")
    add_common_arguments(export_parser)
    export_parser.add_argument("--format", choices=["csv", "json"], default="csv", help="Export format")
    export_parser.add_argument("--output", help="Output file (default: stdout)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.desc and not args.sort:
        parser.error("--desc requires --sort")

    config = Config()
    setup_logging(config)
    apply_overrides(args, config)

    if not login(args, config):
        sys.exit(1)

    try:
        if args.command == "show":
            sys.exit(show_dashboard(args, config))

        elif args.command == "export":
            sys.exit(export_data(args, config))

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
