#!/usr/bin/env python3
"""
CLI script to seed the database with the emission factor catalogue and sample data.

Usage:
    # Basic seeding
    python scripts/seed_database.py

    # Clear existing data before seeding
    python scripts/seed_database.py --clear

    # Only seed emission factors and the admin user
    python scripts/seed_database.py --skip-samples

    # Seed another environment
    python scripts/seed_database.py --config production.toml

    # Using uv
    uv run python scripts/seed_database.py --clear
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import carp modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from carp.core.config import get_config
from carp.database.base import apply_db_migration, engine_kw, get_db_url, is_sqlite
from carp.database.session_manager.db_session import Database
from carp.services.seed_database import DEFAULT_DATA_DIR, DatabaseSeeder
from carp.utils.constants import ConfigFile
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create Rich console
console = Console()


def print_header(text: str, style: str = "bold cyan"):
    """Print a formatted header using Rich Panel."""
    console.print(
        Panel(
            Text(text, justify="center", style=style),
            border_style="cyan",
            padding=(1, 2),
        )
    )


def print_config(args):
    """Print configuration details."""
    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Setting", style="bold yellow")
    config_table.add_column("Value", style="green")

    config_table.add_row("⚙️  Config", args.config)
    config_table.add_row("📁 Data Directory", str(args.data_dir))
    config_table.add_row("🗑️  Clear Existing", "Yes" if args.clear else "No")
    config_table.add_row("🚗 Skip Samples", "Yes" if args.skip_samples else "No")
    config_table.add_row("🧱 Run Migrations", "Yes" if args.migrate else "No")

    console.print(config_table)
    console.print()


def print_stats(stats: dict):
    """Print seeding statistics using Rich Table."""
    print_header("SEEDING STATISTICS", "bold green")

    stats_table = Table(show_header=True, box=None, padding=(0, 2))
    stats_table.add_column("Category", style="bold cyan", width=30)
    stats_table.add_column("Created", justify="right", style="bold green")

    stats_table.add_row("📊 Emission Factors", str(stats["emission_factors"]))
    stats_table.add_row("👤 Users", str(stats["users"]))
    stats_table.add_row("🚗 Vehicles", str(stats["vehicles"]))
    stats_table.add_row("🗺️  Trips", str(stats["trips"]))

    console.print(stats_table)
    console.print()

    # Show errors if any
    if stats.get("errors"):
        console.print(
            Panel(
                f"[yellow]⚠️  {len(stats['errors'])} errors occurred during seeding[/yellow]",
                border_style="yellow",
            )
        )
        for i, error in enumerate(stats["errors"][:5], 1):
            console.print(f"  {i}. [dim]{error}[/dim]")
        if len(stats["errors"]) > 5:
            console.print(f"  [dim]... and {len(stats['errors']) - 5} more[/dim]")

    console.print()


async def main():
    """Main entry point for the seeding script."""
    parser = argparse.ArgumentParser(
        description="Seed the database with emission factors and sample data"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear existing data before seeding",
    )
    parser.add_argument(
        "--skip-samples",
        action="store_true",
        help="Only seed emission factors and the admin user",
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply database migrations before seeding",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=ConfigFile.DEVELOPMENT,
        help="Configuration file name (default: development.toml)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help="Directory containing CSV files (default: carp/seed_data)",
    )

    args = parser.parse_args()

    print_header("DATABASE SEEDING", "bold cyan")
    print_config(args)

    try:
        # Initialize database
        config = get_config(args.config)
        if args.migrate:
            with console.status("[bold cyan]Applying migrations...", spinner="dots"):
                await apply_db_migration(config)

        async_db_url = get_db_url(config)
        Database.init(
            async_db_url, engine_kw=None if is_sqlite(async_db_url) else engine_kw
        )
        logger.info("Database initialized")

        with console.status(
            "[bold cyan]Seeding database...", spinner="dots"
        ) as status:
            async with DatabaseSeeder(data_dir=args.data_dir) as seeder:
                status.update("[bold yellow]Loading emission factors and sample data...")
                stats = await seeder.seed_all(
                    clear_existing=args.clear,
                    skip_samples=args.skip_samples,
                )

        print_stats(stats)

        console.print(
            Panel(
                Text("✅ SEEDING COMPLETED SUCCESSFULLY", justify="center"),
                border_style="bold green",
                style="bold green",
            )
        )

    except Exception as e:
        logger.error(f"Seeding failed: {e}", exc_info=True)

        console.print()
        console.print(
            Panel(
                f"[bold red]❌ SEEDING FAILED[/bold red]\n\n[red]{e!s}[/red]",
                border_style="bold red",
            )
        )
        console.print()
        sys.exit(1)
    finally:
        await Database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
