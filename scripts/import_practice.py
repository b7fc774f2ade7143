#!/usr/bin/env python3
"""
Import a practice written in notation into Snowflake.

Parses the text file exactly like the quick-entry editor does. If any
line is rejected, every error is printed and nothing is stored;
otherwise the practice's stored sets are replaced.

Usage:
    python scripts/import_practice.py --practice-id <uuid> --file monday.txt
    python scripts/import_practice.py --practice-id <uuid> --file monday.txt --dry-run

Requires:
    - .env file with Snowflake credentials (unless --mock or --dry-run)
"""

import argparse
import sys
from pathlib import Path
from uuid import UUID

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from swimpractice.config import get_settings
from swimpractice.core.practice.parser import parse_practice
from swimpractice.core.practice.totals import (
    estimate_duration_minutes,
    practice_total_distance,
    stroke_breakdown,
)
from swimpractice.infrastructure.snowflake.client import create_snowflake_connection
from swimpractice.infrastructure.snowflake.repositories.practices import (
    PracticeRepository,
    SnowflakeConfig,
)


def print_summary(sets) -> None:
    print(f"Parsed {len(sets)} set(s):")
    for practice_set in sets:
        print(
            f"  {practice_set.name} ({practice_set.set_type.value}): "
            f"{len(practice_set.items)} item(s), {practice_set.total_distance}"
        )

    print(f"\nTotal distance: {practice_total_distance(sets)}")
    print(f"Estimated time: {estimate_duration_minutes(sets)} min")
    for stroke, distance in stroke_breakdown(sets).items():
        print(f"  {stroke.value}: {distance}")


def store_practice(practice_id: UUID, sets, mock_mode: bool) -> bool:
    settings = get_settings()

    config = None
    if not mock_mode:
        missing = settings.validate_required_fields()
        if missing:
            print(f"ERROR: Missing configuration: {', '.join(missing)}")
            return False

        config = SnowflakeConfig(
            account=settings.snowflake_account,
            user=settings.snowflake_user,
            password=settings.snowflake_password or None,
            private_key_path=settings.snowflake_private_key_path,
            private_key_base64=settings.snowflake_private_key_base64,
            database=settings.snowflake_database,
            schema=settings.snowflake_schema,
            warehouse=settings.snowflake_warehouse,
            role=settings.snowflake_role,
        )

    try:
        with create_snowflake_connection(config=config, mock_mode=mock_mode) as conn:
            PracticeRepository(conn).replace_practice_sets(practice_id, sets)
    except Exception as e:
        print(f"ERROR saving practice: {e}")
        return False

    print(f"\n[OK] Saved practice {practice_id}")
    return True


def main():
    parser = argparse.ArgumentParser(description='Import a practice written in notation')
    parser.add_argument('--practice-id', required=True, type=UUID, help='Practice to replace')
    parser.add_argument('--file', required=True, help='Practice text file')
    parser.add_argument('--dry-run', action='store_true', help='Parse only, don\'t store')
    parser.add_argument('--mock', action='store_true', help='Store in an in-memory database')
    args = parser.parse_args()

    filepath = Path(args.file)
    if not filepath.exists():
        print(f"ERROR: Cannot find {args.file}")
        sys.exit(1)

    print(f"Parsing practice from: {filepath}")
    result = parse_practice(filepath.read_text(encoding='utf-8'))

    if not result.ok:
        print(f"\n{len(result.errors)} line(s) could not be parsed. Nothing was saved.\n")
        for error in result.errors:
            print(f"[ERR] {error.formatted}")
        sys.exit(1)

    if not result.sets:
        print("ERROR: No sets found in practice file")
        sys.exit(1)

    print_summary(result.sets)

    if args.dry_run:
        print("\n=== DRY RUN - Nothing stored ===")
        sys.exit(0)

    success = store_practice(args.practice_id, result.sets, mock_mode=args.mock)
    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
