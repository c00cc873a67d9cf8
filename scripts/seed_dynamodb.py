"""Create the employee bank profile table and seed sample profiles.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import boto3

TABLE_BASE = "payrail-employee-banks"
DEFAULT_SEED = Path(__file__).resolve().parent.parent / "config" / "employee_banks_seed.json"


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create the bank profile table. Skips if it already exists."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    table_name = f"{TABLE_BASE}{suffix}"
    if table_name in existing:
        print(f"  Table {table_name} already exists, skipping")
        return
    client.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    print(f"  Created table {table_name}")


def seed_profiles(ddb: Any, suffix: str = "", seed_path: Path = DEFAULT_SEED) -> int:
    """Load employee bank profiles from JSON. Returns the number written."""
    data = json.loads(Path(seed_path).read_text())

    tbl = ddb.Table(f"{TABLE_BASE}{suffix}")
    with tbl.batch_writer() as batch:
        for profile in data["profiles"]:
            batch.put_item(Item={
                "PK": f"EMPLOYEE#{profile['employeeId']}",
                "SK": "BANK",
                **profile,
            })
    print(f"  Seeded {len(data['profiles'])} bank profiles")
    return len(data["profiles"])


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB bank profiles for PayRail")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--seed-file", default=str(DEFAULT_SEED), help="Profiles JSON file")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    print("Seeding data...")
    seed_profiles(ddb, suffix=args.table_suffix, seed_path=Path(args.seed_file))

    print("Done!")


if __name__ == "__main__":
    main()
