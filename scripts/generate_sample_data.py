#!/usr/bin/env python3
"""Generate a sample policy portfolio.

Writes customers.json (legacy rows with embedded participants),
payments.json and an upload CSV to the output folder, and optionally
seeds a PostgreSQL database with the same data.
"""

import argparse
import csv
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from stone_river.generators import CustomerGenerator
from stone_river.models.policy.records import customer_to_row
from stone_river.scenarios import PortfolioScenario
from stone_river.sinks.serialization import serialize_value, to_dict_fast

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def save_json(data: list, filename: str, output_dir: Path) -> None:
    """Save data to JSON file."""
    filepath = output_dir / filename
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(serialize_value(data), f, indent=2, ensure_ascii=False)
    print(f"Saved {len(data)} records to {filepath}")


def save_upload_csv(scenario: PortfolioScenario, output_dir: Path, count: int, seed: int) -> None:
    """Write an upload file mixing new customers with ids already in the portfolio."""
    generator = CustomerGenerator(seed=seed + 1)
    rows = []
    for customer in generator.generate_batch(count):
        rows.append({
            "Policy Number": f"NEW{customer.customer_id:05d}",
            "First Name": customer.first_name,
            "Surname": customer.surname,
            "ID Number": customer.id_number,
        })

    existing = list(scenario.store.customers.values())[:2]
    for customer in existing:
        rows.append({
            "Policy Number": customer.policy_number,
            "First Name": customer.first_name,
            "Surname": customer.surname,
            "ID Number": customer.id_number,
        })
    if rows:
        rows.append(dict(rows[0]))

    filepath = output_dir / "upload-sample.csv"
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0]))
        writer.writeheader()
        writer.writerows(rows)
    print(f"Saved {len(rows)} upload rows to {filepath}")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate a sample policy portfolio")
    parser.add_argument(
        "--customers",
        type=int,
        default=100,
        help="Number of customers to generate (default: 100)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="local",
        help="Output folder for JSON/CSV files (default: local)",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=None,
        help="Also seed this PostgreSQL database",
    )
    args = parser.parse_args()

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    scenario = PortfolioScenario(num_customers=args.customers, seed=args.seed)
    store = scenario.generate()
    customers = store.load_customers()
    payments = store.load_payments()

    save_json([customer_to_row(c) for c in customers], "customers.json", output_dir)
    save_json([to_dict_fast(p) for p in payments], "payments.json", output_dir)
    save_upload_csv(scenario, output_dir, count=10, seed=args.seed)

    if args.postgres_url:
        from stone_river.store.postgres import PostgresStore

        pg = PostgresStore(args.postgres_url)
        try:
            pg.create_tables()
            pg.add_customers(customers)
            pg.add_payments(payments)
        finally:
            pg.close()

    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    for name, value in scenario.get_summary().items():
        print(f"  {name}: {value}")


if __name__ == "__main__":
    main()
