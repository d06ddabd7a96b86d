import argparse
import asyncio

from offerpool.core import security
from offerpool.db.session import SessionLocal
from offerpool.services import pool_population


async def populate_pool(*, per_category: int, country_code: str, replace_existing: bool) -> None:
    async with SessionLocal() as session:
        inserted, removed = await pool_population.populate_pool(
            session,
            per_category=per_category,
            country_code=country_code,
            replace_existing=replace_existing,
        )
    print(f"Inserted {inserted} offers ({removed} removed) for {country_code.upper()}")


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1 or value > 500:
        raise argparse.ArgumentTypeError("must be between 1 and 500")
    return value


def _add_pool_commands(subparsers) -> None:
    populate = subparsers.add_parser("populate-pool", help="Fill the offer pool with generated merchant offers")
    populate.add_argument("--per-category", type=_positive_int, default=50, help="Offers generated per category")
    populate.add_argument("--country", default="IN", help="2-letter country code for the generated offers")
    populate.add_argument(
        "--replace-existing",
        action="store_true",
        help="Delete existing pool rows for the country before inserting",
    )


def _add_token_command(subparsers) -> None:
    token = subparsers.add_parser("admin-token", help="Mint an admin bearer token for the pool endpoints")
    token.add_argument("--subject", required=True, help="Operator identifier stored in the token")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offer pool operations")
    subparsers = parser.add_subparsers(dest="command")
    _add_pool_commands(subparsers)
    _add_token_command(subparsers)
    return parser


def _run_cli_command(args: argparse.Namespace) -> bool:
    if args.command == "populate-pool":
        country = (args.country or "").strip()
        if len(country) != 2:
            raise SystemExit("Country must be a 2-letter code")
        asyncio.run(
            populate_pool(
                per_category=args.per_category,
                country_code=country,
                replace_existing=bool(args.replace_existing),
            )
        )
        return True

    if args.command == "admin-token":
        subject = (args.subject or "").strip()
        if not subject:
            raise SystemExit("Subject is required")
        print(security.create_admin_token(subject))
        return True

    return False


def main():
    parser = _build_parser()
    args = parser.parse_args()
    if not _run_cli_command(args):
        parser.print_help()


if __name__ == "__main__":
    main()
