"""Command line interface for income-proof."""

import argparse
import asyncio
import logging
import sys
import uuid
from pathlib import Path

from income_proof.analysis import monthly_totals
from income_proof.config import IncomeProofConfig
from income_proof.engine import IncomeProofEngine
from income_proof.exceptions import IncomeProofError, JurisdictionBlockedError
from income_proof.feeds import SyntheticTransactionFeed
from income_proof.formatting import format_currency, format_date, format_month, shorten_address
from income_proof.logging import setup_logging
from income_proof.models import (
    IncomeProfile,
    Notification,
    NotificationKind,
    ProofRecord,
    QueryKind,
    VerificationResult,
)
from income_proof.proofs import JurisdictionTable
from income_proof.sinks import ConsoleSink, JsonFileSink
from income_proof.store import ProofRegistry, load_registry, locked_registry
from income_proof.wallet import StaticWalletProvider, wallet_context

logger = logging.getLogger(__name__)


def notify(kind: NotificationKind, title: str, message: str) -> Notification:
    """Build and print a notification."""
    notification = Notification(kind, title, message, notification_id=uuid.uuid4().hex)
    stream = sys.stderr if kind in (NotificationKind.ERROR, NotificationKind.WARNING) else sys.stdout
    print(f"[{kind.value.upper()}] {title}: {message}", file=stream)
    return notification


def print_profile(profile: IncomeProfile, employers: dict[str, str] | None = None) -> None:
    employers = employers or {}
    print(f"Total income:       {format_currency(profile.total_income)}")
    print(f"Average monthly:    {format_currency(profile.average_monthly_income)}")
    print(f"Payments:           {profile.payment_count} over {profile.distinct_months} months")
    print(f"Employers:          {profile.employer_count}")
    print(f"Payment frequency:  {profile.payment_frequency.value}")
    print("Monthly totals:")
    for month, total in monthly_totals(profile.transactions).items():
        print(f"  {format_month(month)}  {format_currency(total)}")
    print("Recent payments:")
    for tx in profile.transactions[:5]:
        print(
            f"  {format_date(tx.timestamp)}  {format_currency(tx.amount):>8}  "
            f"from {employers.get(tx.from_address, shorten_address(tx.from_address))}  {tx.memo}"
        )


def print_record(record: ProofRecord) -> None:
    print(f"Token:              #{record.token_id}")
    print(f"Wallet:             {record.wallet_address}")
    print(f"Issued:             {format_date(record.verification_timestamp)}")
    print(f"Average monthly:    {format_currency(record.average_monthly_income)}")
    print(f"Payment frequency:  {record.payment_frequency.value}")
    print(f"Employers:          {record.employer_count}")
    print(f"Verification hash:  {record.verification_hash}")
    print(f"Token URI:          {record.token_uri}")
    print(f"Valid:              {'yes' if record.is_valid else 'no (revoked)'}")


def _build_engine(
    args: argparse.Namespace,
    config: IncomeProofConfig,
    registry: ProofRegistry | None = None,
) -> IncomeProofEngine:
    sinks: list = []
    if args.events_dir:
        sinks.append(JsonFileSink(args.events_dir))
    if args.echo_events:
        sinks.append(ConsoleSink(pretty=False))

    feed = SyntheticTransactionFeed(seed=args.seed if args.seed is not None else config.seed)
    if registry is None:
        registry = load_registry(args.registry)
    return IncomeProofEngine.from_config(config, feed, registry=registry, sinks=sinks)


def cmd_scan(args: argparse.Namespace, config: IncomeProofConfig) -> int:
    engine = _build_engine(args, config)
    wallet = wallet_context(
        StaticWalletProvider(args.wallet, config.network.chain_id), config.network.name
    )
    profile = asyncio.run(engine.scan(wallet))
    print_profile(profile, engine.feed_client.feed.employer_directory(wallet.address))
    notify(
        NotificationKind.SUCCESS,
        "Scan Complete",
        f"Found {profile.payment_count} income transactions",
    )
    return 0


def cmd_mint(args: argparse.Namespace, config: IncomeProofConfig) -> int:
    wallet = wallet_context(
        StaticWalletProvider(args.wallet, config.network.chain_id), config.network.name
    )
    # Load, allocate and save under one registry file lock
    try:
        with locked_registry(args.registry, config.registry.lock_timeout) as registry:
            engine = _build_engine(args, config, registry)
            try:
                profile = asyncio.run(engine.scan(wallet))
                record = engine.mint(profile, wallet, args.jurisdiction)
            finally:
                engine.close()
    except JurisdictionBlockedError as e:
        notify(NotificationKind.ERROR, "Jurisdiction Blocked", str(e))
        return 1

    print_record(record)
    notify(
        NotificationKind.SUCCESS,
        "Proof Minted",
        f"Your income proof #{record.token_id} has been minted",
    )
    return 0


def cmd_verify(args: argparse.Namespace, config: IncomeProofConfig) -> int:
    engine = _build_engine(args, config)
    result: VerificationResult = engine.verify(args.kind, args.value)

    if not result.found:
        notify(
            NotificationKind.ERROR,
            "Not Found",
            result.error or "No income proof found for the given input",
        )
        return 1

    print_record(result.record)
    if result.is_valid:
        notify(NotificationKind.SUCCESS, "Proof Verified", "Income proof found and validated")
        return 0
    notify(NotificationKind.WARNING, "Invalid Proof", result.error or "Proof is not valid")
    return 1


def cmd_history(args: argparse.Namespace, config: IncomeProofConfig) -> int:
    engine = _build_engine(args, config)
    records = engine.history(args.wallet)
    if not records:
        notify(NotificationKind.INFO, "No Proofs", "You haven't minted any income proofs yet")
        return 0

    for record in records:
        status = "valid" if record.is_valid else "revoked"
        print(
            f"#{record.token_id:<5} {format_date(record.verification_timestamp)}  "
            f"{format_currency(record.average_monthly_income):>8}/month  "
            f"{record.payment_frequency.value:<9}  {status}"
        )
    return 0


def cmd_revoke(args: argparse.Namespace, config: IncomeProofConfig) -> int:
    with locked_registry(args.registry, config.registry.lock_timeout) as registry:
        engine = _build_engine(args, config, registry)
        try:
            record = engine.revoke(args.token_id, args.reason)
        finally:
            engine.close()
    notify(NotificationKind.INFO, "Proof Revoked", f"Proof #{record.token_id} is no longer valid")
    return 0


def cmd_export_postgres(args: argparse.Namespace, config: IncomeProofConfig) -> int:
    from income_proof.store.postgres import PostgresProofRepository

    registry = load_registry(args.registry)
    repository = PostgresProofRepository(config.postgres.connection_string)
    repository.create_table()
    count = repository.save_all(registry.records())
    notify(NotificationKind.SUCCESS, "Export Complete", f"Exported {count} proofs to PostgreSQL")
    return 0


def cmd_jurisdictions(args: argparse.Namespace, config: IncomeProofConfig) -> int:
    table = JurisdictionTable.default(config.registry.blocked_jurisdictions)
    print("Permitted:")
    for j in table.permitted():
        print(f"  {j.code:<3} {j.name}")
    print("Blocked:")
    for j in table.blocked():
        print(f"  {j.code:<3} {j.name}")
    return 0


def build_parser(config: IncomeProofConfig) -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="income-proof",
        description="Analyze wallet income and issue verifiable income proofs",
    )
    parser.add_argument("--log-level", default=config.log_level, help="Log level (default: INFO)")
    parser.add_argument(
        "--registry",
        type=Path,
        default=config.registry.path,
        help=f"Registry JSON file (default: {config.registry.path})",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the synthetic feed")
    parser.add_argument("--events-dir", type=Path, default=None, help="Write proof events as JSON Lines")
    parser.add_argument("--echo-events", action="store_true", help="Print proof events to stdout")

    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Analyze a wallet's income")
    scan.add_argument("--wallet", required=True, help="Wallet address")
    scan.set_defaults(func=cmd_scan)

    mint = sub.add_parser("mint", help="Scan a wallet and mint an income proof")
    mint.add_argument("--wallet", required=True, help="Wallet address")
    mint.add_argument("--jurisdiction", default="US", help="Jurisdiction code (default: US)")
    mint.set_defaults(func=cmd_mint)

    verify = sub.add_parser("verify", help="Verify an income proof")
    verify.add_argument(
        "--kind",
        choices=[k.value for k in QueryKind],
        default=QueryKind.TOKEN_ID.value,
        help="Lookup key (default: tokenId)",
    )
    verify.add_argument("value", help="Token id, verification hash or wallet address")
    verify.set_defaults(func=cmd_verify)

    history = sub.add_parser("history", help="List proofs minted by a wallet")
    history.add_argument("--wallet", required=True, help="Wallet address")
    history.set_defaults(func=cmd_history)

    revoke = sub.add_parser("revoke", help="Revoke an income proof")
    revoke.add_argument("token_id", type=int, help="Token id to revoke")
    revoke.add_argument("--reason", default="", help="Reason recorded in the audit log")
    revoke.set_defaults(func=cmd_revoke)

    jurisdictions = sub.add_parser("jurisdictions", help="List permitted and blocked jurisdictions")
    jurisdictions.set_defaults(func=cmd_jurisdictions)

    export = sub.add_parser("export-postgres", help="Copy the registry into PostgreSQL (POSTGRES_* env vars)")
    export.set_defaults(func=cmd_export_postgres)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    config = IncomeProofConfig.from_env()
    args = build_parser(config).parse_args(argv)
    setup_logging(args.log_level, config.log_format)

    try:
        return args.func(args, config)
    except IncomeProofError as e:
        logger.debug("Command failed", exc_info=True)
        notify(NotificationKind.ERROR, type(e).__name__, str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
