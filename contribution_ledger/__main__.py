"""Entry point for the contribution ledger command line"""
import argparse
import json
import logging
import os
import sys
import traceback
from typing import List, Optional

from contribution_ledger.config import Settings, settings
from contribution_ledger.db import db
from contribution_ledger.models.contribution import AccessPolicy
from contribution_ledger.models.report import ContributorView, LedgerSummary, RecordView
from contribution_ledger.registry import ContributionRegistry
from contribution_ledger.services.storage import StorageService
from contribution_ledger.services.vault import InMemoryVault

logger = logging.getLogger(__name__)

def build_summary(registry: ContributionRegistry, latest: int = 10, top: int = 10) -> LedgerSummary:
    """Collect the current ledger state into a report"""
    stats = registry.global_stats()
    policy = registry.policy
    count = registry.record_count()
    latest_records = [
        RecordView(index=count - 1 - offset, **record.__dict__)
        for offset, record in enumerate(registry.latest(latest))
    ]
    return LedgerSummary(
        custodian=policy.custodian,
        minimum_contribution=policy.minimum_contribution,
        total_value_received=stats.total_value_received,
        total_record_count=stats.total_record_count,
        total_gasless_count=stats.total_gasless_count,
        contributor_count=len(stats.known_contributors),
        top_contributors=[
            ContributorView(contributor=contributor, total_value_received=total)
            for contributor, total in registry.top_contributors(top)
        ],
        latest_records=latest_records,
        metadata={
            'version': '1.0.0',
            'top_contributors_order': 'first_seen'
        }
    )

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='contribution_ledger', description='Append-only contribution ledger')
    commands = parser.add_subparsers(dest='command')

    summary = commands.add_parser('summary', help='Write a ledger summary report')
    summary.add_argument('--latest', type=int, default=10, help='Number of recent records to include')
    summary.add_argument('--top', type=int, default=10, help='Number of contributors to include')

    contribute = commands.add_parser('contribute', help='Record a value-bearing contribution')
    contribute.add_argument('--caller', required=True)
    contribute.add_argument('--amount', type=int, required=True)
    contribute.add_argument('--note', default='')

    gasless = commands.add_parser('gasless', help='Record gasless contributions, one per note')
    gasless.add_argument('--caller', required=True)
    gasless.add_argument('notes', nargs='+')

    minimum = commands.add_parser('set-minimum', help='Change the minimum contribution')
    minimum.add_argument('--caller', required=True)
    minimum.add_argument('--value', type=int, required=True)

    custodian = commands.add_parser('set-custodian', help='Hand the custodian role to another identity')
    custodian.add_argument('--caller', required=True)
    custodian.add_argument('--new', dest='new_custodian', required=True)

    return parser

def execute(args: argparse.Namespace, registry: ContributionRegistry, config: Settings) -> None:
    """Run one parsed command against the registry"""
    command = args.command or 'summary'

    if command == 'contribute':
        index = registry.submit_value_contribution(args.caller, args.amount, args.note)
        logger.info(f"Recorded value contribution at index {index}")
    elif command == 'gasless':
        indices = registry.submit_gasless_batch(args.caller, args.notes)
        logger.info(f"Recorded gasless contributions at indices {indices}")
    elif command == 'set-minimum':
        registry.set_minimum_contribution(args.caller, args.value)
    elif command == 'set-custodian':
        registry.set_custodian(args.caller, args.new_custodian)
    elif command == 'summary':
        summary = build_summary(registry, getattr(args, 'latest', 10), getattr(args, 'top', 10))
        os.makedirs(config.OUTPUT_DIR, exist_ok=True)
        output_path = os.path.join(config.OUTPUT_DIR, "results.json")
        with open(output_path, 'w') as f:
            f.write(summary.model_dump_json(indent=2))
        logger.info(f"Summary written to {output_path}")
        logger.info(f"Summary: {summary.model_dump_json()}")
    else:
        raise ValueError(f"Unsupported command: {command}")

def run(argv: Optional[List[str]] = None) -> None:
    """Parse arguments, restore the ledger and run the requested command."""
    logging.basicConfig(level=settings.LOG_LEVEL, format='%(message)s')
    args = build_parser().parse_args(argv)

    try:
        # Initialize database connection
        db.init()

        # Log config
        logger.info("Using configuration:")
        logger.info(json.dumps(settings.model_dump(), indent=2))

        with db.session() as session:
            registry = ContributionRegistry.restore(
                StorageService(session),
                # value custody is external to this process
                InMemoryVault(),
                AccessPolicy(custodian=settings.CUSTODIAN, minimum_contribution=settings.MINIMUM_CONTRIBUTION),
                limits=settings.ledger_limits
            )
            execute(args, registry, settings)

    except Exception as e:
        logger.error(f"Error running ledger command: {e}")
        traceback.print_exc()
        sys.exit(1)
    finally:
        db.dispose()

if __name__ == "__main__":
    run()
