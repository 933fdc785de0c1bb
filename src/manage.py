"""Taxonomy database management CLI.

The storage provider comes from taxonomy/domain.toml, selected with
PROTEAN_ENV (for example ``PROTEAN_ENV=sqlite``).

Usage:
    python src/manage.py setup-db            # Create the categories table
    python src/manage.py drop-db             # Drop it
    python src/manage.py check-tree          # Audit ancestor caches, slugs and parent links
    python src/manage.py rebuild-ancestors   # Recompute every ancestor cache from parent links
"""

import argparse
import sys


def _domain():
    from taxonomy.domain import taxonomy

    print("Initializing taxonomy domain...")
    taxonomy.init()
    return taxonomy


def setup_database(domain):
    from taxonomy.utils.db import setup_db

    print("Creating taxonomy database schema...")
    setup_db(domain)
    print("Done.")


def drop_database(domain):
    from taxonomy.utils.db import drop_db

    print("Dropping taxonomy database schema...")
    drop_db(domain)
    print("Done.")


def check_tree(domain) -> int:
    from taxonomy.category.services import get_services

    with domain.domain_context():
        violations = get_services().auditor.audit()
    for violation in violations:
        print(f"  [{violation.kind}] {violation.category_id}: {violation.detail}")
    if violations:
        print(f"{len(violations)} violation(s) found. Run 'rebuild-ancestors' to repair stale caches.")
        return 1
    print("Category tree is consistent.")
    return 0


def rebuild_ancestors(domain) -> int:
    from taxonomy.category.services import get_services

    with domain.domain_context():
        reports = get_services().auditor.rebuild()
    updated = sum(len(report.updated_ids) for report in reports)
    failed = [failed_id for report in reports for failed_id in report.failed_ids]
    print(f"Recomputed {updated} categor{'y' if updated == 1 else 'ies'} from {len(reports)} root(s).")
    if failed:
        print(f"Failed branches: {', '.join(failed)}")
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description="Taxonomy database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("check-tree", help="Report hierarchy invariant violations")
    subparsers.add_parser("rebuild-ancestors", help="Recompute every ancestor cache")

    args = parser.parse_args()
    domain = _domain()

    if args.command == "setup-db":
        setup_database(domain)
    elif args.command == "drop-db":
        drop_database(domain)
    elif args.command == "check-tree":
        sys.exit(check_tree(domain))
    elif args.command == "rebuild-ancestors":
        sys.exit(rebuild_ancestors(domain))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
