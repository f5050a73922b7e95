#!/usr/bin/env python
"""Idempotent seed script for the admin bootstrap.

Usage:
    python backend/scripts/seed_authz.py                      # seed normally
    python backend/scripts/seed_authz.py --email ops@x.io     # seed a different admin
    python backend/scripts/seed_authz.py --dry-run            # run logic then rollback (no DB changes)
    python backend/scripts/seed_authz.py --show               # print the admin's grants afterwards
    python backend/scripts/seed_authz.py --validate           # report rows that can never match
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from authapi import create_app, get_db  # type: ignore
from authapi.models.authz import Base, Permission
from authapi.services.policy import load_subject_claims
from authapi.services.seed import seed_admin, validate_grants
import authapi.models.category  # noqa: F401
import authapi.models.product  # noqa: F401
import authapi.models.navigation  # noqa: F401


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed the Admin role, admin user and its wildcard grants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_authz.py\n  dry run: seed_authz.py --dry-run\n  show grants: seed_authz.py --show\n""")
    )
    p.add_argument('--email', default=os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com'), help='Admin user email')
    p.add_argument('--show', action='store_true', help='Print the admin permission rows and claims after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--validate', action='store_true', help='Report grants that can never match; exits 2 on problems')
    return p.parse_args()


def print_grants(session, user_id: str):
    rows = session.execute(select(Permission).where(Permission.subject_id.in_([user_id, '*']))).scalars().all()
    print(f"Permissions for {user_id}:")
    for p in rows:
        print(f"  {p.subject_type}:{p.subject_id} may {p.action} {p.resource_type}/{p.resource_id}")
    print("Claims:")
    for c in load_subject_claims(session, user_id):
        print(f"  {c.display_name} ({c.action} {c.resource_type})")


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM permissions LIMIT 1'))
        except Exception:
            # Bootstrap fallback when migrations have not run; prefer `alembic upgrade head`
            session.rollback()
            Base.metadata.create_all(session.get_bind())
        finally:
            session.commit()

    with app.app_context():
        session = get_db()
        try:
            result = seed_admin(session, args.email)
            if args.validate:
                problems = validate_grants(session)
                if problems:
                    print('\n[VALIDATION] FAIL:')
                    for p in problems:
                        print(' -', p)
                    session.rollback()
                    sys.exit(2)
                print('[VALIDATION] OK: all grants can match a route requirement.')
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) {result}")
            else:
                session.commit()
                print(f"[DONE] admin {args.email}: {result}")
            if args.show:
                print_grants(session, result['user_id'])
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

if __name__ == '__main__':
    main()
