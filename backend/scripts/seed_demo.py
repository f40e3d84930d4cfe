#!/usr/bin/env python
"""Idempotent seed script for demo profiles and spare-parts inventory.

Usage:
    python backend/scripts/seed_demo.py               # seed normally
    python backend/scripts/seed_demo.py --show        # print profiles and parts after seeding
    python backend/scripts/seed_demo.py --dry-run     # run logic then roll back (no store changes)
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
import textwrap

from werkzeug.security import generate_password_hash

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from tracker import create_app  # noqa: E402
from tracker.domain import Profile, Role, Sparepart, SparepartStatus  # noqa: E402
from tracker.store import get_store  # noqa: E402

log = logging.getLogger('tracker.seed')

DEMO_PARTS = (
    Sparepart('SP-001', 'Injector Nozzle', 24, SparepartStatus.AVAILABLE, 'Rack A1'),
    Sparepart('SP-002', 'Injector Seal Kit', 60, SparepartStatus.AVAILABLE, 'Rack A2'),
    Sparepart('SP-003', 'Fuel Pump Plunger', 8, SparepartStatus.AVAILABLE, 'Rack B1'),
    Sparepart('SP-004', 'Delivery Valve', 0, SparepartStatus.BACK_ORDER, 'Rack B2'),
    Sparepart('SP-005', 'Governor Spring', 0, SparepartStatus.ORDERED, 'Rack C1'),
)


class _DryRun(Exception):
    pass


def ensure_profiles(store, password: str, domain: str) -> int:
    created = 0
    for role in Role.ALL:
        if role == Role.CUSTOMER:
            continue
        username = f'{role.lower()}@{domain}'
        if store.get('users', username=username):
            continue
        profile = Profile(
            id=f'demo-{role.lower()}',
            username=username,
            role=role,
            password_hash=generate_password_hash(password),
        )
        store.insert('users', profile.to_record())
        created += 1
    return created


def ensure_parts(store) -> int:
    created = 0
    for part in DEMO_PARTS:
        if store.get('spareparts', part_id=part.part_id):
            continue
        store.insert('spareparts', part.to_record())
        created += 1
    return created


def print_summary(store):
    users = store.select('users', None, 'username')
    parts = store.select('spareparts', None, 'part_id')
    print('Profiles:')
    for u in users:
        print(f"  {u['role'].ljust(10)} {u['username']}")
    print('Spare parts:')
    for p in parts:
        print(f"  {p['part_id']}  {p['name'].ljust(20)} stock={str(p['stock']).rjust(3)}  {p['status']}")


def parse_args():
    p = argparse.ArgumentParser(
        description='Seed demo profiles & spare parts',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_demo.py\n  dry run: seed_demo.py --dry-run\n  show: seed_demo.py --show\n""")
    )
    p.add_argument('--show', action='store_true', help='Print profiles and parts after seeding')
    p.add_argument('--dry-run', action='store_true', help='Roll back after operations (no commit)')
    p.add_argument('--domain', default=os.getenv('SEED_EMAIL_DOMAIN', 'example.com'),
                   help='E-mail domain for the demo profiles')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    password = os.getenv('SEED_DEMO_PASSWORD', 'ChangeMe123!')
    with app.app_context():
        store = get_store()
        created_u = created_p = 0
        try:
            with store.atomic():
                created_u = ensure_profiles(store, password, args.domain)
                created_p = ensure_parts(store)
                if args.dry_run:
                    raise _DryRun()
        except _DryRun:
            print(f"[DRY-RUN] (rolled back) Profiles would create: {created_u}, Parts would create: {created_p}")
        else:
            log.info('seeded %d profiles, %d parts', created_u, created_p)
            print(f"[DONE] Profiles created: {created_u}, Parts created: {created_p}")
        if args.show:
            print_summary(store)


if __name__ == '__main__':
    main()
