"""
Startup initialization: probe the remote data service, seed demo data locally.

Seeding only ever touches customers and projects, and only when the
respective local collection is empty. Time entries are never seeded.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from timekeeper.infra.local_store import LocalStore, StorageKeys
from timekeeper.infra.repository import Database

logger = logging.getLogger(__name__)


DEMO_CUSTOMERS = [
    {"id": "c1", "name": "Acme Inc", "email": "contact@acme.com", "company": "Acme"},
    {"id": "c2", "name": "Globex", "email": "info@globex.com", "company": "Globex Corp"},
    {"id": "c3", "name": "Umbrella Corp", "email": "hello@umbrella.com", "company": "Umbrella"},
]

DEMO_PROJECTS = [
    {"id": "p1", "name": "Website Redesign", "customer_id": "c1", "active": True},
    {"id": "p2", "name": "Mobile App", "customer_id": "c1", "active": True},
    {"id": "p3", "name": "Marketing Campaign", "customer_id": "c2", "active": True},
    {"id": "p4", "name": "Internal Tools", "customer_id": "c3", "active": True},
]


@dataclass
class InitializationResult:
    remote_connected: bool = False
    seeded_customers: bool = False
    seeded_projects: bool = False


async def seed_demo_data(local: LocalStore, result: InitializationResult) -> InitializationResult:
    """Write demo customers/projects into empty local collections"""
    created_at = datetime.now(timezone.utc).isoformat()

    if await local.is_empty(StorageKeys.CUSTOMERS):
        await local.replace_all(StorageKeys.CUSTOMERS,
                                [{**c, "created_at": created_at} for c in DEMO_CUSTOMERS])
        result.seeded_customers = True
        logger.info(f"Seeded {len(DEMO_CUSTOMERS)} demo customers")

    if await local.is_empty(StorageKeys.PROJECTS):
        await local.replace_all(StorageKeys.PROJECTS,
                                [{**p, "created_at": created_at} for p in DEMO_PROJECTS])
        result.seeded_projects = True
        logger.info(f"Seeded {len(DEMO_PROJECTS)} demo projects")

    return result


async def initialize_database(db: Database) -> InitializationResult:
    """
    Run once at startup.

    Remote configured and reachable -> nothing else to do.
    Remote failing (error reply or exception) or not configured -> seed the
    local store if it is empty.
    """
    result = InitializationResult()
    logger.info("Checking database connection...")

    if db.remote is None:
        logger.info("Using local storage (remote data service not configured)")
        return await seed_demo_data(db.local, result)

    try:
        probe = await db.remote.count_probe("customers")
    except Exception as e:
        logger.error(f"Error connecting to remote data service: {type(e).__name__}: {e}")
        return await seed_demo_data(db.local, result)

    if probe.error is not None:
        logger.error(f"Remote data service connection error: {probe.error}")
        return await seed_demo_data(db.local, result)

    result.remote_connected = True
    logger.info("Connected to remote data service successfully")
    return result
