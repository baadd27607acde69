# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                           CALENDAR SYNC RUNNER                             ║
# ║    One run: fetch upcoming events, merge them into the stored              ║
# ║    collection, and commit the file only when its content changed.          ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
runner.py: Orchestrates a single fetch, merge and conditional write.
"""
import asyncio
from typing import Optional

from calsync.config import Settings, load_settings, log_startup_config
from calsync.events import (
    GitHubContentStore,
    build_credentials,
    build_service,
    get_upcoming_events,
)
from calsync.utils.error_handling import CalendarSyncError, ConfigurationError
from calsync.utils.logging import logger, setup_logging

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ ADAPTER CONSTRUCTION                                                       ║
# ╚════════════════════════════════════════════════════════════════════════════╝

def create_store(settings: Settings) -> GitHubContentStore:
    return GitHubContentStore(
        repository=settings.repository,
        token=settings.repo_token,
        api_url=settings.api_url,
        branch=settings.branch,
        commit_message=settings.commit_message,
        committer={"name": settings.committer_name, "email": settings.committer_email},
    )

def create_service(settings: Settings):
    credentials = build_credentials(settings.google_token, settings.client_secrets)
    return build_service(credentials)

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ SYNC RUN                                                                   ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- run_sync ---
# Executes one sync run. Blocking API calls run in worker threads; each step
# waits for the previous one, so nothing is written unless the fetch and the
# merge both completed.
# Args:
#     settings: Validated configuration.
#     service: Calendar API resource; built from settings when None.
#     store: Persistence adapter; built from settings when None.
# Returns: True if the stored file was updated, False if nothing was written.
# Raises: CalendarSyncError subclasses on fetch, read or write failure.
async def run_sync(settings: Settings, service=None, store: Optional[GitHubContentStore] = None) -> bool:
    if service is None:
        service = create_service(settings)
    events = await asyncio.to_thread(
        get_upcoming_events, service, settings.calendar_id, settings.max_results
    )
    if not events:
        return False

    if store is None:
        store = create_store(settings)
    snapshot = await asyncio.to_thread(store.load, settings.json_path)
    collection = snapshot.collection

    before = collection.to_json()
    stored_count = len(collection)
    collection.merge(events)
    after = collection.to_json()

    if before == after:
        logger.info(f"Stored events at {settings.json_path} are up to date, nothing to commit")
        return False

    logger.info(f"Merged {len(events)} fetched events: {len(collection) - stored_count} new, {len(collection)} total")
    await asyncio.to_thread(store.save, settings.json_path, after, snapshot.sha)
    return True

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ ENTRY POINT                                                                ║
# ╚════════════════════════════════════════════════════════════════════════════╝

def main() -> int:
    """Run once and return a process exit status."""
    setup_logging()
    logger.info("Running calendar sync")
    try:
        settings = load_settings()
        log_startup_config(settings)
        updated = asyncio.run(run_sync(settings))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except CalendarSyncError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error during calendar sync: {e}")
        return 1
    logger.info("Calendar sync finished" + (" (file updated)" if updated else ""))
    return 0
