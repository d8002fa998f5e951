from __future__ import annotations

from typing import Any

from ..deps import get_entity_store
from ..modules.catalog.repair import ConsistencyAuditor
from ..modules.catalog.store import EntityStore
from ..observability.logging import configure_logging, get_logger
from ..settings import settings

log = get_logger("consistency_repair_worker")


def run_once(*, store: EntityStore | None = None, delete_orphans: bool = True) -> dict[str, Any]:
    """
    One repair pass over the whole catalog. Safe to run from cron/ECS scheduled task.

    Orphan questions go first: their topic is gone, so no topic pass would
    ever find them.
    """
    auditor = ConsistencyAuditor(store or get_entity_store())

    orphans = auditor.repair_orphans() if delete_orphans else auditor.find_orphan_questions()
    repaired = auditor.repair_all_topics()

    out = {
        "ok": True,
        "orphanQuestions": len(orphans),
        "orphansDeleted": bool(delete_orphans),
        "repairedTopics": len(repaired),
        "danglingIds": sum(len(a.dangling_ids) for a in repaired),
        "unlistedIds": sum(len(a.unlisted_ids) for a in repaired),
        "duplicateIds": sum(len(a.duplicate_ids) for a in repaired),
    }
    log.info("consistency_repair_done", **out)
    return out


if __name__ == "__main__":
    configure_logging(level=settings.log_level)
    run_once()
