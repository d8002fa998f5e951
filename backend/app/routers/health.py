from __future__ import annotations

from fastapi import APIRouter

from ..settings import settings

router = APIRouter()


@router.get("/", tags=["health"])
def health():
    return {
        "message": "Topic/Question Catalog API",
        "version": "1.0.0",
        "status": "running",
        "port": settings.port,
        "environment": settings.normalized_environment,
        "store": settings.normalized_catalog_store,
        "dynamodb": "configured" if settings.ddb_table_name else "missing",
        "endpoints": [
            "GET /api/topics",
            "POST /api/topics",
            "GET /api/topics/{topicId}",
            "PUT /api/topics/{topicId}",
            "DELETE /api/topics/{topicId}",
            "GET /api/topics/{topicId}/questions",
            "POST /api/topics/{topicId}/questions",
            "DELETE /api/topics/{topicId}/questions/{questionId}",
            "GET /api/questions/{questionId}",
            "PUT /api/questions/{questionId}",
            "GET /api/topics/{topicId}/consistency",
            "POST /api/topics/{topicId}/repair",
        ],
    }
