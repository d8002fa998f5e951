from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_auditor, get_consistency_manager, get_lookup
from ..modules.catalog.consistency import ConsistencyManager
from ..modules.catalog.lookup import CatalogLookup
from ..modules.catalog.repair import ConsistencyAuditor
from ..modules.catalog.schemas import QuestionDTO, TopicAuditDTO, TopicDTO

router = APIRouter(tags=["topics"])


@router.get("/topics", response_model=list[TopicDTO])
def list_topics(lookup: CatalogLookup = Depends(get_lookup)):
    return lookup.get_all_topics()


@router.post("/topics", response_model=TopicDTO, status_code=201)
def create_topic(body: TopicDTO, manager: ConsistencyManager = Depends(get_consistency_manager)):
    return manager.create_topic(body)


@router.get("/topics/{topicId}", response_model=TopicDTO)
def get_topic(topicId: str, lookup: CatalogLookup = Depends(get_lookup)):
    return lookup.get_topic_by_id(topicId)


@router.put("/topics/{topicId}", response_model=TopicDTO)
def update_topic(topicId: str, body: TopicDTO, manager: ConsistencyManager = Depends(get_consistency_manager)):
    return manager.update_topic(topicId, body)


@router.delete("/topics/{topicId}")
def delete_topic(topicId: str, manager: ConsistencyManager = Depends(get_consistency_manager)):
    deleted = manager.delete_topic(topicId)
    return {"ok": True, "topicId": topicId, "deletedQuestions": deleted}


@router.get("/topics/{topicId}/questions", response_model=list[QuestionDTO])
def list_topic_questions(topicId: str, lookup: CatalogLookup = Depends(get_lookup)):
    return lookup.get_questions_by_topic(topicId)


@router.post("/topics/{topicId}/questions", response_model=QuestionDTO, status_code=201)
def add_question(topicId: str, body: QuestionDTO, manager: ConsistencyManager = Depends(get_consistency_manager)):
    return manager.add_question_to_topic(topicId, body)


@router.delete("/topics/{topicId}/questions/{questionId}")
def delete_question(topicId: str, questionId: str, manager: ConsistencyManager = Depends(get_consistency_manager)):
    manager.delete_question(topicId, questionId)
    return {"ok": True, "topicId": topicId, "questionId": questionId}


@router.get("/topics/{topicId}/consistency", response_model=TopicAuditDTO)
def audit_topic(topicId: str, auditor: ConsistencyAuditor = Depends(get_auditor)):
    return auditor.audit_topic(topicId).to_dto()


@router.post("/topics/{topicId}/repair", response_model=TopicAuditDTO)
def repair_topic(topicId: str, auditor: ConsistencyAuditor = Depends(get_auditor)):
    return auditor.repair_topic(topicId).to_dto()
