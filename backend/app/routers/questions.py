from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_consistency_manager, get_lookup
from ..modules.catalog.consistency import ConsistencyManager
from ..modules.catalog.lookup import CatalogLookup
from ..modules.catalog.schemas import QuestionDTO

router = APIRouter(tags=["questions"])


@router.get("/questions/{questionId}", response_model=QuestionDTO)
def get_question(questionId: str, lookup: CatalogLookup = Depends(get_lookup)):
    return lookup.get_question_by_id(questionId)


# topicId is immutable; moving a question between topics is not supported.
@router.put("/questions/{questionId}", response_model=QuestionDTO)
def update_question(
    questionId: str,
    body: QuestionDTO,
    manager: ConsistencyManager = Depends(get_consistency_manager),
):
    return manager.update_question(questionId, body)
