"""API endpoints для работы с тегами."""

from fastapi import APIRouter, Depends

from ..services import TagService
from .dependencies import get_tag_service
from .schemas import ErrorResponse, TagCreate, TagResponse

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=list[TagResponse], summary="Все теги")
async def list_tags(service: TagService = Depends(get_tag_service)) -> list[TagResponse]:
    return [TagResponse.model_validate(t) for t in await service.list_tags()]


@router.post(
    "",
    response_model=TagResponse,
    summary="Получить или создать тег",
    description="Идемпотентно: при точном совпадении имени возвращается существующий тег.",
    responses={400: {"model": ErrorResponse, "description": "Пустое название"}},
)
async def ensure_tag(data: TagCreate, service: TagService = Depends(get_tag_service)) -> TagResponse:
    return TagResponse.model_validate(await service.ensure_tag(data.name))
