import math
from typing import Optional

from .database import MAX_DB_INT
from .models import CustomModel


class Pagination(CustomModel):
    page: int
    limit: int
    total: int
    pages: int


def _parse_positive_int(raw: Optional[str], default: int) -> int:
    """숫자가 아니거나 1 미만이면 기본값을 사용합니다 (에러로 처리하지 않음)."""
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def resolve_page(raw_page: Optional[str], raw_limit: Optional[str], *, default_limit: int, max_limit: int) -> tuple[int, int]:
    page = _parse_positive_int(raw_page, 1)
    limit = min(_parse_positive_int(raw_limit, default_limit), max_limit)
    # OFFSET이 DB 정수 범위를 넘는 page는 잘못된 값으로 보고 기본값 사용
    if (page - 1) * limit > MAX_DB_INT:
        page = 1
    return page, limit


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
