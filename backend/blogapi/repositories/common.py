# 저장소 공통 유틸
# - 경로 파라미터로 들어온 문자열 id → ObjectId 변환
# - 드라이버의 DuplicateKeyError 에서 중복 필드명 추출

import re
from typing import Any, Optional

from beanie import PydanticObjectId
from pymongo.errors import DuplicateKeyError

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def parse_object_id(value: Any) -> Optional[PydanticObjectId]:
    """24자리 hex 문자열만 ObjectId 로 인정합니다. 그 외는 None (→ 404 처리)."""
    if isinstance(value, PydanticObjectId):
        return value
    if value is None or not _OBJECT_ID_RE.match(str(value)):
        return None
    return PydanticObjectId(str(value))


def duplicate_field(error: DuplicateKeyError) -> Optional[str]:
    details = error.details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    if key_pattern:
        return next(iter(key_pattern))
    return None
