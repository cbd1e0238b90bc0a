# 공통 스키마
# - API JSON 은 camelCase (isPublished, totalPages ...), 파이썬 코드는 snake_case
# - 요청 본문은 두 형식 모두 허용 (populate_by_name)

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(CamelModel):
    message: str
