from datetime import datetime, timezone
from zoneinfo import ZoneInfo
from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from .config import settings

class CustomModel(BaseModel):
    """
    프로젝트의 모든 Pydantic 스키마가 상속받는 공통 기본 모델.
    API 데이터 정책을 중앙에서 관리합니다.
    """
    model_config = ConfigDict(
        # 프론트엔드(React)와 협의된 camelCase 필드명으로 입출력합니다.
        alias_generator=to_camel,

        # True일 경우, 필드 이름(snake_case)으로도 값을 할당할 수 있습니다.
        populate_by_name=True,

        # SQLAlchemy 모델 객체를 Pydantic 스키마로 변환 가능하게 합니다.
        from_attributes=True,

        # 정의되지 않은 필드가 들어오면 검증 에러로 처리합니다.
        extra="forbid",
    )

    @field_serializer('*', mode="wrap", check_fields=False)
    def serialize_datetime(self, value, handler, _info):
        """datetime 객체를 설정된 시간대 기준 ISO 8601 문자열로 변환합니다."""
        if isinstance(value, datetime):
            tz = ZoneInfo(settings.TIMEZONE)
            if value.tzinfo is None:
                # sqlite 등 시간대 정보 없이 돌아오는 값은 UTC로 간주합니다.
                value = value.replace(tzinfo=timezone.utc)
            return value.astimezone(tz).isoformat()
        return handler(value)
