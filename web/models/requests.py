"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증
"""

from pydantic import AliasChoices, BaseModel, Field


class SettlementRequest(BaseModel):
    """월마감 / 월마감 취소 요청

    월 형식(YYYY-MM) 검증은 엔진에서 수행하여 VALIDATION 에러로 응답한다.
    """

    month: str = Field(
        ...,
        validation_alias=AliasChoices("month", "targetMonth"),
        description="대상 월 (YYYY-MM)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"month": "2024-02"},
                {"targetMonth": "2024-02"},
            ]
        }
    }
