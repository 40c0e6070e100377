"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
필드는 snake_case, JSON 키는 camelCase(alias)로 내보낸다.
"""

from pydantic import BaseModel, Field

Amount = int | float


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="실행 모드 (production/development)")
    version: str = Field(..., description="앱 버전")
    schema_ready: bool = Field(default=True, alias="schemaReady", description="DB 스키마 초기화 여부")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """에러 응답"""

    code: str = Field(..., description="에러 코드 (VALIDATION, ALREADY_SETTLED 등)")
    message: str = Field(..., description="에러 메시지")


class SettlementStatusResponse(BaseModel):
    """월마감 상태 응답"""

    target_month: str = Field(..., alias="targetMonth", description="대상 월")
    settled: bool = Field(..., description="월마감 완료 여부")

    model_config = {"populate_by_name": True}


class SettlementResponse(BaseModel):
    """월마감 결과 응답"""

    target_month: str = Field(..., alias="targetMonth", description="대상 월")
    created_count: int = Field(..., alias="createdCount", description="생성 항목 수")
    skipped_count: int = Field(..., alias="skippedCount", description="건너뛴 템플릿 수")
    reflected_count: int = Field(..., alias="reflectedCount", description="자산 반영 항목 수")
    total_settled_amount: Amount = Field(
        ..., alias="totalSettledAmount", description="생성 항목 금액 합계"
    )

    model_config = {"populate_by_name": True}


class RollbackResponse(BaseModel):
    """월마감 취소 결과 응답"""

    target_month: str = Field(..., alias="targetMonth", description="대상 월")
    deleted_count: int = Field(..., alias="deletedCount", description="삭제 항목 수")
    reversed_amount: Amount = Field(
        ..., alias="reversedAmount", description="되돌린 자산 변동분 합계 (절대값)"
    )

    model_config = {"populate_by_name": True}


class LedgerEntryResponse(BaseModel):
    """원장 항목 응답"""

    id: str = Field(..., description="항목 ID")
    ledger_type: str = Field(..., alias="ledgerType", description="income / expense")
    name: str = Field(..., description="이름")
    amount: Amount = Field(..., description="금액")
    occurred_at: str = Field(..., alias="occurredAt", description="발생일 (YYYY-MM-DD)")
    category: str = Field(default="", description="카테고리")
    entry_source: str = Field(..., alias="entrySource", description="manual / auto_settlement")
    reflect_to_liquid_asset: bool = Field(
        ..., alias="reflectToLiquidAsset", description="유동자산 반영 여부"
    )
    reflected_amount: Amount = Field(..., alias="reflectedAmount", description="실제 반영 변동분")
    reflected_asset_id: str | None = Field(default=None, alias="reflectedAssetId")
    source_template_id: str | None = Field(default=None, alias="sourceTemplateId")
    settlement_month: str | None = Field(default=None, alias="settlementMonth")
    note: str = Field(default="", description="메모")

    model_config = {"populate_by_name": True}


class LedgerEntryListResponse(BaseModel):
    """월별 원장 항목 목록 응답"""

    target_month: str = Field(..., alias="targetMonth", description="대상 월")
    entries: list[LedgerEntryResponse] = Field(default_factory=list)
    count: int = Field(..., description="항목 수")

    model_config = {"populate_by_name": True}
