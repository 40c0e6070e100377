"""
유동자산 선택 전략

월마감 반영 대상 자산 하나를 고르는 함수. 엔진 생성 시 교체 가능하다.
선택된 자산 ID는 원장 항목과 정산 레코드에 저장되므로
취소 시 다시 선택하지 않는다.
"""

from collections.abc import Callable, Sequence
from datetime import date

from core.domain.models import Asset

AssetSelector = Callable[[Sequence[Asset]], Asset | None]


def select_most_recently_valued(assets: Sequence[Asset]) -> Asset | None:
    """평가일이 가장 최근인 자산 선택

    평가일이 같으면 asset_id가 작은 쪽. 평가일이 없는 자산은 가장 오래된 것으로 본다.
    """
    if not assets:
        return None

    return min(
        assets,
        key=lambda a: (-(a.valuation_date or date.min).toordinal(), a.asset_id),
    )
