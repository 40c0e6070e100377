"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- settlement: 반복 수입/지출 월마감
"""
