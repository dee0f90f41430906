"""
App layer: 비교 서버 (FastAPI + HTMX).

역할:
- 파일 업로드, threshold 입력, 리포트 다운로드
- ⚠️ 비교 로직 없음 (core에 위임)
"""
