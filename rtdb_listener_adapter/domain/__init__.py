"""실시간 데이터베이스 어댑터 도메인 레이어."""
