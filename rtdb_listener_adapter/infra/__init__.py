"""인프라 레이어: Query/DataSnapshot 바인딩과 설정 로더."""
