"""프레젠테이션 레이어 (CLI)."""
