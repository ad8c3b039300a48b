"""
앱 설정
========

기본값은 Config 클래스에 두고, VRFGAME_ 접두 환경 변수로 덮어쓴다.

  VRFGAME_DB_PATH    TinyDB JSON 파일 경로 (없으면 메모리 DB)
  VRFGAME_LOG_LEVEL  로깅 레벨 (기본 INFO)
  VRFGAME_SECRET_KEY Flask secret key
"""


class Config:
    SECRET_KEY = "key"
    DB_PATH = None
    LOG_LEVEL = "INFO"


class TestConfig(Config):
    TESTING = True
    LOG_LEVEL = "DEBUG"
