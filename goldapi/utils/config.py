"""로깅 초기화 유틸리티"""

import json
import logging

# 배치 잡 / AWS SDK 로거는 WARNING 이상만 출력
NOISY_LOGGERS = ("apscheduler", "botocore", "boto3", "urllib3")


class JsonFormatter(logging.Formatter):
    """한 줄 JSON 로그 포맷터 (CloudWatch 검색용)"""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        log_record = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%d %H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False, default=str)


def init_logging(level: int = logging.INFO) -> None:
    """루트 로거에 JSON 핸들러를 설치합니다."""
    root = logging.getLogger()
    if root.hasHandlers():
        root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info("Logging initialized")
