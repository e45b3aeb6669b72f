"""
정기 작업 스케줄러 (APScheduler, Asia/Kolkata)

- points_recalculation: 매일 02:00 사용 가능 포인트 재계산
- maturity_redemption: 매일 23:00 만기 상환 요청 생성
- gold_accrual: 매월 (redemptionWindow + 1)일 03:00 포인트 -> 적립 금 전환

각 작업은 자체 세션을 열고, 실패는 로그만 남깁니다 (재시도 없음).
"""

import asyncio
import inspect
import logging
from contextlib import AbstractContextManager
from typing import Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from goldapi.config import Settings
from goldapi.database.session import get_db_context
from goldapi.models.settings import SettingKey
from goldapi.schemas.batch import ScheduledJobInfo, SchedulerStatusResponse
from goldapi.services.accrual_service import AccrualService
from goldapi.services.maturity_service import MaturityService
from goldapi.services.points_recalculation_service import PointsRecalculationService
from goldapi.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

SessionContextFactory = Callable[[], AbstractContextManager]

POINTS_RECALCULATION_JOB = "points_recalculation"
MATURITY_REDEMPTION_JOB = "maturity_redemption"
GOLD_ACCRUAL_JOB = "gold_accrual"


def accrual_day(redemption_window: int) -> int:
    """상환 기간 다음 날 (28일을 넘으면 1일)"""
    day = redemption_window + 1
    return 1 if day > 28 else day


def accrual_cron(redemption_window: int) -> str:
    return f"0 3 {accrual_day(redemption_window)} * *"


def run_points_recalculation(db: Session):
    return PointsRecalculationService(db).recalculate_all()


def run_maturity_redemption(db: Session):
    return MaturityService(db).process_matured_schemes()


def run_gold_accrual(db: Session):
    return AccrualService(db).convert_points_to_accrued_gold()


class GoldJobScheduler:
    """정기 작업 등록/실행"""

    def __init__(
        self,
        settings: Settings,
        session_factory: SessionContextFactory = get_db_context,
    ):
        self.settings = settings
        self._session_factory = session_factory
        self._timezone = ZoneInfo(settings.TIMEZONE)
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._crons: Dict[str, str] = {}

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def _resolve_accrual_cron(self) -> str:
        window = self.settings.DEFAULT_REDEMPTION_WINDOW
        try:
            with self._session_factory() as db:
                window = SettingsService(db).get_int(SettingKey.REDEMPTION_WINDOW, window)
        except Exception as e:
            logger.error(f"Failed to read redemption window, using default {window}: {str(e)}")
        return accrual_cron(window)

    def job_definitions(self) -> List[tuple]:
        return [
            (POINTS_RECALCULATION_JOB, self.settings.POINTS_RECALCULATION_CRON, run_points_recalculation),
            (MATURITY_REDEMPTION_JOB, self.settings.MATURITY_REDEMPTION_CRON, run_maturity_redemption),
            (GOLD_ACCRUAL_JOB, self._resolve_accrual_cron(), run_gold_accrual),
        ]

    def start(self) -> None:
        if self.is_running:
            return

        scheduler = AsyncIOScheduler(timezone=self._timezone)
        for job_id, cron, func in self.job_definitions():
            trigger = CronTrigger.from_crontab(cron, timezone=self._timezone)
            scheduler.add_job(
                self._wrap_job(job_id, func),
                trigger=trigger,
                id=job_id,
                replace_existing=True,
            )
            self._crons[job_id] = cron
            logger.info(f"Registered scheduled job {job_id} ({cron} {self.settings.TIMEZONE})")

        scheduler.start()
        self._scheduler = scheduler
        logger.info(f"Gold job scheduler started with {len(self._crons)} jobs")

    async def stop(self) -> None:
        if not self._scheduler:
            return
        result = self._scheduler.shutdown(wait=False)
        if inspect.isawaitable(result):
            await result
        self._scheduler = None
        logger.info("Gold job scheduler stopped")

    def run_job(self, job_id: str, func: Callable[[Session], object]):
        """작업 1회 실행 (자체 세션)"""
        logger.info(f"Scheduled job {job_id} started")
        with self._session_factory() as db:
            result = func(db)
        logger.info(f"Scheduled job {job_id} completed: {result}")
        return result

    def _wrap_job(self, job_id: str, func: Callable[[Session], object]):
        async def _runner():
            try:
                return await asyncio.to_thread(self.run_job, job_id, func)
            except Exception as e:
                logger.exception(f"Scheduled job {job_id} failed: {str(e)}")
                return None

        return _runner

    def status(self) -> SchedulerStatusResponse:
        jobs = []
        for job_id, cron in self._crons.items():
            next_run = None
            if self._scheduler is not None:
                job = self._scheduler.get_job(job_id)
                if job is not None and job.next_run_time is not None:
                    next_run = job.next_run_time.isoformat()
            jobs.append(ScheduledJobInfo(job_id=job_id, cron=cron, next_run_time=next_run))

        return SchedulerStatusResponse(
            running=self.is_running, timezone=self.settings.TIMEZONE, jobs=jobs
        )
