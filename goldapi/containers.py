from dependency_injector import containers, providers

from goldapi.config import Settings
from goldapi.database.session import get_db
from goldapi.services.accrual_service import AccrualService
from goldapi.services.auth_service import AuthService
from goldapi.services.aws_service import AwsService
from goldapi.services.bonus_service import BonusService
from goldapi.services.dashboard_service import DashboardService
from goldapi.services.file_service import FileService
from goldapi.services.gold_price_service import GoldPriceService
from goldapi.services.maturity_service import MaturityService
from goldapi.services.notification_service import NotificationService
from goldapi.services.points_recalculation_service import PointsRecalculationService
from goldapi.services.redemption_service import RedemptionService
from goldapi.services.referral_service import ReferralService
from goldapi.services.scheduler_service import GoldJobScheduler
from goldapi.services.scheme_request_service import SchemeRequestService
from goldapi.services.scheme_service import SchemeService
from goldapi.services.settings_service import SettingsService
from goldapi.services.transaction_service import TransactionService
from goldapi.services.user_scheme_service import UserSchemeService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class RepositoryModule(containers.DeclarativeContainer):
    """Database session."""

    get_db = providers.Resource(get_db)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies."""

    config = providers.DependenciesContainer()
    repositories = providers.DependenciesContainer()

    aws_service = providers.Factory(AwsService, settings=config.config)
    notification_service = providers.Factory(
        NotificationService, settings=config.config, aws_service=aws_service
    )
    file_service = providers.Factory(FileService, settings=config.config, aws_service=aws_service)
    scheduler = providers.Singleton(GoldJobScheduler, settings=config.config)

    auth_service = providers.Factory(AuthService, db=repositories.get_db, settings=config.config)
    settings_service = providers.Factory(SettingsService, db=repositories.get_db)
    scheme_service = providers.Factory(SchemeService, db=repositories.get_db)
    transaction_service = providers.Factory(TransactionService, db=repositories.get_db)
    bonus_service = providers.Factory(BonusService, db=repositories.get_db)
    gold_price_service = providers.Factory(GoldPriceService, db=repositories.get_db)
    user_scheme_service = providers.Factory(
        UserSchemeService,
        db=repositories.get_db,
        notification_service=notification_service,
    )
    redemption_service = providers.Factory(RedemptionService, db=repositories.get_db)
    maturity_service = providers.Factory(MaturityService, db=repositories.get_db)
    accrual_service = providers.Factory(AccrualService, db=repositories.get_db)
    points_recalculation_service = providers.Factory(
        PointsRecalculationService, db=repositories.get_db
    )
    dashboard_service = providers.Factory(DashboardService, db=repositories.get_db)
    scheme_request_service = providers.Factory(SchemeRequestService, db=repositories.get_db)
    referral_service = providers.Factory(ReferralService, db=repositories.get_db)


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "goldapi.routers.auth_router",
            "goldapi.routers.gold_price_router",
            "goldapi.routers.scheme_router",
            "goldapi.routers.user_scheme_router",
            "goldapi.routers.transaction_router",
            "goldapi.routers.redemption_router",
            "goldapi.routers.scheme_request_router",
            "goldapi.routers.referral_router",
            "goldapi.routers.admin_router",
            "goldapi.routers.file_router",
            "goldapi.routers.health_router",
        ],
    )

    config = providers.Container(ConfigModule)
    repositories = providers.Container(RepositoryModule)
    services = providers.Container(
        ServiceModule, config=config, repositories=repositories
    )
