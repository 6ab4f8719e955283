from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.requests import HTTPConnection
from pydantic import UUID4

from app.config import Settings, get_settings
from app.db import DatabaseManager
from app.repositories.base import (
    InteractionLedger,
    MessageStore,
    NotificationStore,
    PhotoStore,
    ProfileStore,
    TagIndex,
    UserStore,
)
from app.repositories.interaction import Neo4jInteractionLedger
from app.repositories.message import Neo4jMessageStore
from app.repositories.notification import Neo4jNotificationStore
from app.repositories.photo import Neo4jPhotoStore
from app.repositories.profile import Neo4jProfileStore
from app.repositories.tag import Neo4jTagIndex
from app.repositories.user import Neo4jUserStore
from app.services.block import BlockService
from app.services.browse import CandidateSelector
from app.services.chat import ChatService
from app.services.fame import FameRatingCalculator, FameRatingUpdater
from app.services.match import MatchEngine
from app.services.notification import NotificationService
from app.services.presence import PresenceService
from app.services.profile import ProfileService
from app.services.scoring import CompatibilityScorer


class Stores:
    """The storage collaborators shared by all services."""

    def __init__(
        self,
        users: UserStore | None = None,
        profiles: ProfileStore | None = None,
        tags: TagIndex | None = None,
        ledger: InteractionLedger | None = None,
        photos: PhotoStore | None = None,
        notifications: NotificationStore | None = None,
        messages: MessageStore | None = None,
    ) -> None:
        self.users = users or Neo4jUserStore()
        self.profiles = profiles or Neo4jProfileStore()
        self.tags = tags or Neo4jTagIndex()
        self.ledger = ledger or Neo4jInteractionLedger()
        self.photos = photos or Neo4jPhotoStore()
        self.notifications = notifications or Neo4jNotificationStore()
        self.messages = messages or Neo4jMessageStore()


async def get_viewer_id(
    x_user_id: Annotated[UUID4 | None, Header()] = None,
) -> UUID4:
    """Dependency resolving the identity of the current viewer.

    Authentication happens upstream; this only reads the identity it
    forwards in the ``X-User-Id`` header.

    Raises:
        HTTPException: If the header is missing
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing viewer identity",
        )
    return x_user_id


def get_database() -> DatabaseManager:
    return DatabaseManager()


@lru_cache
def get_stores() -> Stores:
    return Stores()


Database = Annotated[DatabaseManager, Depends(get_database)]
StoresDep = Annotated[Stores, Depends(get_stores)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_notification_service(
    database: Database, stores: StoresDep
) -> NotificationService:
    return NotificationService(database, stores.notifications)


def get_fame_updater(
    database: Database, stores: StoresDep, settings: SettingsDep
) -> FameRatingUpdater:
    return FameRatingUpdater(
        database, stores.profiles, FameRatingCalculator(settings.fame)
    )


NotificationServiceDep = Annotated[
    NotificationService, Depends(get_notification_service)
]
FameUpdaterDep = Annotated[FameRatingUpdater, Depends(get_fame_updater)]


def get_candidate_selector(
    database: Database, stores: StoresDep, settings: SettingsDep
) -> CandidateSelector:
    return CandidateSelector(
        database,
        stores.profiles,
        stores.tags,
        stores.ledger,
        CompatibilityScorer(settings.scoring),
        settings,
    )


def get_match_engine(
    database: Database,
    stores: StoresDep,
    sink: NotificationServiceDep,
    fame: FameUpdaterDep,
) -> MatchEngine:
    return MatchEngine(
        database,
        stores.users,
        stores.profiles,
        stores.ledger,
        stores.photos,
        stores.messages,
        sink,
        fame,
    )


def get_block_service(
    database: Database, stores: StoresDep, fame: FameUpdaterDep
) -> BlockService:
    return BlockService(database, stores.users, stores.ledger, stores.messages, fame)


def get_profile_service(
    database: Database,
    stores: StoresDep,
    sink: NotificationServiceDep,
    fame: FameUpdaterDep,
) -> ProfileService:
    return ProfileService(
        database,
        stores.users,
        stores.profiles,
        stores.tags,
        stores.photos,
        sink,
        fame,
    )


def get_chat_service(
    database: Database, stores: StoresDep, sink: NotificationServiceDep
) -> ChatService:
    return ChatService(database, stores.ledger, stores.messages, sink)


ViewerId = Annotated[UUID4, Depends(get_viewer_id)]


def get_presence_service(connection: HTTPConnection) -> PresenceService:
    """The process-wide presence tracker created at startup."""
    return connection.app.state.presence
