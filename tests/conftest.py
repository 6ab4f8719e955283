from datetime import date

import pytest

from app.config import Settings
from app.models.profile import Gender, SexualPreference
from app.models.user import User
from app.services.block import BlockService
from app.services.browse import CandidateSelector
from app.services.chat import ChatService
from app.services.fame import FameRatingCalculator, FameRatingUpdater
from app.services.match import MatchEngine
from app.services.notification import NotificationService
from app.services.presence import PresenceService
from app.services.profile import ProfileService
from app.services.scoring import CompatibilityScorer
from tests.fakes import (
    FakeDatabase,
    FakeInteractionLedger,
    FakeMessageStore,
    FakeNotificationStore,
    FakePhotoStore,
    FakeProfileStore,
    FakeTagIndex,
    FakeUserStore,
    RecordingSink,
    seed_user,
    years_ago,
)


# Storage fixtures
@pytest.fixture
def database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def users() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture
def profiles() -> FakeProfileStore:
    return FakeProfileStore()


@pytest.fixture
def tags() -> FakeTagIndex:
    return FakeTagIndex()


@pytest.fixture
def ledger() -> FakeInteractionLedger:
    return FakeInteractionLedger()


@pytest.fixture
def photos() -> FakePhotoStore:
    return FakePhotoStore()


@pytest.fixture
def messages() -> FakeMessageStore:
    return FakeMessageStore()


@pytest.fixture
def notifications() -> FakeNotificationStore:
    return FakeNotificationStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def settings() -> Settings:
    return Settings()


# Service fixtures
@pytest.fixture
def fame_updater(database: FakeDatabase, profiles: FakeProfileStore) -> FameRatingUpdater:
    return FameRatingUpdater(database, profiles, FameRatingCalculator())


@pytest.fixture
def candidate_selector(
    database: FakeDatabase,
    profiles: FakeProfileStore,
    tags: FakeTagIndex,
    ledger: FakeInteractionLedger,
    settings: Settings,
) -> CandidateSelector:
    return CandidateSelector(
        database, profiles, tags, ledger, CompatibilityScorer(), settings
    )


@pytest.fixture
def match_engine(
    database: FakeDatabase,
    users: FakeUserStore,
    profiles: FakeProfileStore,
    ledger: FakeInteractionLedger,
    photos: FakePhotoStore,
    messages: FakeMessageStore,
    sink: RecordingSink,
    fame_updater: FameRatingUpdater,
) -> MatchEngine:
    return MatchEngine(
        database, users, profiles, ledger, photos, messages, sink, fame_updater
    )


@pytest.fixture
def block_service(
    database: FakeDatabase,
    users: FakeUserStore,
    ledger: FakeInteractionLedger,
    messages: FakeMessageStore,
    fame_updater: FameRatingUpdater,
) -> BlockService:
    return BlockService(database, users, ledger, messages, fame_updater)


@pytest.fixture
def profile_service(
    database: FakeDatabase,
    users: FakeUserStore,
    profiles: FakeProfileStore,
    tags: FakeTagIndex,
    photos: FakePhotoStore,
    sink: RecordingSink,
    fame_updater: FameRatingUpdater,
) -> ProfileService:
    return ProfileService(database, users, profiles, tags, photos, sink, fame_updater)


@pytest.fixture
def notification_service(
    database: FakeDatabase, notifications: FakeNotificationStore
) -> NotificationService:
    return NotificationService(database, notifications)


@pytest.fixture
def chat_service(
    database: FakeDatabase,
    ledger: FakeInteractionLedger,
    messages: FakeMessageStore,
    sink: RecordingSink,
) -> ChatService:
    return ChatService(database, ledger, messages, sink)


@pytest.fixture
def presence_service(database: FakeDatabase, users: FakeUserStore) -> PresenceService:
    return PresenceService(database, users)


# Test data fixtures
@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def test_user(database: FakeDatabase) -> User:
    return seed_user(
        database,
        "test_user",
        profile={
            "gender": Gender.MALE,
            "sexual_preference": SexualPreference.HETEROSEXUAL,
            "birth_date": years_ago(30),
            "latitude": 48.8566,
            "longitude": 2.3522,
            "last_location": "Paris",
        },
        tags=("#travel", "#fitness", "#music"),
    )


@pytest.fixture
def another_test_user(database: FakeDatabase) -> User:
    return seed_user(
        database,
        "another_test_user",
        profile={
            "gender": Gender.FEMALE,
            "sexual_preference": SexualPreference.HETEROSEXUAL,
            "birth_date": years_ago(28),
            "latitude": 48.8606,
            "longitude": 2.3376,
            "last_location": "Paris",
        },
        tags=("#travel", "#fitness"),
    )


@pytest.fixture
def user_without_photo(database: FakeDatabase) -> User:
    return seed_user(
        database,
        "no_photo_user",
        profile={
            "gender": Gender.FEMALE,
            "sexual_preference": SexualPreference.BISEXUAL,
        },
        photo=False,
    )
