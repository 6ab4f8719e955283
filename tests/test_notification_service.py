import logging
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from app.errors import NotificationNotFoundError
from app.models.notification import Notification, NotificationType
from app.models.user import User
from app.services.notification import NotificationService, render_message
from tests.fakes import FakeDatabase


def _store(database: FakeDatabase, notification: Notification) -> Notification:
    database.state.notifications[notification.notification_id] = notification
    return notification


def _notification(
    recipient: User,
    actor: User,
    notification_type: NotificationType = NotificationType.LIKE,
    minutes_ago: int = 0,
    is_read: bool = False,
) -> Notification:
    return Notification(
        notification_id=uuid4(),
        recipient_id=recipient.user_id,
        notification_type=notification_type,
        actor_id=actor.user_id,
        is_read=is_read,
        created_at=datetime.now(UTC) - timedelta(minutes=minutes_ago),
    )


@pytest.mark.unit
class TestRenderMessage:
    @pytest.mark.parametrize(
        "notification_type, expected",
        [
            (NotificationType.LIKE, "Test_user Tester liked your profile"),
            (NotificationType.PROFILE_VIEW, "Test_user Tester viewed your profile"),
            (NotificationType.MATCH, "You matched with Test_user Tester!"),
            (NotificationType.MESSAGE, "Test_user Tester sent you a message"),
            (NotificationType.UNMATCH, "Test_user Tester unliked your profile"),
        ],
    )
    def test_templates(self, test_user: User, notification_type, expected):
        assert render_message(notification_type, test_user) == expected

    def test_missing_actor_falls_back(self):
        assert (
            render_message(NotificationType.LIKE, None)
            == "You have a new notification"
        )


@pytest.mark.unit
class TestNotificationService:
    def test_emit_persists_notification(
        self,
        notification_service: NotificationService,
        database: FakeDatabase,
        test_user: User,
        another_test_user: User,
    ):
        message_id = uuid4()

        notification = notification_service.emit(
            another_test_user.user_id,
            NotificationType.MESSAGE,
            test_user.user_id,
            message_id,
        )

        assert notification is not None
        assert notification.entity_id == message_id
        assert notification.is_read is False
        assert database.state.notifications == {
            notification.notification_id: notification
        }

    def test_emit_failure_is_logged_not_raised(
        self,
        notification_service: NotificationService,
        database: FakeDatabase,
        test_user: User,
        caplog,
    ):
        with caplog.at_level(logging.ERROR):
            result = notification_service.emit(
                uuid4(), NotificationType.LIKE, test_user.user_id
            )

        assert result is None
        assert database.state.notifications == {}
        assert "Failed to emit like notification" in caplog.text

    @pytest.mark.asyncio
    async def test_list_notifications_newest_first(
        self,
        notification_service: NotificationService,
        database: FakeDatabase,
        test_user: User,
        another_test_user: User,
    ):
        older = _store(
            database,
            _notification(test_user, another_test_user, minutes_ago=10, is_read=True),
        )
        newer = _store(
            database,
            _notification(test_user, another_test_user, NotificationType.MATCH),
        )
        _store(database, _notification(another_test_user, test_user))

        feed = await notification_service.list_notifications(test_user.user_id)

        assert [view.notification.notification_id for view in feed.notifications] == [
            newer.notification_id,
            older.notification_id,
        ]
        assert feed.unread_count == 1
        first = feed.notifications[0]
        assert first.actor_username == "another_test_user"
        assert first.message == "You matched with Another_test_user Tester!"

    @pytest.mark.asyncio
    async def test_list_respects_limit(
        self,
        notification_service: NotificationService,
        database: FakeDatabase,
        test_user: User,
        another_test_user: User,
    ):
        for minutes in range(3):
            _store(
                database,
                _notification(test_user, another_test_user, minutes_ago=minutes),
            )

        feed = await notification_service.list_notifications(test_user.user_id, 2)

        assert len(feed.notifications) == 2
        assert feed.unread_count == 3

    @pytest.mark.asyncio
    async def test_mark_as_read(
        self,
        notification_service: NotificationService,
        database: FakeDatabase,
        test_user: User,
        another_test_user: User,
    ):
        notification = _store(database, _notification(test_user, another_test_user))

        await notification_service.mark_as_read(
            test_user.user_id, notification.notification_id
        )

        assert database.state.notifications[notification.notification_id].is_read

    @pytest.mark.asyncio
    async def test_cannot_touch_someone_elses_notification(
        self,
        notification_service: NotificationService,
        database: FakeDatabase,
        test_user: User,
        another_test_user: User,
    ):
        notification = _store(database, _notification(test_user, another_test_user))

        with pytest.raises(NotificationNotFoundError):
            await notification_service.mark_as_read(
                another_test_user.user_id, notification.notification_id
            )
        with pytest.raises(NotificationNotFoundError):
            await notification_service.delete(
                another_test_user.user_id, notification.notification_id
            )
        assert notification.notification_id in database.state.notifications

    @pytest.mark.asyncio
    async def test_mark_all_and_delete_all(
        self,
        notification_service: NotificationService,
        database: FakeDatabase,
        test_user: User,
        another_test_user: User,
    ):
        for _ in range(2):
            _store(database, _notification(test_user, another_test_user))
        kept = _store(database, _notification(another_test_user, test_user))

        assert await notification_service.mark_all_as_read(test_user.user_id) == 2
        assert await notification_service.mark_all_as_read(test_user.user_id) == 0
        assert await notification_service.delete_all(test_user.user_id) == 2
        assert list(database.state.notifications) == [kept.notification_id]

    @pytest.mark.asyncio
    async def test_delete(
        self,
        notification_service: NotificationService,
        database: FakeDatabase,
        test_user: User,
        another_test_user: User,
    ):
        notification = _store(database, _notification(test_user, another_test_user))

        await notification_service.delete(
            test_user.user_id, notification.notification_id
        )

        assert database.state.notifications == {}
