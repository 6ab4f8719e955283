import logging

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.errors import (
    AlreadyBlockedError,
    NotBlockedError,
    SelfBlockError,
    SelfReportError,
    TargetNotFoundError,
)
from app.models.block import DEFAULT_REPORT_REASON, Block, Report
from app.repositories.base import InteractionLedger, MessageStore, UserStore
from app.schemas.database_records import CreateBlockRecord, RemoveBlockRecord
from app.services.fame import FameRatingUpdater

logger = logging.getLogger(__name__)


class BlockService:
    """Service for managing user blocks and reports.

    Blocking a user removes every like and the match between the two users
    and hides each from the other's browsing. Profile counters are left as
    they were.
    """

    def __init__(
        self,
        database,
        users: UserStore,
        ledger: InteractionLedger,
        messages: MessageStore,
        fame: FameRatingUpdater,
    ) -> None:
        self.database = database
        self.users = users
        self.ledger = ledger
        self.messages = messages
        self.fame = fame

    def _create_block_relationship(
        self, tx: ManagedTransaction, origin_id: UUID4, target_id: UUID4
    ) -> CreateBlockRecord:
        self.ledger.lock_pair(tx, origin_id, target_id)
        if not self.users.user_exists(tx, target_id):
            raise TargetNotFoundError(f"User {target_id} not found")
        if self.ledger.block_exists(tx, origin_id, target_id):
            raise AlreadyBlockedError(f"User {target_id} is already blocked")

        self.ledger.create_block(tx, origin_id, target_id)
        removed_forward = self.ledger.delete_like(tx, origin_id, target_id)
        removed_reverse = self.ledger.delete_like(tx, target_id, origin_id)
        removed_match_id = None
        if match := self.ledger.find_match(tx, origin_id, target_id):
            self.messages.delete_for_match(tx, match.match_id)
            self.ledger.delete_match(tx, match.match_id)
            removed_match_id = match.match_id

        return CreateBlockRecord(
            success=True,
            blocked_user_id=target_id,
            removed_forward_like=removed_forward,
            removed_reverse_like=removed_reverse,
            removed_match_id=removed_match_id,
        )

    async def block(self, origin_id: UUID4, target_id: UUID4) -> CreateBlockRecord:
        """Block a user.

        Args:
            origin_id: ID of the user doing the blocking
            target_id: ID of the user to block

        Returns:
            Record of the block creation, including what it removed

        Raises:
            SelfBlockError: If a user tries to block themselves
            TargetNotFoundError: If the user to block does not exist
            AlreadyBlockedError: If the block already exists
        """
        if origin_id == target_id:
            raise SelfBlockError("Users cannot block themselves")

        record = self.database.execute_write(
            self._create_block_relationship, origin_id, target_id
        )
        logger.info("User %s blocked %s", origin_id, target_id)
        self.fame.refresh_many(origin_id, target_id)
        return record

    def _remove_block_relationship(
        self, tx: ManagedTransaction, origin_id: UUID4, target_id: UUID4
    ) -> RemoveBlockRecord:
        if not self.ledger.delete_block(tx, origin_id, target_id):
            raise NotBlockedError(f"User {target_id} is not blocked")
        return RemoveBlockRecord(success=True, unblocked_user_id=target_id)

    async def unblock(self, origin_id: UUID4, target_id: UUID4) -> RemoveBlockRecord:
        """Unblock a user.

        Likes and matches removed by the block are not restored.

        Args:
            origin_id: ID of the user doing the unblocking
            target_id: ID of the user to unblock

        Raises:
            SelfBlockError: If a user tries to unblock themselves
            NotBlockedError: If the block does not exist
        """
        if origin_id == target_id:
            raise SelfBlockError("Users cannot unblock themselves")

        record = self.database.execute_write(
            self._remove_block_relationship, origin_id, target_id
        )
        logger.info("User %s unblocked %s", origin_id, target_id)
        return record

    def _create_report(
        self,
        tx: ManagedTransaction,
        reporter_id: UUID4,
        reported_id: UUID4,
        reason: str,
    ) -> Report:
        if not self.users.user_exists(tx, reported_id):
            raise TargetNotFoundError(f"User {reported_id} not found")
        return self.ledger.create_report(tx, reporter_id, reported_id, reason)

    async def report(
        self, reporter_id: UUID4, reported_id: UUID4, reason: str | None = None
    ) -> Report:
        """Report a user, as a fake account by default.

        Raises:
            SelfReportError: If a user tries to report themselves
            TargetNotFoundError: If the reported user does not exist
            AlreadyReportedError: If the reporter already reported this user
        """
        if reporter_id == reported_id:
            raise SelfReportError("Users cannot report themselves")

        report = self.database.execute_write(
            self._create_report,
            reporter_id,
            reported_id,
            (reason or "").strip() or DEFAULT_REPORT_REASON,
        )
        logger.warning(
            "User %s reported %s: %s", reporter_id, reported_id, report.reason
        )
        return report

    async def get_blocked_users(self, user_id: UUID4) -> list[Block]:
        """Get the blocks a user has placed, newest first."""
        return self.database.execute_read(self.ledger.list_blocks, user_id)

    async def is_blocked(self, user_id: UUID4, target_id: UUID4) -> bool:
        """Check whether either user blocks the other."""
        return self.database.execute_read(self.ledger.is_blocked, user_id, target_id)
