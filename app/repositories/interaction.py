from datetime import UTC, datetime
from uuid import UUID, uuid4

from neo4j import ManagedTransaction
from neo4j.exceptions import ConstraintError
from pydantic import UUID4

from app.errors import (
    AlreadyBlockedError,
    AlreadyReportedError,
    ConflictError,
    DuplicateLikeError,
)
from app.models.block import Block, Report
from app.models.like import Like
from app.models.match import Match, canonical_pair, pair_key
from app.repositories.base import InteractionLedger, to_native


class Neo4jInteractionLedger(InteractionLedger):
    """Likes, matches, blocks and reports stored as relationships between users.

    Uniqueness of each kind of edge is enforced by the schema constraints in
    ``app.db.CONSTRAINTS``; constraint violations surface as conflict errors.
    """

    def lock_pair(self, tx: ManagedTransaction, user_a: UUID4, user_b: UUID4) -> None:
        query = """
        MATCH (user:User)
        WHERE user.user_id IN $user_ids
        WITH user
        ORDER BY user.user_id
        SET user._lock = timestamp()
        REMOVE user._lock
        """
        user_ids = [str(user_id) for user_id in canonical_pair(user_a, user_b)]
        tx.run(query, user_ids=user_ids).consume()

    # Likes

    def create_like(
        self, tx: ManagedTransaction, liker_id: UUID4, liked_id: UUID4
    ) -> Like:
        query = """
        MATCH (liker:User {user_id: $liker_id})
        MATCH (liked:User {user_id: $liked_id})
        CREATE (liker)-[r:LIKES {
            liker_id: $liker_id,
            liked_id: $liked_id,
            created_at: $current_time
        }]->(liked)
        RETURN r
        """
        try:
            result = tx.run(
                query,
                liker_id=str(liker_id),
                liked_id=str(liked_id),
                current_time=datetime.now(UTC),
            )
            record = result.single(strict=True)
        except ConstraintError as e:
            raise DuplicateLikeError(f"User {liker_id} already likes {liked_id}") from e
        return Like(**to_native(dict(record["r"])))

    def delete_like(
        self, tx: ManagedTransaction, liker_id: UUID4, liked_id: UUID4
    ) -> bool:
        query = """
        MATCH (:User {user_id: $liker_id})-[r:LIKES]->(:User {user_id: $liked_id})
        DELETE r
        RETURN count(r) AS removed
        """
        result = tx.run(query, liker_id=str(liker_id), liked_id=str(liked_id))
        record = result.single()
        return bool(record and record["removed"])

    def like_exists(
        self, tx: ManagedTransaction, liker_id: UUID4, liked_id: UUID4
    ) -> bool:
        query = """
        OPTIONAL MATCH (:User {user_id: $liker_id})-[r:LIKES]->(:User {user_id: $liked_id})
        RETURN count(r) > 0 AS exists
        """
        result = tx.run(query, liker_id=str(liker_id), liked_id=str(liked_id))
        record = result.single()
        return bool(record and record["exists"])

    def get_liked_ids(self, tx: ManagedTransaction, liker_id: UUID4) -> set[UUID4]:
        query = """
        MATCH (:User {user_id: $liker_id})-[r:LIKES]->(:User)
        RETURN r.liked_id AS liked_id
        """
        result = tx.run(query, liker_id=str(liker_id))
        return {UUID(record["liked_id"]) for record in result}

    def list_likes_given(self, tx: ManagedTransaction, user_id: UUID4) -> list[Like]:
        query = """
        MATCH (:User {user_id: $user_id})-[r:LIKES]->(:User)
        RETURN r
        ORDER BY r.created_at DESC
        """
        result = tx.run(query, user_id=str(user_id))
        return [Like(**to_native(dict(record["r"]))) for record in result]

    def list_likes_received(
        self, tx: ManagedTransaction, user_id: UUID4
    ) -> list[Like]:
        query = """
        MATCH (:User)-[r:LIKES]->(:User {user_id: $user_id})
        RETURN r
        ORDER BY r.created_at DESC
        """
        result = tx.run(query, user_id=str(user_id))
        return [Like(**to_native(dict(record["r"]))) for record in result]

    # Matches

    def find_match(
        self, tx: ManagedTransaction, user_a: UUID4, user_b: UUID4
    ) -> Match | None:
        query = """
        MATCH ()-[m:MATCHED_WITH {pair_key: $pair_key}]->()
        RETURN m
        """
        result = tx.run(query, pair_key=pair_key(user_a, user_b))
        if record := result.single():
            return Match(**to_native(dict(record["m"])))
        return None

    def get_match(self, tx: ManagedTransaction, match_id: UUID4) -> Match | None:
        query = """
        MATCH ()-[m:MATCHED_WITH {match_id: $match_id}]->()
        RETURN m
        """
        result = tx.run(query, match_id=str(match_id))
        if record := result.single():
            return Match(**to_native(dict(record["m"])))
        return None

    def create_match(
        self, tx: ManagedTransaction, user_a: UUID4, user_b: UUID4
    ) -> Match:
        user1_id, user2_id = canonical_pair(user_a, user_b)
        query = """
        MATCH (user1:User {user_id: $user1_id})
        MATCH (user2:User {user_id: $user2_id})
        CREATE (user1)-[m:MATCHED_WITH {
            match_id: $match_id,
            user1_id: $user1_id,
            user2_id: $user2_id,
            pair_key: $pair_key,
            created_at: $current_time
        }]->(user2)
        RETURN m
        """
        try:
            result = tx.run(
                query,
                match_id=str(uuid4()),
                user1_id=str(user1_id),
                user2_id=str(user2_id),
                pair_key=pair_key(user1_id, user2_id),
                current_time=datetime.now(UTC),
            )
            record = result.single(strict=True)
        except ConstraintError as e:
            raise ConflictError(f"Users {user1_id} and {user2_id} are already matched") from e
        return Match(**to_native(dict(record["m"])))

    def delete_match(self, tx: ManagedTransaction, match_id: UUID4) -> bool:
        query = """
        MATCH ()-[m:MATCHED_WITH {match_id: $match_id}]->()
        DELETE m
        RETURN count(m) AS removed
        """
        result = tx.run(query, match_id=str(match_id))
        record = result.single()
        return bool(record and record["removed"])

    def list_matches(self, tx: ManagedTransaction, user_id: UUID4) -> list[Match]:
        query = """
        MATCH (:User {user_id: $user_id})-[m:MATCHED_WITH]-(:User)
        RETURN m
        ORDER BY m.created_at DESC
        """
        result = tx.run(query, user_id=str(user_id))
        return [Match(**to_native(dict(record["m"]))) for record in result]

    # Blocks

    def is_blocked(
        self, tx: ManagedTransaction, user_a: UUID4, user_b: UUID4
    ) -> bool:
        query = """
        OPTIONAL MATCH (:User {user_id: $user_a})-[r:BLOCKS]-(:User {user_id: $user_b})
        RETURN count(r) > 0 AS blocked
        """
        result = tx.run(query, user_a=str(user_a), user_b=str(user_b))
        record = result.single()
        return bool(record and record["blocked"])

    def block_exists(
        self, tx: ManagedTransaction, blocker_id: UUID4, blocked_id: UUID4
    ) -> bool:
        query = """
        OPTIONAL MATCH (:User {user_id: $blocker_id})-[r:BLOCKS]->(:User {user_id: $blocked_id})
        RETURN count(r) > 0 AS exists
        """
        result = tx.run(query, blocker_id=str(blocker_id), blocked_id=str(blocked_id))
        record = result.single()
        return bool(record and record["exists"])

    def create_block(
        self, tx: ManagedTransaction, blocker_id: UUID4, blocked_id: UUID4
    ) -> Block:
        query = """
        MATCH (blocker:User {user_id: $blocker_id})
        MATCH (blocked:User {user_id: $blocked_id})
        CREATE (blocker)-[r:BLOCKS {
            blocker_id: $blocker_id,
            blocked_id: $blocked_id,
            created_at: $current_time
        }]->(blocked)
        RETURN r
        """
        try:
            result = tx.run(
                query,
                blocker_id=str(blocker_id),
                blocked_id=str(blocked_id),
                current_time=datetime.now(UTC),
            )
            record = result.single(strict=True)
        except ConstraintError as e:
            raise AlreadyBlockedError(f"User {blocked_id} is already blocked") from e
        return Block(**to_native(dict(record["r"])))

    def delete_block(
        self, tx: ManagedTransaction, blocker_id: UUID4, blocked_id: UUID4
    ) -> bool:
        query = """
        MATCH (:User {user_id: $blocker_id})-[r:BLOCKS]->(:User {user_id: $blocked_id})
        DELETE r
        RETURN count(r) AS removed
        """
        result = tx.run(query, blocker_id=str(blocker_id), blocked_id=str(blocked_id))
        record = result.single()
        return bool(record and record["removed"])

    def get_block_partner_ids(
        self, tx: ManagedTransaction, user_id: UUID4
    ) -> set[UUID4]:
        query = """
        MATCH (:User {user_id: $user_id})-[:BLOCKS]-(other:User)
        RETURN DISTINCT other.user_id AS user_id
        """
        result = tx.run(query, user_id=str(user_id))
        return {UUID(record["user_id"]) for record in result}

    def list_blocks(self, tx: ManagedTransaction, blocker_id: UUID4) -> list[Block]:
        query = """
        MATCH (:User {user_id: $blocker_id})-[r:BLOCKS]->(:User)
        RETURN r
        ORDER BY r.created_at DESC
        """
        result = tx.run(query, blocker_id=str(blocker_id))
        return [Block(**to_native(dict(record["r"]))) for record in result]

    # Reports

    def create_report(
        self,
        tx: ManagedTransaction,
        reporter_id: UUID4,
        reported_id: UUID4,
        reason: str,
    ) -> Report:
        query = """
        MATCH (reporter:User {user_id: $reporter_id})
        MATCH (reported:User {user_id: $reported_id})
        CREATE (reporter)-[r:REPORTED {
            reporter_id: $reporter_id,
            reported_id: $reported_id,
            reason: $reason,
            created_at: $current_time
        }]->(reported)
        RETURN r
        """
        try:
            result = tx.run(
                query,
                reporter_id=str(reporter_id),
                reported_id=str(reported_id),
                reason=reason,
                current_time=datetime.now(UTC),
            )
            record = result.single(strict=True)
        except ConstraintError as e:
            raise AlreadyReportedError(f"User {reported_id} was already reported") from e
        return Report(**to_native(dict(record["r"])))
