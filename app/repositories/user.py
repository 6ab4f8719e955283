from datetime import datetime
from typing import Any

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.models.user import User
from app.repositories.base import UserStore, to_native

USER_FIELDS = (
    "user_id",
    "username",
    "email",
    "first_name",
    "last_name",
    "is_verified",
    "is_online",
    "last_login",
    "created_at",
)


def user_from_node(node: Any) -> User:
    """Build a user from a ``:User`` node, ignoring unrelated properties."""
    data = to_native(dict(node))
    return User(**{key: data[key] for key in USER_FIELDS if data.get(key) is not None})


class Neo4jUserStore(UserStore):
    def get_user(self, tx: ManagedTransaction, user_id: UUID4) -> User | None:
        query = """
        MATCH (user:User {user_id: $user_id})
        RETURN user
        """
        result = tx.run(query, user_id=str(user_id))
        if record := result.single():
            return user_from_node(record["user"])
        return None

    def user_exists(self, tx: ManagedTransaction, user_id: UUID4) -> bool:
        query = """
        MATCH (user:User {user_id: $user_id})
        RETURN count(user) > 0 AS exists
        """
        result = tx.run(query, user_id=str(user_id))
        record = result.single()
        return bool(record and record["exists"])

    def set_presence(
        self,
        tx: ManagedTransaction,
        user_id: UUID4,
        is_online: bool,
        last_login: datetime | None,
    ) -> None:
        query = """
        MATCH (user:User {user_id: $user_id})
        SET user.is_online = $is_online,
            user.last_login = coalesce($last_login, user.last_login)
        """
        tx.run(
            query, user_id=str(user_id), is_online=is_online, last_login=last_login
        ).consume()
