from uuid import uuid4

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.models.tag import Tag
from app.repositories.base import TagIndex


class Neo4jTagIndex(TagIndex):
    def get_tag_ids(self, tx: ManagedTransaction, user_id: UUID4) -> set[UUID4]:
        return {tag.tag_id for tag in self.get_tags(tx, user_id)}

    def get_tags(self, tx: ManagedTransaction, user_id: UUID4) -> list[Tag]:
        query = """
        MATCH (:User {user_id: $user_id})-[:HAS_TAG]->(tag:Tag)
        RETURN tag
        ORDER BY tag.name
        """
        result = tx.run(query, user_id=str(user_id))
        return [Tag(**dict(record["tag"])) for record in result]

    def get_tag_by_name(self, tx: ManagedTransaction, name: str) -> Tag | None:
        query = """
        MATCH (tag:Tag {name: $name})
        RETURN tag
        """
        result = tx.run(query, name=name)
        if record := result.single():
            return Tag(**dict(record["tag"]))
        return None

    def create_tag(self, tx: ManagedTransaction, name: str) -> Tag:
        query = """
        MERGE (tag:Tag {name: $name})
        ON CREATE
            SET tag.tag_id = $tag_id
        RETURN tag
        """
        result = tx.run(query, name=name, tag_id=str(uuid4()))
        record = result.single(strict=True)
        return Tag(**dict(record["tag"]))

    def attach_tag(
        self, tx: ManagedTransaction, user_id: UUID4, tag_id: UUID4
    ) -> bool:
        query = """
        MATCH (user:User {user_id: $user_id})
        MATCH (tag:Tag {tag_id: $tag_id})
        OPTIONAL MATCH (user)-[existing:HAS_TAG]->(tag)
        WITH user, tag, existing
        WHERE existing IS NULL
        CREATE (user)-[:HAS_TAG]->(tag)
        RETURN true AS attached
        """
        result = tx.run(query, user_id=str(user_id), tag_id=str(tag_id))
        return result.single() is not None

    def detach_tag(
        self, tx: ManagedTransaction, user_id: UUID4, tag_id: UUID4
    ) -> bool:
        query = """
        MATCH (:User {user_id: $user_id})-[r:HAS_TAG]->(:Tag {tag_id: $tag_id})
        DELETE r
        RETURN count(r) AS removed
        """
        result = tx.run(query, user_id=str(user_id), tag_id=str(tag_id))
        record = result.single()
        return bool(record and record["removed"])
