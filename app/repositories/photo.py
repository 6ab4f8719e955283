from datetime import UTC, datetime
from uuid import uuid4

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.errors import PhotoNotFoundError
from app.models.photo import Photo
from app.repositories.base import PhotoStore, to_native


class Neo4jPhotoStore(PhotoStore):
    def list_photos(self, tx: ManagedTransaction, user_id: UUID4) -> list[Photo]:
        query = """
        MATCH (:User {user_id: $user_id})-[:HAS_PHOTO]->(photo:Photo)
        RETURN photo
        ORDER BY photo.created_at
        """
        result = tx.run(query, user_id=str(user_id))
        return [Photo(**to_native(dict(record["photo"]))) for record in result]

    def count_photos(self, tx: ManagedTransaction, user_id: UUID4) -> int:
        query = """
        OPTIONAL MATCH (:User {user_id: $user_id})-[:HAS_PHOTO]->(photo:Photo)
        RETURN count(photo) AS total
        """
        result = tx.run(query, user_id=str(user_id))
        record = result.single()
        return record["total"] if record else 0

    def has_profile_photo(self, tx: ManagedTransaction, user_id: UUID4) -> bool:
        query = """
        OPTIONAL MATCH (:User {user_id: $user_id})-[:HAS_PHOTO]->(photo:Photo {is_profile: true})
        RETURN count(photo) > 0 AS exists
        """
        result = tx.run(query, user_id=str(user_id))
        record = result.single()
        return bool(record and record["exists"])

    def get_photo(
        self, tx: ManagedTransaction, user_id: UUID4, photo_id: UUID4
    ) -> Photo | None:
        query = """
        MATCH (:User {user_id: $user_id})-[:HAS_PHOTO]->(photo:Photo {photo_id: $photo_id})
        RETURN photo
        """
        result = tx.run(query, user_id=str(user_id), photo_id=str(photo_id))
        if record := result.single():
            return Photo(**to_native(dict(record["photo"])))
        return None

    def create_photo(
        self,
        tx: ManagedTransaction,
        user_id: UUID4,
        file_path: str,
        is_profile: bool,
    ) -> Photo:
        query = """
        MATCH (user:User {user_id: $user_id})
        CREATE (user)-[:HAS_PHOTO]->(photo:Photo {
            photo_id: $photo_id,
            user_id: $user_id,
            file_path: $file_path,
            is_profile: $is_profile,
            created_at: $current_time
        })
        RETURN photo
        """
        result = tx.run(
            query,
            user_id=str(user_id),
            photo_id=str(uuid4()),
            file_path=file_path,
            is_profile=is_profile,
            current_time=datetime.now(UTC),
        )
        record = result.single(strict=True)
        return Photo(**to_native(dict(record["photo"])))

    def set_profile_photo(
        self, tx: ManagedTransaction, user_id: UUID4, photo_id: UUID4
    ) -> Photo:
        query = """
        MATCH (user:User {user_id: $user_id})-[:HAS_PHOTO]->(target:Photo {photo_id: $photo_id})
        MATCH (user)-[:HAS_PHOTO]->(photo:Photo)
        SET photo.is_profile = (photo.photo_id = $photo_id)
        WITH DISTINCT target
        RETURN target
        """
        result = tx.run(query, user_id=str(user_id), photo_id=str(photo_id))
        if record := result.single():
            return Photo(**to_native(dict(record["target"])))
        raise PhotoNotFoundError(f"Photo {photo_id} not found")

    def delete_photo(
        self, tx: ManagedTransaction, user_id: UUID4, photo_id: UUID4
    ) -> bool:
        query = """
        MATCH (:User {user_id: $user_id})-[:HAS_PHOTO]->(photo:Photo {photo_id: $photo_id})
        DETACH DELETE photo
        RETURN count(photo) AS removed
        """
        result = tx.run(query, user_id=str(user_id), photo_id=str(photo_id))
        record = result.single()
        return bool(record and record["removed"])
