from datetime import UTC, datetime
from enum import Enum
from typing import Any

from neo4j import ManagedTransaction, Record
from pydantic import UUID4

from app.errors import UserNotFoundError
from app.models.browse import CandidateQuery, CandidateRecord
from app.models.photo import Photo
from app.models.profile import Profile, ProfileCounter
from app.models.tag import Tag
from app.repositories.base import ProfileStore, to_native
from app.repositories.user import user_from_node

# Tags and photos of the candidate bound to ``user``, photos oldest first.
CANDIDATE_DETAILS = """
OPTIONAL MATCH (user)-[:HAS_TAG]->(tag:Tag)
WITH user, profile, collect(DISTINCT tag) AS tags
OPTIONAL MATCH (user)-[:HAS_PHOTO]->(photo:Photo)
WITH user, profile, tags, photo
ORDER BY photo.created_at
RETURN user, profile, tags, collect(photo) AS photos
"""


def profile_from_node(node: Any) -> Profile:
    return Profile(**to_native(dict(node)))


def candidate_from_record(record: Record) -> CandidateRecord:
    return CandidateRecord(
        user=user_from_node(record["user"]),
        profile=profile_from_node(record["profile"]),
        tags=sorted(
            (Tag(**dict(tag)) for tag in record["tags"]), key=lambda tag: tag.name
        ),
        photos=[Photo(**to_native(dict(photo))) for photo in record["photos"]],
    )


def _to_parameter(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class Neo4jProfileStore(ProfileStore):
    def get_profile(self, tx: ManagedTransaction, user_id: UUID4) -> Profile | None:
        query = """
        MATCH (:User {user_id: $user_id})-[:HAS_PROFILE]->(profile:Profile)
        RETURN profile
        """
        result = tx.run(query, user_id=str(user_id))
        if record := result.single():
            return profile_from_node(record["profile"])
        return None

    def upsert_profile(
        self, tx: ManagedTransaction, user_id: UUID4, fields: dict[str, Any]
    ) -> Profile:
        query = """
        MATCH (user:User {user_id: $user_id})
        MERGE (user)-[:HAS_PROFILE]->(profile:Profile {user_id: $user_id})
        ON CREATE
            SET profile.sexual_preference = 'bisexual',
                profile.fame_rating = 0.0,
                profile.views_count = 0,
                profile.likes_count = 0,
                profile.matches_count = 0,
                profile.created_at = $current_time
        SET profile += $fields,
            profile.updated_at = $current_time
        RETURN profile
        """
        result = tx.run(
            query,
            user_id=str(user_id),
            fields={key: _to_parameter(value) for key, value in fields.items()},
            current_time=datetime.now(UTC),
        )
        if record := result.single():
            return profile_from_node(record["profile"])
        raise UserNotFoundError(f"User {user_id} not found")

    def increment_counter(
        self,
        tx: ManagedTransaction,
        user_id: UUID4,
        counter: ProfileCounter,
        delta: int,
    ) -> None:
        # Counter names come from the ProfileCounter enum, never from input.
        field = ProfileCounter(counter).value
        query = f"""
        MATCH (profile:Profile {{user_id: $user_id}})
        WITH profile, coalesce(profile.{field}, 0) + $delta AS updated
        SET profile.{field} = CASE WHEN updated < 0 THEN 0 ELSE updated END
        """
        tx.run(query, user_id=str(user_id), delta=delta).consume()

    def set_fame_rating(
        self, tx: ManagedTransaction, user_id: UUID4, value: float
    ) -> None:
        query = """
        MATCH (profile:Profile {user_id: $user_id})
        SET profile.fame_rating = $value
        """
        tx.run(query, user_id=str(user_id), value=float(value)).consume()

    def get_candidate(
        self, tx: ManagedTransaction, user_id: UUID4
    ) -> CandidateRecord | None:
        query = (
            """
        MATCH (user:User {user_id: $user_id})-[:HAS_PROFILE]->(profile:Profile)
        """
            + CANDIDATE_DETAILS
        )
        result = tx.run(query, user_id=str(user_id))
        if record := result.single():
            return candidate_from_record(record)
        return None

    def find_candidates(
        self, tx: ManagedTransaction, query: CandidateQuery
    ) -> list[CandidateRecord]:
        """Run the candidate filter in the database.

        Age is computed in full years at ``query.today``. A profile without a
        birth date yields a null age, which fails any age bound.
        """
        cypher = (
            """
        MATCH (user:User)-[:HAS_PROFILE]->(profile:Profile)
        WHERE NOT user.user_id IN $exclude_ids
            AND ($genders IS NULL OR profile.gender IN $genders)
            AND ($preferences IS NULL OR profile.sexual_preference IN $preferences)
            AND ($fame_min IS NULL OR profile.fame_rating >= $fame_min)
            AND ($fame_max IS NULL OR profile.fame_rating <= $fame_max)
            AND ($location IS NULL
                OR toLower(coalesce(profile.last_location, '')) CONTAINS toLower($location))
        WITH user, profile,
            CASE WHEN profile.birth_date IS NULL THEN null
                ELSE duration.between(date(profile.birth_date), date($today)).years
            END AS age
        WHERE ($age_min IS NULL OR age >= $age_min)
            AND ($age_max IS NULL OR age <= $age_max)
            AND ALL(tag_name IN $tag_names
                WHERE EXISTS { MATCH (user)-[:HAS_TAG]->(:Tag {name: tag_name}) })
        """
            + CANDIDATE_DETAILS
        )
        result = tx.run(
            cypher,
            exclude_ids=[str(user_id) for user_id in query.exclude_ids],
            genders=(
                None
                if query.genders is None
                else [gender.value for gender in query.genders]
            ),
            preferences=(
                None
                if query.preferences is None
                else [preference.value for preference in query.preferences]
            ),
            fame_min=query.fame_min,
            fame_max=query.fame_max,
            location=query.location,
            age_min=query.age_min,
            age_max=query.age_max,
            tag_names=list(query.tag_names),
            today=query.today.isoformat(),
        )
        return [candidate_from_record(record) for record in result]
