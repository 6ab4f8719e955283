import logging
from os import environ
from typing import Any, Callable, TypeVar

from neo4j import Driver, GraphDatabase

from app.utils.singleton import SingletonMeta

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Uniqueness rules the dating core relies on. Duplicate likes, matches and
# blocks are rejected here rather than by application locks.
CONSTRAINTS: tuple[str, ...] = (
    "CREATE CONSTRAINT user_id_unique IF NOT EXISTS "
    "FOR (u:User) REQUIRE u.user_id IS UNIQUE",
    "CREATE CONSTRAINT user_username_unique IF NOT EXISTS "
    "FOR (u:User) REQUIRE u.username IS UNIQUE",
    "CREATE CONSTRAINT user_email_unique IF NOT EXISTS "
    "FOR (u:User) REQUIRE u.email IS UNIQUE",
    "CREATE CONSTRAINT profile_user_unique IF NOT EXISTS "
    "FOR (p:Profile) REQUIRE p.user_id IS UNIQUE",
    "CREATE CONSTRAINT tag_id_unique IF NOT EXISTS "
    "FOR (t:Tag) REQUIRE t.tag_id IS UNIQUE",
    "CREATE CONSTRAINT tag_name_unique IF NOT EXISTS "
    "FOR (t:Tag) REQUIRE t.name IS UNIQUE",
    "CREATE CONSTRAINT photo_id_unique IF NOT EXISTS "
    "FOR (p:Photo) REQUIRE p.photo_id IS UNIQUE",
    "CREATE CONSTRAINT like_pair_unique IF NOT EXISTS "
    "FOR ()-[r:LIKES]-() REQUIRE (r.liker_id, r.liked_id) IS UNIQUE",
    "CREATE CONSTRAINT match_pair_unique IF NOT EXISTS "
    "FOR ()-[r:MATCHED_WITH]-() REQUIRE r.pair_key IS UNIQUE",
    "CREATE CONSTRAINT block_pair_unique IF NOT EXISTS "
    "FOR ()-[r:BLOCKS]-() REQUIRE (r.blocker_id, r.blocked_id) IS UNIQUE",
    "CREATE CONSTRAINT report_pair_unique IF NOT EXISTS "
    "FOR ()-[r:REPORTED]-() REQUIRE (r.reporter_id, r.reported_id) IS UNIQUE",
    "CREATE CONSTRAINT notification_id_unique IF NOT EXISTS "
    "FOR (n:Notification) REQUIRE n.notification_id IS UNIQUE",
    "CREATE CONSTRAINT message_id_unique IF NOT EXISTS "
    "FOR (m:Message) REQUIRE m.message_id IS UNIQUE",
)


class DatabaseManager(metaclass=SingletonMeta):
    """Singleton manager for Neo4j database connections.

    This class manages the lifecycle of Neo4j database connections, ensuring
    only one connection is active at a time and handling connection pooling.
    Services run their work through ``execute_read``/``execute_write`` so
    that each unit of work is one managed transaction.

    Attributes:
        _driver: The Neo4j driver instance
        _uri: URI of the Neo4j database
        _auth: Tuple of username and password for authentication
        _database: Name of the Neo4j database to connect to
    """

    def __init__(self) -> None:
        """Initialize the database manager.

        Sets up connection parameters and verifies connectivity.

        Raises:
            neo4j.exceptions.ServiceUnavailable: If database is not reachable
            neo4j.exceptions.AuthError: If credentials are invalid
        """
        self._driver: Driver | None = None
        self._uri: str = environ.get("NEO4J_URI", "")
        self._auth: tuple[str, str] = (
            environ.get("NEO4J_USER", ""),
            environ.get("NEO4J_PASSWORD", ""),
        )
        self._database: str = environ.get("NEO4J_DATABASE", "")
        # Verify connectivity during initialization
        self._verify_connectivity()

    def _verify_connectivity(self) -> None:
        """Verify database connectivity with current credentials.

        Raises:
            neo4j.exceptions.ServiceUnavailable: If database is not reachable
            neo4j.exceptions.AuthError: If credentials are invalid
        """
        with GraphDatabase.driver(self._uri, auth=self._auth) as test_driver:
            test_driver.verify_connectivity()

    @property
    def driver(self) -> Driver:
        """Get or create the Neo4j driver instance.

        Returns:
            The Neo4j driver instance that can be used for database operations
        """
        if not self._driver:
            self._driver = GraphDatabase.driver(
                self._uri,
                auth=self._auth,
                max_connection_pool_size=10,  # Default is 100
                connection_timeout=30,  # Seconds
            )
        return self._driver

    @property
    def database(self) -> str:
        """Get the name of the Neo4j database."""
        return self._database

    def execute_read(
        self, work: Callable[..., T], *args: Any, **kwargs: Any
    ) -> T:
        """Run a transaction function in a read transaction.

        Args:
            work: Function taking the transaction as its first argument
            *args: Extra positional arguments for ``work``
            **kwargs: Extra keyword arguments for ``work``

        Returns:
            Whatever ``work`` returns
        """
        with self.driver.session(database=self.database) as session:
            return session.execute_read(work, *args, **kwargs)

    def execute_write(
        self, work: Callable[..., T], *args: Any, **kwargs: Any
    ) -> T:
        """Run a transaction function in a write transaction.

        Everything ``work`` does commits together or not at all. An exception
        raised inside ``work`` rolls the transaction back and propagates.

        Args:
            work: Function taking the transaction as its first argument
            *args: Extra positional arguments for ``work``
            **kwargs: Extra keyword arguments for ``work``

        Returns:
            Whatever ``work`` returns
        """
        with self.driver.session(database=self.database) as session:
            return session.execute_write(work, *args, **kwargs)

    def apply_constraints(self) -> None:
        """Create the uniqueness constraints if they do not exist yet."""
        with self.driver.session(database=self.database) as session:
            for statement in CONSTRAINTS:
                session.run(statement).consume()
        logger.info("Applied %d schema constraints", len(CONSTRAINTS))

    def close(self) -> None:
        """Close the database connection.

        This method should be called when shutting down the application
        to properly close the database connection and clean up resources.
        If no connection exists, this is a no-op.
        """
        if self._driver:
            self._driver.close()
            self._driver = None

