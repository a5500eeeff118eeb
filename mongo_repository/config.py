"""
Repository configuration.

Binds a repository to a connection target, logical database and
collection, and controls identifier generation. Loaded explicitly or
from environment variables (.env file supported).
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import InvalidConfigurationError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "repository"


@dataclass(frozen=True)
class DbConfiguration:
    """
    Immutable binding of a repository to a physical collection.

    Attributes:
        connection_string: MongoDB connection string
        db_name: Logical database name
        collection: Collection name
        auto_generate_ids: Assign a fresh id on every insert, overwriting
            any caller-supplied id
    """

    connection_string: str
    db_name: str = DEFAULT_DATABASE
    collection: str = ""
    auto_generate_ids: bool = True

    def validate(self) -> None:
        """
        Check that the binding data is present.

        Raises:
            InvalidConfigurationError: If any name or the connection string is empty
        """
        if not self.connection_string or not self.connection_string.strip():
            raise InvalidConfigurationError(
                "The connection string is null or empty. Make sure the connection "
                "string is set up correctly in the configuration."
            )
        if not self.db_name:
            raise InvalidConfigurationError("Database name is required")
        if not self.collection:
            raise InvalidConfigurationError("Collection name is required")

    @classmethod
    def from_env(
        cls,
        collection: Optional[str] = None,
        db_name: Optional[str] = None,
    ) -> "DbConfiguration":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGODB_URI (required): MongoDB connection string
        - MONGODB_DATABASE: Database name (default: "repository")
        - MONGODB_COLLECTION: Collection name (required unless passed in)
        - MONGODB_AUTO_GENERATE_IDS: Generate ids on insert (true/false, default true)

        Args:
            collection: Collection name, overrides MONGODB_COLLECTION
            db_name: Database name, overrides MONGODB_DATABASE

        Returns:
            DbConfiguration instance

        Raises:
            InvalidConfigurationError: If MONGODB_URI or the collection is not set
        """
        connection_string = os.getenv("MONGODB_URI")
        if not connection_string:
            raise InvalidConfigurationError("MONGODB_URI environment variable is required")

        collection = collection or os.getenv("MONGODB_COLLECTION")
        if not collection:
            raise InvalidConfigurationError(
                "Collection name is required (pass it in or set MONGODB_COLLECTION)"
            )

        auto_ids_str = os.getenv("MONGODB_AUTO_GENERATE_IDS", "true").lower()
        if auto_ids_str not in ("true", "false"):
            logger.warning(
                f"Invalid MONGODB_AUTO_GENERATE_IDS '{auto_ids_str}', defaulting to true"
            )
            auto_ids_str = "true"

        return cls(
            connection_string=connection_string,
            db_name=db_name or os.getenv("MONGODB_DATABASE", DEFAULT_DATABASE),
            collection=collection,
            auto_generate_ids=auto_ids_str == "true",
        )
