import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    tables_table: str
    reservations_table: str
    slot_index: str
    user_pool_id: str
    client_id: str
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            tables_table=os.environ.get("TABLES_TABLE", ""),
            reservations_table=os.environ.get("RESERVATIONS_TABLE", ""),
            slot_index=os.environ.get("RESERVATIONS_SLOT_INDEX", "slot-index"),
            user_pool_id=os.environ.get("USER_POOL_ID", ""),
            client_id=os.environ.get("CLIENT_ID", ""),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str) -> logging.Logger:
    # Lambda installs its own handler on the root logger; only the level is ours
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level, logging.INFO))
    return logger
