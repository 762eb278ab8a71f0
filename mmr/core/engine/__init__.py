"""MMR engines: eager and lazy variants of one contract"""
from typing import Dict, Optional, Type

from mmr.core.config import MMRConfig
from mmr.core.engine.base import BaseMMR, Snapshot, MAX_POSITIONS
from mmr.core.engine.eager import EagerMMR
from mmr.core.engine.lazy import LazyMMR
from mmr.core.storage import NodeStore
from mmr.crypto.hasher import Hasher, get_hasher
from mmr.utils.logger import setup_logging

ENGINES: Dict[str, Type[BaseMMR]] = {
    EagerMMR.variant: EagerMMR,
    LazyMMR.variant: LazyMMR,
}


def create_mmr(
    config: Optional[MMRConfig] = None,
    hasher: Optional[Hasher] = None,
    store: Optional[NodeStore] = None,
    configure_logging: bool = False,
) -> BaseMMR:
    """
    Build the engine described by a config.

    Args:
        config: Engine configuration (defaults if None)
        hasher: Overrides ``config.hasher`` when given
        store: Overrides ``config.db_path`` when given
        configure_logging: Apply the config's logging settings first

    Returns:
        EagerMMR or LazyMMR
    """
    config = config or MMRConfig()
    if configure_logging:
        setup_logging(
            level=config.log_level_value,
            log_dir=str(config.log_dir) if config.log_dir else None,
            log_to_file=config.log_to_file,
        )

    hasher = hasher or get_hasher(config.hasher)
    if store is None and config.db_path is not None:
        store = NodeStore(config.db_path)

    return ENGINES[config.variant](
        hasher=hasher,
        max_positions=config.max_positions,
        store=store,
    )


__all__ = [
    "BaseMMR",
    "EagerMMR",
    "LazyMMR",
    "Snapshot",
    "MAX_POSITIONS",
    "ENGINES",
    "create_mmr",
]
