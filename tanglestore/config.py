import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigParseError

CFG_PATH = Path(os.environ.get('TANGLESTORE_CONFIG', 'config.json'))

DEFAULT_DEPTH = 3
DEFAULT_MWM = 14


@dataclass(frozen=True)
class NodeConfig:
    provider: str
    depth: int = DEFAULT_DEPTH
    mwm: int = DEFAULT_MWM


@dataclass(frozen=True)
class IpfsConfig:
    provider: str
    token: Optional[str] = None
    timeout: int = 30


@dataclass(frozen=True)
class StoreConfig:
    node: NodeConfig
    ipfs: IpfsConfig
    seed: str


def read_config(path: Optional[Path] = None) -> dict:
    p = Path(path) if path else CFG_PATH
    if not p.exists():
        return {}
    try:
        return json.loads(p.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        raise ConfigParseError(f'Unable to read configuration {p}: {e}') from e


def load_config(path: Optional[Path] = None) -> StoreConfig:
    """Build the immutable store configuration.

    Values come from the JSON file, then environment variables override the
    endpoints and the secrets (seed, IPFS token).
    """
    cfg = read_config(path)
    node = cfg.get('node') or {}
    ipfs = cfg.get('ipfs') or {}

    node_provider = os.environ.get('TANGLESTORE_NODE_PROVIDER') or node.get('provider')
    ipfs_provider = os.environ.get('TANGLESTORE_IPFS_PROVIDER') or ipfs.get('provider')
    token = os.environ.get('TANGLESTORE_IPFS_TOKEN') or ipfs.get('token') or None
    seed = os.environ.get('TANGLESTORE_SEED') or cfg.get('seed')

    if not node_provider:
        raise ConfigParseError('node.provider is not configured')
    if not ipfs_provider:
        raise ConfigParseError('ipfs.provider is not configured')
    if not seed:
        raise ConfigParseError('seed is not configured')

    try:
        depth = int(node.get('depth', DEFAULT_DEPTH))
        mwm = int(node.get('mwm', DEFAULT_MWM))
        timeout = int(ipfs.get('timeout', 30))
    except (TypeError, ValueError) as e:
        raise ConfigParseError(f'Invalid numeric configuration value: {e}') from e

    return StoreConfig(
        node=NodeConfig(provider=node_provider, depth=depth, mwm=mwm),
        ipfs=IpfsConfig(provider=ipfs_provider, token=token, timeout=timeout),
        seed=seed,
    )


def masked(config: StoreConfig) -> dict:
    """Config as a dict with the seed and token hidden, for display."""
    def _mask(v):
        if not v:
            return v
        return v[:4] + '*' * max(len(v) - 4, 0)
    return {
        'node': {'provider': config.node.provider, 'depth': config.node.depth, 'mwm': config.node.mwm},
        'ipfs': {'provider': config.ipfs.provider, 'token': _mask(config.ipfs.token), 'timeout': config.ipfs.timeout},
        'seed': _mask(config.seed),
    }
