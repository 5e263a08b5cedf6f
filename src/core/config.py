from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Set, Tuple, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 10.0


class ChainEndpoint(BaseModel):
    """
    JSON-RPC endpoint of one chain.

    `request_timeout` bounds every RPC call made through this endpoint so a
    stalled node cannot hang an evaluation.
    """

    chain_id: int = Field(..., ge=0)
    rpc_url: str = Field(..., min_length=1)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    name: str = ""


class RouteConfig(BaseModel):
    """Cross-chain sync contract deployed on `dest_chain_id` that tracks `src_chain_id`."""

    dest_chain_id: int = Field(..., ge=0)
    src_chain_id: int = Field(..., ge=0)
    cross_chain_sync_address: str

    @field_validator("cross_chain_sync_address")
    @classmethod
    def _check_address(cls, v: str) -> str:
        return check_address(v)

    def key(self) -> Tuple[int, int]:
        return (self.dest_chain_id, self.src_chain_id)


class BridgeSyncConfig(BaseModel):
    """
    Static configuration: chain endpoints plus the routing table of sync
    oracles, keyed by the ordered pair (dest_chain_id, src_chain_id).
    """

    chains: List[ChainEndpoint] = Field(default_factory=list)
    routes: List[RouteConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_consistency(self) -> "BridgeSyncConfig":
        seen_chains: Set[int] = set()
        for chain in self.chains:
            if chain.chain_id in seen_chains:
                raise ValueError(f"duplicate chain_id {chain.chain_id} in chains")
            seen_chains.add(chain.chain_id)

        seen_routes: Set[Tuple[int, int]] = set()
        for route in self.routes:
            if route.key() in seen_routes:
                raise ValueError(
                    f"duplicate route dest={route.dest_chain_id} src={route.src_chain_id}"
                )
            seen_routes.add(route.key())
            for chain_id in route.key():
                if chain_id not in seen_chains:
                    raise ValueError(
                        f"route dest={route.dest_chain_id} src={route.src_chain_id} "
                        f"references undeclared chain {chain_id}"
                    )
        return self

    def chain(self, chain_id: int) -> ChainEndpoint:
        for endpoint in self.chains:
            if endpoint.chain_id == chain_id:
                return endpoint
        raise ConfigurationError(f"chain {chain_id} is not configured")


def check_address(value: str) -> str:
    text = value.strip()
    if not text.startswith("0x") or len(text) != 42:
        raise ValueError(f"not a 20-byte hex address: {value!r}")
    int(text[2:], 16)
    return text


def load_config(path: Union[str, Path]) -> BridgeSyncConfig:
    """
    Load a BridgeSyncConfig from a YAML (.yml/.yaml) or JSON file.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"cannot read config file {path}: {exc}") from exc

    if path.suffix.lower() in (".yml", ".yaml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)

    cfg = BridgeSyncConfig.model_validate(data or {})
    logger.debug(
        "Loaded bridge sync config from %s: %d chains, %d routes",
        path, len(cfg.chains), len(cfg.routes),
    )
    return cfg
