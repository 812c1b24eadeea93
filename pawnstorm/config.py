# pawnstorm/config.py
import logging
import os
import tomllib
from dataclasses import dataclass, field
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Centipawn-like scale. The king value is only a safety net: python-chess never
# offers a king capture as a legal move.
PIECE_VALUES = {
    "PAWN": 100,
    "KNIGHT": 280,
    "BISHOP": 320,
    "ROOK": 479,
    "QUEEN": 929,
    "KING": 60000,
}

MATE_SCORE = 10**10


@dataclass
class SearchConfig:
    depth: int = 3
    auto_queen_promotion: bool = True
    autoplay_delay_ms: int = 500
    history_capacity: int = 100
    seed: Optional[int] = None  # None means a fresh shuffle every run


@dataclass
class EvalConfig:
    piece_values: Dict[str, int] = field(default_factory=lambda: PIECE_VALUES.copy())
    check_bonus: int = 50
    mate_score: int = MATE_SCORE


@dataclass
class UIConfig:
    engine_name: str = "Pawnstorm"
    engine_author: str = "Pawnstorm developers"
    reference_side: str = "white"  # the running score is positive for this side


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "ui"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if not hasattr(target, k):
                    logger.warning("Unknown config key %s.%s in %s", section, k, path)
                elif k == "piece_values":
                    # a partial table only overrides the pieces it names
                    target.piece_values.update({name.upper(): value for name, value in v.items()})
                else:
                    setattr(target, k, v)
        if "log_level" in raw:
            cfg.log_level = raw["log_level"]
        return cfg


def configure_logging(level: Optional[str] = None):
    """Set up root logging for the command-line and API entry points."""
    logging.basicConfig(
        level=(level or CONFIG.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("PAWNSTORM_CONFIG_TOML", "config.toml"))
# allow env override of depth for quick debugging
override_depth = os.environ.get("PAWNSTORM_SEARCH_DEPTH")
if override_depth:
    try:
        CONFIG.search.depth = int(override_depth)
    except ValueError:
        logger.warning("Ignoring non-integer PAWNSTORM_SEARCH_DEPTH=%r", override_depth)
