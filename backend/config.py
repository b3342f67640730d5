import json
import logging
import math
from pathlib import Path
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

logger = logging.getLogger(__name__)

# highest order first, unigram last
DEFAULT_INTERPOLATION_WEIGHTS = {
    2: (0.6, 0.4),
    3: (0.5, 0.3, 0.2),
}


class ModelConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    order: Literal[2, 3] = 2
    interpolation_weights: Optional[Tuple[float, ...]] = None

    start_symbol: str = "<S>"
    stop_symbol: str = "</S>"
    unknown_symbol: str = "*UNKNOWN*"

    seed: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _default_weights(cls, data):
        if isinstance(data, dict) and data.get("interpolation_weights") is None:
            order = data.get("order", 2)
            if order in DEFAULT_INTERPOLATION_WEIGHTS:
                data = {**data, "interpolation_weights": DEFAULT_INTERPOLATION_WEIGHTS[order]}
        return data

    @model_validator(mode="after")
    def _check(self):
        weights = self.interpolation_weights
        if len(weights) != self.order:
            raise ValueError(
                f"order {self.order} needs {self.order} interpolation weights, got {len(weights)}"
            )
        if any(w < 0.0 or w > 1.0 for w in weights):
            raise ValueError(f"interpolation weights must lie in [0, 1]: {weights}")
        if not math.isclose(sum(weights), 1.0, abs_tol=1e-9):
            raise ValueError(f"interpolation weights must sum to 1, got {sum(weights)}")

        symbols = {self.start_symbol, self.stop_symbol, self.unknown_symbol}
        if len(symbols) != 3 or "" in symbols:
            raise ValueError("start, stop and unknown symbols must be distinct and non-empty")
        return self

    @property
    def reserved_symbols(self):
        return frozenset((self.start_symbol, self.stop_symbol, self.unknown_symbol))

    @classmethod
    def load(cls, path, **overrides) -> "ModelConfig":
        """Read a config.json; a missing file gives the defaults."""
        path = Path(path)
        data = {}
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            logger.info("Loaded model config from %s", path)
        else:
            logger.info("No config at %s, using defaults", path)
        data.update(overrides)
        return cls(**data)
