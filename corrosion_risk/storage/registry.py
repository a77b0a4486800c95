"""
Norm Registry — In-Memory Reference Data

Holds the norms (and their parameter catalogue) available to the
evaluation API. Seeded with the built-in DIN 50929-3 norm; additional
norms are loaded from a JSON file when NORMS_FILE is configured.

Loading happens before evaluation: the rating core never fetches data.
"""

import logging
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, List, Optional, Union

from corrosion_risk.schemas import Norm, Parameter
from corrosion_risk.standards import DIN50929_NORM_ID, din50929_norm, din50929_parameters

from .records import load_norms_file


logger = logging.getLogger(__name__)


class NormNotFoundError(KeyError):
    """Requested norm id is not registered."""


class NormRegistry:
    """
    Thread-safe store of norms and catalogue parameters.

    Norms are returned as copies so callers cannot mutate shared state.
    """

    def __init__(self, include_builtin: bool = True):
        self._norms: Dict[str, Norm] = {}
        self._parameters: Dict[str, Parameter] = {}
        self._lock = Lock()

        if include_builtin:
            self.register(din50929_norm(), din50929_parameters())

    def register(self, norm: Norm, parameters: Optional[Iterable[Parameter]] = None) -> None:
        """Add or replace a norm (and optional catalogue parameters)."""
        with self._lock:
            if norm.id in self._norms:
                logger.info(f"Replacing norm '{norm.id}'")
            self._norms[norm.id] = norm
            for parameter in parameters or []:
                self._parameters[parameter.id] = parameter

    def load_file(self, path: Union[str, Path]) -> int:
        """Register every norm in a JSON file. Returns the number loaded."""
        norms = load_norms_file(path)
        for norm in norms:
            self.register(norm)
        return len(norms)

    def get(self, norm_id: str) -> Norm:
        """
        Look up a norm by id.

        Raises:
            NormNotFoundError: id not registered
        """
        with self._lock:
            norm = self._norms.get(norm_id)
        if norm is None:
            raise NormNotFoundError(norm_id)
        return norm.model_copy(deep=True)

    def list(self) -> List[Norm]:
        with self._lock:
            return [norm.model_copy(deep=True) for norm in self._norms.values()]

    def parameters(self) -> List[Parameter]:
        with self._lock:
            return list(self._parameters.values())

    def __contains__(self, norm_id: str) -> bool:
        with self._lock:
            return norm_id in self._norms

    def __len__(self) -> int:
        with self._lock:
            return len(self._norms)


def build_registry(norms_file: Optional[str] = None) -> NormRegistry:
    """
    Create a registry with the built-in norm plus norms from a file.

    A missing or unreadable file is logged and skipped; the built-in
    norm stays available.
    """
    registry = NormRegistry()
    if norms_file:
        try:
            count = registry.load_file(norms_file)
            logger.info(f"Registered {count} norm(s) from {norms_file}")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load norms from {norms_file}: {e}")
    if DIN50929_NORM_ID not in registry:
        logger.warning("Built-in DIN 50929-3 norm is not registered")
    return registry
