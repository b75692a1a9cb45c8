"""
Shared Spin Buffer Access
=========================
The engine owns the per-site angle array; the GUI only aliases it. Any
engine call may replace or move that storage (a lattice resize creates a new
handle, the engine may reallocate internally), so an alias must never be
reused without checking that it still points at the live store.

Classes:
    BufferDescriptor: Identity of one engine allocation.
    SharedStateView: Revalidating, read-only alias over the engine buffer.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt
    from xyexplorer.model.engine import SimulationHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BufferDescriptor:
    handle_id: int
    address: int
    length: int


class SharedStateView:
    """
    Non-owning alias over ``handle.spins``.

    :meth:`refresh` is the only way to obtain the array: it compares the
    handle identity, data address and length against the alias it holds and
    rebuilds the alias when any of them changed. The returned array is
    read-only and must not be kept across engine calls.
    """

    def __init__(self) -> None:
        self._descriptor: Optional[BufferDescriptor] = None
        self._view: Optional[npt.NDArray[np.float64]] = None

    @property
    def descriptor(self) -> Optional[BufferDescriptor]:
        return self._descriptor

    def refresh(self, handle: SimulationHandle, size: int) -> npt.NDArray[np.float64]:
        """
        Return the current angle array (length size*size) for `handle`.

        Raises:
            ValueError: If the engine buffer is smaller than size*size.
        """
        length = size * size
        candidate = np.frombuffer(handle.spins, dtype=np.float64, count=length)
        descriptor = BufferDescriptor(
            handle_id=id(handle),
            address=candidate.__array_interface__["data"][0],
            length=length,
        )

        if descriptor != self._descriptor:
            if self._descriptor is not None:
                logger.debug(f"Spin buffer moved ({self._descriptor} -> {descriptor}), rebuilding view.")
            candidate.flags.writeable = False
            self._view = candidate
            self._descriptor = descriptor

        return self._view

    def invalidate(self) -> None:
        """Drop the held alias (the owning handle is about to be replaced)."""
        self._descriptor = None
        self._view = None
