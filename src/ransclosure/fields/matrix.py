from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import scipy as sp
import scipy.sparse.linalg  # noqa: F401

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

spsolve = sp.sparse.linalg.spsolve


class MeshMatrix:
    """
    Implicit operator over the interior cells of a mesh.

    Represents the residual ``A phi - b`` with a sparse ``matrix`` A of shape
    (n_cells, n_cells) shared by all components and a dense ``source`` b of shape
    (n_cells, n_components). Subtracting an explicit per-cell array moves it to
    the source, so ``M -= div(T)`` and ``M -= lap(U, mu)`` read like the equation.
    """
    def __init__(
        self,
        matrix: sp.sparse.csr_matrix,
        source: npt.NDArray[np.float64],
    ) -> None:
        self.matrix = sp.sparse.csr_matrix(matrix, dtype=np.float64)
        source = np.asarray(source, dtype=np.float64)
        self.source = source.reshape(source.shape[0], -1).copy()
        if self.matrix.shape != (self.n_cells, self.n_cells):
            raise ValueError(f"Matrix shape {self.matrix.shape} does not match {self.n_cells} cells.")

    @classmethod
    def zeros(cls, n_cells: int, n_components: int = 1) -> MeshMatrix:
        """Empty operator for ``n_cells`` cells and ``n_components`` components."""
        return cls(sp.sparse.csr_matrix((n_cells, n_cells), dtype=np.float64),
                   np.zeros((n_cells, n_components), dtype=np.float64))

    @classmethod
    def from_triplets(
        cls,
        rows: npt.NDArray[np.int64],
        cols: npt.NDArray[np.int64],
        data: npt.NDArray[np.float64],
        source: npt.NDArray[np.float64],
    ) -> MeshMatrix:
        """Assemble from COO triplets (duplicates are summed)."""
        n = source.shape[0]
        matrix = sp.sparse.coo_matrix((data, (rows, cols)), shape=(n, n)).tocsr()
        return cls(matrix, source)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(cells={self.n_cells}, components={self.n_components}, nnz={self.matrix.nnz})"

    @property
    def n_cells(self) -> int:
        return self.source.shape[0]

    @property
    def n_components(self) -> int:
        return self.source.shape[1]

    def copy(self) -> MeshMatrix:
        return MeshMatrix(self.matrix.copy(), self.source.copy())

    def _explicit(self, values: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        values = np.asarray(values, dtype=np.float64)
        values = values[:self.n_cells].reshape(self.n_cells, -1)
        if values.shape[1] != self.n_components:
            raise ValueError(f"Explicit term has {values.shape[1]} components, expected {self.n_components}.")
        return values

    def __iadd__(self, other: MeshMatrix | npt.NDArray[np.float64]) -> MeshMatrix:
        if isinstance(other, MeshMatrix):
            self.matrix = self.matrix + other.matrix
            self.source = self.source + other.source
        else:
            self.source = self.source - self._explicit(other)
        return self

    def __isub__(self, other: MeshMatrix | npt.NDArray[np.float64]) -> MeshMatrix:
        if isinstance(other, MeshMatrix):
            self.matrix = self.matrix - other.matrix
            self.source = self.source - other.source
        else:
            self.source = self.source + self._explicit(other)
        return self

    def __add__(self, other: MeshMatrix | npt.NDArray[np.float64]) -> MeshMatrix:
        out = self.copy()
        out += other
        return out

    def __sub__(self, other: MeshMatrix | npt.NDArray[np.float64]) -> MeshMatrix:
        out = self.copy()
        out -= other
        return out

    def __neg__(self) -> MeshMatrix:
        return MeshMatrix(-self.matrix, -self.source)

    def diagonal(self) -> npt.NDArray[np.float64]:
        return self.matrix.diagonal()

    def add_source(self, values: npt.NDArray[np.float64]) -> None:
        """Add an explicit source (right-hand side) per cell."""
        self.source = self.source + self._explicit(values)

    def add_diagonal(self, values: npt.NDArray[np.float64]) -> None:
        """Add an implicit per-cell coefficient to the diagonal."""
        values = np.broadcast_to(np.asarray(values, dtype=np.float64), (self.n_cells,))
        self.matrix = self.matrix + sp.sparse.diags(values, format="csr")

    def residual(self, phi: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """``A phi - b`` evaluated on the interior cells."""
        phi = np.asarray(phi, dtype=np.float64)[:self.n_cells].reshape(self.n_cells, -1)
        return self.matrix @ phi - self.source

    def relax(self, phi: npt.NDArray[np.float64], factor: float) -> None:
        """
        Implicit (Patankar) under-relaxation towards the current values ``phi``.

        The diagonal becomes ``a_P / factor`` and ``(1 - factor) / factor * a_P * phi``
        is added to the source, so a converged solution is unaffected.
        """
        if not 0.0 < factor <= 1.0:
            raise ValueError(f"Under-relaxation factor must lie in (0, 1], got {factor}.")
        if factor == 1.0:
            return
        a_p = self.diagonal()
        phi = np.asarray(phi, dtype=np.float64)[:self.n_cells].reshape(self.n_cells, -1)
        extra = a_p * (1.0 - factor) / factor
        self.add_diagonal(extra)
        self.source = self.source + extra[:, np.newaxis] * phi

    def fix_values(self, cells: npt.NDArray[np.int64], values: npt.NDArray[np.float64]) -> None:
        """Replace the equations of ``cells`` with ``phi[cell] = value``."""
        cells = np.asarray(cells, dtype=np.int64)
        if cells.size == 0:
            return
        values = np.asarray(values, dtype=np.float64).reshape(cells.size, -1)
        keep = np.ones(self.n_cells, dtype=np.float64)
        keep[cells] = 0.0
        pinned = np.zeros(self.n_cells, dtype=np.float64)
        pinned[cells] = 1.0
        self.matrix = (sp.sparse.diags(keep) @ self.matrix + sp.sparse.diags(pinned)).tocsr()
        self.source[cells] = values

    def solve(self) -> npt.NDArray[np.float64]:
        """
        Solve ``A phi = b`` for every component.

        Returns:
            Solution of shape (n_cells,) for scalar operators, else (n_cells, n_components).
        """
        matrix = self.matrix.tocsc()
        solution = np.empty_like(self.source)
        for j in range(self.n_components):
            solution[:, j] = spsolve(matrix, self.source[:, j])
        if not np.all(np.isfinite(solution)):
            logger.warning(f"Non-finite values in solution of {self}.")
        return solution[:, 0] if self.n_components == 1 else solution
