from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from ransclosure.fields.operators import mag

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

PATCH_NAMES = ("left", "right", "bottom", "top")


class Mesh:
    """
    Finite-volume mesh with owner/neighbour face connectivity.

    Cells ``0 .. n_cells - 1`` are interior cells. Each boundary face owns one
    ghost cell placed at the face centre; ghost cells follow the interior cells,
    so every cell field has ``n_total = n_cells + n_boundary_faces`` entries and
    a boundary face's neighbour is its ghost cell.
    """
    def __init__(
        self,
        cell_centers: npt.NDArray[np.float64],
        cell_volumes: npt.NDArray[np.float64],
        face_owner: npt.NDArray[np.int64],
        face_neighbour: npt.NDArray[np.int64],
        face_normals: npt.NDArray[np.float64],
        face_centers: npt.NDArray[np.float64],
        patches: dict[str, npt.NDArray[np.int64]] | None = None,
    ) -> None:
        """
        Initialize the mesh.

        Args:
            cell_centers: Centres of interior and ghost cells, shape (n_total, 3).
            cell_volumes: Volumes of interior cells, shape (n_cells,).
            face_owner: Owner (interior) cell per face, shape (n_faces,).
            face_neighbour: Neighbour cell per face; ghost index for boundary faces.
            face_normals: Area vectors pointing from owner to neighbour, shape (n_faces, 3).
            face_centers: Face centres, shape (n_faces, 3).
            patches: Named groups of boundary face indices.
        """
        self.cell_centers = np.asarray(cell_centers, dtype=np.float64)
        self.cell_volumes = np.asarray(cell_volumes, dtype=np.float64)
        self.face_owner = np.asarray(face_owner, dtype=np.int64)
        self.face_neighbour = np.asarray(face_neighbour, dtype=np.int64)
        self.face_normals = np.asarray(face_normals, dtype=np.float64)
        self.face_centers = np.asarray(face_centers, dtype=np.float64)
        self.patches = {name: np.asarray(faces, dtype=np.int64) for name, faces in (patches or {}).items()}

        self._validate()

        self.face_areas = mag(self.face_normals)
        self.face_units = self.face_normals / self.face_areas[:, np.newaxis]

        self.boundary_faces = np.flatnonzero(self.face_neighbour >= self.n_cells)
        self.ghost_cells = self.face_neighbour[self.boundary_faces]

        # Geometric interpolation weight of the owner value on each face
        d_pn = np.abs(np.einsum("fi,fi->f", self.face_units,
                                self.cell_centers[self.face_neighbour] - self.cell_centers[self.face_owner]))
        d_fn = np.abs(np.einsum("fi,fi->f", self.face_units,
                                self.cell_centers[self.face_neighbour] - self.face_centers))
        self.owner_neighbour_distance = d_pn
        self.face_weights = d_fn / d_pn

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(cells={self.n_cells}, faces={self.n_faces}, patches={list(self.patches)})"

    def _validate(self) -> None:
        n_faces = self.face_owner.size
        if self.face_neighbour.size != n_faces:
            raise ValueError("face_owner and face_neighbour must have the same length.")
        if self.face_normals.shape != (n_faces, 3) or self.face_centers.shape != (n_faces, 3):
            raise ValueError("face_normals and face_centers must have shape (n_faces, 3).")
        if self.cell_centers.ndim != 2 or self.cell_centers.shape[1] != 3:
            raise ValueError("cell_centers must have shape (n_total, 3).")
        n_boundary = int(np.count_nonzero(self.face_neighbour >= self.cell_volumes.size))
        if self.cell_centers.shape[0] != self.cell_volumes.size + n_boundary:
            raise ValueError(
                f"Expected {self.cell_volumes.size + n_boundary} cell centres "
                f"(interior + ghost), got {self.cell_centers.shape[0]}."
            )
        if np.any(self.face_owner >= self.cell_volumes.size):
            raise ValueError("Face owners must be interior cells.")
        if np.any(mag(self.face_normals) <= 0.0):
            raise ValueError("Every face must have a positive area.")

    @property
    def n_cells(self) -> int:
        """Number of interior cells."""
        return self.cell_volumes.size

    @property
    def n_faces(self) -> int:
        """Number of faces (interior and boundary)."""
        return self.face_owner.size

    @property
    def n_total(self) -> int:
        """Number of interior plus ghost cells, i.e. the length of a cell field."""
        return self.cell_centers.shape[0]

    def patch_faces(self, name: str) -> npt.NDArray[np.int64]:
        """Face indices of the named patch."""
        try:
            return self.patches[name]
        except KeyError:
            raise KeyError(f"Unknown patch '{name}'. Available patches: {sorted(self.patches)}") from None

    def fill_ghosts(self, phi: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Copy owner values into ghost slots (zero-gradient extrapolation), in place."""
        phi[self.ghost_cells] = phi[self.face_owner[self.boundary_faces]]
        return phi

    def wall_distance(self, face: int) -> float:
        """Wall-normal distance between the owner and neighbour centres of a face."""
        c1 = self.face_owner[face]
        c2 = self.face_neighbour[face]
        return float(abs(np.dot(self.face_units[face], self.cell_centers[c1] - self.cell_centers[c2])))

    def cell_field(self, value: float | npt.ArrayLike = 0.0, n_components: int | None = None) -> npt.NDArray[np.float64]:
        """Allocate a field over interior and ghost cells filled with ``value``."""
        shape = (self.n_total,) if n_components is None else (self.n_total, n_components)
        out = np.empty(shape, dtype=np.float64)
        out[...] = value
        return out

    @classmethod
    def channel(
        cls,
        nx: int,
        ny: int,
        lx: float,
        ly: float,
        depth: float = 1.0,
        y_grading: float = 1.0,
    ) -> Mesh:
        """
        Build a two-dimensional Cartesian block (one cell deep in z).

        Cells are numbered ``i + j * nx`` with ``i`` along x. The boundary patches
        are ``left`` (x = 0), ``right`` (x = lx), ``bottom`` (y = 0) and ``top``
        (y = ly). Front and back faces are not represented.

        Args:
            nx: Cells along x.
            ny: Cells along y.
            lx: Length along x.
            ly: Height along y.
            depth: Extent along z.
            y_grading: Ratio of consecutive cell heights (1.0 for uniform spacing).
        """
        if nx < 1 or ny < 1:
            raise ValueError(f"Channel needs at least one cell per direction, got nx={nx}, ny={ny}.")
        if lx <= 0.0 or ly <= 0.0 or depth <= 0.0:
            raise ValueError("Channel dimensions must be positive.")

        x = np.linspace(0.0, lx, nx + 1)
        if y_grading == 1.0:
            y = np.linspace(0.0, ly, ny + 1)
        else:
            heights = y_grading ** np.arange(ny)
            y = np.concatenate(([0.0], np.cumsum(heights))) * (ly / heights.sum())
        xc = 0.5 * (x[:-1] + x[1:])
        yc = 0.5 * (y[:-1] + y[1:])
        dx = np.diff(x)
        dy = np.diff(y)
        n_cells = nx * ny

        def cid(i: int, j: int) -> int:
            return i + j * nx

        centers = [[xc[i], yc[j], 0.0] for j in range(ny) for i in range(nx)]
        volumes = [dx[i] * dy[j] * depth for j in range(ny) for i in range(nx)]

        owner: list[int] = []
        neighbour: list[int] = []
        normals: list[list[float]] = []
        fcenters: list[list[float]] = []

        # 1) Interior faces
        for j in range(ny):
            for i in range(nx - 1):
                owner.append(cid(i, j))
                neighbour.append(cid(i + 1, j))
                normals.append([dy[j] * depth, 0.0, 0.0])
                fcenters.append([x[i + 1], yc[j], 0.0])
        for j in range(ny - 1):
            for i in range(nx):
                owner.append(cid(i, j))
                neighbour.append(cid(i, j + 1))
                normals.append([0.0, dx[i] * depth, 0.0])
                fcenters.append([xc[i], y[j + 1], 0.0])

        # 2) Boundary faces, each followed by its ghost cell
        patches: dict[str, list[int]] = {name: [] for name in PATCH_NAMES}
        ghost_centers: list[list[float]] = []

        def add_boundary(patch: str, cell: int, normal: list[float], center: list[float]) -> None:
            patches[patch].append(len(owner))
            owner.append(cell)
            neighbour.append(n_cells + len(ghost_centers))
            normals.append(normal)
            fcenters.append(center)
            ghost_centers.append(center)

        for j in range(ny):
            add_boundary("left", cid(0, j), [-dy[j] * depth, 0.0, 0.0], [x[0], yc[j], 0.0])
        for j in range(ny):
            add_boundary("right", cid(nx - 1, j), [dy[j] * depth, 0.0, 0.0], [x[-1], yc[j], 0.0])
        for i in range(nx):
            add_boundary("bottom", cid(i, 0), [0.0, -dx[i] * depth, 0.0], [xc[i], y[0], 0.0])
        for i in range(nx):
            add_boundary("top", cid(i, ny - 1), [0.0, dx[i] * depth, 0.0], [xc[i], y[-1], 0.0])

        mesh = cls(
            cell_centers=np.array(centers + ghost_centers, dtype=np.float64),
            cell_volumes=np.array(volumes, dtype=np.float64),
            face_owner=np.array(owner, dtype=np.int64),
            face_neighbour=np.array(neighbour, dtype=np.int64),
            face_normals=np.array(normals, dtype=np.float64),
            face_centers=np.array(fcenters, dtype=np.float64),
            patches={name: np.array(faces, dtype=np.int64) for name, faces in patches.items()},
        )
        logger.debug(f"Built channel mesh {nx}x{ny}: {mesh}")
        return mesh
