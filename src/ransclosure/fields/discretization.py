"""
Finite-Volume Operators
=======================
Gradient, Laplacian, divergence and convection on a ``Mesh``.

Cell fields cover interior and ghost cells (``mesh.n_total`` rows); ghost slots
must hold the boundary values before an operator is applied (see
``apply_boundary_conditions``). Implicit operators return a ``MeshMatrix``;
explicit ones return volume-integrated per-cell arrays over the interior cells.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

import numpy as np

from ransclosure.fields.kernels import as_face_columns, scatter_faces, scatter_faces_symmetric
from ransclosure.fields.matrix import MeshMatrix
from ransclosure.mesh.boundary import fixed_value_faces

if TYPE_CHECKING:
    import numpy.typing as npt
    from ransclosure.mesh.boundary import BoundaryCondition
    from ransclosure.mesh.mesh import Mesh


def _as_cell_scalar(mesh: Mesh, gamma: float | npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    gamma = np.asarray(gamma, dtype=np.float64)
    if gamma.ndim == 0:
        return np.full(mesh.n_total, float(gamma))
    if gamma.shape[0] != mesh.n_total:
        raise ValueError(f"Cell field has {gamma.shape[0]} entries, expected {mesh.n_total}.")
    return gamma


def interpolate(mesh: Mesh, phi: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Linear interpolation of a cell field to the faces."""
    phi = np.asarray(phi, dtype=np.float64)
    w = mesh.face_weights.reshape((-1,) + (1,) * (phi.ndim - 1))
    return w * phi[mesh.face_owner] + (1.0 - w) * phi[mesh.face_neighbour]


def grad(mesh: Mesh, phi: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Green-Gauss cell gradient.

    For a vector field the result is ``grad[c, i, j] = d phi_j / d x_i``. Ghost
    slots receive the gradient of their owner cell.

    Args:
        mesh: The mesh.
        phi: Scalar ``(n_total,)`` or vector ``(n_total, 3)`` cell field.

    Returns:
        ``(n_total, 3)`` for scalars, ``(n_total, 3, 3)`` for vectors.
    """
    phi = np.asarray(phi, dtype=np.float64)
    phi_f = interpolate(mesh, phi)
    if phi.ndim == 1:
        flux = mesh.face_normals * phi_f[:, np.newaxis]
        out_shape = (3,)
    else:
        flux = np.einsum("fi,fj->fij", mesh.face_normals, phi_f)
        out_shape = (3, phi.shape[1])

    summed = scatter_faces(mesh.face_owner, mesh.face_neighbour, mesh.n_cells, as_face_columns(flux))
    result = np.zeros((mesh.n_total,) + out_shape, dtype=np.float64)
    result[:mesh.n_cells] = summed.reshape((mesh.n_cells,) + out_shape) / \
        mesh.cell_volumes.reshape((-1,) + (1,) * len(out_shape))
    return mesh.fill_ghosts(result)


def divergence(mesh: Mesh, T: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Explicit, volume-integrated divergence of a cell field.

    For a tensor field the face flux is ``S_f . T_f`` (contraction on the first
    index); for a vector field it is ``S_f . v_f``.

    Returns:
        ``(n_cells, 3)`` for tensors, ``(n_cells,)`` for vectors.
    """
    T = np.asarray(T, dtype=np.float64)
    T_f = interpolate(mesh, T)
    if T.ndim == 3:
        flux = np.einsum("fi,fij->fj", mesh.face_normals, T_f)
    elif T.ndim == 2:
        flux = np.einsum("fi,fi->f", mesh.face_normals, T_f)
    else:
        raise ValueError("divergence expects a vector (n, 3) or tensor (n, 3, 3) field.")
    summed = scatter_faces(mesh.face_owner, mesh.face_neighbour, mesh.n_cells, as_face_columns(flux))
    return summed if T.ndim == 3 else summed[:, 0]


def laplacian(
    mesh: Mesh,
    phi: npt.NDArray[np.float64],
    gamma: float | npt.NDArray[np.float64],
    boundaries: Iterable[BoundaryCondition] = (),
) -> MeshMatrix:
    """
    Implicit ``div(gamma grad phi)`` with a two-point face flux.

    Interior faces couple owner and neighbour. Boundary faces with a fixed-value
    descriptor couple the owner to the (known) ghost value; other boundary faces
    carry no diffusive flux.

    Args:
        mesh: The mesh.
        phi: Field the operator acts on; only its ghost values are read.
        gamma: Diffusivity, scalar or per-cell ``(n_total,)``.
        boundaries: Descriptors of ``phi``'s field.
    """
    phi = np.asarray(phi, dtype=np.float64)
    n_components = 1 if phi.ndim == 1 else phi.shape[1]
    gamma_f = interpolate(mesh, _as_cell_scalar(mesh, gamma))
    coeff = gamma_f * mesh.face_areas / mesh.owner_neighbour_distance

    n = mesh.n_cells
    owner, neighbour = mesh.face_owner, mesh.face_neighbour
    interior = neighbour < n
    fixed = fixed_value_faces(mesh, boundaries) & ~interior

    # Diagonal collects -coeff from every interior face and every fixed boundary face
    diag_coeff = np.where(interior | fixed, coeff, 0.0)
    diag = -scatter_faces_symmetric(owner, np.where(interior, neighbour, n), n,
                                    as_face_columns(diag_coeff))[:, 0]

    rows = np.concatenate((np.arange(n), owner[interior], neighbour[interior]))
    cols = np.concatenate((np.arange(n), neighbour[interior], owner[interior]))
    data = np.concatenate((diag, coeff[interior], coeff[interior]))

    source = np.zeros((n, n_components), dtype=np.float64)
    if np.any(fixed):
        ghost_values = phi[neighbour[fixed]].reshape(-1, n_components)
        np.add.at(source, owner[fixed], -coeff[fixed, np.newaxis] * ghost_values)

    return MeshMatrix.from_triplets(rows, cols, data, source)


def face_mass_flux(mesh: Mesh, U: npt.NDArray[np.float64], rho: float) -> npt.NDArray[np.float64]:
    """Mass flux ``rho U_f . S_f`` through every face (positive from owner to neighbour)."""
    return rho * np.einsum("fi,fi->f", mesh.face_normals, interpolate(mesh, U))


def convection(
    mesh: Mesh,
    F: npt.NDArray[np.float64],
    phi: npt.NDArray[np.float64],
) -> MeshMatrix:
    """
    Implicit first-order upwind ``div(F phi)``.

    Inflow through a boundary face takes the ghost value of ``phi``; outflow uses
    the owner value implicitly.
    """
    phi = np.asarray(phi, dtype=np.float64)
    F = np.asarray(F, dtype=np.float64)
    n_components = 1 if phi.ndim == 1 else phi.shape[1]
    n = mesh.n_cells
    owner, neighbour = mesh.face_owner, mesh.face_neighbour
    interior = neighbour < n

    f_out = np.maximum(F, 0.0)
    f_in = np.minimum(F, 0.0)

    rows = np.concatenate((owner, neighbour[interior], owner[interior], neighbour[interior]))
    cols = np.concatenate((owner, neighbour[interior], neighbour[interior], owner[interior]))
    data = np.concatenate((f_out, -f_in[interior], f_in[interior], -f_out[interior]))

    source = np.zeros((n, n_components), dtype=np.float64)
    boundary = ~interior
    if np.any(boundary):
        ghost_values = phi[neighbour[boundary]].reshape(-1, n_components)
        np.add.at(source, owner[boundary], -f_in[boundary, np.newaxis] * ghost_values)

    return MeshMatrix.from_triplets(rows, cols, data, source)
