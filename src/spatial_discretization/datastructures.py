"""Data structures for discretization configuration and cached per-cell data.

Structure:
- DiscretizationParameters: Input configuration (quadrature orders)
- SetupFlags / PrecomputeStage: Requested and completed precomputation phases
- PrecomputeMetrics: Per-phase timings of the last precompute call
- UnitIntegralData: Cached volume and surface integral tensors of one cell
- VolumeQuadraturePointData / FaceQuadraturePointData / QuadraturePointData:
  Cached quadrature-point data of one cell
"""

from dataclasses import dataclass, asdict, field
from enum import Flag, IntFlag, auto
from typing import List

import numpy as np
import pandas as pd

from quadrature import QuadratureOrders


# ========================================================
# Parameters (Input Configuration)
# ========================================================


@dataclass
class DiscretizationParameters:
    """Spatial discretization parameters."""

    second_order: int = 2  # fixed, assembly-grade quadrature order
    arbitrary_order: int = 4  # configurable quadrature order for QP data

    def quadrature_orders(self) -> QuadratureOrders:
        return QuadratureOrders(second=self.second_order, arbitrary=self.arbitrary_order)

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])


# ========================================================
# Precomputation State
# ========================================================


class SetupFlags(IntFlag):
    """Optional precomputation phases requested from ``precompute``."""

    NO_FLAGS = 0
    COMPUTE_UNIT_INTEGRALS = 1
    INIT_QP_DATA = 2


class PrecomputeStage(Flag):
    """Completed precomputation phases of a discretization instance."""

    EMPTY = 0
    MAPPINGS_BUILT = auto()
    INTEGRALS_BUILT = auto()
    QUADRATURE_BUILT = auto()


@dataclass
class PrecomputeMetrics:
    """Wall time (seconds) spent in each phase of the most recent precompute call."""

    n_cells: int = 0
    mapping_time_seconds: float = 0.0
    unit_integral_time_seconds: float = 0.0
    quadrature_time_seconds: float = 0.0
    total_time_seconds: float = 0.0

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])


# ========================================================
# Unit Integrals
# ========================================================


@dataclass
class UnitIntegralData:
    """Integrals of shape functions and their gradients over one cell.

    Volume tensors (n = number of dofs):
    - mass[i, j] = int phi_i phi_j dV, shape (n, n)
    - stiffness[i, j] = int grad phi_i . grad phi_j dV, shape (n, n)
    - mixed[i, j, :] = int phi_i grad phi_j dV, shape (n, n, 3)
    - shape_integral[i] = int phi_i dV, shape (n,)

    Surface tensors are lists indexed by face, with the same per-face shapes.
    """

    mass: np.ndarray
    stiffness: np.ndarray
    mixed: np.ndarray
    shape_integral: np.ndarray
    face_mass: List[np.ndarray] = field(default_factory=list)
    face_mixed: List[np.ndarray] = field(default_factory=list)
    face_shape_integral: List[np.ndarray] = field(default_factory=list)
    face_dof_mappings: List[List[int]] = field(default_factory=list)

    @classmethod
    def allocate(cls, n_dofs: int, n_faces: int):
        """Allocate zeroed tensors with proper sizes."""
        return cls(
            # Volume integrals
            mass=np.zeros((n_dofs, n_dofs)),
            stiffness=np.zeros((n_dofs, n_dofs)),
            mixed=np.zeros((n_dofs, n_dofs, 3)),
            shape_integral=np.zeros(n_dofs),
            # Surface integrals
            face_mass=[np.zeros((n_dofs, n_dofs)) for _ in range(n_faces)],
            face_mixed=[np.zeros((n_dofs, n_dofs, 3)) for _ in range(n_faces)],
            face_shape_integral=[np.zeros(n_dofs) for _ in range(n_faces)],
        )

    @property
    def num_dofs(self) -> int:
        return self.shape_integral.shape[0]

    @property
    def num_faces(self) -> int:
        return len(self.face_mass)

    def arrays(self):
        """Every cached tensor, volume first then per-face."""
        yield from (self.mass, self.stiffness, self.mixed, self.shape_integral)
        yield from self.face_mass
        yield from self.face_mixed
        yield from self.face_shape_integral

    def freeze(self):
        """Mark every tensor read-only."""
        for array in self.arrays():
            array.setflags(write=False)
        return self


# ========================================================
# Quadrature-Point Data
# ========================================================


@dataclass
class VolumeQuadraturePointData:
    """Quadrature nodes of one cell with their basis data.

    - qpoints_ref: reference point of each node, shape (nqp, 3). For
      sub-element decompositions this is the point in its sub-simplex.
    - qpoints_xyz: physical point of each node, shape (nqp, 3)
    - JxW: Jacobian-scaled weight of each node, shape (nqp,)
    - shape_values[i, q]: phi_i at node q, shape (ndofs, nqp)
    - shape_grad[i, q, :]: physical grad phi_i at node q, shape (ndofs, nqp, 3)
    """

    qpoints_ref: np.ndarray
    qpoints_xyz: np.ndarray
    JxW: np.ndarray
    shape_values: np.ndarray
    shape_grad: np.ndarray

    def __len__(self):
        return self.JxW.shape[0]

    def __iter__(self):
        """Yield (reference point, physical point, JxW) per node."""
        return zip(self.qpoints_ref, self.qpoints_xyz, self.JxW)

    @property
    def num_qpoints(self) -> int:
        return self.JxW.shape[0]

    @property
    def num_dofs(self) -> int:
        return self.shape_values.shape[0]

    @property
    def quadrature_point_indices(self) -> range:
        return range(self.num_qpoints)

    @classmethod
    def concatenate(cls, parts, **extra):
        """Stack sub-element data along the quadrature-point axis."""
        return cls(
            qpoints_ref=np.concatenate([p.qpoints_ref for p in parts]),
            qpoints_xyz=np.concatenate([p.qpoints_xyz for p in parts]),
            JxW=np.concatenate([p.JxW for p in parts]),
            shape_values=np.concatenate([p.shape_values for p in parts], axis=1),
            shape_grad=np.concatenate([p.shape_grad for p in parts], axis=1),
            **extra,
        )


@dataclass
class FaceQuadraturePointData(VolumeQuadraturePointData):
    """Face quadrature nodes; adds the outward unit normal at each node, shape (nqp, 3)."""

    normals: np.ndarray = None

    @classmethod
    def concatenate(cls, parts, **extra):
        normals = np.concatenate([p.normals for p in parts])
        return super().concatenate(parts, normals=normals, **extra)


@dataclass
class QuadraturePointData:
    """Volume and per-face quadrature-point data of one cell."""

    volume: VolumeQuadraturePointData
    faces: List[FaceQuadraturePointData] = field(default_factory=list)

    @property
    def num_faces(self) -> int:
        return len(self.faces)
