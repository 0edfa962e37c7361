r"""Unit-integral and quadrature-data precomputation driver.

Given a cell mapping and a pair of (volume, face) quadrature rules, this module
produces the cached quadrature-point data of the cell and reduces it to the
integral tensors:

.. math::

    M_{ij} = \sum_q w_q |J_q| \phi_i(p_q) \phi_j(p_q)

    K_{ij} = \sum_q w_q |J_q| \nabla\phi_i(p_q) \cdot \nabla\phi_j(p_q)

    G_{ij} = \sum_q w_q |J_q| \phi_i(p_q) \nabla\phi_j(p_q)

    S_i = \sum_q w_q |J_q| \phi_i(p_q)

Surface tensors use the face rule, the face Jacobian determinant and the
face-to-element point conversion supplied by the mapping.
"""

import logging

import numpy as np

from .datastructures import (
    FaceQuadraturePointData,
    QuadraturePointData,
    UnitIntegralData,
    VolumeQuadraturePointData,
)
from .exceptions import DegenerateGeometryError

log = logging.getLogger(__name__)


def integrate_volume(qp_data: VolumeQuadraturePointData):
    """Reduce volume quadrature-point data to (mass, stiffness, mixed, shape_integral)."""
    phi = qp_data.shape_values
    grad = qp_data.shape_grad
    JxW = qp_data.JxW

    mass = np.einsum("iq,jq,q->ij", phi, phi, JxW)
    stiffness = np.einsum("iqd,jqd,q->ij", grad, grad, JxW)
    mixed = np.einsum("iq,jqd,q->ijd", phi, grad, JxW)
    shape_integral = phi @ JxW
    return mass, stiffness, mixed, shape_integral


def integrate_face(qp_data: FaceQuadraturePointData):
    """Reduce face quadrature-point data to (mass, mixed, shape_integral)."""
    phi = qp_data.shape_values
    grad = qp_data.shape_grad
    JxW = qp_data.JxW

    mass = np.einsum("iq,jq,q->ij", phi, phi, JxW)
    mixed = np.einsum("iq,jqd,q->ijd", phi, grad, JxW)
    shape_integral = phi @ JxW
    return mass, mixed, shape_integral


def initialize_quadrature_data(mapping, volume_rule, face_rule) -> QuadraturePointData:
    """Evaluate the mapping at every volume and face quadrature node.

    Parameters
    ----------
    mapping : CellMapping
        Cell mapping providing ``volume_quadrature_data`` and ``face_quadrature_data``.
    volume_rule, face_rule : QuadratureRule
        Reference-domain rules for the cell and its faces.

    Returns
    -------
    QuadraturePointData
    """
    volume = mapping.volume_quadrature_data(volume_rule)
    faces = [
        mapping.face_quadrature_data(f, face_rule) for f in range(mapping.num_faces)
    ]
    return QuadraturePointData(volume=volume, faces=faces)


def compute_unit_integrals(mapping, volume_rule, face_rule) -> UnitIntegralData:
    """Integrate shape functions and gradients over a cell and its faces.

    Parameters
    ----------
    mapping : CellMapping
        Cell mapping to integrate.
    volume_rule, face_rule : QuadratureRule
        Reference-domain rules for the cell and its faces.

    Returns
    -------
    UnitIntegralData
        Read-only integral tensors.

    Raises
    ------
    DegenerateGeometryError
        If any tensor contains non-finite values.
    """
    qp_data = initialize_quadrature_data(mapping, volume_rule, face_rule)
    return unit_integrals_from_quadrature_data(qp_data, mapping.face_dof_mappings)


def unit_integrals_from_quadrature_data(qp_data: QuadraturePointData, face_dof_mappings):
    """Accumulate UnitIntegralData from already evaluated quadrature-point data."""
    mass, stiffness, mixed, shape_integral = integrate_volume(qp_data.volume)
    data = UnitIntegralData(
        mass=mass,
        stiffness=stiffness,
        mixed=mixed,
        shape_integral=shape_integral,
        face_dof_mappings=[list(m) for m in face_dof_mappings],
    )
    for face_qp in qp_data.faces:
        face_mass, face_mixed, face_shape_integral = integrate_face(face_qp)
        data.face_mass.append(face_mass)
        data.face_mixed.append(face_mixed)
        data.face_shape_integral.append(face_shape_integral)

    check_finite(data)
    return data.freeze()


def check_finite(data: UnitIntegralData, label: str = "unit integrals"):
    """Raise DegenerateGeometryError if any cached tensor is NaN or infinite."""
    for array in data.arrays():
        if not np.all(np.isfinite(array)):
            log.error(f"check_finite: non-finite values in {label}")
            raise DegenerateGeometryError(f"Non-finite values in {label}")
