"""Quadrature Rule Provider: volume and face rules under two named order configurations."""

from dataclasses import dataclass, asdict
from enum import Enum

import pandas as pd

from .rules import QuadratureRule, ReferenceShape, get_rule


class OrderConfig(str, Enum):
    """Named quadrature-order configuration."""

    SECOND = "second"  # fixed, assembly-grade
    ARBITRARY = "arbitrary"  # configurable


# Reference shape of the faces of each reference cell
FACE_SHAPE = {
    ReferenceShape.LINE: ReferenceShape.POINT,
    ReferenceShape.TRIANGLE: ReferenceShape.LINE,
    ReferenceShape.TETRAHEDRON: ReferenceShape.TRIANGLE,
}


@dataclass(frozen=True)
class QuadratureOrders:
    """Requested quadrature orders for the two named configurations."""

    second: int = 2
    arbitrary: int = 4

    def __post_init__(self):
        for name, value in asdict(self).items():
            if int(value) < 1:
                raise ValueError(f"Quadrature order '{name}' must be >= 1, got {value}")

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])


class QuadratureProvider:
    """Hands out reference-domain quadrature rules.

    Parameters
    ----------
    orders : QuadratureOrders, optional
        Orders for the "second" and "arbitrary" configurations.
    """

    def __init__(self, orders: QuadratureOrders = None):
        self.orders = orders if orders is not None else QuadratureOrders()

    def order(self, config: OrderConfig) -> int:
        """Polynomial order requested under ``config``."""
        config = OrderConfig(config)
        if config == OrderConfig.SECOND:
            return self.orders.second
        return self.orders.arbitrary

    def volume_rule(
        self,
        shape: ReferenceShape,
        config: OrderConfig = OrderConfig.SECOND,
        order: int = None,
    ) -> QuadratureRule:
        """Volume rule for ``shape``.

        Parameters
        ----------
        shape : ReferenceShape
            Reference cell shape.
        config : OrderConfig
            Named order configuration.
        order : int, optional
            Explicit order overriding the configured one.
        """
        config = OrderConfig(config)
        if order is None:
            order = self.order(config)
        return get_rule(ReferenceShape(shape), int(order), config == OrderConfig.SECOND)

    def face_rule(
        self,
        shape: ReferenceShape,
        config: OrderConfig = OrderConfig.SECOND,
        order: int = None,
    ) -> QuadratureRule:
        """Face rule for the faces of reference cell ``shape``."""
        shape = ReferenceShape(shape)
        if shape not in FACE_SHAPE:
            raise ValueError(f"Reference shape {shape.value} has no faces")
        return self.volume_rule(FACE_SHAPE[shape], config, order)
