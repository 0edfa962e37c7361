"""Collective synchronization between mesh partitions."""


def default_communicator():
    """PETSc's world communicator; every rank must call ``barrier()`` equally often."""
    from petsc4py import PETSc

    return PETSc.COMM_WORLD


class SerialCommunicator:
    """Single-process stand-in exposing the PETSc communicator calls used here."""

    def getRank(self) -> int:
        return 0

    def getSize(self) -> int:
        return 1

    def barrier(self):
        pass
