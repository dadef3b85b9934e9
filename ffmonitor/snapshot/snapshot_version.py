from enum import IntEnum


class SnapshotVersion(IntEnum):
    # Values are written to disk as the container tag. Never renumber, only append.
    V1 = 1
