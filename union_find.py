import numpy as np
from numba import njit


class InvalidArgument(ValueError):
    """Raised when a size or count argument is not a positive integer."""


class IndexOutOfRange(IndexError):
    """Raised when a site coordinate or element id falls outside its range."""


# weighted quick union-find
class WeightedQuickUnionUF:
    """
    A class for the Weighted Quick-Union-Find data structure
    with path compression.
    """

    def __init__(self, n: int):
        """
        Initializes an empty union-find data structure with 'n' elements
        indexed 0 through n-1. Each element is initially in its own component.

        :param n: The number of elements.
        """
        if n <= 0:
            raise InvalidArgument(f"union-find size must be > 0, got {n}")

        # self.parent[i] = parent of element i
        self.parent = list(range(n))

        # self.size[i] = number of elements in the tree rooted at i
        self.size = [1] * n

        self.count = n

    def __len__(self):
        return len(self.parent)

    def get_count(self) -> int:
        """
        Returns the number of disjoint sets.
        """
        return self.count

    def _validate(self, p: int):
        n = len(self.parent)
        if p < 0 or p >= n:
            raise IndexOutOfRange(f"index {p} is not between 0 and {n-1}")

    def find(self, p: int) -> int:
        """
        Returns the root (canonical element) of the set containing 'p'.
        Every node on the path is relinked directly to the root.
        """
        self._validate(p)

        root = p
        while root != self.parent[root]:
            root = self.parent[root]

        while p != root:
            next_p = self.parent[p]
            self.parent[p] = root
            p = next_p

        return root

    def connected(self, p: int, q: int) -> bool:
        """
        Returns true if 'p' and 'q' are in the same component.
        """
        return self.find(p) == self.find(q)

    def size_of(self, p: int) -> int:
        return self.size[self.find(p)]

    def union(self, p: int, q: int):
        """
        Merges the set containing 'p' with the set containing 'q'.
        """
        rootP = self.find(p)
        rootQ = self.find(q)

        if rootP == rootQ:
            return

        # smaller tree goes under the larger one
        if self.size[rootP] < self.size[rootQ]:
            self.parent[rootP] = rootQ
            self.size[rootQ] += self.size[rootP]
        else:
            self.parent[rootQ] = rootP
            self.size[rootP] += self.size[rootQ]

        self.count -= 1


# Array kernels for the compiled trial loop. No bounds checks here.
@njit(cache=True)
def find_root(parent, x):
    root = x
    while parent[root] != root:
        root = parent[root]
    while x != root:
        next_x = parent[x]
        parent[x] = root
        x = next_x
    return root


@njit(cache=True)
def union_by_size(parent, size, a, b):
    ra = find_root(parent, a)
    rb = find_root(parent, b)
    if ra == rb:
        return
    if size[ra] < size[rb]:
        parent[ra] = rb
        size[rb] += size[ra]
    else:
        parent[rb] = ra
        size[ra] += size[rb]


def new_forest(m: int):
    """Allocate parent/size arrays for ``m`` singleton sets."""
    if m <= 0:
        raise InvalidArgument(f"union-find size must be > 0, got {m}")
    return np.arange(m, dtype=np.int64), np.ones(m, dtype=np.int64)
