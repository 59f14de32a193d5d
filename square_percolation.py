import numpy as np

from union_find import IndexOutOfRange, InvalidArgument, WeightedQuickUnionUF

__all__ = ["Percolation", "InvalidArgument", "IndexOutOfRange"]


class Percolation:
    """
    An n-by-n grid of sites, each blocked or open, backed by a weighted
    quick-union-find over n*n + 2 elements.

    Sites are addressed by 1-indexed (row, col). Two extra elements,
    ``virtualTop`` and ``virtualBottom``, stand for the top and bottom
    boundaries so that percolation is a single root comparison.
    """

    # create a n by n grid with all sites blocked
    def __init__(self, n: int):
        if n <= 0:
            raise InvalidArgument(f"grid size n must be a positive integer, got {n}")

        self.size = n
        self.gridSquare = n * n
        self.grid = np.zeros(self.gridSquare, dtype=bool)

        self.wqfGrid = WeightedQuickUnionUF(self.gridSquare + 2)

        self.virtualTop = self.gridSquare
        self.virtualBottom = self.gridSquare + 1

        self.openSite = 0

    def __repr__(self):
        return (f"Percolation(n={self.size}, open={self.openSite}, "
                f"percolates={self.percolates()})")

    # open the site[row, col] if it's not open yet
    def open(self, row: int, col: int):
        site = self.coordinatesToId(row, col)

        if self.grid[site]:
            return

        self.grid[site] = True
        self.openSite += 1

        ## top row
        if row == 1:
            self.wqfGrid.union(self.virtualTop, site)

        ## bottom row
        if row == self.size:
            self.wqfGrid.union(self.virtualBottom, site)

        ## left, right, up, down
        for r, c in ((row, col - 1), (row, col + 1), (row - 1, col), (row + 1, col)):
            if self.isOnGrid(r, c) and self.grid[self.coordinatesToId(r, c)]:
                self.wqfGrid.union(site, self.coordinatesToId(r, c))

    # is site[row, col] open?
    def isOpen(self, row: int, col: int) -> bool:
        return bool(self.grid[self.coordinatesToId(row, col)])

    def isFull(self, row: int, col: int) -> bool:
        """
        A site is full when it is open and connected to the top row
        through open sites.
        """
        site = self.coordinatesToId(row, col)
        return bool(self.grid[site]) and self.wqfGrid.connected(site, self.virtualTop)

    def percolates(self) -> bool:
        return self.wqfGrid.connected(self.virtualTop, self.virtualBottom)

    def numberOfOpenSites(self) -> int:
        return self.openSite

    def openFraction(self) -> float:
        return self.openSite / self.gridSquare

    def validState(self, row: int, col: int):
        if not self.isOnGrid(row, col):
            raise IndexOutOfRange(
                f"site ({row}, {col}) is outside the {self.size}x{self.size} grid")

    def coordinatesToId(self, row: int, col: int) -> int:
        self.validState(row, col)
        return self.size * (row - 1) + (col - 1)

    def isOnGrid(self, row: int, col: int) -> bool:
        return 1 <= row <= self.size and 1 <= col <= self.size
