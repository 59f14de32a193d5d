"""
Monte Carlo estimation of the site percolation threshold on an n-by-n
square grid.

Each trial opens uniformly random sites on a fresh grid until it
percolates and records the fraction of open sites. The driver aggregates
the trials into a mean, a sample standard deviation and a 95% confidence
interval. A finite-size sweep over several grid sizes extrapolates the
threshold of the infinite lattice.
"""
import argparse
import logging
import math
import random
from concurrent.futures import ProcessPoolExecutor
from itertools import repeat

import numpy as np
from numba import njit
from scipy.stats import linregress

from square_percolation import Percolation
from union_find import InvalidArgument, find_root, new_forest, union_by_size

logger = logging.getLogger(__name__)

CONFIDENCE_95 = 1.96
PROGRESS_EVERY = 50
FSS_EXPONENT = -3 / 4


def percolation_threshold(n: int, rng) -> float:
    """
    Run one trial on a fresh n-by-n grid.

    :param n: grid size.
    :param rng: any object with ``randint(lo, hi)`` over a closed range,
        e.g. ``random.Random``.
    :return: fraction of sites open when the grid first percolates.
    """
    simulator = Percolation(n)
    while not simulator.percolates():
        row = rng.randint(1, n)
        col = rng.randint(1, n)
        simulator.open(row, col)
    return simulator.numberOfOpenSites() / (n * n)


@njit(cache=True)
def _newman_ziff_kernel(n, parent, size, seed):
    np.random.seed(seed)
    total = n * n
    top = total
    bottom = total + 1

    open_flags = np.zeros(total, dtype=np.uint8)
    sites = np.arange(total)
    np.random.shuffle(sites)

    for k in range(total):
        site = sites[k]
        open_flags[site] = 1
        row = site // n
        col = site % n

        if row == 0:
            union_by_size(parent, size, site, top)
        if row == n - 1:
            union_by_size(parent, size, site, bottom)
        if col > 0 and open_flags[site - 1]:
            union_by_size(parent, size, site, site - 1)
        if col < n - 1 and open_flags[site + 1]:
            union_by_size(parent, size, site, site + 1)
        if row > 0 and open_flags[site - n]:
            union_by_size(parent, size, site, site - n)
        if row < n - 1 and open_flags[site + n]:
            union_by_size(parent, size, site, site + n)

        if find_root(parent, top) == find_root(parent, bottom):
            return (k + 1) / total
    return 1.0


def newman_ziff_threshold(n: int, seed: int) -> float:
    """
    Compiled trial that opens the sites in a random permutation order
    instead of redrawing already-open sites.
    """
    if n <= 0:
        raise InvalidArgument(f"grid size n must be a positive integer, got {n}")
    parent, size = new_forest(n * n + 2)
    return float(_newman_ziff_kernel(n, parent, size, seed))


def _run_trial(n, seed, fast=False):
    if fast:
        return newman_ziff_threshold(n, int(seed))
    return percolation_threshold(n, random.Random(int(seed)))


def _run_trials(n, seeds, fast=False):
    return [_run_trial(n, seed, fast) for seed in seeds]


class PercolationStats:
    """
    Runs ``trials`` independent percolation experiments on an n-by-n grid.

    Per-trial seeds are drawn from a ``numpy.random.SeedSequence`` so a
    fixed ``seed`` gives the same results whatever the worker count.
    """

    def __init__(self, n: int, trials: int, seed=None, workers: int = 1, fast: bool = False):
        if n <= 0 or trials <= 0:
            raise InvalidArgument("grid size n and trials count must be positive integers")
        if workers <= 0:
            raise InvalidArgument(f"workers must be a positive integer, got {workers}")

        self.gridSize = n
        self.trialCount = trials

        if not isinstance(seed, np.random.SeedSequence):
            seed = np.random.SeedSequence(seed)
        seeds = seed.generate_state(trials)

        logger.info("Running %d trials on a %dx%d grid (%d worker(s))", trials, n, n, workers)
        if workers == 1:
            results = []
            for t, trial_seed in enumerate(seeds):
                results.append(_run_trial(n, trial_seed, fast))
                if (t + 1) % PROGRESS_EVERY == 0:
                    logger.debug("  Progress: %d/%d trials", t + 1, trials)
        else:
            chunks = [c for c in np.array_split(seeds, workers) if len(c)]
            results = []
            with ProcessPoolExecutor(max_workers=workers) as executor:
                for chunk in executor.map(_run_trials, repeat(n), chunks, repeat(fast)):
                    results.extend(chunk)
                    logger.debug("  Progress: %d/%d trials", len(results), trials)

        self.trialResults = np.asarray(results, dtype=float)

        if trials == 1:
            logger.warning("a single trial has no standard deviation; "
                           "stddev and confidence bounds are NaN")

    @property
    def results(self):
        return self.trialResults

    def mean(self) -> float:
        return float(np.mean(self.trialResults))

    def stddev(self) -> float:
        # sample standard deviation, undefined for one trial
        if self.trialCount < 2:
            return float("nan")
        return float(np.std(self.trialResults, ddof=1))

    def _margin(self) -> float:
        return CONFIDENCE_95 * self.stddev() / math.sqrt(self.trialCount)

    def confidenceLo(self) -> float:
        return self.mean() - self._margin()

    def confidenceHi(self) -> float:
        return self.mean() + self._margin()

    def confidence_interval(self):
        return self.confidenceLo(), self.confidenceHi()

    def report(self):
        print(f"Mean: {self.mean()}")
        print(f"Stddev: {self.stddev()}")
        lo, hi = self.confidence_interval()
        print(f"95% confidence interval [{lo}, {hi}]")


def threshold_sweep(sizes, trials: int, seed=None, workers: int = 1, fast: bool = False):
    """Run a ``PercolationStats`` for every grid size in ``sizes``."""
    children = np.random.SeedSequence(seed).spawn(len(sizes))
    sweep = []
    for L, child in zip(sizes, children):
        logger.info("simulate n = %s", L)
        sweep.append(PercolationStats(int(L), trials, seed=child, workers=workers, fast=fast))
    return sweep


def extrapolate_threshold(sizes, means, exponent=FSS_EXPONENT):
    """
    Fits the mean threshold against L^exponent and returns the intercept,
    which estimates pc on the infinite lattice.
    """
    sizes = np.asarray(sizes, dtype=float)
    means = np.asarray(means, dtype=float)
    if len(sizes) != len(means):
        raise InvalidArgument("sizes and means must have the same length")
    if len(np.unique(sizes)) < 2:
        raise InvalidArgument("extrapolation needs at least two distinct grid sizes")

    X_scaling = sizes ** exponent
    slope, intercept, r_value, p_value, std_err = linregress(X_scaling, means)
    return {"pc_inf": float(intercept), "slope": float(slope), "r_squared": float(r_value ** 2)}


def positive_int(value):
    try:
        ivalue = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"{value} must be a positive integer")
    return ivalue


def _add_common_options(parser):
    parser.add_argument('--seed', type=int, default=None,
                        help="Seed for reproducible runs.")
    parser.add_argument('--workers', type=positive_int, default=1,
                        help="Number of worker processes for the trials.")
    parser.add_argument('--fast', action='store_true',
                        help="Use the compiled permutation-order trial.")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Log trial progress.")


def _configure_logging(verbose):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Estimate the percolation threshold of an n-by-n grid by Monte Carlo simulation."
    )
    parser.add_argument('n', type=positive_int, help="Size of the square grid (n x n).")
    parser.add_argument('trials', type=positive_int, help="The number of Monte Carlo trials to perform.")
    _add_common_options(parser)
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    stats = PercolationStats(args.n, args.trials, seed=args.seed,
                             workers=args.workers, fast=args.fast)
    stats.report()
    return 0


def sweep_main(argv=None):
    parser = argparse.ArgumentParser(
        description="Run a finite-size sweep and extrapolate the percolation threshold."
    )
    parser.add_argument('--Lmin', type=positive_int, default=50,
                        help="Minimum size of the square grid (N_min x N_min).")
    parser.add_argument('--Lmax', type=positive_int, default=200,
                        help="Maximum size of the square grid (N_max x N_max).")
    parser.add_argument('--Lstep', type=positive_int, default=50,
                        help="Step size for increasing the grid size N.")
    parser.add_argument('--t', type=positive_int, default=500,
                        help="The number of Monte Carlo trials to perform per size.")
    _add_common_options(parser)
    args = parser.parse_args(argv)

    L_values = list(range(args.Lmin, args.Lmax + 1, args.Lstep))
    if len(L_values) < 2:
        parser.error("the sweep needs at least two grid sizes (check --Lmin/--Lmax/--Lstep)")

    _configure_logging(args.verbose)

    sweep = threshold_sweep(L_values, args.t, seed=args.seed,
                            workers=args.workers, fast=args.fast)

    for L, stats in zip(L_values, sweep):
        print("=" * 60)
        print(f"n = {L}")
        stats.report()
    print("=" * 60)

    fit = extrapolate_threshold(L_values, [s.mean() for s in sweep])
    print(f"\n--- Extrapolation Results (exponent {FSS_EXPONENT:.2f}) ---")
    print(f"pc(infinity) = {fit['pc_inf']:.6f}, R^2 = {fit['r_squared']:.4f}")
    print("-------------------------------------------------------")
    return 0


if __name__ == "__main__":
    main()
