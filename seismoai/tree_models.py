"""
tree_models.py
--------------
Tree learners used by the prediction engine: a greedy decision tree split on
the absolute gap between partition means, a bootstrap random forest of those
trees, and an averaging ensemble of single-feature stumps.

The split score and the stump averaging reproduce the dashboard numbers; they
are neither variance reduction nor cumulative boosting.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from seismoai.config import (
    BOOSTING_ITERATIONS,
    BOOSTING_LEARNING_RATE,
    FOREST_NUM_TREES,
    RANDOM_SEED,
)

logger = logging.getLogger(__name__)

MAX_DEPTH = 5
MIN_SAMPLES_SPLIT = 5


@dataclass(frozen=True)
class Leaf:
    prediction: float


@dataclass(frozen=True)
class Split:
    feature_index: int
    threshold: float
    left: "TreeNode"
    right: "TreeNode"


TreeNode = Union[Leaf, Split]


@dataclass(frozen=True)
class Learner:
    """One boosting stump: contributes `gain` when feature > threshold"""
    threshold: float
    gain: float


def as_feature_matrix(features: Sequence[Sequence[float]], labels: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Validate and convert a feature matrix to a 2-D float array.
    Ragged rows, or a row count that differs from the label count, raise ValueError.
    """
    rows = [list(row) for row in features]
    if rows:
        width = len(rows[0])
        for idx, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Ragged feature matrix: row {idx} has {len(row)} columns, expected {width}")
    if labels is not None and len(labels) != len(rows):
        raise ValueError(f"Feature/label length mismatch: {len(rows)} rows, {len(labels)} labels")
    if not rows:
        return np.empty((0, 0), dtype=float)
    return np.asarray(rows, dtype=float)


def _mean(values: np.ndarray) -> float:
    if values.size == 0:
        return 0.0
    return float(values.mean())


class DecisionTree:
    """Regression tree with an absolute-mean-gap split criterion"""

    def __init__(self, max_depth: int = MAX_DEPTH, min_samples_split: int = MIN_SAMPLES_SPLIT):
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.root: Optional[TreeNode] = None

    def train(self, features: Sequence[Sequence[float]], labels: Sequence[float]) -> "DecisionTree":
        X = as_feature_matrix(features, labels)
        y = np.asarray(labels, dtype=float)
        self.root = self._build(X, y, 0)
        return self

    def _best_split(self, X: np.ndarray, y: np.ndarray) -> Optional[Tuple[int, float]]:
        best: Optional[Tuple[int, float]] = None
        best_gain = 0.0
        for f in range(X.shape[1]):
            column = X[:, f]
            for threshold in column:
                left = column <= threshold
                n_left = int(left.sum())
                if n_left == 0 or n_left == len(column):
                    continue
                gain = abs(float(y[left].mean()) - float(y[~left].mean()))
                # strict comparison keeps the first candidate on ties
                if gain > best_gain:
                    best_gain = gain
                    best = (f, float(threshold))
        return best

    def _build(self, X: np.ndarray, y: np.ndarray, depth: int) -> TreeNode:
        if depth > self.max_depth or len(y) < self.min_samples_split:
            return Leaf(_mean(y))

        split = self._best_split(X, y)
        if split is None:
            return Leaf(_mean(y))

        feature_index, threshold = split
        left = X[:, feature_index] <= threshold
        return Split(
            feature_index=feature_index,
            threshold=threshold,
            left=self._build(X[left], y[left], depth + 1),
            right=self._build(X[~left], y[~left], depth + 1),
        )

    def predict(self, features: Sequence[float]) -> float:
        node = self.root
        if node is None:
            return 0.0
        while isinstance(node, Split):
            if features[node.feature_index] <= node.threshold:
                node = node.left
            else:
                node = node.right
        return node.prediction

    def depth(self) -> int:
        def _depth(node: Optional[TreeNode]) -> int:
            if not isinstance(node, Split):
                return 0
            return 1 + max(_depth(node.left), _depth(node.right))
        return _depth(self.root)


class RandomForestPredictor:
    """
    Bootstrap ensemble of DecisionTree. Every tree sees all features; only the
    rows are resampled. Pass a seeded `numpy.random.Generator` for reproducible
    training.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng(RANDOM_SEED)
        self.trees: List[DecisionTree] = []

    def train(self, features: Sequence[Sequence[float]], labels: Sequence[float],
              num_trees: int = FOREST_NUM_TREES) -> "RandomForestPredictor":
        X = as_feature_matrix(features, labels)
        y = np.asarray(labels, dtype=float)
        n = len(y)
        for _ in range(num_trees):
            if n == 0:
                self.trees.append(DecisionTree().train([], []))
                continue
            idx = np.asarray(self.rng.integers(0, n, size=n), dtype=int)
            self.trees.append(DecisionTree().train(X[idx].tolist(), y[idx].tolist()))
        logger.debug(f"Random forest trained: {len(self.trees)} trees on {n} rows")
        return self

    def predict(self, features: Sequence[float]) -> float:
        if not self.trees:
            return 0.0
        return sum(tree.predict(features) for tree in self.trees) / len(self.trees)


class GradientBoostingRiskScorer:
    """
    Stump ensemble over feature column 0. Each round picks the threshold that
    maximizes the average of the left and right residual means, then shrinks the
    residuals above it by `learning_rate * gain`. Predictions average the stump
    contributions instead of summing them.
    """

    def __init__(self, learning_rate: float = BOOSTING_LEARNING_RATE):
        self.learning_rate = learning_rate
        self.learners: List[Learner] = []

    def train(self, features: Sequence[Sequence[float]], labels: Sequence[float],
              iterations: int = BOOSTING_ITERATIONS) -> "GradientBoostingRiskScorer":
        X = as_feature_matrix(features, labels)
        residuals = np.asarray(labels, dtype=float).copy()
        if len(residuals) and X.shape[1] == 0:
            raise ValueError("Boosting needs at least one feature column")
        column = X[:, 0] if len(residuals) else np.empty(0, dtype=float)

        for _ in range(iterations):
            learner = self._find_best_split(column, residuals)
            self.learners.append(learner)
            residuals = residuals - self.learning_rate * np.where(column > learner.threshold, learner.gain, 0.0)
        logger.debug(f"Boosting trained: {len(self.learners)} learners")
        return self

    @staticmethod
    def _find_best_split(column: np.ndarray, residuals: np.ndarray) -> Learner:
        best_threshold = 0.0
        best_gain = float("-inf")
        for threshold in column:
            left = column <= threshold
            n_left = int(left.sum())
            if n_left == 0 or n_left == len(column):
                continue
            gain = (float(residuals[left].mean()) + float(residuals[~left].mean())) / 2
            if gain > best_gain:
                best_gain = gain
                best_threshold = float(threshold)
        return Learner(threshold=best_threshold, gain=max(best_gain, 0.0))

    def predict(self, feature: float) -> float:
        total = sum(learner.gain if feature > learner.threshold else 0.0 for learner in self.learners)
        return total / max(1, len(self.learners))
