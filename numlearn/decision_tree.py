"""
Decision Tree Classifier - From Scratch Implementation
======================================================

샘플 가중치를 지원하는 정보 이득 기반 결정 트리 분류기.
max_depth=1 이면 결정 그루터기(decision stump) 로, AdaBoost 의 약한 학습기로 쓰인다.

수학적 배경:
-----------
분할 기준: 가중 엔트로피 감소 (정보 이득) 최대화

노드의 클래스 가중치 W_c = Σ_{i: y_i = c} w_i, 전체 W = Σ_c W_c
    H = - Σ_c (W_c / W) · log₂(W_c / W)

분할 후 가중 엔트로피:
    H_split = (W_left / W) · H_left + (W_right / W) · H_right

정보 이득:
    Gain = H - H_split

임계값 탐색:
    피처 값으로 정렬한 뒤 클래스별 누적 가중치로 모든 분할점의
    좌/우 클래스 가중치를 한 번에 계산한다. 임계값은 인접한 서로 다른
    값의 중간점이다.

예측:
    리프의 정규화된 클래스 가중치 분포에서 argmax

데이터 규약: X 는 (n_features, n_samples), 열 = 샘플

Author: NumLearn Project
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .exceptions import DimensionMismatchError, NotFittedError
from .serialization import register_serializable


@dataclass
class TreeNode:
    """결정 트리의 노드를 표현하는 클래스"""

    # 분할 정보 (내부 노드용)
    feature_idx: Optional[int] = None    # 분할에 사용된 피처 인덱스
    threshold: Optional[float] = None    # 분할 임계값

    # 자식 노드
    left: Optional['TreeNode'] = None    # 왼쪽 자식 (값 <= threshold)
    right: Optional['TreeNode'] = None   # 오른쪽 자식 (값 > threshold)

    # 클래스 분포
    class_probabilities: Optional[np.ndarray] = None
    n_samples: int = 0                   # 노드에 도달한 샘플 수
    weight: float = 0.0                  # 노드에 도달한 샘플 가중치 합
    entropy: float = 0.0                 # 노드의 가중 엔트로피
    depth: int = 0                       # 노드의 깊이

    def is_leaf(self) -> bool:
        """리프 노드인지 확인"""
        return self.left is None and self.right is None

    def to_dict(self) -> Dict:
        result = {
            'class_probabilities': self.class_probabilities,
            'n_samples': self.n_samples,
            'weight': self.weight,
            'entropy': self.entropy,
            'depth': self.depth,
        }
        if not self.is_leaf():
            result['feature_idx'] = self.feature_idx
            result['threshold'] = self.threshold
            result['left'] = self.left.to_dict()
            result['right'] = self.right.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Dict) -> 'TreeNode':
        node = cls(
            class_probabilities=np.asarray(data['class_probabilities'], dtype=np.float64),
            n_samples=int(data['n_samples']),
            weight=float(data['weight']),
            entropy=float(data['entropy']),
            depth=int(data['depth']),
        )
        if 'left' in data:
            node.feature_idx = int(data['feature_idx'])
            node.threshold = float(data['threshold'])
            node.left = cls.from_dict(data['left'])
            node.right = cls.from_dict(data['right'])
        return node


def _entropy(class_weights: np.ndarray) -> np.ndarray:
    """
    행 단위 엔트로피 (log₂)

    Parameters
    ----------
    class_weights : ndarray of shape (..., n_classes)
    """
    totals = np.sum(class_weights, axis=-1, keepdims=True)
    with np.errstate(divide='ignore', invalid='ignore'):
        p = class_weights / totals
        terms = np.where(p > 0, p * np.log2(p), 0.0)
    return -np.sum(terms, axis=-1)


@register_serializable
class DecisionTreeClassifier:
    """
    가중 정보 이득 기반 결정 트리 분류기 (From Scratch)

    Parameters
    ----------
    max_depth : int, default=1
        트리의 최대 깊이. None이면 제한 없음. 1이면 결정 그루터기.

    min_samples_split : int, default=2
        내부 노드를 분할하기 위한 최소 샘플 수.

    min_samples_leaf : int, default=1
        리프 노드에 있어야 하는 최소 샘플 수.

    min_gain_split : float, default=1e-7
        분할을 수행하기 위한 최소 정보 이득.

    Attributes
    ----------
    root_ : TreeNode
        학습된 트리의 루트 노드

    n_features_ : int
        학습에 사용된 피처 수

    n_classes_ : int
        클래스 수

    feature_importances_ : ndarray of shape (n_features,)
        피처 중요도 (가중 엔트로피 감소 기반)

    tree_stats_ : dict
        트리 통계 (깊이, 노드 수, 리프 수 등)

    Examples
    --------
    >>> X = np.array([[1.0, 2.0, 3.0, 4.0]])
    >>> y = np.array([0, 0, 1, 1])
    >>> stump = DecisionTreeClassifier(max_depth=1).fit(X, y, 2)
    >>> stump.predict(np.array([[1.5, 3.5]]))
    array([0, 1])
    """

    def __init__(
        self,
        max_depth: Optional[int] = 1,
        min_samples_split: int = 2,
        min_samples_leaf: int = 1,
        min_gain_split: float = 1e-7
    ):
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.min_gain_split = min_gain_split

        # 학습 후 설정되는 속성들
        self.root_: Optional[TreeNode] = None
        self.n_features_: int = 0
        self.n_classes_: int = 0
        self.feature_importances_: Optional[np.ndarray] = None
        self.tree_stats_: Dict = {}

        # 학습 과정 기록 (시각화용)
        self.training_history_: List[Dict] = []

    def _class_weights(self, y: np.ndarray, w: np.ndarray) -> np.ndarray:
        return np.bincount(y, weights=w, minlength=self.n_classes_)

    def _find_best_split(
        self,
        X: np.ndarray,
        y: np.ndarray,
        w: np.ndarray
    ) -> Tuple[Optional[int], Optional[float], float]:
        """
        최적의 분할점 탐색

        Parameters
        ----------
        X : ndarray of shape (n_features, n_samples)

        Returns
        -------
        best_feature : int or None
        best_threshold : float or None
        best_gain : float
        """
        n_features, n_samples = X.shape

        class_weights = self._class_weights(y, w)
        total = np.sum(class_weights)
        parent_entropy = _entropy(class_weights)

        best_gain = 0.0
        best_feature = None
        best_threshold = None

        one_hot = np.zeros((n_samples, self.n_classes_))
        one_hot[np.arange(n_samples), y] = w

        # 분할 위치 i: 정렬 후 [0, i] 가 왼쪽
        left_counts = np.arange(1, n_samples)
        size_ok = (left_counts >= self.min_samples_leaf) & \
                  (n_samples - left_counts >= self.min_samples_leaf)

        for feature_idx in range(n_features):
            order = np.argsort(X[feature_idx], kind='mergesort')
            values = X[feature_idx, order]

            left = np.cumsum(one_hot[order], axis=0)[:-1]
            right = class_weights - left
            left_total = left.sum(axis=1)
            right_total = right.sum(axis=1)

            valid = size_ok & (values[:-1] < values[1:])
            if not np.any(valid):
                continue

            split_entropy = (
                left_total / total * _entropy(left)
                + right_total / total * _entropy(right)
            )
            gain = np.where(valid, parent_entropy - split_entropy, -np.inf)

            idx = int(np.argmax(gain))
            if gain[idx] > best_gain:
                best_gain = float(gain[idx])
                best_feature = feature_idx
                best_threshold = float((values[idx] + values[idx + 1]) / 2)

        return best_feature, best_threshold, best_gain

    def _make_node(self, y: np.ndarray, w: np.ndarray, depth: int) -> TreeNode:
        class_weights = self._class_weights(y, w)
        total = np.sum(class_weights)
        if total > 0:
            probabilities = class_weights / total
        else:
            probabilities = np.full(self.n_classes_, 1.0 / self.n_classes_)

        return TreeNode(
            class_probabilities=probabilities,
            n_samples=len(y),
            weight=float(total),
            entropy=float(_entropy(class_weights)) if total > 0 else 0.0,
            depth=depth
        )

    def _build_tree(
        self,
        X: np.ndarray,
        y: np.ndarray,
        w: np.ndarray,
        depth: int = 0
    ) -> TreeNode:
        """
        재귀적으로 결정 트리 구축

        종료 조건:
        1. max_depth 도달
        2. 샘플 수 < min_samples_split
        3. 노드가 순수함 (엔트로피 0)
        4. 정보 이득 < min_gain_split
        """
        node = self._make_node(y, w, depth)

        should_stop = (
            (self.max_depth is not None and depth >= self.max_depth) or
            node.n_samples < self.min_samples_split or
            node.entropy == 0
        )

        best_feature, best_threshold, best_gain = (None, None, 0.0) if should_stop \
            else self._find_best_split(X, y, w)

        if best_feature is None or best_gain < self.min_gain_split:
            self.training_history_.append({
                'depth': depth,
                'n_samples': node.n_samples,
                'entropy': node.entropy,
                'action': 'leaf',
                'class': int(np.argmax(node.class_probabilities))
            })
            return node

        left_mask = X[best_feature] <= best_threshold
        right_mask = ~left_mask

        self.training_history_.append({
            'depth': depth,
            'n_samples': node.n_samples,
            'entropy': node.entropy,
            'action': 'split',
            'feature': best_feature,
            'threshold': best_threshold,
            'gain': best_gain,
            'n_left': int(np.sum(left_mask)),
            'n_right': int(np.sum(right_mask))
        })

        node.feature_idx = best_feature
        node.threshold = best_threshold
        node.left = self._build_tree(X[:, left_mask], y[left_mask], w[left_mask], depth + 1)
        node.right = self._build_tree(X[:, right_mask], y[right_mask], w[right_mask], depth + 1)

        return node

    def _calculate_feature_importances(self, node: TreeNode) -> np.ndarray:
        """
        피처 중요도 계산

        importance[i] = Σ weight · entropy_decrease   (피처 i 를 쓰는 분할)
        """
        importances = np.zeros(self.n_features_)

        def _traverse(node: TreeNode):
            if node.is_leaf() or node.weight == 0:
                return

            decrease = node.entropy - (
                (node.left.weight / node.weight) * node.left.entropy +
                (node.right.weight / node.weight) * node.right.entropy
            )
            importances[node.feature_idx] += node.weight * decrease

            _traverse(node.left)
            _traverse(node.right)

        _traverse(node)

        total = np.sum(importances)
        if total > 0:
            importances /= total

        return importances

    def _calculate_tree_stats(self, node: TreeNode) -> Dict:
        """트리 통계 계산"""
        stats = {'max_depth': 0, 'n_nodes': 0, 'n_leaves': 0, 'n_internal': 0}

        def _traverse(node: TreeNode, depth: int):
            stats['n_nodes'] += 1
            stats['max_depth'] = max(stats['max_depth'], depth)

            if node.is_leaf():
                stats['n_leaves'] += 1
            else:
                stats['n_internal'] += 1
                _traverse(node.left, depth + 1)
                _traverse(node.right, depth + 1)

        _traverse(node, 0)
        return stats

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        n_classes: Optional[int] = None,
        sample_weight: Optional[np.ndarray] = None
    ) -> 'DecisionTreeClassifier':
        """
        결정 트리 학습

        Parameters
        ----------
        X : ndarray of shape (n_features, n_samples)
            학습 데이터 (열 = 샘플)
        y : ndarray of shape (n_samples,)
            0 ~ n_classes-1 정수 레이블
        n_classes : int, optional
            클래스 수. None이면 max(y) + 1
        sample_weight : ndarray of shape (n_samples,), optional
            샘플 가중치. None이면 모두 1.

        Returns
        -------
        self : DecisionTreeClassifier
            학습된 모델
        """
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        y = np.asarray(y).ravel().astype(np.int64)

        if X.shape[1] != len(y):
            raise DimensionMismatchError(
                f"X와 y의 샘플 수가 일치하지 않습니다: {X.shape[1]} vs {len(y)}"
            )
        if len(y) == 0:
            raise ValueError("Cannot fit a decision tree on an empty dataset")
        if np.any(y < 0):
            raise ValueError("Labels must be non-negative integers")

        w = np.ones(len(y)) if sample_weight is None \
            else np.asarray(sample_weight, dtype=np.float64).ravel()
        if len(w) != len(y):
            raise DimensionMismatchError(
                f"sample_weight 길이가 샘플 수와 일치하지 않습니다: {len(w)} vs {len(y)}"
            )

        self.n_features_ = X.shape[0]
        self.n_classes_ = int(n_classes) if n_classes is not None else int(y.max()) + 1

        self.training_history_ = []
        self.root_ = self._build_tree(X, y, w)
        self.feature_importances_ = self._calculate_feature_importances(self.root_)
        self.tree_stats_ = self._calculate_tree_stats(self.root_)

        return self

    def _leaf(self, x: np.ndarray) -> TreeNode:
        node = self.root_
        while not node.is_leaf():
            node = node.left if x[node.feature_idx] <= node.threshold else node.right
        return node

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """
        클래스 확률

        Returns
        -------
        probabilities : ndarray of shape (n_classes, n_samples)
        """
        if self.root_ is None:
            raise NotFittedError("모델이 학습되지 않았습니다. fit()을 먼저 호출하세요.")

        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.shape[0] != self.n_features_:
            raise DimensionMismatchError(
                f"Data has {X.shape[0]} features, tree was trained on {self.n_features_}"
            )

        return np.column_stack([self._leaf(x).class_probabilities for x in X.T])

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        예측 수행

        Parameters
        ----------
        X : ndarray of shape (n_features, n_samples)

        Returns
        -------
        y_pred : ndarray of shape (n_samples,)
            예측 레이블
        """
        return np.argmax(self.predict_proba(X), axis=0)

    def get_depth(self) -> int:
        """트리의 최대 깊이 반환"""
        if self.root_ is None:
            return 0
        return self.tree_stats_.get('max_depth', 0)

    def get_n_leaves(self) -> int:
        """리프 노드 수 반환"""
        if self.root_ is None:
            return 0
        return self.tree_stats_.get('n_leaves', 0)

    def get_state(self) -> dict:
        return {
            'params': {
                'max_depth': self.max_depth,
                'min_samples_split': self.min_samples_split,
                'min_samples_leaf': self.min_samples_leaf,
                'min_gain_split': self.min_gain_split,
            },
            'n_features': self.n_features_,
            'n_classes': self.n_classes_,
            'root': None if self.root_ is None else self.root_.to_dict(),
        }

    @classmethod
    def from_state(cls, state: dict) -> 'DecisionTreeClassifier':
        tree = cls(**state['params'])
        tree.n_features_ = int(state['n_features'])
        tree.n_classes_ = int(state['n_classes'])
        if state['root'] is not None:
            tree.root_ = TreeNode.from_dict(state['root'])
            tree.feature_importances_ = tree._calculate_feature_importances(tree.root_)
            tree.tree_stats_ = tree._calculate_tree_stats(tree.root_)
        return tree

    def __repr__(self) -> str:
        if self.root_ is None:
            return "DecisionTreeClassifier(not fitted)"

        return (
            f"DecisionTreeClassifier("
            f"depth={self.get_depth()}, "
            f"n_leaves={self.get_n_leaves()}, "
            f"n_features={self.n_features_})"
        )
