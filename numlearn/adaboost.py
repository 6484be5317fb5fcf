"""
AdaBoost Classifier - From Scratch Implementation
=================================================

다중 클래스 AdaBoost.MH 알고리즘 구현 (Schapire & Singer 1999).

수학적 배경:
-----------
AdaBoost의 핵심 아이디어:
- (클래스, 샘플) 쌍마다 가중치 D(c, i) 를 부여
- 틀리기 쉬운 쌍에 더 높은 가중치
- 다음 학습기가 어려운 샘플에 집중하도록 유도

알고리즘 (AdaBoost.MH):
----------------------
1. 초기화: D(c, i) = 1 / (k · n)

2. for t = 1 to T:
   a. 샘플 가중치 w_i = Σ_c D(c, i) 로 약한 학습기 h_t 학습
   b. 가중 edge 계산:
      r_t = Σ_{i: h_t(x_i) = y_i} w_i - Σ_{i: h_t(x_i) ≠ y_i} w_i

   c. 종료 조건:
      - t > 1 이고 |r_t - r_{t-1}| < tolerance → h_t 를 버리고 종료
      - r_t >= 1 (완벽한 학습기) → α_t = 1 로 추가 후 종료

   d. 학습기 가중치:
      α_t = 1/2 · log((1 + r_t) / (1 - r_t))

   e. 가중치 갱신 (Y, H 는 정답/예측 클래스에서 +1, 그 외 -1):
      D(c, i) ← D(c, i) · exp(-α_t · Y(c, i) · H(c, i)) / Z_t

3. 최종 예측:
   - 각 학습기가 예측한 클래스에 α_t 를 누적
   - 열(샘플)별로 정규화한 값이 클래스 확률, argmax 가 예측 레이블

데이터 규약: X 는 (n_features, n_samples), 열 = 샘플

Author: NumLearn Project
"""

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import CONFIG
from .decision_tree import DecisionTreeClassifier
from .exceptions import DimensionMismatchError, NotFittedError
from .perceptron import Perceptron
from .serialization import register_serializable

logger = logging.getLogger(__name__)

WEAK_LEARNERS = {
    'decision_stump': DecisionTreeClassifier,
    'perceptron': Perceptron,
}


@register_serializable
class AdaBoostClassifier:
    """
    AdaBoost.MH 분류 모델 (From Scratch)

    Parameters
    ----------
    n_iterations : int, optional
        최대 부스팅 라운드 수 (기본값 CONFIG['adaboost_iterations'])

    tolerance : float, optional
        r_t 변화량 종료 기준 (기본값 CONFIG['adaboost_tolerance'])

    weak_learner : {'decision_stump', 'perceptron'}, default='decision_stump'
        약한 학습기 종류

    learner_params : dict, optional
        약한 학습기 생성자 인자 (예: {'max_depth': 2})

    verbose : bool, default=False
        라운드별 진행 상황 출력

    Attributes
    ----------
    estimators_ : list
        학습된 약한 학습기들

    alphas_ : ndarray
        각 학습기의 가중치 α_t

    n_classes_ : int
        클래스 수

    n_features_ : int
        학습 데이터 차원

    zt_product_ : float
        Π_t Z_t (학습 오차의 상한)

    training_history_ : list of dict
        라운드별 r_t, α_t, 가중 오차, 학습 정확도

    Examples
    --------
    >>> from sklearn.datasets import load_iris
    >>> X, y = load_iris(return_X_y=True)
    >>> ada = AdaBoostClassifier(n_iterations=50).fit(X.T, y, 3)
    >>> labels, probabilities = ada.classify(X.T)
    """

    def __init__(
        self,
        n_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
        weak_learner: str = 'decision_stump',
        learner_params: Optional[Dict] = None,
        verbose: bool = False
    ):
        if weak_learner not in WEAK_LEARNERS:
            raise ValueError(
                f"Unknown weak learner '{weak_learner}'; "
                f"choose from {sorted(WEAK_LEARNERS)}"
            )

        self.n_iterations = n_iterations if n_iterations is not None \
            else CONFIG['adaboost_iterations']
        self.tolerance = tolerance if tolerance is not None \
            else CONFIG['adaboost_tolerance']
        self.weak_learner = weak_learner
        self.learner_params = dict(learner_params) if learner_params else {}
        self.verbose = verbose

        if self.n_iterations <= 0:
            raise ValueError(f"n_iterations must be positive, got {self.n_iterations}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")

        # 학습 후 설정되는 속성들
        self.estimators_: List = []
        self.alphas_: Optional[np.ndarray] = None
        self.n_classes_: int = 0
        self.n_features_: int = 0
        self.zt_product_: float = 1.0

        # 학습 과정 기록 (시각화용)
        self.training_history_: List[Dict] = []

    def _make_learner(self):
        return WEAK_LEARNERS[self.weak_learner](**self.learner_params)

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        n_classes: Optional[int] = None
    ) -> 'AdaBoostClassifier':
        """
        AdaBoost.MH 모델 학습

        Parameters
        ----------
        X : ndarray of shape (n_features, n_samples)
            학습 데이터
        y : ndarray of shape (n_samples,)
            0 ~ n_classes-1 정수 레이블
        n_classes : int, optional
            클래스 수. None이면 max(y) + 1

        Returns
        -------
        self : AdaBoostClassifier
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
            raise ValueError("Cannot train AdaBoost on an empty dataset")

        n_features, n_samples = X.shape
        k = int(n_classes) if n_classes is not None else int(y.max()) + 1
        self.n_features_ = n_features
        self.n_classes_ = k

        # 정답 클래스 +1, 그 외 -1
        truth = -np.ones((k, n_samples))
        truth[y, np.arange(n_samples)] = 1.0

        # 1. 초기화: 균등 분포
        distribution = np.full((k, n_samples), 1.0 / (k * n_samples))

        self.estimators_ = []
        alphas = []
        self.zt_product_ = 1.0
        self.training_history_ = []
        previous_rt = 0.0

        for t in range(self.n_iterations):
            # 2a. 학습기 학습
            sample_weight = distribution.sum(axis=0)
            learner = self._make_learner().fit(X, y, k, sample_weight)
            predicted = learner.predict(X)
            correct = predicted == y

            # 2b. 가중 edge
            rt = np.sum(sample_weight[correct]) - np.sum(sample_weight[~correct])

            # 2c. 종료 조건
            if t > 0 and abs(rt - previous_rt) < self.tolerance:
                logger.info(f"AdaBoost converged at iteration {t + 1}: |Δr_t| < {self.tolerance}")
                break
            previous_rt = rt

            if rt >= 1.0:
                self.estimators_.append(learner)
                alphas.append(1.0)
                self._record(t, rt, 1.0, 0.0, correct)
                logger.info(f"Perfect weak learner at iteration {t + 1}; stopping")
                break

            # 2d. 학습기 가중치
            alpha = 0.5 * np.log((1 + rt) / (1 - rt))

            # 2e. 가중치 갱신
            hypothesis = -np.ones((k, n_samples))
            hypothesis[predicted, np.arange(n_samples)] = 1.0
            distribution = distribution * np.exp(-alpha * truth * hypothesis)
            zt = np.sum(distribution)
            distribution /= zt
            self.zt_product_ *= zt

            self.estimators_.append(learner)
            alphas.append(alpha)
            self._record(t, rt, alpha, zt, correct)

        self.alphas_ = np.array(alphas)
        return self

    def _record(self, t: int, rt: float, alpha: float, zt: float, correct: np.ndarray) -> None:
        self.training_history_.append({
            'iteration': t + 1,
            'rt': float(rt),
            'alpha': float(alpha),
            'weighted_error': float((1 - rt) / 2),
            'zt': float(zt),
            'train_accuracy': float(np.mean(correct)),
        })

        if self.verbose:
            print(f"Iteration {t + 1}/{self.n_iterations}: "
                  f"r_t={rt:.4f}, alpha={alpha:.4f}, "
                  f"train_acc={np.mean(correct):.4f}")

    def classify(self, X: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        분류 수행

        Parameters
        ----------
        X : ndarray of shape (n_features, n_samples)

        Returns
        -------
        labels : ndarray of shape (n_samples,)
            예측 레이블 (0 ~ n_classes-1)
        probabilities : ndarray of shape (n_classes, n_samples)
            각 열의 합은 1
        """
        if self.alphas_ is None:
            raise NotFittedError("모델이 학습되지 않았습니다. fit()을 먼저 호출하세요.")

        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.shape[0] != self.n_features_:
            raise DimensionMismatchError(
                f"Test data dimensionality ({X.shape[0]}) must be the same as "
                f"the model dimensionality ({self.n_features_})"
            )

        n_samples = X.shape[1]
        probabilities = np.zeros((self.n_classes_, n_samples))
        columns = np.arange(n_samples)

        for learner, alpha in zip(self.estimators_, self.alphas_):
            probabilities[learner.predict(X), columns] += alpha

        labels = np.argmax(probabilities, axis=0)

        totals = probabilities.sum(axis=0)
        empty = totals == 0
        probabilities[:, empty] = 1.0 / self.n_classes_
        probabilities[:, ~empty] /= totals[~empty]

        return labels, probabilities

    def predict(self, X: np.ndarray) -> np.ndarray:
        """예측 레이블"""
        return self.classify(X)[0]

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """클래스 확률 (n_classes, n_samples)"""
        return self.classify(X)[1]

    def staged_predict(self, X: np.ndarray) -> np.ndarray:
        """
        각 부스팅 라운드별 예측 반환 (시각화용)

        Returns
        -------
        predictions : ndarray of shape (n_estimators, n_samples)
        """
        if self.alphas_ is None:
            raise NotFittedError("모델이 학습되지 않았습니다. fit()을 먼저 호출하세요.")

        X = np.asarray(X, dtype=np.float64)
        votes = np.zeros((self.n_classes_, X.shape[1]))
        columns = np.arange(X.shape[1])
        staged = np.zeros((len(self.estimators_), X.shape[1]), dtype=np.int64)

        for m, (learner, alpha) in enumerate(zip(self.estimators_, self.alphas_)):
            votes[learner.predict(X), columns] += alpha
            staged[m] = np.argmax(votes, axis=0)

        return staged

    def get_state(self) -> dict:
        return {
            'params': {
                'n_iterations': self.n_iterations,
                'tolerance': self.tolerance,
                'weak_learner': self.weak_learner,
                'learner_params': self.learner_params,
            },
            'estimators': list(self.estimators_),
            'alphas': self.alphas_,
            'n_classes': self.n_classes_,
            'n_features': self.n_features_,
            'zt_product': self.zt_product_,
        }

    @classmethod
    def from_state(cls, state: dict) -> 'AdaBoostClassifier':
        model = cls(**state['params'])
        model.estimators_ = list(state['estimators'])
        model.alphas_ = None if state['alphas'] is None \
            else np.asarray(state['alphas'], dtype=np.float64)
        model.n_classes_ = int(state['n_classes'])
        model.n_features_ = int(state['n_features'])
        model.zt_product_ = float(state['zt_product'])
        return model

    def __repr__(self) -> str:
        if self.alphas_ is None:
            return "AdaBoostClassifier(not fitted)"

        return (
            f"AdaBoostClassifier("
            f"n_estimators={len(self.estimators_)}, "
            f"weak_learner='{self.weak_learner}', "
            f"n_classes={self.n_classes_})"
        )


@register_serializable
class AdaBoostModel:
    """
    레이블 매핑을 포함한 AdaBoost 모델

    임의의 레이블 값을 0 ~ k-1 로 정규화해 학습하고, 예측 시 원래 값으로 되돌린다.

    Parameters
    ----------
    weak_learner : {'decision_stump', 'perceptron'}, default='decision_stump'
    n_iterations : int, optional
    tolerance : float, optional
    verbose : bool, default=False

    Attributes
    ----------
    mappings : ndarray
        정규화된 레이블 i 에 대응하는 원래 레이블 값
    dimensionality : int
        학습 데이터 차원
    classifier : AdaBoostClassifier
    """

    def __init__(
        self,
        weak_learner: str = 'decision_stump',
        n_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
        verbose: bool = False
    ):
        self.classifier = AdaBoostClassifier(
            n_iterations=n_iterations,
            tolerance=tolerance,
            weak_learner=weak_learner,
            verbose=verbose
        )
        self.mappings: Optional[np.ndarray] = None
        self.dimensionality: int = 0

    @property
    def weak_learner(self) -> str:
        return self.classifier.weak_learner

    def train(self, data: np.ndarray, labels: np.ndarray) -> 'AdaBoostModel':
        """
        모델 학습

        Parameters
        ----------
        data : ndarray of shape (n_features, n_samples)
        labels : ndarray of shape (n_samples,)
            임의의 레이블 값
        """
        data = np.asarray(data, dtype=np.float64)
        if data.ndim == 1:
            data = data.reshape(1, -1)

        self.mappings, normalized = np.unique(np.asarray(labels).ravel(), return_inverse=True)
        self.dimensionality = data.shape[0]
        self.classifier.fit(data, normalized, len(self.mappings))

        logger.info(
            f"Trained AdaBoost ({self.weak_learner}) on {data.shape[1]} points, "
            f"{self.dimensionality} dimensions, {len(self.mappings)} classes"
        )
        return self

    def classify(self, test: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        분류 수행

        Returns
        -------
        predictions : ndarray of shape (n_samples,)
            원래 레이블 값
        probabilities : ndarray of shape (n_classes, n_samples)

        Raises
        ------
        DimensionMismatchError
            test 차원이 학습 차원과 다를 때
        """
        if self.mappings is None:
            raise NotFittedError("모델이 학습되지 않았습니다. train()을 먼저 호출하세요.")

        test = np.asarray(test, dtype=np.float64)
        if test.ndim == 1:
            test = test.reshape(-1, 1)
        if test.shape[0] != self.dimensionality:
            raise DimensionMismatchError(
                f"Test data dimensionality ({test.shape[0]}) must be the same as "
                f"the model dimensionality ({self.dimensionality})!"
            )

        labels, probabilities = self.classifier.classify(test)
        return self.mappings[labels], probabilities

    def get_state(self) -> dict:
        return {
            'classifier': self.classifier,
            'mappings': self.mappings,
            'dimensionality': self.dimensionality,
        }

    @classmethod
    def from_state(cls, state: dict) -> 'AdaBoostModel':
        model = cls()
        model.classifier = state['classifier']
        model.mappings = None if state['mappings'] is None else np.asarray(state['mappings'])
        model.dimensionality = int(state['dimensionality'])
        return model

    def __repr__(self) -> str:
        if self.mappings is None:
            return "AdaBoostModel(not fitted)"
        return (f"AdaBoostModel(weak_learner='{self.weak_learner}', "
                f"dimensionality={self.dimensionality}, n_classes={len(self.mappings)})")
