"""
ML Visualizer - 학습된 모델 시각화 도구
========================================

분포 추정, 부스팅 학습 과정, 어텐션 가중치를 시각화합니다.

주요 기능:
- 부스팅 학습 곡선 (r_t, α_t, 가중 오차)
- 앙상블 정확도 수렴 과정
- 1차원 분포 적합 결과와 데이터 히스토그램
- 어텐션 가중치 히트맵
- 클래스 확률 막대 그래프

Author: NumLearn Project
"""

from typing import List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np


class MLVisualizer:
    """
    머신러닝 모델 시각화 클래스

    Parameters
    ----------
    figsize : tuple, default=(12, 8)
        기본 Figure 크기

    style : str, optional
        Matplotlib 스타일

    dpi : int, default=100
        Figure DPI
    """

    def __init__(
        self,
        figsize: Tuple[int, int] = (12, 8),
        style: Optional[str] = None,
        dpi: int = 100
    ):
        self.figsize = figsize
        self.style = style
        self.dpi = dpi

        # 스타일 설정
        if self.style:
            try:
                plt.style.use(self.style)
            except OSError:
                pass  # 스타일을 찾을 수 없으면 기본값 사용

        # 색상 팔레트
        self.colors = {
            'primary': '#2E86AB',
            'secondary': '#A23B72',
            'accent': '#F18F01',
            'success': '#C73E1D',
            'neutral': '#3B3B3B',
            'train': '#2E86AB',
            'val': '#F18F01',
            'test': '#C73E1D'
        }

    def plot_boosting_curve(
        self,
        model,
        title: str = "Boosting Learning Curve",
        figsize: Optional[Tuple[int, int]] = None
    ) -> plt.Figure:
        """
        AdaBoost 모델의 학습 곡선 시각화

        Parameters
        ----------
        model : AdaBoostClassifier or AdaBoostModel
            학습된 부스팅 모델
        title : str
            그래프 제목
        figsize : tuple, optional
            Figure 크기

        Returns
        -------
        fig : matplotlib.Figure
        """
        classifier = getattr(model, 'classifier', model)
        history = classifier.training_history_

        if not history:
            raise ValueError("학습 이력이 없습니다.")

        fig, axes = plt.subplots(1, 2, figsize=figsize or (14, 5), dpi=self.dpi)
        iterations = [h['iteration'] for h in history]

        # 1. 가중 오차 / 학습 정확도
        ax1 = axes[0]
        ax1.plot(iterations, [h['weighted_error'] for h in history],
                 label='Weighted Error', color=self.colors['primary'], linewidth=2)
        ax1.plot(iterations, [h['train_accuracy'] for h in history],
                 label='Weak Learner Accuracy', color=self.colors['accent'],
                 linewidth=2, linestyle='--')
        ax1.set_xlabel('Iteration', fontsize=11)
        ax1.set_ylabel('Error / Accuracy', fontsize=11)
        ax1.set_title('Learning Curve', fontsize=12, fontweight='bold')
        ax1.legend(loc='upper right')
        ax1.grid(True, alpha=0.3)

        # 2. 학습기 가중치와 edge
        ax2 = axes[1]
        ax2.bar(iterations, [h['alpha'] for h in history],
                color=self.colors['secondary'], alpha=0.7, label='alpha')
        ax2.plot(iterations, [h['rt'] for h in history],
                 color=self.colors['neutral'], marker='o', markersize=3, label='r_t')
        ax2.set_xlabel('Iteration', fontsize=11)
        ax2.set_ylabel('Weight', fontsize=11)
        ax2.set_title('Learner Weights (α_t) and Edge (r_t)', fontsize=12, fontweight='bold')
        ax2.legend(loc='upper right')
        ax2.grid(True, alpha=0.3)

        fig.suptitle(title, fontsize=14, fontweight='bold', y=1.02)
        plt.tight_layout()
        return fig

    def plot_ensemble_convergence(
        self,
        model,
        X: np.ndarray,
        y: np.ndarray,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Ensemble Accuracy Convergence"
    ) -> plt.Figure:
        """
        학습기 수에 따른 앙상블 정확도

        Parameters
        ----------
        model : AdaBoostClassifier
        X : ndarray of shape (n_features, n_samples)
        y : ndarray of shape (n_samples,)
            0 ~ n_classes-1 정수 레이블
        """
        staged = model.staged_predict(X)
        accuracy = np.mean(staged == np.asarray(y).ravel()[None, :], axis=1)

        fig, ax = plt.subplots(figsize=figsize or (10, 5), dpi=self.dpi)
        ax.plot(np.arange(1, len(accuracy) + 1), accuracy,
                color=self.colors['train'], linewidth=2)
        ax.set_xlabel('Number of Weak Learners', fontsize=11)
        ax.set_ylabel('Accuracy', fontsize=11)
        ax.set_ylim(0, 1.05)
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        return fig

    def plot_distribution_fit(
        self,
        distribution,
        data: np.ndarray,
        bins: int = 30,
        n_grid: int = 200,
        figsize: Optional[Tuple[int, int]] = None,
        title: Optional[str] = None
    ) -> plt.Figure:
        """
        1차원 분포 적합 결과

        Parameters
        ----------
        distribution : Distribution
            dimensionality == 1 인 학습된 분포
        data : array of shape (n,) or (1, n)
            히스토그램으로 그릴 데이터
        """
        if distribution.dimensionality != 1:
            raise ValueError("1차원 분포만 시각화할 수 있습니다.")

        data = np.asarray(data, dtype=np.float64).ravel()
        margin = 0.1 * (data.max() - data.min() + 1e-12)
        grid = np.linspace(data.min() - margin, data.max() + margin, n_grid)
        density = distribution.probability(grid.reshape(1, -1))

        fig, ax = plt.subplots(figsize=figsize or (10, 5), dpi=self.dpi)
        ax.hist(data, bins=bins, density=True, alpha=0.5,
                color=self.colors['primary'], edgecolor='white', label='Data')
        ax.plot(grid, density, color=self.colors['success'], linewidth=2, label='Fitted density')
        ax.set_xlabel('x', fontsize=11)
        ax.set_ylabel('Density', fontsize=11)
        ax.set_title(title or f"{type(distribution).__name__} fit",
                     fontsize=14, fontweight='bold')
        ax.legend(loc='upper right')
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        return fig

    def plot_attention_weights(
        self,
        weights: np.ndarray,
        batch_index: int = 0,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Attention Weights"
    ) -> plt.Figure:
        """
        헤드별 어텐션 가중치 히트맵

        Parameters
        ----------
        weights : ndarray of shape (batch, heads, tgt, src)
            MultiheadAttention.attention_weights() 의 결과
        batch_index : int
            표시할 배치 샘플
        """
        weights = np.asarray(weights)
        if weights.ndim != 4:
            raise ValueError("weights는 (batch, heads, tgt, src) 형태여야 합니다.")

        n_heads = weights.shape[1]
        fig, axes = plt.subplots(1, n_heads, figsize=figsize or (4 * n_heads, 4),
                                 dpi=self.dpi, squeeze=False)

        for head in range(n_heads):
            ax = axes[0, head]
            image = ax.imshow(weights[batch_index, head], cmap='viridis',
                              vmin=0.0, vmax=1.0, aspect='auto')
            ax.set_xlabel('Source position', fontsize=10)
            ax.set_ylabel('Target position', fontsize=10)
            ax.set_title(f'Head {head}', fontsize=11, fontweight='bold')

        fig.colorbar(image, ax=axes.ravel().tolist(), shrink=0.8)
        fig.suptitle(title, fontsize=14, fontweight='bold')
        return fig

    def plot_class_probabilities(
        self,
        probabilities: np.ndarray,
        class_labels: Optional[Sequence] = None,
        max_points: int = 50,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Class Probabilities"
    ) -> plt.Figure:
        """
        점별 클래스 확률 누적 막대 그래프

        Parameters
        ----------
        probabilities : ndarray of shape (n_classes, n_points)
        class_labels : sequence, optional
        max_points : int
            표시할 최대 점 수
        """
        probabilities = np.asarray(probabilities)[:, :max_points]
        n_classes, n_points = probabilities.shape
        labels: List = list(class_labels) if class_labels is not None else list(range(n_classes))

        fig, ax = plt.subplots(figsize=figsize or (12, 5), dpi=self.dpi)
        colors = plt.cm.Set2(np.linspace(0, 1, max(n_classes, 2)))
        bottom = np.zeros(n_points)
        positions = np.arange(n_points)

        for c in range(n_classes):
            ax.bar(positions, probabilities[c], bottom=bottom, color=colors[c],
                   label=f'Class {labels[c]}', alpha=0.85)
            bottom += probabilities[c]

        ax.set_xlabel('Point', fontsize=11)
        ax.set_ylabel('Probability', fontsize=11)
        ax.set_ylim(0, 1.05)
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.legend(loc='upper right', fontsize=9)
        ax.grid(True, alpha=0.3, axis='y')

        plt.tight_layout()
        return fig

    def save_figure(
        self,
        fig: plt.Figure,
        filepath: str,
        dpi: Optional[int] = None
    ):
        """Figure 저장"""
        fig.savefig(filepath, dpi=dpi or self.dpi, bbox_inches='tight',
                    facecolor='white', edgecolor='none')
        print(f"Figure saved: {filepath}")
