"""
행렬 파일 입출력
================

CSV 파일은 한 줄에 관측점 하나 (행 = 샘플) 로 저장되므로,
라이브러리의 (차원, 샘플) 행렬 규약에 맞게 읽고 쓸 때 전치한다.
.npy 파일은 행렬 그대로 저장한다.

Author: NumLearn Project
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_matrix(path: PathLike) -> np.ndarray:
    """
    행렬 로드

    Returns
    -------
    matrix : ndarray of shape (n_dimensions, n_points)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Matrix file not found: {path}")

    if path.suffix.lower() == '.npy':
        matrix = np.atleast_2d(np.load(path)).astype(np.float64)
    else:
        matrix = pd.read_csv(path, header=None).to_numpy(dtype=np.float64).T

    logger.info(f"Loaded {matrix.shape[0]}x{matrix.shape[1]} matrix from {path}")
    return matrix


def save_matrix(path: PathLike, matrix: np.ndarray) -> Path:
    """
    행렬 저장

    Parameters
    ----------
    matrix : array of shape (n_dimensions, n_points)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    matrix = np.atleast_2d(np.asarray(matrix))

    if path.suffix.lower() == '.npy':
        np.save(path, matrix)
    else:
        pd.DataFrame(matrix.T).to_csv(path, header=False, index=False)

    logger.info(f"Saved {matrix.shape[0]}x{matrix.shape[1]} matrix to {path}")
    return path


def load_labels(path: PathLike) -> np.ndarray:
    """레이블 벡터 로드 (한 줄에 하나, 또는 한 줄에 전부)"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Labels file not found: {path}")

    if path.suffix.lower() == '.npy':
        labels = np.load(path).ravel()
    else:
        labels = pd.read_csv(path, header=None).to_numpy().ravel()

    if np.issubdtype(labels.dtype, np.floating) and np.all(labels == np.round(labels)):
        labels = labels.astype(np.int64)
    return labels


def save_labels(path: PathLike, labels: np.ndarray) -> Path:
    """레이블 벡터 저장 (한 줄에 하나)"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    labels = np.asarray(labels).ravel()

    if path.suffix.lower() == '.npy':
        np.save(path, labels)
    else:
        pd.DataFrame(labels).to_csv(path, header=False, index=False)
    return path
