"""
NumLearn 설정
=============

라이브러리 전역 기본값과 로깅/난수 생성기 헬퍼.

Author: NumLearn Project
"""

import logging
from typing import Optional, Union

import numpy as np

# =============================================================================
# Configuration
# =============================================================================

CONFIG = {
    'random_seed': None,

    # Gamma 분포 최대우도 추정 (Newton 반복)
    'gamma_tolerance': 1e-8,
    'gamma_max_iterations': 250,

    # 공분산 양의 정부호 보정
    'max_condition_number': 1e5,
    'min_eigenvalue': 1e-10,

    # 그래디언트 검증
    'jacobian_perturbation': 1e-6,
    'gradient_check_epsilon': 1e-7,

    # AdaBoost
    'adaboost_iterations': 100,
    'adaboost_tolerance': 1e-6,
    'perceptron_max_iterations': 1000,

    # 로깅
    'log_level': 'WARNING',
    'log_format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
}


def get_rng(
    random_state: Optional[Union[int, np.random.Generator]] = None
) -> np.random.Generator:
    """
    난수 생성기 반환

    Parameters
    ----------
    random_state : int or Generator, optional
        None이면 CONFIG['random_seed']를 사용
    """
    if isinstance(random_state, np.random.Generator):
        return random_state
    if random_state is None:
        random_state = CONFIG['random_seed']
    return np.random.default_rng(random_state)


def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    """루트 로거에 콘솔 핸들러 설정 (CLI용)"""
    logging.basicConfig(
        level=level if level is not None else CONFIG['log_level'],
        format=CONFIG['log_format'],
    )
    logging.getLogger('numlearn').setLevel(
        level if level is not None else CONFIG['log_level']
    )
