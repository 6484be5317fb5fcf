"""
NumLearn 예외 클래스
====================

라이브러리 전반에서 사용하는 예외 계층.

Author: NumLearn Project
"""


class NumLearnError(Exception):
    """NumLearn 예외의 기본 클래스."""
    pass


class DimensionMismatchError(NumLearnError, ValueError):
    """데이터, 모델, 가중치 버퍼 또는 마스크의 차원이 맞지 않을 때."""
    pass


class InvalidObservationError(NumLearnError, ValueError):
    """관측값이 분포의 지지집합(support)을 벗어날 때."""
    pass


class InvalidWeightsError(NumLearnError, ValueError):
    """샘플 가중치가 음수, 비유한값, 전부 0이거나 길이가 다를 때."""
    pass


class ConvergenceError(NumLearnError, RuntimeError):
    """반복 추정이 수렴하지 않거나 수치적으로 퇴화했을 때."""
    pass


class NotFittedError(NumLearnError, RuntimeError):
    """학습되지 않은 모델로 예측하려 할 때."""
    pass


class SerializationError(NumLearnError):
    """저장/로드 형식이나 내용이 잘못되었을 때."""
    pass
