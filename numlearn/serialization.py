"""
Model Serialization - 다중 형식 저장/로드
==========================================

분포, 레이어, 약한 학습기, AdaBoost 모델의 파라미터 상태를
구조화 텍스트(JSON)와 바이너리(joblib, pickle) 형식으로 저장한다.

저장 규약:
---------
- 직렬화 가능한 클래스는 get_state() -> dict, from_state(state) 를 구현하고
  @register_serializable 로 등록한다.
- 페이로드는 {'class', 'version', 'state'} 봉투(envelope) 형태.
- JSON에서는 ndarray를 {'__ndarray__', 'dtype', 'shape'} 로 태깅한다.
  float의 repr은 왕복 시 정확히 복원되므로 평가 결과가 동일하게 유지된다.

Author: NumLearn Project
"""

import io
import json
import logging
import pickle
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

import joblib
import numpy as np

from .exceptions import SerializationError

logger = logging.getLogger(__name__)

_REGISTRY: Dict[str, Type] = {}


class SerializationFormat(Enum):
    """지원하는 직렬화 형식."""
    JSON = "json"
    JOBLIB = "joblib"
    PICKLE = "pickle"


_SUFFIX_FORMATS = {
    '.json': SerializationFormat.JSON,
    '.joblib': SerializationFormat.JOBLIB,
    '.pkl': SerializationFormat.PICKLE,
    '.pickle': SerializationFormat.PICKLE,
}


def register_serializable(cls: Type) -> Type:
    """클래스를 직렬화 레지스트리에 등록하는 데코레이터"""
    _REGISTRY[cls.__name__] = cls
    return cls


def _encode(value: Any, text: bool) -> Any:
    """상태 값을 기본 자료형으로 재귀 변환"""
    if type(value).__name__ in _REGISTRY and hasattr(value, 'get_state'):
        return {
            '__class__': type(value).__name__,
            'state': _encode(value.get_state(), text),
        }
    if isinstance(value, np.ndarray):
        if not text:
            return value.copy()
        return {
            '__ndarray__': value.ravel().tolist(),
            'dtype': str(value.dtype),
            'shape': list(value.shape),
        }
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, dict):
        return {str(k): _encode(v, text) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v, text) for v in value]
    return value


def _decode(value: Any) -> Any:
    """_encode의 역변환"""
    if isinstance(value, dict):
        if '__ndarray__' in value:
            return np.asarray(
                value['__ndarray__'], dtype=value['dtype']
            ).reshape(value['shape'])
        if '__class__' in value:
            name = value['__class__']
            if name not in _REGISTRY:
                raise SerializationError(f"Unknown serialized class: {name}")
            return _REGISTRY[name].from_state(_decode(value['state']))
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


def _envelope(obj: Any, text: bool) -> Dict[str, Any]:
    from . import __version__

    name = type(obj).__name__
    if name not in _REGISTRY:
        raise SerializationError(f"{name} is not serializable")
    return {
        'class': name,
        'version': __version__,
        'state': _encode(obj.get_state(), text),
    }


def _open_envelope(payload: Any) -> Any:
    if not isinstance(payload, dict) or 'class' not in payload \
            or 'state' not in payload:
        raise SerializationError("Malformed payload: missing class/state")
    name = payload['class']
    if name not in _REGISTRY:
        raise SerializationError(f"Unknown serialized class: {name}")
    return _REGISTRY[name].from_state(_decode(payload['state']))


def _as_format(fmt: Union[str, SerializationFormat]) -> SerializationFormat:
    try:
        return SerializationFormat(fmt)
    except ValueError:
        raise SerializationError(f"Unsupported serialization format: {fmt}")


def dumps(obj: Any, fmt: Union[str, SerializationFormat] = SerializationFormat.JSON) -> Union[str, bytes]:
    """
    객체를 메모리 상의 페이로드로 직렬화

    Returns
    -------
    payload : str (JSON) or bytes (JOBLIB, PICKLE)
    """
    fmt = _as_format(fmt)

    if fmt == SerializationFormat.JSON:
        return json.dumps(_envelope(obj, text=True))
    elif fmt == SerializationFormat.JOBLIB:
        buffer = io.BytesIO()
        joblib.dump(_envelope(obj, text=False), buffer)
        return buffer.getvalue()
    else:
        return pickle.dumps(_envelope(obj, text=False))


def loads(data: Union[str, bytes], fmt: Union[str, SerializationFormat] = SerializationFormat.JSON) -> Any:
    """dumps()로 만든 페이로드에서 객체 복원"""
    fmt = _as_format(fmt)

    try:
        if fmt == SerializationFormat.JSON:
            payload = json.loads(data)
        elif fmt == SerializationFormat.JOBLIB:
            payload = joblib.load(io.BytesIO(data))
        else:
            payload = pickle.loads(data)
    except (ValueError, TypeError, EOFError, pickle.UnpicklingError) as e:
        raise SerializationError(f"Failed to decode {fmt.value} payload: {e}") from e

    return _open_envelope(payload)


def _infer_format(path: Path, fmt: Optional[Union[str, SerializationFormat]]) -> SerializationFormat:
    if fmt is not None:
        return _as_format(fmt)
    suffix = path.suffix.lower()
    if suffix not in _SUFFIX_FORMATS:
        raise SerializationError(
            f"Cannot infer serialization format from suffix '{suffix}'"
        )
    return _SUFFIX_FORMATS[suffix]


def save(obj: Any, path: Union[str, Path], fmt: Optional[Union[str, SerializationFormat]] = None) -> Path:
    """
    객체를 파일로 저장

    Parameters
    ----------
    obj : 직렬화 가능한 객체
    path : str or Path
    fmt : SerializationFormat, optional
        None이면 확장자(.json, .joblib, .pkl)로 판단
    """
    path = Path(path)
    fmt = _infer_format(path, fmt)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = dumps(obj, fmt)
    if isinstance(payload, str):
        path.write_text(payload, encoding='utf-8')
    else:
        path.write_bytes(payload)

    logger.info(f"Saved {type(obj).__name__} to {path} ({fmt.value})")
    return path


def load(path: Union[str, Path], fmt: Optional[Union[str, SerializationFormat]] = None) -> Any:
    """save()로 저장한 파일에서 객체 로드"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")
    fmt = _infer_format(path, fmt)

    if fmt == SerializationFormat.JSON:
        obj = loads(path.read_text(encoding='utf-8'), fmt)
    else:
        obj = loads(path.read_bytes(), fmt)

    logger.info(f"Loaded {type(obj).__name__} from {path} ({fmt.value})")
    return obj
