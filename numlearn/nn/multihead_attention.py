"""
Multihead Attention - From Scratch Implementation
=================================================

스케일드 닷-프로덕트 멀티헤드 어텐션 레이어.

수학적 배경:
-----------
입력 한 열은 [query; key; value] 를 세로로 이어 붙인 벡터이다.
    query: E × T (토큰별 E 차원 임베딩이 연속 배치), key/value: E × S

투영:
    Q = q Wqᵀ + bq,  K = k Wkᵀ + bk,  V = v Wvᵀ + bv

헤드 분할 (h = 1..H, 헤드 차원 d = E / H):
    scores_h = Q_h K_hᵀ / √d + attn_mask + key_padding_mask
    P_h = softmax(scores_h)            (source 축으로 정규화)
    A_h = P_h V_h

출력:
    out = concat(A_1..A_H) Woᵀ + bo    → (E·T, batch)

마스크는 가산(additive) 실수 행렬이다. 차단된 위치에는 매우 큰 음수
(예: np.finfo(float).min 또는 -inf) 를 넣는다.
    attn_mask: (T, S)
    key_padding_mask: (1, S) 또는 (batch, S), 모든 헤드에 공통 적용

역전파 (softmax 야코비안):
    ∂scores = P ⊙ (∂P - Σ_s ∂P ⊙ P)

가중치 버퍼 배치 (크기 4E² + 4E):
    [Wq, Wk, Wv, bq, bk, bv, Wo, bo]

Author: NumLearn Project
"""

from typing import Dict, Optional

import numpy as np

from ..exceptions import DimensionMismatchError
from ..serialization import register_serializable
from .layer import Layer


@register_serializable
class MultiheadAttention(Layer):
    """
    멀티헤드 어텐션 레이어

    Parameters
    ----------
    tgt_seq_len : int
        목표(query) 시퀀스 길이 T
    num_heads : int
        헤드 수 H
    attn_mask : array of shape (T, S), optional
        가산 어텐션 마스크
    key_padding_mask : array of shape (1, S) or (batch, S), optional
        가산 키 패딩 마스크

    Notes
    -----
    input_dimensions = (E, T + 2S) 로 설정하면 임베딩 차원 E 와
    소스 길이 S 가 결정된다. 출력 차원은 (E, T).
    """

    def __init__(
        self,
        tgt_seq_len: int,
        num_heads: int,
        attn_mask: Optional[np.ndarray] = None,
        key_padding_mask: Optional[np.ndarray] = None
    ):
        super().__init__()
        if tgt_seq_len <= 0:
            raise ValueError(f"tgt_seq_len must be positive, got {tgt_seq_len}")
        if num_heads <= 0:
            raise ValueError(f"num_heads must be positive, got {num_heads}")

        self.tgt_seq_len = int(tgt_seq_len)
        self.num_heads = int(num_heads)
        self.attn_mask = None if attn_mask is None else np.asarray(attn_mask, dtype=np.float64)
        self.key_padding_mask = (
            None if key_padding_mask is None
            else np.atleast_2d(np.asarray(key_padding_mask, dtype=np.float64))
        )

        self.embed_dim = 0
        self.src_seq_len = 0
        self.head_dim = 0

    def compute_output_dimensions(self) -> None:
        if len(self.input_dimensions) != 2:
            raise DimensionMismatchError(
                f"MultiheadAttention expects input dimensions (embed_dim, "
                f"tgt_seq_len + 2 * src_seq_len), got {self.input_dimensions}"
            )

        embed_dim, n_tokens = self.input_dimensions
        remainder = n_tokens - self.tgt_seq_len
        if remainder <= 0 or remainder % 2 != 0:
            raise DimensionMismatchError(
                f"Token count {n_tokens} is not tgt_seq_len ({self.tgt_seq_len}) "
                f"plus twice a positive source length"
            )
        if embed_dim <= 0 or embed_dim % self.num_heads != 0:
            raise DimensionMismatchError(
                f"Embedding dimension {embed_dim} must be divisible by "
                f"num_heads ({self.num_heads})"
            )

        self.embed_dim = embed_dim
        self.src_seq_len = remainder // 2
        self.head_dim = embed_dim // self.num_heads
        self.output_dimensions = (embed_dim, self.tgt_seq_len)

        if self.attn_mask is not None and \
                self.attn_mask.shape != (self.tgt_seq_len, self.src_seq_len):
            raise DimensionMismatchError(
                f"attn_mask shape {self.attn_mask.shape} must be "
                f"({self.tgt_seq_len}, {self.src_seq_len})"
            )
        if self.key_padding_mask is not None and \
                self.key_padding_mask.shape[1] != self.src_seq_len:
            raise DimensionMismatchError(
                f"key_padding_mask must have {self.src_seq_len} columns, "
                f"got {self.key_padding_mask.shape[1]}"
            )

    def weight_size(self) -> int:
        e = self.embed_dim
        return 4 * e * e + 4 * e

    def _bind_weights(self, weights: np.ndarray) -> None:
        e = self.embed_dim
        ee = e * e
        self.query_weight = weights[0:ee].reshape(e, e)
        self.key_weight = weights[ee:2 * ee].reshape(e, e)
        self.value_weight = weights[2 * ee:3 * ee].reshape(e, e)
        self.query_bias = weights[3 * ee:3 * ee + e]
        self.key_bias = weights[3 * ee + e:3 * ee + 2 * e]
        self.value_bias = weights[3 * ee + 2 * e:3 * ee + 3 * e]
        self.output_weight = weights[3 * ee + 3 * e:4 * ee + 3 * e].reshape(e, e)
        self.output_bias = weights[4 * ee + 3 * e:]

    # =========================================================================
    # 텐서 배치 변환
    # =========================================================================

    def _tokens(self, block: np.ndarray, length: int) -> np.ndarray:
        """(E·L, B) → (B, L, E)"""
        return block.reshape(length, self.embed_dim, -1).transpose(2, 0, 1)

    def _columns(self, tokens: np.ndarray) -> np.ndarray:
        """(B, L, E) → (E·L, B)"""
        batch, length, embed = tokens.shape
        return tokens.transpose(1, 2, 0).reshape(length * embed, batch)

    def _split_heads(self, x: np.ndarray) -> np.ndarray:
        """(B, L, E) → (B, H, L, d)"""
        batch, length, _ = x.shape
        return x.reshape(batch, length, self.num_heads, self.head_dim).transpose(0, 2, 1, 3)

    def _merge_heads(self, x: np.ndarray) -> np.ndarray:
        """(B, H, L, d) → (B, L, E)"""
        batch, _, length, _ = x.shape
        return x.transpose(0, 2, 1, 3).reshape(batch, length, self.embed_dim)

    def _split_input(self, input: np.ndarray):
        e, t, s = self.embed_dim, self.tgt_seq_len, self.src_seq_len
        q = self._tokens(input[:e * t], t)
        k = self._tokens(input[e * t:e * (t + s)], s)
        v = self._tokens(input[e * (t + s):], s)
        return q, k, v

    # =========================================================================
    # 순전파 / 역전파
    # =========================================================================

    def _forward_pass(self, input: np.ndarray) -> Dict[str, np.ndarray]:
        self._check_ready()
        input = self._check_input(input)
        batch = input.shape[1]

        q_in, k_in, v_in = self._split_input(input)

        query = self._split_heads(q_in @ self.query_weight.T + self.query_bias)
        key = self._split_heads(k_in @ self.key_weight.T + self.key_bias)
        value = self._split_heads(v_in @ self.value_weight.T + self.value_bias)

        scale = 1.0 / np.sqrt(self.head_dim)
        scores = query @ key.transpose(0, 1, 3, 2) * scale

        # 차단값끼리 더해지면 -inf 로 넘칠 수 있다
        with np.errstate(over='ignore'):
            if self.attn_mask is not None:
                scores = scores + self.attn_mask
            if self.key_padding_mask is not None:
                mask = self.key_padding_mask
                if mask.shape[0] not in (1, batch):
                    raise DimensionMismatchError(
                        f"key_padding_mask has {mask.shape[0]} rows, "
                        f"expected 1 or {batch}"
                    )
                scores = scores + mask[:, None, None, :]

        scores = scores - np.max(scores, axis=-1, keepdims=True)
        weights = np.exp(scores)
        weights /= np.sum(weights, axis=-1, keepdims=True)

        attended = self._merge_heads(weights @ value)
        output = attended @ self.output_weight.T + self.output_bias

        return {
            'q_in': q_in, 'k_in': k_in, 'v_in': v_in,
            'query': query, 'key': key, 'value': value,
            'weights': weights, 'attended': attended,
            'output': output, 'scale': scale,
        }

    def _backward_pass(self, cache: Dict[str, np.ndarray], gy: np.ndarray):
        """출력 그래디언트로부터 투영된 Q, K, V 에 대한 그래디언트 계산"""
        d_output = self._tokens(np.asarray(gy, dtype=np.float64), self.tgt_seq_len)
        weights, scale = cache['weights'], cache['scale']

        d_attended = self._split_heads(d_output @ self.output_weight)
        d_weights = d_attended @ cache['value'].transpose(0, 1, 3, 2)
        d_value = weights.transpose(0, 1, 3, 2) @ d_attended

        d_scores = weights * (d_weights - np.sum(d_weights * weights, axis=-1, keepdims=True))
        d_query = d_scores @ cache['key'] * scale
        d_key = d_scores.transpose(0, 1, 3, 2) @ cache['query'] * scale

        return (d_output, self._merge_heads(d_query),
                self._merge_heads(d_key), self._merge_heads(d_value))

    def forward(self, input: np.ndarray) -> np.ndarray:
        """
        순전파

        Parameters
        ----------
        input : array of shape (E·(T + 2S), batch)

        Returns
        -------
        output : ndarray of shape (E·T, batch)
        """
        return self._columns(self._forward_pass(input)['output'])

    def backward(self, input: np.ndarray, output: np.ndarray, gy: np.ndarray) -> np.ndarray:
        """
        입력 [query; key; value] 에 대한 그래디언트

        Returns
        -------
        g : ndarray of shape (E·(T + 2S), batch)
        """
        cache = self._forward_pass(input)
        _, d_query, d_key, d_value = self._backward_pass(cache, gy)

        return np.vstack([
            self._columns(d_query @ self.query_weight),
            self._columns(d_key @ self.key_weight),
            self._columns(d_value @ self.value_weight),
        ])

    def gradient(self, input: np.ndarray, error: np.ndarray) -> np.ndarray:
        """가중치 버퍼와 같은 배치의 파라미터 그래디언트"""
        cache = self._forward_pass(input)
        d_output, d_query, d_key, d_value = self._backward_pass(cache, error)

        return np.concatenate([
            np.einsum('bte,btf->ef', d_query, cache['q_in']).ravel(),
            np.einsum('bse,bsf->ef', d_key, cache['k_in']).ravel(),
            np.einsum('bse,bsf->ef', d_value, cache['v_in']).ravel(),
            d_query.sum(axis=(0, 1)),
            d_key.sum(axis=(0, 1)),
            d_value.sum(axis=(0, 1)),
            np.einsum('bte,btf->ef', d_output, cache['attended']).ravel(),
            d_output.sum(axis=(0, 1)),
        ])

    def attention_weights(self, input: np.ndarray) -> np.ndarray:
        """
        softmax 어텐션 가중치

        Returns
        -------
        weights : ndarray of shape (batch, H, T, S)
        """
        return self._forward_pass(input)['weights']

    def _config(self) -> dict:
        return {
            'tgt_seq_len': self.tgt_seq_len,
            'num_heads': self.num_heads,
            'attn_mask': self.attn_mask,
            'key_padding_mask': self.key_padding_mask,
        }

    def __repr__(self) -> str:
        return (f"MultiheadAttention(embed_dim={self.embed_dim}, "
                f"num_heads={self.num_heads}, tgt_seq_len={self.tgt_seq_len}, "
                f"src_seq_len={self.src_seq_len})")
