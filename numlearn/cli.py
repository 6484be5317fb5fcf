"""
AdaBoost 명령행 인터페이스
==========================

numlearn-adaboost-train:
    학습 행렬 (+ 레이블) 로 AdaBoostModel 을 학습해 파일로 저장

numlearn-adaboost-predict-proba:
    저장된 모델과 테스트 행렬로 클래스 확률 행렬을 계산해 저장
    테스트 차원이 모델 차원과 다르면 아무것도 쓰지 않고 종료 코드 1

Author: NumLearn Project
"""

import argparse
import logging
import sys
from typing import List, Optional

from .adaboost import WEAK_LEARNERS, AdaBoostModel
from .config import CONFIG, setup_logging
from .data_utils import load_labels, load_matrix, save_labels, save_matrix
from .exceptions import NumLearnError, SerializationError
from .serialization import load, save

logger = logging.getLogger(__name__)


def _add_verbose(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="상세 로그 출력 (INFO 레벨)"
    )


def build_predict_proba_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="numlearn-adaboost-predict-proba",
        description="학습된 AdaBoost 모델로 테스트 점들의 클래스 확률을 계산합니다.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
사용 예시:
  %(prog)s --test test.csv --input_model model.json --probabilities probs.csv
  %(prog)s -T test.csv -m model.joblib -p probs.csv --predictions labels.csv
        """
    )
    parser.add_argument("-T", "--test", required=True,
                        help="테스트 행렬 파일 (CSV: 한 줄에 점 하나, 또는 .npy)")
    parser.add_argument("-m", "--input_model", required=True,
                        help="학습된 모델 파일 (.json, .joblib, .pkl)")
    parser.add_argument("-p", "--probabilities",
                        help="클래스 확률 행렬 출력 파일")
    parser.add_argument("--predictions",
                        help="예측 레이블 출력 파일")
    _add_verbose(parser)
    return parser


def build_train_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="numlearn-adaboost-train",
        description="AdaBoost 모델을 학습해 저장합니다.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
사용 예시:
  %(prog)s --training train.csv --labels labels.csv --output_model model.json
  %(prog)s -t train.csv -M model.joblib --weak_learner perceptron --iterations 50
        """
    )
    parser.add_argument("-t", "--training", required=True,
                        help="학습 행렬 파일")
    parser.add_argument("-l", "--labels",
                        help="레이블 파일 (없으면 학습 행렬의 마지막 차원을 레이블로 사용)")
    parser.add_argument("-M", "--output_model", required=True,
                        help="모델 출력 파일 (.json, .joblib, .pkl)")
    parser.add_argument("-i", "--iterations", type=int,
                        default=CONFIG['adaboost_iterations'],
                        help=f"최대 부스팅 라운드 수 (기본값: {CONFIG['adaboost_iterations']})")
    parser.add_argument("-e", "--tolerance", type=float,
                        default=CONFIG['adaboost_tolerance'],
                        help=f"r_t 변화량 종료 기준 (기본값: {CONFIG['adaboost_tolerance']})")
    parser.add_argument("-w", "--weak_learner", choices=sorted(WEAK_LEARNERS),
                        default="decision_stump",
                        help="약한 학습기 종류 (기본값: decision_stump)")
    _add_verbose(parser)
    return parser


def predict_proba_main(argv: Optional[List[str]] = None) -> int:
    """numlearn-adaboost-predict-proba 진입점"""
    args = build_predict_proba_parser().parse_args(argv)
    setup_logging(logging.INFO if args.verbose else None)

    try:
        model = load(args.input_model)
        if not isinstance(model, AdaBoostModel):
            raise SerializationError(
                f"{args.input_model} holds a {type(model).__name__}, not an AdaBoostModel"
            )

        test = load_matrix(args.test)
        predictions, probabilities = model.classify(test)
    except (NumLearnError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    if args.probabilities:
        save_matrix(args.probabilities, probabilities)
    if args.predictions:
        save_labels(args.predictions, predictions)

    logger.info(f"Classified {test.shape[1]} points into {probabilities.shape[0]} classes")
    return 0


def train_main(argv: Optional[List[str]] = None) -> int:
    """numlearn-adaboost-train 진입점"""
    args = build_train_parser().parse_args(argv)
    setup_logging(logging.INFO if args.verbose else None)

    try:
        data = load_matrix(args.training)
        if args.labels:
            labels = load_labels(args.labels)
        else:
            logger.info("No labels given; using the last dimension of the training data")
            labels = data[-1]
            data = data[:-1]

        model = AdaBoostModel(
            weak_learner=args.weak_learner,
            n_iterations=args.iterations,
            tolerance=args.tolerance,
            verbose=args.verbose
        ).train(data, labels)
        save(model, args.output_model)
    except (NumLearnError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(predict_proba_main())
