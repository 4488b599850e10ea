"""Command line entry point for training and evaluating incident risk models."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from loguru import logger

from .core.config import get_settings
from .services.riskmodel import (
    ArtifactStore,
    Hyperparameters,
    ModelEvaluationService,
    ModelTrainingService,
    PipelineConfig,
    RiskModelError,
)


def _parse_columns(pairs: Sequence[str]) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for pair in pairs:
        logical, separator, physical = pair.partition("=")
        if not separator or not logical.strip():
            raise argparse.ArgumentTypeError(f"column mapping must look like logical=physical, got {pair!r}")
        mapping[logical.strip()] = physical.strip()
    return mapping


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="incident-risk",
        description="Train and evaluate logistic regression incident risk models from CSV datasets",
    )
    parser.add_argument("--artifact-root", default=None, help="Directory that holds models/<id>/<version>.json")
    parser.add_argument("--log-level", default=None, help="Override INCIDENT_RISK_LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    train = commands.add_parser("train", help="Train a model and write its artifact")
    train.add_argument("dataset", help="CSV dataset path")
    train.add_argument("--model-id", required=True)
    train.add_argument("--training-run-id", default="")
    train.add_argument("--learning-rate", type=float, default=None)
    train.add_argument("--iterations", type=int, default=None)
    train.add_argument("--validation-split", type=float, default=None)
    train.add_argument(
        "--column",
        action="append",
        default=[],
        metavar="LOGICAL=PHYSICAL",
        help="Map a logical column (timestamp, latitude, longitude, category, risk, label) to a header name",
    )

    evaluate = commands.add_parser("evaluate", help="Score a stored artifact against a dataset")
    evaluate.add_argument("artifact", help="Artifact path, absolute or relative to the artifact root")
    evaluate.add_argument("dataset", help="CSV dataset path")
    evaluate.add_argument("--column", action="append", default=[], metavar="LOGICAL=PHYSICAL")
    return parser


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def main(argv: Optional[List[str]] = None) -> int:
    parser = _parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    _configure_logging(args.log_level or settings.LOG_LEVEL)

    try:
        columns = _parse_columns(args.column)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    store = ArtifactStore(Path(args.artifact_root) if args.artifact_root else settings.ARTIFACT_ROOT)
    config = PipelineConfig(max_categories=settings.MAX_CATEGORIES)

    try:
        if args.command == "train":
            overrides = {
                "learning_rate": args.learning_rate,
                "iterations": args.iterations,
                "validation_split": args.validation_split,
            }
            defaults = Hyperparameters(
                learning_rate=settings.DEFAULT_LEARNING_RATE,
                iterations=settings.DEFAULT_ITERATIONS,
                validation_split=settings.DEFAULT_VALIDATION_SPLIT,
            )
            service = ModelTrainingService(store, config=config, default_hyperparameters=defaults)
            result = service.train(
                args.dataset,
                columns,
                overrides,
                model_id=args.model_id,
                training_run_id=args.training_run_id,
                progress_callback=lambda percent: logger.debug(f"Training progress {percent:.0f}%"),
            )
            payload = result.as_dict()
        else:
            evaluator = ModelEvaluationService(store, config=config)
            metrics = evaluator.evaluate(
                args.artifact,
                args.dataset,
                columns,
                progress_callback=lambda percent: logger.debug(f"Evaluation progress {percent:.0f}%"),
            )
            payload = {"metrics": metrics.as_dict()}
    except (RiskModelError, OSError) as exc:
        logger.error(f"{args.command} failed: {exc}")
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
