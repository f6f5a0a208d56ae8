"""Evaluation of flags for SDK clients."""

from __future__ import annotations

import logging
from typing import Any

from toggle.evaluation_types import (
    EvaluationContext,
    EvaluationResponse,
    SingleEvaluationResponse,
)
from toggle.evaluator import Evaluator


class EvaluationService:
    """Loads flags from a repository and evaluates them for a user."""

    def __init__(self, flag_repo: Any, logger: logging.Logger | None = None) -> None:
        self.flag_repo = flag_repo
        self.evaluator = Evaluator()
        self.logger = logger or logging.getLogger("toggle.evaluation")

    def evaluate_all(
        self, project_id: str, tenant_id: str, eval_ctx: EvaluationContext
    ) -> EvaluationResponse:
        """Evaluate every flag of the project for ``eval_ctx``.

        Errors from the repository are logged and propagate unchanged.
        """
        try:
            flags = self.flag_repo.list_by_project(project_id, tenant_id)
        except Exception as exc:
            self.logger.error(
                "failed to fetch flags for evaluation project_id=%s error=%s",
                project_id,
                exc,
            )
            raise

        results: dict[str, bool] = {}
        for flag in flags or []:
            enabled = self.evaluator.evaluate(flag, eval_ctx)
            results[flag.id] = enabled
            self.logger.debug(
                "flag evaluated flag_id=%s flag_name=%s enabled=%s user_id=%s",
                flag.id,
                flag.name,
                enabled,
                eval_ctx.user_id,
            )

        self.logger.info(
            "bulk evaluation completed project_id=%s user_id=%s flags_evaluated=%d",
            project_id,
            eval_ctx.user_id,
            len(results),
        )
        return EvaluationResponse(flags=results)

    def evaluate_single(
        self, flag_id: str, tenant_id: str, eval_ctx: EvaluationContext
    ) -> SingleEvaluationResponse:
        """Evaluate one flag for ``eval_ctx``.

        Errors from the repository are logged and propagate unchanged.
        """
        try:
            flag = self.flag_repo.get_by_id(flag_id, tenant_id)
        except Exception as exc:
            self.logger.error(
                "failed to fetch flag for evaluation flag_id=%s error=%s", flag_id, exc
            )
            raise

        enabled = self.evaluator.evaluate(flag, eval_ctx)
        self.logger.info(
            "flag evaluated flag_id=%s flag_name=%s enabled=%s user_id=%s",
            flag_id,
            flag.name,
            enabled,
            eval_ctx.user_id,
        )
        return SingleEvaluationResponse(enabled=enabled, flag_id=flag_id)