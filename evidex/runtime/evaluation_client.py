from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import httpx

from evidex.core.config import Settings
from evidex.core.models import Regulation


logger = logging.getLogger(__name__)

SAMPLE_RESULT_PATH = Path(__file__).resolve().parent.parent / "data" / "sample_evaluation.json"


class EvaluationError(RuntimeError):
    pass


class Evaluator(Protocol):
    def evaluate(self, pdf_path: Path, regulation: Regulation) -> dict[str, Any]: ...


@dataclass
class EvaluationClient:
    url: str
    timeout_seconds: float = 300.0
    transport: httpx.BaseTransport | None = field(default=None, repr=False)

    def evaluate(self, pdf_path: Path, regulation: Regulation) -> dict[str, Any]:
        logger.info("Evaluating %s against %s via %s", pdf_path.name, regulation.value, self.url)
        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self.transport) as client:
                with pdf_path.open("rb") as handle:
                    response = client.post(
                        self.url,
                        data={"regulation": regulation.value},
                        files={"file": (pdf_path.name, handle, "application/pdf")},
                    )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("Evaluation failed with HTTP %s", status)
            raise EvaluationError(f"Evaluation failed (HTTP {status}): {exc.response.text}") from exc
        except httpx.RequestError as exc:
            logger.error("Evaluation backend unreachable: %s", exc)
            raise EvaluationError(f"Connection error: {exc}") from exc

        try:
            result = response.json()
        except ValueError as exc:
            raise EvaluationError("Evaluation backend returned invalid JSON") from exc
        if not isinstance(result, dict):
            raise EvaluationError("Evaluation backend returned a non-object result")
        return result


@dataclass
class LocalEvaluationClient:
    """Offline stand-in that answers with the bundled sample result."""

    delay_seconds: float = 1.0
    sample_path: Path = SAMPLE_RESULT_PATH

    def evaluate(self, pdf_path: Path, regulation: Regulation) -> dict[str, Any]:
        logger.info("Evaluating %s against %s with the local sample", pdf_path.name, regulation.value)
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        return json.loads(self.sample_path.read_text(encoding="utf-8"))


def build_evaluation_client(settings: Settings) -> Evaluator:
    if settings.evaluation_mode == "local":
        return LocalEvaluationClient(delay_seconds=settings.local_evaluation_delay_seconds)
    return EvaluationClient(url=settings.evaluation_url, timeout_seconds=settings.evaluation_timeout_seconds)
