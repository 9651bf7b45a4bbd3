from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from image_analyzer.core.errors import AnalysisItemError, EmptyInput, MissingCredential
from image_analyzer.core.intake import ImageRecord
from image_analyzer.core.models import AnalysisResult, AnalysisStatus
from image_analyzer.core.session_config import SessionConfig
from image_analyzer.core.store import ImageStore

logger = logging.getLogger(__name__)

DEFAULT_DELAY_S = 2.0
DEFAULT_KEYWORDS = "keyword1, keyword2, keyword3"

ProgressCallback = Callable[[float, int, int], None]


@dataclass(frozen=True)
class AnalysisRequest:
    record: ImageRecord
    model: str
    include_description: bool
    use_filename_context: bool
    api_key: str = field(default="", repr=False)


class Analyzer(Protocol):
    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        ...


class MockAnalyzer:
    """Stands in for a provider call: waits `delay_s`, then returns templated text."""

    def __init__(self, delay_s: float = DEFAULT_DELAY_S) -> None:
        self.delay_s = delay_s

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        await asyncio.sleep(self.delay_s)
        name = request.record.name
        return AnalysisResult(
            filename=name,
            title=f"SEO title for {name}",
            description=f"Detailed description of image {name}" if request.include_description else None,
            keywords=DEFAULT_KEYWORDS,
            status=AnalysisStatus.COMPLETED,
        )


def validate_start(config: SessionConfig, store: ImageStore) -> None:
    if not config.has_api_key():
        raise MissingCredential()
    if len(store) == 0:
        raise EmptyInput()


def _failed_result(record: ImageRecord, exc: AnalysisItemError) -> AnalysisResult:
    return AnalysisResult(
        filename=record.name,
        title="",
        keywords="",
        status=AnalysisStatus.ERROR,
        error=exc.user_message,
    )


class AnalysisWorkflow:
    """Runs the analyzer over the store's images one at a time.

    Concurrent calls to `run` on the same store are not guarded; callers
    must not start a run while `store.is_processing` is set.
    """

    def __init__(self, analyzer: Optional[Analyzer] = None) -> None:
        self.analyzer: Analyzer = analyzer if analyzer is not None else MockAnalyzer()

    async def run(
        self,
        config: SessionConfig,
        store: ImageStore,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[AnalysisResult]:
        validate_start(config, store)

        images = list(store.images)
        total = len(images)
        # Read once so every result in this run has the same shape
        include_description = config.include_description
        api_key = config.api_key.get_secret_value()
        results: List[AnalysisResult] = []

        logger.info("Starting analysis of %d image(s) with model %s", total, config.model)
        store.begin_run()
        completed = False
        try:
            for idx, record in enumerate(images):
                progress = idx / total * 100
                store.set_progress(progress)
                if on_progress is not None:
                    on_progress(progress, idx, total)

                request = AnalysisRequest(
                    record=record,
                    model=config.model,
                    include_description=include_description,
                    use_filename_context=config.use_filename_context,
                    api_key=api_key,
                )
                try:
                    result = await self.analyzer.analyze(request)
                except AnalysisItemError as exc:
                    logger.warning("Analysis failed for %s: %s", record.name, exc)
                    result = _failed_result(record, exc)
                results.append(result)

            store.set_results(results, include_description)
            completed = True
        finally:
            store.finish_run(completed=completed)
            if not completed:
                logger.warning("Analysis stopped after %d of %d image(s)", len(results), total)

        if on_progress is not None:
            on_progress(100.0, total, total)
        logger.info("Analysis finished: %d result(s)", len(results))
        return results
