from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from image_analyzer.core.intake import ImageRecord
from image_analyzer.core.models import AnalysisResult
from image_analyzer.core.previews import PreviewStore

logger = logging.getLogger(__name__)

Listener = Callable[["ImageStore"], None]


class ImageStore:
    """Ordered image collection plus the state of the latest analysis run.

    Subscribers are called after every mutating operation.
    """

    def __init__(self, previews: Optional[PreviewStore] = None) -> None:
        self.previews = previews if previews is not None else PreviewStore()
        self._images: List[ImageRecord] = []
        self._results: List[AnalysisResult] = []
        self.results_include_description = False
        self.progress: float = 0.0
        self.is_processing = False
        self._listeners: List[Listener] = []

    # Observers
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # Collection
    @property
    def images(self) -> Sequence[ImageRecord]:
        return tuple(self._images)

    @property
    def results(self) -> Sequence[AnalysisResult]:
        return tuple(self._results)

    def ids(self) -> List[str]:
        return [img.id for img in self._images]

    def append(self, batch: Iterable[ImageRecord]) -> None:
        batch = list(batch)
        self._images.extend(batch)
        logger.info("Added %d image(s); collection size %d", len(batch), len(self._images))
        self._notify()

    def remove(self, image_id: str) -> bool:
        for idx, img in enumerate(self._images):
            if img.id == image_id:
                del self._images[idx]
                self.previews.release(img.preview_uri)
                self._notify()
                return True
        return False

    def clear(self) -> None:
        for img in self._images:
            self.previews.release(img.preview_uri)
        self._images = []
        self._results = []
        self.results_include_description = False
        self._notify()

    def close(self) -> None:
        """Release every preview still held; used when the session is torn down."""
        self.clear()
        self.previews.release_all()

    # Analysis run state
    def begin_run(self) -> None:
        self.progress = 0.0
        self.is_processing = True
        self._notify()

    def set_progress(self, value: float) -> None:
        self.progress = max(0.0, min(100.0, float(value)))
        self._notify()

    def set_results(self, results: Iterable[AnalysisResult], include_description: bool) -> None:
        self._results = list(results)
        self.results_include_description = bool(include_description)
        self._notify()

    def finish_run(self, completed: bool = True) -> None:
        if completed:
            self.progress = 100.0
        self.is_processing = False
        self._notify()

    def __iter__(self) -> Iterator[ImageRecord]:
        return iter(list(self._images))

    def __len__(self) -> int:
        return len(self._images)
