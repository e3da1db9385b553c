"""Explicit analysis state for interactive callers."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from ..analysis.analyzer import ImageAnalyzer
from ..analysis.results import ImageAnalysis
from ..analysis.sampler import PixelBuffer
from ..errors import ImageLoadError, InvalidInput
from ..utils.logging import get_logger
from .loader import load_pixel_buffer

logger = get_logger(__name__)


class SessionStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of an ``AnalysisSession``."""

    status: SessionStatus
    file_name: Optional[str] = None
    analysis: Optional[ImageAnalysis] = None
    message: Optional[str] = None


IDLE = SessionState(SessionStatus.IDLE)


class AnalysisSession:
    """Owns the idle/loading/ready/error state of one analysis slot.

    The engine runs exactly once per entry into LOADING; its result or
    error decides whether the session ends up READY or ERROR.
    """

    def __init__(
        self,
        analyzer: Optional[ImageAnalyzer] = None,
        loader: Callable[[Union[str, Path]], PixelBuffer] = load_pixel_buffer,
    ):
        self.analyzer = analyzer or ImageAnalyzer()
        self.loader = loader
        self.state = IDLE

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    def run(self, path: Union[str, Path]) -> SessionState:
        """Load and analyze ``path``, returning the final state."""
        if self.state.status is SessionStatus.LOADING:
            raise RuntimeError("An analysis is already in progress")

        file_name = Path(path).name
        self.state = SessionState(SessionStatus.LOADING, file_name=file_name)

        try:
            buffer = self.loader(path)
            analysis = self.analyzer.analyze(buffer)
        except (ImageLoadError, InvalidInput) as e:
            logger.info(f"Analysis of {file_name} failed: {e}")
            self.state = SessionState(SessionStatus.ERROR, file_name=file_name, message=str(e))
        except Exception as e:
            logger.error(f"Unexpected error while analyzing {file_name}: {e}", exc_info=True)
            self.state = SessionState(
                SessionStatus.ERROR,
                file_name=file_name,
                message="Something went wrong while analyzing the image",
            )
        else:
            self.state = SessionState(
                SessionStatus.READY, file_name=file_name, analysis=analysis
            )

        return self.state

    def reset(self) -> SessionState:
        """Return to IDLE, dropping any result or error."""
        self.state = IDLE
        return self.state
