from scenevault.pipeline.pacing import FixedDelayPacer, NoPacer, Pacer
from scenevault.pipeline.progress import CancelToken, ProgressCallback, report
from scenevault.pipeline.run_state import RunProgress, SyncStage, SyncState

__all__ = [
    "Pacer",
    "NoPacer",
    "FixedDelayPacer",
    "CancelToken",
    "ProgressCallback",
    "report",
    "RunProgress",
    "SyncStage",
    "SyncState",
]
