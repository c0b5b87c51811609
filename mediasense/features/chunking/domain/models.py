from dataclasses import dataclass, field
from pathlib import Path
from typing import List

@dataclass(frozen=True)
class AudioChunk:
    """
    One fixed-duration slice of a longer recording.
    Consumed once by the transcription router, then deleted.
    """
    index: int
    file_path: Path
    start_offset_seconds: float
    duration_seconds: float
    # True when the chunk *is* the source file and must survive cleanup.
    is_source: bool = False

@dataclass(frozen=True)
class ChunkPlan:
    """
    The surviving chunks of a split, in index order, plus the nominal grid they came from.
    Indices may have gaps where a conversion failed.
    """
    chunks: List[AudioChunk] = field(default_factory=list)
    expected_count: int = 0
    chunk_seconds: float = 0.0
    source_duration_seconds: float = 0.0

    @property
    def dropped_indices(self) -> List[int]:
        present = {c.index for c in self.chunks}
        return [i for i in range(self.expected_count) if i not in present]
