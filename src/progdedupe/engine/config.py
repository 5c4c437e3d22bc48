"""Engine configuration dataclass."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from progdedupe.clustering.models import ClusteringConfig, GatePolicy


@dataclass
class EngineConfig:
    """Configuration of the integrity and deduplication engine.

    Attributes
    ----------
    similarity_threshold : float
        Primary-field similarity a duplicate candidate must exceed (default: 0.7).
    gate_threshold : float
        Minimum secondary-field similarity (default: 0.5).
    gate_policy : GatePolicy
        Treatment of empty secondary fields, "lenient" or "strict".
    compound_separator : str
        Separator of compound course/objective keys (default: "|").
    min_slug_length : int
        Canonical slugs shorter than this fall back to "<prefix>-<index>".
    language : str
        Language of localized names used for scanning and faculty slugs.
    events_path : Path | None
        JSONL audit log. If None, no events are written.
    clustering : ClusteringConfig
        Thresholds for the duplicate scanner, built from the fields above.
    """

    similarity_threshold: float = 0.7
    gate_threshold: float = 0.5
    gate_policy: GatePolicy = GatePolicy.LENIENT
    compound_separator: str = "|"
    min_slug_length: int = 2
    language: str = "en"
    events_path: Path | None = None
    clustering: ClusteringConfig = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Coerce types and validate."""
        self.clustering = ClusteringConfig(
            similarity_threshold=self.similarity_threshold,
            gate_threshold=self.gate_threshold,
            gate_policy=self.gate_policy,
        )
        self.gate_policy = self.clustering.gate_policy

        if not self.compound_separator:
            raise ValueError("compound_separator must not be empty")

        if self.min_slug_length < 1:
            raise ValueError(f"min_slug_length must be >= 1, got {self.min_slug_length}")

        if self.language not in ("vi", "en"):
            raise ValueError(f"language must be 'vi' or 'en', got {self.language!r}")

        if self.events_path is not None:
            self.events_path = Path(self.events_path)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        del data["clustering"]
        data["gate_policy"] = self.gate_policy.value
        data["events_path"] = str(self.events_path) if self.events_path is not None else None
        return data
