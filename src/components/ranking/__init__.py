"""
Ranking component - Explore section ranking.

Public API for ranking creators and posts into discovery sections.
"""

from ._scoring import metric, normalize, recency_decay, sort_timestamp, to_utc
from .component import (
    SECTION_TITLES,
    apply_diversity_rules,
    eligible_creators,
    eligible_posts,
    load_config_from_rules,
    load_ranker_config,
    rank,
    run,
    snapshot_reference_time,
)
from .models import (
    Candidate,
    CandidateKind,
    CandidateReason,
    ForYouWeights,
    RankByIdInput,
    RankerConfig,
    RankInput,
    RankOutput,
    RisingStarWeights,
    Section,
    SectionType,
    TrendingWeights,
)
from .ports import CandidatePoolPort

__all__ = [
    # Component functions
    "rank",
    "run",
    "load_ranker_config",
    "load_config_from_rules",
    # Pure functions
    "apply_diversity_rules",
    "eligible_creators",
    "eligible_posts",
    "metric",
    "normalize",
    "recency_decay",
    "sort_timestamp",
    "to_utc",
    "snapshot_reference_time",
    # Models
    "Candidate",
    "CandidateKind",
    "CandidateReason",
    "ForYouWeights",
    "RankByIdInput",
    "RankerConfig",
    "RankInput",
    "RankOutput",
    "RisingStarWeights",
    "Section",
    "SectionType",
    "TrendingWeights",
    "SECTION_TITLES",
    # Ports
    "CandidatePoolPort",
]
