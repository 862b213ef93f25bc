"""Trust scoring and admission decisions for container images.

Submodules:
    models      -- Criterion, EvaluatorResult, Decision, EvaluationReport
    evaluators  -- Pure vendor, recency, vulnerability and signature scoring
    adoption    -- Per-registry adoption strategies and their registry
    engine      -- ImageEvaluator (gather, score, decide)
    report      -- JSON serialization and exit codes

All public names are re-exported here.
"""

from imagetrust.core.scoring.models import (
    Criterion,
    Decision,
    EvaluationReport,
    EvaluatorResult,
    ImageMetadata,
    VulnerabilityCounts,
)
from imagetrust.core.scoring.engine import ImageEvaluator, build_report, decide
from imagetrust.core.scoring.report import ExitCode, exit_code_for, report_to_dict

__all__ = [
    "Criterion",
    "Decision",
    "EvaluationReport",
    "EvaluatorResult",
    "ExitCode",
    "ImageEvaluator",
    "ImageMetadata",
    "VulnerabilityCounts",
    "build_report",
    "decide",
    "exit_code_for",
    "report_to_dict",
]
