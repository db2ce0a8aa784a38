"""Model documentation orchestration."""

from modeldoc.documenter.ops import CheckResult, ModelDocumenter, ModelResult

__all__ = ["CheckResult", "ModelDocumenter", "ModelResult"]
