"""Lake sync job package.

Modules:
- config: RunnerConfig dataclass
- runner: PipelineRunner (extract → collect → publish)
- cli: CLI entry point (main)
"""

from .config import RunnerConfig
from .runner import PipelineResult, PipelineRunner, PipelineState
from .cli import main

__all__ = ["RunnerConfig", "PipelineResult", "PipelineRunner", "PipelineState", "main"]
