"""Structured generation: parse-recovery tiers and the retrying executor."""

from src.services.generation.generation_executor import GenerationExecutor
from src.services.generation.json_recovery import DEFAULT_STRATEGIES, recover_json_array

__all__ = ["DEFAULT_STRATEGIES", "GenerationExecutor", "recover_json_array"]
