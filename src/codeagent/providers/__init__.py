"""Inference backends."""

from codeagent.providers.base import InferenceBackend, InferenceOptions
from codeagent.providers.ollama import OllamaBackend

__all__ = ["InferenceBackend", "InferenceOptions", "OllamaBackend"]
