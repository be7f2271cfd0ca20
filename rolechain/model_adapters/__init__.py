"""Provider adapters (Gemini, OpenAI, Ollama) and the role-to-model router."""

from rolechain.model_adapters.gemini import call_gemini
from rolechain.model_adapters.ollama import call_ollama
from rolechain.model_adapters.openai import call_openai
from rolechain.model_adapters.router import ModelRouter, ResolvedModel, resolve_model

__all__ = [
    "ModelRouter",
    "ResolvedModel",
    "call_gemini",
    "call_ollama",
    "call_openai",
    "resolve_model",
]
