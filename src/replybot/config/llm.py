import os

from .loader import section

PROVIDERS = ("openai", "ollama")


class LLM:
    def __init__(self, config: dict | None = None) -> None:
        llm_cfg = section(config, "llm")

        provider = str(llm_cfg.get("provider", os.getenv("LLM_PROVIDER", "openai"))).strip().lower()
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown LLM provider {provider!r}; expected one of {', '.join(PROVIDERS)}")
        self.PROVIDER: str = provider

        self.DEFAULT_MODEL_ID: str = str(llm_cfg.get("default_model", os.getenv("DEFAULT_MODEL_ID", "gpt-3.5-turbo")))
        self.DEFAULT_SYSTEM_PROMPT: str = str(
            llm_cfg.get(
                "default_system_prompt",
                os.getenv("DEFAULT_SYSTEM_PROMPT", "You are a helpful assistant."),
            )
        )
        self.MODELS_URL: str = str(
            llm_cfg.get("models_url", os.getenv("MODELS_URL", "https://api.groq.com/openai/v1/models"))
        )
        self.MODELS_TTL_MS: int = int(llm_cfg.get("models_ttl_ms", os.getenv("MODELS_TTL_MS", "3600000")))
        self.REQUEST_TIMEOUT_S: float = float(
            llm_cfg.get("request_timeout_s", os.getenv("REQUEST_TIMEOUT_S", "30"))
        )

        # Ollama ignores the stored openai_* settings and uses these instead.
        self.OLLAMA_MODEL_ID: str = str(llm_cfg.get("ollama_model", os.getenv("OLLAMA_MODEL", "gpt-oss-20b")))
        self.OLLAMA_HOST: str = str(llm_cfg.get("ollama_host", os.getenv("OLLAMA_HOST", "http://localhost:11434")))

    @property
    def use_ollama(self) -> bool:
        return self.PROVIDER == "ollama"
