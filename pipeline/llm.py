"""
LLM Client Configuration
========================
Configures the LLM client based on settings (OpenAI, Anthropic, Ollama or Google).
"""

import os
from pathlib import Path
from typing import Optional
from langchain_core.language_models import BaseChatModel
from dotenv import load_dotenv

# Load .env from project root
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")


def get_llm(provider: Optional[str] = None, temperature: float = 0.3) -> BaseChatModel:
    """
    Get the configured LLM client.
    
    Uses `provider` if given, otherwise LLM_PROVIDER from the environment.
    
    Args:
        provider: "openai", "anthropic", "ollama" or "google"
        temperature: Sampling temperature (0.0 = deterministic)
    
    Returns:
        LangChain chat model
    """
    provider = (provider or os.getenv("LLM_PROVIDER", "openai")).lower()
    
    if provider == "openai":
        from langchain_openai import ChatOpenAI
        
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable is required")
        
        model = os.getenv("OPENAI_MODEL", "gpt-4o")
        
        return ChatOpenAI(
            model=model,
            temperature=temperature,
            api_key=api_key,
        )
    
    elif provider == "anthropic":
        from langchain_anthropic import ChatAnthropic
        
        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable is required")
        
        model = os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20241022")
        
        return ChatAnthropic(
            model=model,
            temperature=temperature,
            api_key=api_key,
        )
    
    elif provider == "ollama":
        from langchain_community.chat_models import ChatOllama
        
        base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
        model = os.getenv("OLLAMA_MODEL", "llama3.2")
        
        return ChatOllama(
            model=model,
            temperature=temperature,
            base_url=base_url,
            format="json",
        )
    
    elif provider == "google":
        from langchain_google_genai import ChatGoogleGenerativeAI
        
        api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ValueError("GOOGLE_API_KEY or GEMINI_API_KEY environment variable is required")
        
        model = os.getenv("GOOGLE_MODEL", "gemini-2.5-pro")
        
        return ChatGoogleGenerativeAI(
            model=model,
            temperature=temperature,
            google_api_key=api_key,
        )
    
    else:
        raise ValueError(
            f"Unknown LLM provider: {provider}. Use 'openai', 'anthropic', 'ollama' or 'google'"
        )
