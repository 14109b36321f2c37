"""
LLM provider factory.

The explainer only ever talks to a LangChain chat model; which one is
decided here from the environment.

    LLM_PROVIDER     "gemini" (default) or "bedrock"

Gemini:
    GOOGLE_API_KEY or GEMINI_API_KEY
    GEMINI_MODEL           (default: gemini-2.5-flash)

Bedrock (AWS credentials from the usual boto chain):
    AWS_REGION             (default: us-east-1)
    BEDROCK_MODEL_ID       (default: anthropic.claude-3-5-sonnet-20241022-v2:0)
"""

import os
from typing import Optional

import dotenv

dotenv.load_dotenv()

SUPPORTED_PROVIDERS = ("gemini", "bedrock")


def create_llm(temperature: float = 0.2, provider: Optional[str] = None):
    """
    Create a LangChain chat model for the configured provider.

    Args:
        temperature: Sampling temperature
        provider: "gemini" or "bedrock"; defaults to LLM_PROVIDER

    Returns:
        A BaseChatModel, or None when credentials or the provider
        package are missing.

    Raises:
        ValueError: for an unknown provider name
    """
    provider = (provider or os.getenv("LLM_PROVIDER", "gemini")).lower()

    if provider == "gemini":
        return _create_gemini(temperature)
    if provider == "bedrock":
        return _create_bedrock(temperature)
    raise ValueError(
        f"Unknown LLM provider: '{provider}'. "
        f"Supported: {', '.join(repr(p) for p in SUPPORTED_PROVIDERS)}"
    )


def _gemini_api_key() -> Optional[str]:
    return os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")


def _create_gemini(temperature: float):
    api_key = _gemini_api_key()
    if not api_key:
        print("[LLM] GOOGLE_API_KEY / GEMINI_API_KEY not set. Explanations disabled.")
        return None

    try:
        from langchain_google_genai import ChatGoogleGenerativeAI
    except ImportError:
        print("[LLM] langchain-google-genai not installed. Explanations disabled.")
        return None

    model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    llm = ChatGoogleGenerativeAI(
        model=model,
        google_api_key=api_key,
        temperature=temperature,
    )
    masked = f"{api_key[:4]}...{api_key[-4:]}" if len(api_key) > 8 else "****"
    print(f"[LLM] Using Google Gemini ({model}, key {masked})")
    return llm


def _create_bedrock(temperature: float):
    region = os.getenv("AWS_REGION", "us-east-1")
    model_id = os.getenv("BEDROCK_MODEL_ID", "anthropic.claude-3-5-sonnet-20241022-v2:0")

    try:
        from langchain_aws import ChatBedrock
    except ImportError:
        print("[LLM] langchain-aws not installed. Install with: pip install cartographer[bedrock]")
        return None

    try:
        llm = ChatBedrock(
            model_id=model_id,
            region_name=region,
            model_kwargs={"temperature": temperature, "max_tokens": 1024},
        )
    except Exception as e:
        print(f"[LLM] Error initializing Bedrock: {e}")
        return None

    print(f"[LLM] Using Amazon Bedrock ({model_id}) in {region}")
    return llm
