"""
Chat model access for the engine.

  models.py     -- CacheablePrompt, LLMResponse, ToolCallRequest, TokenUsage,
                   and the ChatModel protocol the engine depends on
  providers.py  -- anthropic / openai / google adapters and pricing
  client.py     -- LLMClient (retries, sanitization, usage totals), create_client

Usage:
    client = create_client()  # provider from the environment
    response = await client.call(prompt="What is 2+3?", role="react")
"""

from .client import LLMClient, create_client
from .models import CacheablePrompt, ChatModel, LLMResponse, TokenUsage, ToolCallRequest
from .providers import PROVIDERS, Pricing, get_provider
