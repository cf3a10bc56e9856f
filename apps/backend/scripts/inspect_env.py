#!/usr/bin/env python3
"""
Environment and Provider Diagnostics Script

This script prints the runtime configuration for the completion provider.
Use this to verify that:
1. The LLM provider and model are what you expect
2. An API key is present when the provider needs one
3. (--list-models) which Gemini models your key can use for generateContent
4. (--ping) the configured provider actually answers a prompt

Usage:
    cd apps/backend
    python scripts/inspect_env.py [--list-models] [--ping]
"""

import argparse
import asyncio
import sys


def _mask(key: str) -> str:
    if len(key) <= 9:
        return "***"
    return f"{key[:5]}...{key[-4:]}"


async def _list_models(errors: list) -> None:
    from jobalign.agent.exceptions import ProviderError
    from jobalign.agent.providers.gemini import GeminiProvider

    print("\n📋 AVAILABLE GEMINI MODELS")
    print("-" * 40)
    try:
        provider = GeminiProvider()
    except ProviderError as e:
        errors.append(str(e))
        print(f"❌ {e}")
        return
    try:
        models = await provider.list_models()
    except ProviderError as e:
        errors.append(f"Listing models failed: {e}")
        print(f"❌ {e}")
        return
    finally:
        await provider.aclose()
    if not models:
        print("⚠️  No models available for text generation with this key.")
    for name in models:
        print(f"   👉 {name}")


async def _ping(errors: list) -> None:
    from jobalign.agent import AgentManager, ProviderError

    print("\n🔧 PROVIDER PING")
    print("-" * 40)
    try:
        reply = await asyncio.wait_for(AgentManager().run("Say hello"), timeout=30)
    except (ProviderError, asyncio.TimeoutError) as e:
        errors.append(f"Provider ping failed: {e!r}")
        print(f"❌ FAILED: {e!r}")
        return
    print(f'✅ Provider replied: "{reply.strip()[:80]}"')


def main():
    parser = argparse.ArgumentParser(description="Inspect JobAlign provider configuration")
    parser.add_argument("--list-models", action="store_true", help="list Gemini models for this key")
    parser.add_argument("--ping", action="store_true", help="send a tiny prompt to the provider")
    args = parser.parse_args()

    print("=" * 60)
    print("JobAlign Provider Diagnostics")
    print("=" * 60)

    from jobalign.core.config import settings

    print("\n🤖 LLM Configuration:")
    print(f"  LLM_PROVIDER:        {settings.LLM_PROVIDER}")
    print(f"  LL_MODEL:            {settings.LL_MODEL}")
    print(f"  LLM_MAX_TOKENS:      {settings.LLM_MAX_TOKENS}")
    print(f"  LLM_TEMPERATURE:     {settings.LLM_TEMPERATURE}")
    print(f"  LLM_TIMEOUT_SECONDS: {settings.LLM_TIMEOUT_SECONDS}")
    print(f"  LLM_BASE_URL:        {settings.LLM_BASE_URL or '(provider default)'}")
    print(f"  LLM_API_KEY:         {'✅ ' + _mask(settings.LLM_API_KEY) if settings.LLM_API_KEY else '❌ NOT SET'}")

    print("\n📄 Analysis Configuration:")
    print(f"  MIN_RESUME_CHARS:          {settings.MIN_RESUME_CHARS}")
    print(f"  MIN_JOB_DESCRIPTION_CHARS: {settings.MIN_JOB_DESCRIPTION_CHARS}")
    print(f"  PROMPT_MAX_CHARS:          {settings.PROMPT_MAX_CHARS}")
    print(f"  SHARE_STORE:               {settings.SHARE_STORE} ({settings.SHARE_STORE_PATH})")

    errors = []
    warnings = []

    print("\n✅ VALIDATION CHECKS")
    print("-" * 40)
    provider = settings.LLM_PROVIDER.lower()
    if provider in ("gemini", "ollama"):
        print(f"✅ LLM Provider: {provider} (built in)")
    elif "." in provider:
        print(f"ℹ️  LLM Provider: {settings.LLM_PROVIDER} (llama_index class path)")
    else:
        print(f"❌ LLM Provider: unknown value {settings.LLM_PROVIDER}")
        errors.append("LLM_PROVIDER must be 'gemini', 'ollama' or a llama_index.llms.* class path")

    if provider != "ollama" and not settings.LLM_API_KEY:
        errors.append("No API key configured; set GEMINI_API_KEY (or LLM_API_KEY) in .env")

    if settings.LLM_MAX_TOKENS < 1024:
        print(f"⚠️  LLM_MAX_TOKENS: {settings.LLM_MAX_TOKENS} (may truncate the labeled output)")
        warnings.append(f"LLM_MAX_TOKENS={settings.LLM_MAX_TOKENS} is low, recommend 2048")

    if args.list_models:
        asyncio.run(_list_models(errors))
    if args.ping:
        asyncio.run(_ping(errors))

    print("\n" + "=" * 60)
    if errors:
        print("❌ ERRORS FOUND:")
        for err in errors:
            print(f"   • {err}")
        print("\nFix these issues before running the application.")
        sys.exit(1)
    elif warnings:
        print("⚠️  WARNINGS (non-critical):")
        for warn in warnings:
            print(f"   • {warn}")
        print("\n✅ System should work, but consider addressing warnings.")
        sys.exit(0)
    else:
        print("✅ ALL CHECKS PASSED")
        sys.exit(0)


if __name__ == "__main__":
    main()
