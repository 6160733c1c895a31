"""
LLM-backed research, qualification and email drafting for inbound leads.

Strict schema enforcement — fail loudly on mismatch.
"""

import json
import re

from openai import AsyncOpenAI

from leadagent.config import settings
from leadagent.errors import ConfigurationError
from leadagent.schemas.leads import LeadForm, Qualification


RESEARCH_PROMPT = """You are a sales research assistant. Given an inbound lead from a
contact form, summarize what is known about the person and their company, what they
are asking for, and anything that would help a salesperson respond. Be concise and
factual; say so when information is missing."""

QUALIFY_PROMPT = """You are a lead qualification system. Classify the lead into exactly one category:
- QUALIFIED: a genuine buyer with a clear need
- FOLLOW_UP: promising but needs more information
- SUPPORT: an existing customer asking for help
- UNQUALIFIED: spam, students, vendors, or no fit

Output ONLY valid JSON matching this exact schema (no markdown, no extra text):
{"category": "QUALIFIED", "reason": "string"}"""

EMAIL_PROMPT = """You write short, friendly first-touch sales emails. Use the research
to personalize the message. Return only the email body."""


def _build_client() -> AsyncOpenAI:
    """Build the AsyncOpenAI client, optionally with a custom base URL."""
    if not settings.openai_api_key:
        raise ConfigurationError("OpenAI API key not configured")
    kwargs: dict = {"api_key": settings.openai_api_key}
    if settings.openai_base_url:
        kwargs["base_url"] = settings.openai_base_url
    return AsyncOpenAI(**kwargs)


async def _complete(system: str, user: str, temperature: float) -> str:
    client = _build_client()
    response = await client.chat.completions.create(
        model=settings.openai_model,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        temperature=temperature,
    )
    content = response.choices[0].message.content
    if not content:
        raise ValueError("LLM returned empty response")
    return content


async def research_lead(lead: LeadForm) -> str:
    return await _complete(RESEARCH_PROMPT, lead.model_dump_json(), temperature=0.3)


async def qualify_lead(lead: LeadForm, research: str) -> Qualification:
    """
    Classify the lead. Returns a strict Qualification — raises on schema mismatch.
    """
    user_content = json.dumps({"lead": lead.model_dump(mode="json"), "research": research})
    content = await _complete(QUALIFY_PROMPT, user_content, temperature=0.1)
    data = json.loads(_strip_markdown_json(content))

    # Strict Pydantic validation — raises ValidationError on mismatch
    return Qualification.model_validate(data)


async def write_email(research: str, qualification: Qualification) -> str:
    user_content = f"Write an email for a {qualification.category} lead based on: {json.dumps(research)}"
    return (await _complete(EMAIL_PROMPT, user_content, temperature=0.7)).strip()


def _strip_markdown_json(text: str) -> str:
    """Remove ```json ... ``` wrapper if present."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```(?:json)?\s*", "", text)
        text = re.sub(r"\s*```$", "", text)
    return text
