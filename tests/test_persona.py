"""Tests for persona resolution and welcome messages."""

from datetime import datetime
from types import SimpleNamespace

import pytest

from app.core.exceptions import ValidationException
from app.core.persona import DEMO_PERSONA, Persona, build_welcome_message, resolve_system_prompt


@pytest.fixture
def persona():
    return Persona(
        name="Alex",
        company="Amazon",
        personality="patient and upbeat",
        company_info="Refunds are available within 30 days of delivery.",
        prompts=["Confirm the order number first"]
    )


def test_simulated_uses_demo_script(persona):
    assert resolve_system_prompt(True, persona) == DEMO_PERSONA.system_prompt
    assert resolve_system_prompt(True, None) == DEMO_PERSONA.system_prompt


def test_demo_persona_is_injectable(persona):
    demo = Persona(name="Dee", company="Demo Co", personality="calm", company_info="", system_prompt="DEMO")
    assert resolve_system_prompt(True, persona, demo=demo) == "DEMO"


def test_persona_prompt_quotes_name_and_company_info(persona):
    prompt = resolve_system_prompt(False, persona)
    assert "Alex" in prompt
    assert "Refunds are available within 30 days of delivery." in prompt
    assert "Amazon" in prompt
    assert "- Confirm the order number first" in prompt


def test_agent_conversation_requires_persona():
    with pytest.raises(ValidationException):
        resolve_system_prompt(False, None)


def test_from_agent_info_requires_name_and_company():
    with pytest.raises(ValidationException) as exc:
        Persona.from_agent_info({"name": "Alex"})
    assert exc.value.details["missing"] == ["company"]


def test_from_agent_info_maps_fields():
    persona = Persona.from_agent_info({
        "name": "Sam",
        "company": "Netflix",
        "companyInfo": "Streaming plans",
        "prompts": ["Be brief"]
    })
    assert persona.company_info == "Streaming plans"
    assert persona.prompts == ["Be brief"]
    assert persona.personality


def test_from_agent_row():
    row = SimpleNamespace(
        name="Alex", company_name="Amazon", personality="kind",
        company_info="Info", prompts=None
    )
    persona = Persona.from_agent(row)
    assert persona.company == "Amazon"
    assert persona.prompts == []


def test_demo_welcome_is_fixed():
    assert build_welcome_message(True, None) == DEMO_PERSONA.greeting


@pytest.mark.parametrize("hour,greeting", [(9, "Good morning!"), (14, "Good afternoon!"), (20, "Good evening!")])
def test_welcome_uses_time_of_day(persona, hour, greeting):
    message = build_welcome_message(False, persona, now=datetime(2024, 5, 1, hour, 0))
    assert message.startswith(greeting)
    assert "Alex" in message
    assert "Amazon" in message
