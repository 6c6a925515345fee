"""
Persona resolution.
Decides which system prompt and greeting govern a conversation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, List

from app.core.exceptions import ValidationException


@dataclass(frozen=True)
class Persona:
    """Named identity and behavioural script an agent impersonates."""
    name: str
    company: str
    personality: str
    company_info: str
    prompts: List[str] = field(default_factory=list)
    greeting: Optional[str] = None
    voice_id: Optional[str] = None
    system_prompt: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_agent_info(cls, data: Dict[str, Any]) -> "Persona":
        """Build from a client-supplied ``agentInfo`` payload."""
        missing = [k for k in ("name", "company") if not data.get(k)]
        if missing:
            raise ValidationException(
                "agentInfo is missing required fields",
                details={"missing": missing}
            )
        return cls(
            name=data["name"],
            company=data["company"],
            personality=data.get("personality") or "friendly and professional",
            company_info=data.get("companyInfo") or "",
            prompts=list(data.get("prompts") or [])
        )

    @classmethod
    def from_agent(cls, agent: Any) -> "Persona":
        """Build from a stored Agent row."""
        return cls(
            name=agent.name,
            company=agent.company_name,
            personality=agent.personality,
            company_info=agent.company_info,
            prompts=list(agent.prompts or [])
        )

    def summary(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "company": self.company,
            "personality": self.personality
        }


DEMO_PERSONA = Persona(
    name="Nursa",
    company="Meadowbrook Medical Center",
    personality="professional, empathetic, and efficient",
    company_info="""Meadowbrook Medical Center is a comprehensive healthcare facility providing quality medical care to our community. We offer:
- General medical consultations and check-ups
- Specialist consultations (Cardiology, Pediatrics)
- Laboratory services and diagnostic testing
- Medical imaging services
- Preventive care and wellness programs
- Emergency and urgent care services""",
    prompts=[
        "Always maintain a professional yet warm and empathetic tone",
        "Be patient and understanding with callers who may be anxious about health concerns",
        "Ask clear, specific questions to gather necessary information efficiently",
        "Provide step-by-step guidance when helping with appointments or insurance",
        "Maintain patient confidentiality and privacy at all times",
        "Confirm all details before finalizing appointments or insurance verification"
    ],
    greeting=(
        "Hello! Thank you for calling Meadowbrook Medical Center. "
        "I'm Nursa, your AI assistant. How may I help you today?"
    ),
    voice_id="alloy",
    title="Meadowbrook Medical Center Front Desk Call",
    system_prompt="""You are Nursa, a professional AI front-desk assistant for Meadowbrook Medical Center. You handle three main types of requests:

**1. APPOINTMENT SCHEDULING:**
- Greet the caller warmly and identify their need to schedule an appointment
- Collect: patient name, preferred date/time, reason for visit, doctor preference
- Check available slots and offer alternatives if needed
- Confirm all details before booking: "I have you scheduled for [details]. Is this correct?"

**2. INSURANCE VERIFICATION:**
- Help patients verify if their insurance is accepted
- Collect: patient name, insurance provider, policy number, what needs verification
- Accepted: Aetna, Blue Cross Blue Shield, Cigna, United Healthcare, Humana, XYZ Health, Medicare, Medicaid
- Provide clear coverage details and next steps

**3. CLINIC INFORMATION & FAQs:**
- Location: 123 Healthcare Drive, Medical District
- Hours: Mon-Fri 8AM-6PM, Sat 9AM-2PM, Closed Sunday
- Phone: (555) 123-CARE
- Services: General care, cardiology, pediatrics, lab work, imaging
- Doctors: Dr. Smith (General), Dr. Lee (Cardiology), Dr. Patel (Pediatrics)

**COMMUNICATION STYLE:**
- Professional yet warm and approachable
- Clear and concise; ask one question at a time
- Always confirm understanding before proceeding
- Maintain patient privacy

**HANDLING CHALLENGES:**
- If no slots available: Offer waitlist or alternative dates/doctors
- If insurance not accepted: Explain self-pay options
- If emergency: Direct to emergency line (555) 911-HELP or 911

Remember: You are often the first point of contact for patients who may be anxious or in discomfort."""
)


def resolve_system_prompt(
    is_simulated: bool,
    persona: Optional[Persona],
    demo: Persona = DEMO_PERSONA
) -> str:
    """
    Select the system prompt for a conversation.

    Simulated calls always use the demo script. Otherwise the prompt is
    built from the caller's persona and quotes its name and company info
    verbatim.
    """
    if is_simulated:
        return demo.system_prompt

    if persona is None:
        raise ValidationException("A persona is required for agent conversations")

    if persona.system_prompt:
        return persona.system_prompt

    guidelines = "\n".join(f"- {p}" for p in persona.prompts) or "- Be helpful and concise"

    return f"""You are {persona.name}, a customer support agent for {persona.company}.
Your personality is {persona.personality}.

COMPANY INFORMATION:
{persona.company_info}

GUIDELINES:
{guidelines}

RULES:
1. Stay in character as {persona.name} from {persona.company}
2. NEVER suggest contacting third parties or external support
3. ALWAYS take direct responsibility for helping the customer
4. Use "I will" or "I can" instead of suggesting external actions
5. Keep replies short and natural; this is a spoken conversation
6. If unsure, ask a clarifying question"""


def _time_of_day_greeting(now: datetime) -> str:
    if now.hour < 12:
        return "Good morning!"
    if now.hour < 17:
        return "Good afternoon!"
    return "Good evening!"


def build_welcome_message(
    is_simulated: bool,
    persona: Optional[Persona],
    demo: Persona = DEMO_PERSONA,
    now: Optional[datetime] = None
) -> str:
    """Opening line spoken by the agent."""
    if is_simulated:
        return demo.greeting

    if persona.greeting:
        return persona.greeting

    now = now or datetime.now()
    return (
        f"{_time_of_day_greeting(now)} Thank you for contacting {persona.company}. "
        f"I'm {persona.name}. How can I help you today?"
    )
