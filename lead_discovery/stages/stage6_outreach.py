"""
Stage 6: Outreach Drafts
========================
Template-based email, DM and SMS drafts for a qualified lead, plus formal
and casual tone variants.
"""

from typing import Tuple

from ..models.schemas import BusinessLead, OutreachMessages, OutreachAlternatives
from ..config.settings import OUTREACH_SENDER_NAME

# (pattern, replacement) pairs applied in order
FORMAL_REWRITES: Tuple[Tuple[str, str], ...] = (
    ("Hey ", "Hello "),
    (" - ", ". "),
    ("love it", "appreciate it"),
    ("Want that?", "Would you be interested?"),
    ("Interested?", "Would you be interested?"),
)

CASUAL_REWRITES: Tuple[Tuple[str, str], ...] = (
    ("Hello ", "Hey "),
    ("Hi ", "Hey "),
    ("appreciate it", "love it"),
    ("Would you be interested?", "Want that?"),
)


class MessageComposer:
    """
    Composes channel-specific outreach drafts from lead fields.
    """

    def __init__(self, sender_name: str = OUTREACH_SENDER_NAME):
        self.sender_name = sender_name

    def compose(self, lead: BusinessLead) -> OutreachMessages:
        business = lead.business_name
        owner = lead.owner_name or "there"
        hook = lead.personal_hook or f"I noticed {business} has a strong local presence"
        demo_link = lead.demo_desktop_screenshot_url or "[demo-link]"

        return OutreachMessages(
            email=self._email(business, owner, hook, demo_link),
            dm=self._dm(business, owner, hook, demo_link),
            sms=self._sms(business, owner, demo_link),
        )

    def compose_alternatives(self, lead: BusinessLead) -> OutreachAlternatives:
        base = self.compose(lead)
        return OutreachAlternatives(
            formal=self._rewrite(base, FORMAL_REWRITES),
            casual=self._rewrite(base, CASUAL_REWRITES),
        )

    def _email(self, business: str, owner: str, hook: str, demo_link: str) -> str:
        return (
            f"Subject: Quick idea for {business}'s website (30s demo)\n"
            f"\n"
            f"Hi {owner},\n"
            f"\n"
            f"{hook.rstrip('.')} - love it. I made a quick 1-page website mockup for "
            f"{business} so you can see how a modern site could bring in more "
            f"walk-ins and bookings.\n"
            f"\n"
            f"Here's a 20s demo: {demo_link}\n"
            f"\n"
            f"If you like what you see, I'll set it live and keep it simple - no "
            f"monthly headaches, just customers. Want me to send a version with your "
            f"logo and opening hours?\n"
            f"\n"
            f"- {self.sender_name}"
        )

    def _dm(self, business: str, owner: str, hook: str, demo_link: str) -> str:
        opener = hook.rstrip(".")
        if not opener.startswith("I "):
            opener = opener[:1].lower() + opener[1:]
        return (
            f"Hey {owner} - {opener}. Made a short website demo for {business} "
            f"(30s). Link: {demo_link}. If you want, I can swap in your logo & menu "
            f"and get it live so customers find you. Interested?"
        )

    def _sms(self, business: str, owner: str, demo_link: str) -> str:
        return (
            f"Hey {owner}, quick site demo for {business}: {demo_link} - I can swap "
            f"your menu/logo & publish it. Want that?"
        )

    def _rewrite(
        self, messages: OutreachMessages, rewrites: Tuple[Tuple[str, str], ...]
    ) -> OutreachMessages:
        def apply(text: str) -> str:
            for old, new in rewrites:
                text = text.replace(old, new)
            return text

        return OutreachMessages(
            email=apply(messages.email),
            dm=apply(messages.dm),
            sms=apply(messages.sms),
        )
