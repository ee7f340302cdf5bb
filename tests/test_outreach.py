"""
Unit tests for stage6_outreach message composition.
"""

import pytest

from lead_discovery.stages.stage6_outreach import MessageComposer


@pytest.fixture
def composer():
    return MessageComposer(sender_name="Alex")


@pytest.mark.unit
class TestCompose:
    def test_personalized_drafts(self, composer, make_lead):
        lead = make_lead(
            owner_name="Maria Lopez",
            personal_hook="Noticed your recent Facebook activity and community engagement.",
            demo_desktop_screenshot_url="https://demo.test/sunrise-cafe-desktop.png",
        )

        messages = composer.compose(lead)

        assert messages.email.startswith("Subject: Quick idea for Sunrise Cafe's website (30s demo)\n")
        assert "Hi Maria Lopez," in messages.email
        assert "Noticed your recent Facebook activity and community engagement - love it." in messages.email
        assert "Here's a 20s demo: https://demo.test/sunrise-cafe-desktop.png" in messages.email
        assert messages.email.endswith("- Alex")

        assert messages.dm.startswith("Hey Maria Lopez - noticed your recent Facebook activity")
        assert "Link: https://demo.test/sunrise-cafe-desktop.png." in messages.dm

        assert messages.sms == (
            "Hey Maria Lopez, quick site demo for Sunrise Cafe: "
            "https://demo.test/sunrise-cafe-desktop.png - I can swap your menu/logo & "
            "publish it. Want that?"
        )

    def test_placeholders_for_missing_fields(self, composer, make_lead):
        messages = composer.compose(make_lead())

        assert "Hi there," in messages.email
        assert "I noticed Sunrise Cafe has a strong local presence - love it." in messages.email
        assert "[demo-link]" in messages.email
        assert messages.dm.startswith("Hey there - I noticed Sunrise Cafe")
        assert "[demo-link]" in messages.sms

    def test_compose_does_not_modify_lead(self, composer, make_lead):
        lead = make_lead(owner_name="Maria Lopez")
        before = lead.model_dump()
        composer.compose(lead)
        assert lead.model_dump() == before


@pytest.mark.unit
class TestAlternatives:
    def test_formal_variant(self, composer, make_lead):
        alternatives = composer.compose_alternatives(make_lead(owner_name="Maria Lopez"))

        assert alternatives.formal.sms == (
            "Hello Maria Lopez, quick site demo for Sunrise Cafe: [demo-link]. "
            "I can swap your menu/logo & publish it. Would you be interested?"
        )
        assert "appreciate it" in alternatives.formal.email
        assert alternatives.formal.dm.startswith("Hello Maria Lopez. ")
        assert alternatives.formal.dm.endswith("Would you be interested?")

    def test_casual_variant(self, composer, make_lead):
        lead = make_lead(owner_name="Maria Lopez")
        base = composer.compose(lead)
        alternatives = composer.compose_alternatives(lead)

        assert "Hey Maria Lopez," in alternatives.casual.email
        assert "Hi Maria Lopez," not in alternatives.casual.email
        assert alternatives.casual.sms == base.sms
