import json

import pytest

from dealscope.config.settings import GatewayConfig
from dealscope.layers.intelligence.gateway import InferenceGateway
from dealscope.use_cases.deal_assistant import DealAssistantSession


SAMPLE_CSV = """Opportunity,Amount,Stage,Owner
Acme Renewal,"$15,000",Negotiation,Dana
Globex Pilot,$800,Prospecting,Lee
Initech Expansion,"$7,500",Proposal,Sam
"""


def dashboard_response(**overrides) -> dict:
    response = {
        "analysisTitle": "Q3 Pipeline Analysis",
        "summary": "Three open deals worth $23,300 in total.",
        "kpis": [
            {"title": "Total Pipeline", "value": "$23,300", "insight": "3 open deals"},
            {"title": "Average Deal Size", "value": "$7,767", "insight": ""}
        ],
        "charts": [
            {
                "chartType": "bar",
                "title": "Deals by Stage",
                "data": [
                    {"name": "Negotiation", "value": 1},
                    {"name": "Prospecting", "value": 1},
                    {"name": "Proposal", "value": 1}
                ]
            }
        ],
        "deals": [
            {
                "rowId": 0, "dealName": "Acme Renewal", "amount": "$15,000",
                "stage": "Negotiation", "insight": "Largest deal in the pipeline.",
                "description": "Annual renewal for Acme, owned by Dana."
            },
            {
                "rowId": 1, "dealName": "Globex Pilot", "amount": "$800",
                "stage": "Prospecting", "insight": "Small pilot, early stage.",
                "description": "Pilot project for Globex, owned by Lee."
            },
            {
                "rowId": 2, "dealName": "Initech Expansion", "amount": "$7,500",
                "stage": "Proposal", "insight": "Proposal sent, awaiting feedback.",
                "description": "Seat expansion for Initech, owned by Sam."
            }
        ]
    }
    response.update(overrides)
    return response


def transcript_response(**overrides) -> dict:
    response = {
        "analysisTitle": "Analysis of 1 Transcript",
        "overallSummary": "Acme agreed to renew; Umbrella asked for a quote.",
        "meetings": [
            {
                "meetingTitle": "Renewal call with Acme",
                "summary": "Acme confirmed the renewal at the negotiated price.",
                "sentiment": "Positive",
                "actionItems": ["Send contract"],
                "risks": [],
                "suggestedFollowUpEmail": "Hi Dana, thanks for the call."
            }
        ],
        "updates": [
            {
                "type": "update",
                "rowId": 0,
                "dealName": "Acme Renewal",
                "changes": {"stage": {"oldValue": "Negotiation", "newValue": "Closed Won"}},
                "reasoning": "Acme confirmed the renewal on the call."
            }
        ],
        "creations": [
            {
                "type": "create",
                "deal": {
                    "dealName": "Umbrella Analytics",
                    "amount": "$5,000",
                    "stage": "Qualification",
                    "description": "Analytics add-on requested by Umbrella."
                },
                "reasoning": "Umbrella is not in the CRM yet."
            }
        ]
    }
    response.update(overrides)
    return response


class FakeInferenceClient:
    """Returns queued responses in order; exceptions in the queue are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def complete(self, prompt, schema):
        self.calls.append((prompt, schema))
        if not self.responses:
            raise AssertionError("Unexpected inference call")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(float(seconds))


@pytest.fixture
def fake_client():
    return FakeInferenceClient()


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def gateway_config():
    return GatewayConfig(
        max_input_chars=2_000_000,
        max_retries=3,
        initial_retry_delay=1.0,
        retry_backoff=2.0
    )


@pytest.fixture
def gateway(fake_client, gateway_config, sleep):
    return InferenceGateway(client=fake_client, config=gateway_config, sleep=sleep)


@pytest.fixture
def session(gateway):
    return DealAssistantSession(gateway=gateway)
