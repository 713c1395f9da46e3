from __future__ import annotations

from typing import Any

import pytest
from hypothesis import HealthCheck, settings

from clausework_core.models import Form, LoadedForm, Resolution

settings.register_profile(
    "ci",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.load_profile("ci")


def make_form(data: dict[str, Any]) -> Form:
    return Form.model_validate(data)


SERVICES_AGREEMENT: dict[str, Any] = {
    "content": [
        "This ",
        {"definition": "Agreement"},
        " is made with ",
        {"blank": ""},
        ".",
        {
            "heading": "Payment",
            "form": {
                "content": [
                    "The ",
                    {"use": "Customer"},
                    " will pay ",
                    {"blank": ""},
                    " within thirty days.",
                ]
            },
        },
        {
            "heading": "Definitions",
            "form": {
                "content": [
                    {"definition": "Customer"},
                    " means the party named in ",
                    {"reference": "Payment"},
                    ".",
                ]
            },
        },
        {
            "form": {
                "conspicuous": "yes",
                "content": [
                    {
                        "heading": "Warranty Disclaimer",
                        "form": {"content": ["Provided as is under this ", {"use": "Agreement"}, "."]},
                    },
                    {"form": {"content": ["No heading here."]}},
                ],
            }
        },
        {"form": {"content": ["Counterparts."]}},
        "Signed by the ",
        {"use": "Customer"},
        ".",
    ]
}


@pytest.fixture
def agreement() -> Form:
    return make_form(SERVICES_AGREEMENT)


@pytest.fixture
def loaded_agreement(agreement: Form) -> LoadedForm:
    return LoadedForm(form=agreement)


@pytest.fixture
def component_loaded() -> LoadedForm:
    """A form whose second child came from a published component, upgraded from edition 2."""
    form = make_form(
        {
            "content": [
                {"heading": "Scope", "form": {"content": ["Services as described."]}},
                {"heading": "Confidentiality", "form": {"content": ["Keep it secret."]}},
            ]
        }
    )
    return LoadedForm(
        form=form,
        resolutions=[
            Resolution(
                path=["content", 1, "form"],
                publisher="kemitchell",
                project="confidentiality",
                specified="2",
                edition="3",
                upgrade=True,
            )
        ],
    )


@pytest.fixture
def component_authored() -> Form:
    return make_form(
        {
            "content": [
                {"heading": "Scope", "form": {"content": ["Services as described."]}},
                {
                    "heading": "Confidentiality",
                    "publisher": "kemitchell",
                    "project": "confidentiality",
                    "edition": "2",
                    "upgrade": "yes",
                },
            ]
        }
    )
