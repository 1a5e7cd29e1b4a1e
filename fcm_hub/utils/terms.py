from typing import Any, Dict


COMPANY_NAME = "FCM Trading and Services"

TERMS_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "template1": {
        "terms": [
            "Customers will be billed after 30 days upon completion and turnover of work with 7 days warranty",
            "Please email the signed price quote to the address above.",
            "Any additional work shall be created with a new quotation.",
            f"If there is any request for a contract bond or any expenses that are out of the price quotation, "
            f"{COMPANY_NAME} will not be included in this quotation.",
        ],
        "include_proposal": True,
        "proposal_text": None,
    },
    "template2": {
        "terms": [
            "50% Down payment will be collected upon contract signing.",
            "Full payment will be collected upon Project acceptance.",
            "Any additional work shall be created with a new quotation.",
        ],
        "include_proposal": True,
        "proposal_text": (
            f"{COMPANY_NAME} proposes to furnish the items described and specified herein the above-mentioned "
            "buyers who accept and bind themselves to the specifications of the materials herein offered, "
            "terms and conditions of the proposal, for the sum of"
        ),
    },
}

DEFAULT_TEMPLATE = "template1"


def get_terms_template(template: str, total_formatted: str) -> Dict[str, Any]:
    key = template if template in TERMS_TEMPLATES else DEFAULT_TEMPLATE
    data = TERMS_TEMPLATES[key]
    return {
        "template": key,
        "terms": list(data["terms"]),
        "includeProposal": data["include_proposal"],
        "proposalText": data["proposal_text"],
        "totalFormatted": total_formatted,
    }
