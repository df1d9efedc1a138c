"""Shared test fixtures for bmml tests."""

import pytest

from bmml.models import Document

BASE_META = {"name": "Test Business", "portfolio": "explore", "stage": "ideation"}


def make_doc(**sections) -> Document:
    """Build a v2 Document from plain dict sections."""
    return Document.model_validate({"version": "2.0", "meta": dict(BASE_META), **sections})


@pytest.fixture()
def doc_factory():
    """Factory fixture: doc_factory(customer_segments=[...], ...) -> Document."""
    return make_doc


@pytest.fixture()
def marketplace_doc() -> Document:
    """Two-sided marketplace touching every block."""
    return make_doc(
        meta={"name": "Marketplace", "created": "2026-01-05", "updated": "2026-02-01"},
        customer_segments=[
            {"id": "cs-buyers", "name": "Buyers"},
            {"id": "cs-sellers", "name": "Sellers"},
        ],
        value_propositions=[
            {"id": "vp-shopping", "name": "Easy Shopping"},
            {"id": "vp-reach", "name": "Reach Customers"},
            {"id": "vp-lonely", "name": "Unfitted Idea"},
        ],
        fits=[
            {"id": "fit-buyers", "for": {"value_propositions": ["vp-shopping"], "customer_segments": ["cs-buyers"]}},
            {"id": "fit-sellers", "for": {"value_propositions": ["vp-reach"], "customer_segments": ["cs-sellers"]}},
        ],
        channels=[
            {"id": "ch-website", "name": "Website", "for": {"customer_segments": ["cs-buyers"]}},
            {"id": "ch-api", "name": "Seller API", "for": {"customer_segments": ["cs-sellers"]}},
        ],
        customer_relationships=[
            {"id": "cr-support", "name": "Support", "for": {"customer_segments": ["cs-sellers", "cs-buyers"]}},
        ],
        revenue_streams=[
            {"id": "rs-fees", "name": "Transaction Fees", "from": {"customer_segments": ["cs-sellers"]},
             "for": {"value_propositions": ["vp-shopping"]}},
        ],
        key_resources=[
            {"id": "kr-platform", "name": "Platform", "for": {"value_propositions": ["vp-shopping", "vp-reach"]}},
        ],
        key_activities=[
            {"id": "ka-onboarding", "name": "Seller Onboarding", "for": {"value_propositions": ["vp-reach"]}},
        ],
        key_partnerships=[
            {"id": "kp-payments", "name": "Payment Provider", "for": {"key_resources": ["kr-platform"]}},
        ],
        costs=[
            {"id": "cost-hosting", "name": "Hosting", "for": {"key_resources": ["kr-platform"]}},
            {"id": "cost-sales", "name": "Sales Team", "for": {"key_activities": ["ka-onboarding"]}},
        ],
    )


MARKETPLACE_YAML = """\
version: "2.0"
meta:
  name: Marketplace
  portfolio: explore
  stage: validation
  created: 2026-01-05
customer_segments:
  - id: cs-buyers
    name: Buyers
  - id: cs-sellers
    name: Sellers
value_propositions:
  - id: vp-shopping
    name: Easy Shopping
fits:
  - id: fit-buyers
    for:
      value_propositions: [vp-shopping]
      customer_segments: [cs-buyers, cs-ghost]
channels:
  - id: ch-website
    name: Website
    for:
      customer_segments: [cs-buyers]
key_resources:
  - id: kr-platform
    name: Platform
    for:
      value_propositions: [vp-shopping]
costs:
"""


@pytest.fixture()
def bmml_file(tmp_path):
    """A .bmml file on disk with one dangling segment reference (cs-ghost)."""
    path = tmp_path / "marketplace.bmml"
    path.write_text(MARKETPLACE_YAML)
    return path
