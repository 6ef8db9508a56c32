"""
Catalogue of gateway routes.

Static paths are listed before parameterised siblings so that, for example,
``/api/personalities/system`` is not captured by ``/api/personalities/{id}``.
"""

from typing import List

from .envelopes import EnvelopePolicy
from .route_adapter import GatewayRoute

BACKEND_POOL = "backend"
PR_POOL = "pr"

GENERAL_ROUTES: List[GatewayRoute] = [
    GatewayRoute(
        name="agents",
        path="/api/agents",
        backend_path="/api/v1/agents",
        pool=BACKEND_POOL,
        summary="List agents",
        tags=("agents",),
    ),
    GatewayRoute(
        name="content_briefs",
        path="/api/content/briefs",
        backend_path="/api/v1/content/briefs",
        pool=BACKEND_POOL,
        query=(("status", None), ("limit", "20"), ("offset", None)),
        summary="List content briefs",
        tags=("content",),
    ),
    GatewayRoute(
        name="content_brief",
        path="/api/content/briefs/{id}",
        backend_path="/api/v1/content/briefs/{id}",
        pool=BACKEND_POOL,
        summary="Get a content brief",
        tags=("content",),
    ),
    GatewayRoute(
        name="content_items",
        path="/api/content/items",
        backend_path="/api/v1/content/items",
        pool=BACKEND_POOL,
        query=(("q", None), ("status", None), ("limit", "20"), ("offset", None)),
        summary="List content items",
        tags=("content",),
    ),
    GatewayRoute(
        name="personalities",
        path="/api/personalities",
        backend_path="/api/v1/personalities",
        pool=BACKEND_POOL,
        query=(("limit", "50"), ("offset", None)),
        summary="List personalities",
        tags=("personalities",),
    ),
    GatewayRoute(
        name="system_personalities",
        path="/api/personalities/system",
        backend_path="/api/v1/personalities/system",
        pool=BACKEND_POOL,
        summary="List system personalities",
        tags=("personalities",),
    ),
    GatewayRoute(
        name="personality",
        path="/api/personalities/{id}",
        backend_path="/api/v1/personalities/{id}",
        pool=BACKEND_POOL,
        summary="Get a personality",
        tags=("personalities",),
    ),
    GatewayRoute(
        name="playbooks",
        path="/api/playbooks",
        backend_path="/api/v1/playbooks",
        pool=BACKEND_POOL,
        query=(("status", None), ("limit", "20"), ("offset", None)),
        summary="List playbooks",
        tags=("playbooks",),
    ),
]

PR_ROUTES: List[GatewayRoute] = [
    GatewayRoute(
        name="pr_journalists",
        path="/api/pr/journalists",
        backend_path="/api/v1/journalist-graph/profiles",
        pool=PR_POOL,
        envelope=EnvelopePolicy.RAW,
        query=(
            ("q", None),
            ("outlet", None),
            ("beat", None),
            ("minEngagementScore", None),
            ("sortBy", None),
            ("sortOrder", None),
            ("limit", None),
            ("offset", None),
        ),
        forward_headers=("authorization",),
        summary="List journalist profiles",
        tags=("pr",),
    ),
    GatewayRoute(
        name="pr_journalist_graph",
        path="/api/pr/journalists/graph",
        backend_path="/api/v1/journalist-graph/graph",
        pool=PR_POOL,
        method="POST",
        envelope=EnvelopePolicy.RAW,
        forward_body=True,
        forward_headers=("authorization",),
        summary="Build the journalist graph",
        tags=("pr",),
    ),
    GatewayRoute(
        name="pr_journalist_duplicates",
        path="/api/pr/journalists/duplicates",
        backend_path="/api/v1/journalist-graph/find-duplicates",
        pool=PR_POOL,
        method="POST",
        envelope=EnvelopePolicy.RAW,
        forward_headers=("authorization",),
        summary="Find duplicate journalist profiles",
        tags=("pr",),
    ),
    GatewayRoute(
        name="pr_journalist",
        path="/api/pr/journalists/{id}",
        backend_path="/api/v1/journalist-graph/profiles/{id}",
        pool=PR_POOL,
        envelope=EnvelopePolicy.RAW,
        forward_headers=("authorization",),
        summary="Get a journalist profile",
        tags=("pr",),
    ),
    GatewayRoute(
        name="pr_queue_pitch",
        path="/api/pr/pitches/contacts/{id}/queue",
        backend_path="/api/v1/pr/pitches/contacts/{id}/queue",
        pool=PR_POOL,
        method="POST",
        envelope=EnvelopePolicy.RAW,
        forward_headers=("authorization",),
        summary="Queue a pitch for a contact",
        tags=("pr",),
    ),
    GatewayRoute(
        name="pr_releases",
        path="/api/pr/releases",
        backend_path="/api/v1/pr/releases",
        pool=PR_POOL,
        envelope=EnvelopePolicy.RAW,
        query=(("limit", None), ("offset", None)),
        forward_headers=("authorization",),
        summary="List press releases",
        tags=("pr",),
    ),
    GatewayRoute(
        name="pr_deliverability_summary",
        path="/api/pr/deliverability/summary",
        backend_path="/api/v1/pr-outreach-deliverability/stats/deliverability",
        pool=PR_POOL,
        envelope=EnvelopePolicy.RAW,
        forward_headers=("authorization",),
        summary="Outreach deliverability summary",
        tags=("pr",),
    ),
]

ALL_ROUTES: List[GatewayRoute] = GENERAL_ROUTES + PR_ROUTES
